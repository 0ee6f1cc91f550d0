from __future__ import annotations

from typing import Any, Callable

import rule_engine

from unicase.collections.errors import ExpressionError


class Expression:
    """
    表达式封装类, 当前基于 rule_engine 实现.
    - evaluate: 返回表达式计算结果
    - match: 返回布尔判定结果

    名称解析先按下标(映射), 失败后再按属性, 因此上下文可以是 dict 或任意对象.
    """

    def __init__(self, expr: str) -> None:
        self.expr = expr
        try:
            self._rule = rule_engine.Rule(
                self.expr,
                rule_engine.Context(resolver=self._resolver),
            )
        except rule_engine.EngineError as ex:
            raise ExpressionError(f"Invalid expression: {expr!r}", cause=ex)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.expr!r})"

    def evaluate(self, data: Any) -> Any:
        """
        计算表达式的值.
        :param data: 上下文数据(映射或任意对象)
        :raises ExpressionError: 求值失败
        """
        try:
            return self._rule.evaluate(data)
        except rule_engine.EngineError as ex:
            raise ExpressionError(
                f"Failed to evaluate expression: {self.expr!r}", cause=ex
            )

    def match(self, data: Any) -> bool:
        """判断表达式是否匹配(布尔结果)."""
        return bool(self.evaluate(data))

    def _resolver(self, data: Any, name: str) -> Any:
        try:
            return rule_engine.resolve_item(data, name)
        except rule_engine.SymbolResolutionError:
            return rule_engine.resolve_attribute(data, name)


def compile(expr: str) -> Expression:
    return Expression(expr)


def key_predicate(expr: str) -> Callable[..., bool]:
    """
    将表达式字符串编译为容器 retain 使用的谓词.

    表达式可引用:
        key    -- 键的原始文本
        folded -- 键的折叠形式
        value  -- 值(仅映射容器)
    """
    rule = compile(expr)

    def predicate(key: Any, *value: Any) -> bool:
        data = {"key": str(key), "folded": key.folded}
        if value:
            data["value"] = value[0]
        return rule.match(data)

    return predicate
