from __future__ import annotations

import logging
from typing import Any, Literal

from unicase.collections.errors import ExpressionError
from unicase.collections.expression import Expression
from unicase.collections.log.helpers import EnhancedFormatter


class FieldFilter(logging.Filter):
    """
    日志字段规则过滤器

    表达式可引用的字段: name / levelname / levelno / message / module / funcName,
    以及通过 `extra` 附加的扩展字段(如 container / removed).
    """

    def __init__(
        self,
        *conditions: str,
        context: dict[str, Any] | None = None,
        policy: Literal["allow", "deny"] = "allow",
    ) -> None:
        """
        初始化过滤器

        参数:
            conditions: 用于匹配日志记录的表达式字符串列表, 任一匹配即视为命中
            context: 额外的表达式上下文
            policy: 过滤策略. allow: 仅放行命中记录; deny: 拒绝命中记录;
        """
        super().__init__()
        self.context = context
        self.policy = policy
        self.rules = [
            Expression(expr) for condition in conditions if (expr := condition.strip())
        ]

    def filter(self, record: logging.LogRecord) -> bool:
        """
        用于过滤日志记录的回调函数

        参数:
            record: 要过滤的日志记录
        返回:
            是否放行该记录. 表达式求值失败视为未命中.
        """
        data = {**(self.context or {}), **self._fields(record)}
        try:
            matched = any(rule.match(data) for rule in self.rules)
        except ExpressionError:
            matched = False

        if self.policy == "deny":
            return not matched
        return matched

    @staticmethod
    def _fields(record: logging.LogRecord) -> dict[str, Any]:
        fields = {
            key: str(value) if not isinstance(value, (int, float, str)) else value
            for key, value in vars(record).items()
            if key not in EnhancedFormatter.RESERVED_FIELDS and not key.startswith("_")
        }
        fields.update(
            name=record.name,
            levelname=record.levelname,
            levelno=record.levelno,
            message=record.getMessage() if record.args else str(record.msg),
            module=record.module,
            funcName=record.funcName,
        )
        return fields
