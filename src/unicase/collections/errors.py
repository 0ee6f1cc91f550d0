"""
定义大小写不敏感容器使用的异常体系.

异常层级结构如下:
    - UniCaseError: 所有异常的统一基类, 支持嵌套链式追踪.
        - KeyConversionError: 输入对象无法转换为 UniCaseKey.
        - UniCaseKeyError: 按键索引访问/删除时键不存在.
        - ExpressionError: retain 过滤表达式解析或求值失败.

说明:
    - 普通查找(get/contains/remove)永远不抛异常, 以 None/False 表示不存在;
    - 只有 `map[key]` 与 `del map[key]` 这类"必须有结果"的操作才会抛 UniCaseKeyError.
"""

from __future__ import annotations

from typing import Any


class UniCaseError(Exception):
    """
    所有 unicase 容器异常的基类,具备错误链追踪能力.

    参数:
    - `*args`: 异常消息内容;
    - `cause`: 可选的原始异常,用于记录异常链(自动赋值给 `__cause__`).
    """

    def __init__(self, *args: Any, cause: Exception | None = None) -> None:
        super().__init__(*args)
        self.cause: Exception | None = cause
        self.__cause__ = cause


class KeyConversionError(UniCaseError, TypeError):
    """
    输入对象不是字符串, UniCaseKey, 也未实现 SupportsToKey 协议.
    """

    def __init__(self, value: Any) -> None:
        super().__init__(f"Cannot convert {type(value).__name__!r} to UniCaseKey")
        self.value = value


class UniCaseKeyError(UniCaseError, KeyError):
    """
    按键索引访问的键不存在.

    `key` 属性保存用于查找的 UniCaseKey.
    """

    def __init__(self, key: Any) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return repr(str(self.key))


class ExpressionError(UniCaseError):
    """过滤表达式解析或求值失败, 原始 rule_engine 异常保存在 `cause` 中."""
