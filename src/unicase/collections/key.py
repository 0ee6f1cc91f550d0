"""
大小写不敏感键及键转换协议.

设计目标:
- 使用 Unicode 默认大小写折叠(`str.casefold`, 与区域设置无关)进行比较/排序/哈希.
- 保留构造时传入的原始文本, 遍历与展示时输出原始大小写.
- 所有容器操作都通过 `to_key` 接受 str / UniCaseKey / 实现 SupportsToKey 的对象.

主要组件:
- UniCaseKey: 大小写不敏感键
- SupportsToKey: 可自定义转换的协议
- to_key: 统一的键转换入口(singledispatch, 可通过 `to_key.register` 扩展)

示例:
    >>> a = UniCaseKey("Accept-Encoding")
    >>> a == UniCaseKey("ACCEPT-ENCODING")
    True
    >>> str(a)
    'Accept-Encoding'
    >>> UniCaseKey("Straße") == UniCaseKey("STRASSE")
    True
    >>> to_key(a) is a
    True
"""

from __future__ import annotations

from collections import UserString
from functools import singledispatch
from typing import Any, Protocol, TypeAlias, runtime_checkable

from pydantic import GetCoreSchemaHandler
from pydantic_core import CoreSchema

from unicase.collections import pydantic_utils
from unicase.collections.errors import KeyConversionError


class UniCaseKey:
    """
    按大小写折叠形式比较的字符串键.

    属性:
        original (str): 构造时传入的原始文本.
        folded (str): 折叠后的比较形式, 构造时计算一次.

    相等/哈希/排序只依据 `folded`; 与普通 str 比较返回 NotImplemented,
    避免 `hash` 与 `==` 不一致.
    """

    __slots__ = ("_original", "_folded")

    def __init__(self, text: str) -> None:
        if not isinstance(text, str):
            raise KeyConversionError(text)
        self._original = str(text)
        self._folded = self._original.casefold()

    @property
    def original(self) -> str:
        return self._original

    @property
    def folded(self) -> str:
        return self._folded

    def to_key(self) -> UniCaseKey:
        return self

    def __str__(self) -> str:
        return self._original

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._original!r})"

    def __len__(self) -> int:
        return len(self._original)

    def __hash__(self) -> int:
        return hash(self._folded)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UniCaseKey):
            return NotImplemented
        return self._folded == other._folded

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, UniCaseKey):
            return NotImplemented
        return self._folded < other._folded

    def __le__(self, other: object) -> bool:
        if not isinstance(other, UniCaseKey):
            return NotImplemented
        return self._folded <= other._folded

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, UniCaseKey):
            return NotImplemented
        return self._folded > other._folded

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, UniCaseKey):
            return NotImplemented
        return self._folded >= other._folded

    def __reduce__(self) -> tuple[type[UniCaseKey], tuple[str]]:
        return (self.__class__, (self._original,))

    def __copy__(self) -> UniCaseKey:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> UniCaseKey:
        return self

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> CoreSchema:
        return pydantic_utils.key_schema(cls)


@runtime_checkable
class SupportsToKey(Protocol):
    def to_key(self) -> UniCaseKey: ...


KeyLike: TypeAlias = "str | UniCaseKey | SupportsToKey"


@singledispatch
def to_key(value: Any) -> UniCaseKey:
    """
    将任意受支持的输入转换为 UniCaseKey.

    参数:
        value: str / UserString / UniCaseKey / 实现 SupportsToKey 的对象.

    返回:
        UniCaseKey: 对 UniCaseKey 输入原样返回(不可变, 无需复制), 其余输入新建.

    异常:
        KeyConversionError: 输入类型不受支持.
    """
    if isinstance(value, SupportsToKey):
        key = value.to_key()
        if isinstance(key, UniCaseKey):
            return key
    raise KeyConversionError(value)


@to_key.register
def _(value: str) -> UniCaseKey:
    return UniCaseKey(value)


@to_key.register
def _(value: UserString) -> UniCaseKey:
    return UniCaseKey(str(value))


@to_key.register
def _(value: UniCaseKey) -> UniCaseKey:
    return value
