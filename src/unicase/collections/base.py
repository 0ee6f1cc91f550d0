"""
大小写不敏感容器的公共实现.

主要组件:
- Bucket: 映射容器的条目, 保存首次插入的原始键与当前值
- UniCaseMap: 映射容器基类(UniCaseIndexMap / UniCaseBTreeMap)
- UniCaseSet: 集合容器基类(UniCaseIndexSet / UniCaseBTreeSet)

底层引擎由子类通过 `_engine_factory` 指定:
- dict: 保留插入顺序, 删除后剩余条目相对顺序不变
- sortedcontainers.SortedDict: 按 UniCaseKey 全序迭代

引擎的键只用于查找; 对外输出的键一律来自条目本身(Bucket.key / 集合值),
因此更新操作不会改变首次插入时的原始大小写.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping, MutableSet
from typing import (
    Any,
    Callable,
    ClassVar,
    Generic,
    Iterable,
    Iterator,
    TypeVar,
    overload,
)

from pydantic import GetCoreSchemaHandler
from pydantic_core import CoreSchema

from unicase.collections import pydantic_utils
from unicase.collections.errors import KeyConversionError, UniCaseKeyError
from unicase.collections.expression import key_predicate
from unicase.collections.key import KeyLike, UniCaseKey, to_key
from unicase.collections.log.helpers import get_logger_adapter

V = TypeVar("V")
T = TypeVar("T")

logger = get_logger_adapter(__name__)

_MISSING: Any = object()


def _try_key(key: Any) -> UniCaseKey | None:
    try:
        return to_key(key)
    except KeyConversionError:
        return None


class Bucket(Generic[V]):
    """映射条目: 原始键 + 值."""

    __slots__ = ("key", "value")

    def __init__(self, key: UniCaseKey, value: V) -> None:
        self.key = key
        self.value = value

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.key!r}, {self.value!r})"


class UniCaseMap(MutableMapping[UniCaseKey, V], Generic[V]):
    """
    大小写不敏感映射的基类.

    - 所有接受键的方法都经过 `to_key`, 可传入 str / UniCaseKey / SupportsToKey.
    - 更新已有键时只替换值, 保留首次插入的原始大小写.
    - `get`/`remove` 等以 None 表示不存在; `map[key]` 与 `del map[key]`
      在键不存在时抛出 UniCaseKeyError.
    """

    _engine_factory: ClassVar[Callable[..., MutableMapping[UniCaseKey, Any]]] = dict

    def __init__(
        self, items: Mapping[Any, V] | Iterable[tuple[KeyLike, V]] | None = None
    ) -> None:
        self._inner: MutableMapping[UniCaseKey, Bucket[V]] = type(self)._engine_factory()
        if items is not None:
            self.extend(items)

    # ===========================================================================

    def __getitem__(self, key: KeyLike) -> V:
        k = to_key(key)
        bucket = self._inner.get(k)
        if bucket is None:
            raise UniCaseKeyError(k)
        return bucket.value

    def __setitem__(self, key: KeyLike, value: V) -> None:
        self.insert(key, value)

    def __delitem__(self, key: KeyLike) -> None:
        k = to_key(key)
        try:
            del self._inner[k]
        except KeyError:
            raise UniCaseKeyError(k) from None

    def __contains__(self, key: object) -> bool:
        k = _try_key(key)
        return k is not None and k in self._inner

    def __iter__(self) -> Iterator[UniCaseKey]:
        for bucket in self._inner.values():
            yield bucket.key

    def __reversed__(self) -> Iterator[UniCaseKey]:
        for k in reversed(self._inner):  # type: ignore[call-overload]
            yield self._inner[k].key

    def __len__(self) -> int:
        return len(self._inner)

    def __eq__(self, other: object) -> bool:
        """
        同类容器相等: 条目数相同, 且每个键(不区分大小写)都存在于对方且值相等.
        与顺序及键的原始大小写无关.
        """
        if not isinstance(other, UniCaseMap) or not (
            isinstance(other, type(self)) or isinstance(self, type(other))
        ):
            return NotImplemented
        if len(self) != len(other):
            return False
        for k, bucket in self._inner.items():
            found = other._inner.get(k)
            if found is None or found.value != bucket.value:
                return False
        return True

    def __repr__(self) -> str:
        inner = ", ".join(f"{b.key.original!r}: {b.value!r}" for b in self._buckets())
        return f"{self.__class__.__name__}({{{inner}}})"

    def __rich_repr__(self) -> Iterator[Any]:
        yield {b.key.original: b.value for b in self._buckets()}

    def __copy__(self) -> UniCaseMap[V]:
        return self.copy()

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> CoreSchema:
        return pydantic_utils.map_schema(cls, source_type, handler)

    # ===========================================================================

    def insert(self, key: KeyLike, value: V) -> V | None:
        """
        插入键值对.

        Args:
            key: 键, 任意可转换为 UniCaseKey 的对象.
            value: 值.

        Returns:
            键已存在时返回旧值(存储的键保持原始大小写不变), 否则返回 None.
        """
        k = to_key(key)
        bucket = self._inner.get(k)
        if bucket is None:
            self._inner[k] = Bucket(k, value)
            return None
        old, bucket.value = bucket.value, value
        return old

    @overload
    def get(self, key: object, /) -> V | None: ...
    @overload
    def get(self, key: object, /, default: V | T) -> V | T: ...
    def get(self, key: object, /, default: Any = None) -> Any:
        """返回键对应的值, 不存在(或无法转换为键)时返回 default."""
        k = _try_key(key)
        bucket = self._inner.get(k) if k is not None else None
        return default if bucket is None else bucket.value

    def get_key_value(self, key: object) -> tuple[UniCaseKey, V] | None:
        """返回 (存储的原始键, 值), 不存在时返回 None."""
        k = _try_key(key)
        bucket = self._inner.get(k) if k is not None else None
        return None if bucket is None else (bucket.key, bucket.value)

    def contains_key(self, key: object) -> bool:
        return key in self

    def remove(self, key: object) -> V | None:
        """移除键并返回其值; 键不存在时不做任何修改, 返回 None."""
        entry = self.remove_entry(key)
        return None if entry is None else entry[1]

    def remove_entry(self, key: object) -> tuple[UniCaseKey, V] | None:
        """移除键并返回 (存储的原始键, 值); 键不存在时返回 None."""
        k = _try_key(key)
        bucket = self._inner.pop(k, None) if k is not None else None
        return None if bucket is None else (bucket.key, bucket.value)

    def pop(self, key: object, default: Any = _MISSING) -> Any:
        """
        移除键并返回其值; 给出 default 时, 键不存在或无法转换均返回 default.

        Raises:
            KeyConversionError: 未给出 default 且键无法转换.
            UniCaseKeyError: 未给出 default 且键不存在.
        """
        k = _try_key(key)
        bucket = self._inner.pop(k, None) if k is not None else None
        if bucket is not None:
            return bucket.value
        if default is not _MISSING:
            return default
        if k is None:
            raise KeyConversionError(key)
        raise UniCaseKeyError(k)

    def popitem(self, last: bool = True) -> tuple[UniCaseKey, V]:
        """
        移除并返回最后(last=True)或第一个条目.

        Raises:
            KeyError: 容器为空.
        """
        if not self._inner:
            raise KeyError("popitem(): map is empty")
        k = next(reversed(self._inner) if last else iter(self._inner))  # type: ignore[call-overload]
        bucket = self._inner.pop(k)
        return bucket.key, bucket.value

    def retain(self, predicate: Callable[[UniCaseKey, V], bool] | str) -> None:
        """
        仅保留谓词为真的条目, 剩余条目顺序不变.

        Args:
            predicate: 接收 (key, value) 的函数, 或引用 key/folded/value 的规则表达式.

        Raises:
            ExpressionError: 表达式无法解析或求值.
        """
        if isinstance(predicate, str):
            predicate = key_predicate(predicate)
        total = len(self._inner)
        kept = [(k, b) for k, b in self._inner.items() if predicate(b.key, b.value)]
        # 以保留的条目重建引擎
        self._inner = type(self)._engine_factory(kept)
        removed = total - len(kept)
        logger.debug(
            "%s.retain removed %d of %d entries",
            type(self).__name__,
            removed,
            total,
            extra={"container": type(self).__name__, "removed": removed},
        )

    def extend(self, items: Mapping[Any, V] | Iterable[tuple[KeyLike, V]]) -> None:
        """
        批量插入. 重复键遵循 insert 语义: 值以后出现者为准, 原始键以首次插入者为准.
        """
        pairs = items.items() if isinstance(items, Mapping) else items
        count = 0
        for key, value in pairs:
            self.insert(key, value)
            count += 1
        logger.debug(
            "%s.extend consumed %d pairs, size is now %d",
            type(self).__name__,
            count,
            len(self._inner),
            extra={"container": type(self).__name__},
        )

    def clear(self) -> None:
        size = len(self._inner)
        self._inner.clear()
        logger.debug(
            "%s.clear dropped %d entries",
            type(self).__name__,
            size,
            extra={"container": type(self).__name__, "removed": size},
        )

    def is_empty(self) -> bool:
        return not self._inner

    def copy(self) -> UniCaseMap[V]:
        """浅复制: 新容器拥有自己的条目, 值对象共享."""
        new = type(self)()
        for k, bucket in self._inner.items():
            new._inner[k] = Bucket(bucket.key, bucket.value)
        return new

    def _buckets(self) -> Iterator[Bucket[V]]:
        return iter(self._inner.values())


class UniCaseSet(MutableSet[UniCaseKey]):
    """
    大小写不敏感集合的基类.

    底层引擎保存 {查找键: 存储的原始键}; 迭代输出存储的原始键.
    `remove` 对不存在的键返回 False 而不是抛异常.
    """

    _engine_factory: ClassVar[Callable[..., MutableMapping[UniCaseKey, Any]]] = dict

    def __init__(self, items: Iterable[KeyLike] | None = None) -> None:
        self._inner: MutableMapping[UniCaseKey, UniCaseKey] = type(self)._engine_factory()
        if items is not None:
            self.extend(items)

    # ===========================================================================

    def __contains__(self, key: object) -> bool:
        k = _try_key(key)
        return k is not None and k in self._inner

    def __iter__(self) -> Iterator[UniCaseKey]:
        return iter(self._inner.values())

    def __reversed__(self) -> Iterator[UniCaseKey]:
        for k in reversed(self._inner):  # type: ignore[call-overload]
            yield self._inner[k]

    def __len__(self) -> int:
        return len(self._inner)

    def __eq__(self, other: object) -> bool:
        """同类集合相等: 元素数相同且互相包含(不区分大小写, 与顺序无关)."""
        if not isinstance(other, UniCaseSet) or not (
            isinstance(other, type(self)) or isinstance(self, type(other))
        ):
            return NotImplemented
        if len(self) != len(other):
            return False
        return all(k in other._inner for k in self._inner)

    def __repr__(self) -> str:
        inner = ", ".join(repr(k.original) for k in self)
        return f"{self.__class__.__name__}([{inner}])"

    def __rich_repr__(self) -> Iterator[Any]:
        yield [k.original for k in self]

    def __copy__(self) -> UniCaseSet:
        return self.copy()

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> CoreSchema:
        return pydantic_utils.set_schema(cls, source_type, handler)

    # ===========================================================================

    def insert(self, key: KeyLike) -> bool:
        """
        添加元素.

        Returns:
            新增时返回 True; 已存在时返回 False, 且不修改存储的原始键.
        """
        k = to_key(key)
        if k in self._inner:
            return False
        self._inner[k] = k
        return True

    def add(self, key: KeyLike) -> None:
        self.insert(key)

    def get(self, key: object) -> UniCaseKey | None:
        """返回存储的原始键, 不存在时返回 None."""
        k = _try_key(key)
        return self._inner.get(k) if k is not None else None

    def contains(self, key: object) -> bool:
        return key in self

    def remove(self, key: object) -> bool:  # type: ignore[override]
        """移除元素, 返回是否确实移除; 对不存在的键是无副作用的空操作."""
        return self.take(key) is not None

    def discard(self, key: object) -> None:
        self.take(key)

    def take(self, key: object) -> UniCaseKey | None:
        """移除并返回存储的原始键, 不存在时返回 None."""
        k = _try_key(key)
        return self._inner.pop(k, None) if k is not None else None

    def replace(self, key: KeyLike) -> UniCaseKey | None:
        """
        添加元素, 若已存在则以新的原始大小写替换(位置不变).

        Returns:
            被替换的原始键, 之前不存在时返回 None.
        """
        k = to_key(key)
        old = self._inner.get(k)
        self._inner[k] = k
        return old

    def pop(self, last: bool = True) -> UniCaseKey:
        """
        移除并返回最后(last=True)或第一个元素.

        Raises:
            KeyError: 集合为空.
        """
        if not self._inner:
            raise KeyError("pop(): set is empty")
        k = next(reversed(self._inner) if last else iter(self._inner))  # type: ignore[call-overload]
        return self._inner.pop(k)

    def retain(self, predicate: Callable[[UniCaseKey], bool] | str) -> None:
        """
        仅保留谓词为真的元素, 剩余元素顺序不变.

        Args:
            predicate: 接收 key 的函数, 或引用 key/folded 的规则表达式.
        """
        if isinstance(predicate, str):
            predicate = key_predicate(predicate)
        total = len(self._inner)
        kept = [(k, stored) for k, stored in self._inner.items() if predicate(stored)]
        self._inner = type(self)._engine_factory(kept)
        removed = total - len(kept)
        logger.debug(
            "%s.retain removed %d of %d keys",
            type(self).__name__,
            removed,
            total,
            extra={"container": type(self).__name__, "removed": removed},
        )

    def extend(self, items: Iterable[KeyLike]) -> None:
        """批量添加. 重复键以首次插入的原始大小写为准."""
        count = 0
        for key in items:
            self.insert(key)
            count += 1
        logger.debug(
            "%s.extend consumed %d keys, size is now %d",
            type(self).__name__,
            count,
            len(self._inner),
            extra={"container": type(self).__name__},
        )

    def clear(self) -> None:
        size = len(self._inner)
        self._inner.clear()
        logger.debug(
            "%s.clear dropped %d keys",
            type(self).__name__,
            size,
            extra={"container": type(self).__name__, "removed": size},
        )

    def is_empty(self) -> bool:
        return not self._inner

    def copy(self) -> UniCaseSet:
        new = type(self)()
        for k, stored in self._inner.items():
            new._inner[k] = stored
        return new
