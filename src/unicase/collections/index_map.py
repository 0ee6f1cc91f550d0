"""
保留插入顺序的大小写不敏感映射, 附带 entry 风格的原地操作接口.

设计目标:
- 迭代顺序为当前条目的首次插入顺序, 删除后剩余条目相对顺序不变.
- `entry` 只做一次查找, 返回 OccupiedEntry 或 VacantEntry,
  避免"先查找, 不存在再插入"的两次遍历.
- `map[key]` 在键不存在时抛出 UniCaseKeyError, `get` 则返回 None.

示例:
    >>> headers = UniCaseIndexMap[str]()
    >>> headers["Accept-Encoding"] = "gzip"
    >>> headers["ACCEPT-ENCODING"]
    'gzip'
    >>> counts = UniCaseIndexMap[int]()
    >>> for word in ["Foo", "foo", "BAR"]:
    ...     _ = counts.entry(word).and_modify(lambda n: n + 1).or_insert(1)
    >>> list(counts.items())
    [(UniCaseKey('Foo'), 2), (UniCaseKey('BAR'), 1)]
"""

from __future__ import annotations

from typing import Any, Callable, Generic, TypeVar

from unicase.collections.base import Bucket, UniCaseMap
from unicase.collections.errors import UniCaseKeyError
from unicase.collections.key import KeyLike, UniCaseKey, to_key

V = TypeVar("V")


class OccupiedEntry(Generic[V]):
    """
    已存在条目的句柄, 直接持有条目, 后续操作无需再次查找.

    条目从映射中移除后句柄失效, 此后的读写抛出 UniCaseKeyError.
    """

    __slots__ = ("_map", "_bucket")

    def __init__(self, owner: UniCaseIndexMap[V], bucket: Bucket[V]) -> None:
        self._map = owner
        self._bucket = bucket

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._bucket.key!r}, {self._bucket.value!r})"

    @property
    def key(self) -> UniCaseKey:
        """存储的原始键."""
        return self._bucket.key

    def get(self) -> V:
        return self._live().value

    def insert(self, value: V) -> V:
        """替换值并返回旧值."""
        self._live()
        old, self._bucket.value = self._bucket.value, value
        return old

    def remove(self) -> V:
        return self.remove_entry()[1]

    def remove_entry(self) -> tuple[UniCaseKey, V]:
        del self._map._inner[self._live().key]
        return self._bucket.key, self._bucket.value

    def and_modify(self, func: Callable[[V], V]) -> OccupiedEntry[V]:
        """以 func(当前值) 的结果替换值."""
        bucket = self._live()
        bucket.value = func(bucket.value)
        return self

    def or_insert(self, default: V) -> V:
        return self._live().value

    def or_insert_with(self, factory: Callable[[], V]) -> V:
        return self._live().value

    def _live(self) -> Bucket[V]:
        if self._map._inner.get(self._bucket.key) is not self._bucket:
            raise UniCaseKeyError(self._bucket.key)
        return self._bucket


class VacantEntry(Generic[V]):
    """不存在条目的句柄, 插入时使用创建句柄时传入的键."""

    __slots__ = ("_map", "_key")

    def __init__(self, owner: UniCaseIndexMap[V], key: UniCaseKey) -> None:
        self._map = owner
        self._key = key

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._key!r})"

    @property
    def key(self) -> UniCaseKey:
        return self._key

    def insert(self, value: V) -> V:
        """插入值并返回该值."""
        self._map._inner[self._key] = Bucket(self._key, value)
        return value

    def and_modify(self, func: Callable[[V], V]) -> VacantEntry[V]:
        return self

    def or_insert(self, default: V) -> V:
        return self.insert(default)

    def or_insert_with(self, factory: Callable[[], V]) -> V:
        return self.insert(factory())


Entry = OccupiedEntry[V] | VacantEntry[V]


class UniCaseIndexMap(UniCaseMap[V]):
    """插入有序映射."""

    _engine_factory = dict

    def entry(self, key: KeyLike) -> Entry[V]:
        """
        获取键对应的条目句柄以便原地操作.

        Args:
            key: 键, 任意可转换为 UniCaseKey 的对象.

        Returns:
            键存在时返回 OccupiedEntry(其 key 为存储的原始键), 否则返回 VacantEntry.
        """
        k = to_key(key)
        bucket: Bucket[V] | None = self._inner.get(k)
        if bucket is None:
            return VacantEntry(self, k)
        return OccupiedEntry(self, bucket)

    def setdefault(self, key: KeyLike, default: Any = None) -> Any:
        return self.entry(key).or_insert(default)
