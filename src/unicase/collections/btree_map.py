"""
按大小写不敏感键排序的映射.

示例:
    >>> m = UniCaseBTreeMap({"b": 2, "A": 1})
    >>> list(m.items())
    [(UniCaseKey('A'), 1), (UniCaseKey('b'), 2)]
    >>> m["B"]
    2
"""

from __future__ import annotations

from typing import Iterator, TypeVar

from sortedcontainers import SortedDict

from unicase.collections.base import UniCaseMap
from unicase.collections.key import KeyLike, UniCaseKey, to_key

V = TypeVar("V")


class UniCaseBTreeMap(UniCaseMap[V]):
    """
    有序映射: 按 UniCaseKey 全序(折叠形式的码点顺序)迭代.

    除基类操作外, 提供 first/last/range 等有序查询.
    """

    _engine_factory = SortedDict
    _inner: SortedDict

    def first(self) -> tuple[UniCaseKey, V] | None:
        """返回最小键的 (原始键, 值), 空映射返回 None."""
        if not self._inner:
            return None
        bucket = self._inner.peekitem(0)[1]
        return bucket.key, bucket.value

    def last(self) -> tuple[UniCaseKey, V] | None:
        """返回最大键的 (原始键, 值), 空映射返回 None."""
        if not self._inner:
            return None
        bucket = self._inner.peekitem(-1)[1]
        return bucket.key, bucket.value

    def range(
        self,
        start: KeyLike | None = None,
        stop: KeyLike | None = None,
        inclusive: tuple[bool, bool] = (True, False),
    ) -> Iterator[tuple[UniCaseKey, V]]:
        """
        按顺序迭代键落在区间内的条目, 边界同样不区分大小写.

        Args:
            start: 下界, None 表示不设下界.
            stop: 上界, None 表示不设上界.
            inclusive: (是否包含下界, 是否包含上界), 默认左闭右开.
        """
        lo = to_key(start) if start is not None else None
        hi = to_key(stop) if stop is not None else None
        for k in self._inner.irange(lo, hi, inclusive):
            bucket = self._inner[k]
            yield bucket.key, bucket.value
