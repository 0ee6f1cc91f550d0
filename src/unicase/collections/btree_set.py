"""
按大小写不敏感键排序的集合.

示例:
    >>> s = UniCaseBTreeSet(["b", "A", "a"])
    >>> [str(k) for k in s]
    ['A', 'b']
    >>> "B" in s
    True
"""

from __future__ import annotations

from typing import Iterator

from sortedcontainers import SortedDict

from unicase.collections.base import UniCaseSet
from unicase.collections.key import KeyLike, UniCaseKey, to_key


class UniCaseBTreeSet(UniCaseSet):
    """有序集合: 按 UniCaseKey 全序迭代, 首次插入的原始大小写被保留."""

    _engine_factory = SortedDict
    _inner: SortedDict

    def first(self) -> UniCaseKey | None:
        return self._inner.peekitem(0)[1] if self._inner else None

    def last(self) -> UniCaseKey | None:
        return self._inner.peekitem(-1)[1] if self._inner else None

    def range(
        self,
        start: KeyLike | None = None,
        stop: KeyLike | None = None,
        inclusive: tuple[bool, bool] = (True, False),
    ) -> Iterator[UniCaseKey]:
        """按顺序迭代落在区间内的原始键(默认左闭右开)."""
        lo = to_key(start) if start is not None else None
        hi = to_key(stop) if stop is not None else None
        for k in self._inner.irange(lo, hi, inclusive):
            yield self._inner[k]
