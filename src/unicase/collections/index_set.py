"""
保留插入顺序的大小写不敏感集合.

示例:
    >>> s = UniCaseIndexSet(["Content-Type", "accept", "CONTENT-TYPE"])
    >>> [str(k) for k in s]
    ['Content-Type', 'accept']
"""

from __future__ import annotations

from unicase.collections.base import UniCaseSet


class UniCaseIndexSet(UniCaseSet):
    """
    插入有序集合.

    迭代顺序为当前元素的首次插入顺序: 删除后重新插入的元素移到末尾,
    查找/replace/retain 不改变顺序.
    """

    _engine_factory = dict
