"""
UniCaseIndexSet 测试套件
"""

import pytest

from unicase.collections.btree_set import UniCaseBTreeSet
from unicase.collections.index_set import UniCaseIndexSet
from unicase.collections.key import UniCaseKey


@pytest.fixture
def empty_set():
    """创建一个空集合"""
    return UniCaseIndexSet()


@pytest.fixture
def filled_set():
    """创建一个包含 A/B/C 的集合"""
    return UniCaseIndexSet(["A", "B", "C"])


def originals(s):
    return [str(k) for k in s]


class TestIndexSetBasics:
    """测试基本操作"""

    def test_insert(self, empty_set):
        assert empty_set.insert("A") is True
        assert empty_set.insert("a") is False
        assert len(empty_set) == 1
        assert originals(empty_set) == ["A"]

    def test_add(self, empty_set):
        empty_set.add("Host")
        empty_set.add("HOST")
        assert originals(empty_set) == ["Host"]

    def test_contains(self, filled_set):
        assert "a" in filled_set
        assert filled_set.contains(UniCaseKey("c"))
        assert "D" not in filled_set
        assert "Å" not in filled_set
        assert 5 not in filled_set

    def test_get_returns_stored_key(self, filled_set):
        key = filled_set.get("b")
        assert key == UniCaseKey("B")
        assert key.original == "B"
        assert filled_set.get("Z") is None

    def test_clear(self, filled_set):
        filled_set.clear()
        assert filled_set.is_empty()
        assert list(filled_set) == []


class TestIndexSetRemoval:
    """测试删除"""

    def test_remove_is_idempotent(self, filled_set):
        assert filled_set.remove("b") is True
        assert filled_set.remove("b") is False
        assert originals(filled_set) == ["A", "C"]

    def test_discard(self, filled_set):
        filled_set.discard("a")
        filled_set.discard("a")
        assert originals(filled_set) == ["B", "C"]

    def test_take(self, filled_set):
        assert filled_set.take("c").original == "C"
        assert filled_set.take("c") is None

    def test_pop(self, filled_set):
        assert filled_set.pop().original == "C"
        assert filled_set.pop(last=False).original == "A"
        assert originals(filled_set) == ["B"]

    def test_pop_empty(self, empty_set):
        with pytest.raises(KeyError):
            empty_set.pop()

    def test_retain(self, filled_set):
        filled_set.retain(lambda k: k != UniCaseKey("b"))
        assert originals(filled_set) == ["A", "C"]

    def test_retain_expression(self):
        s = UniCaseIndexSet(["X-Trace", "Accept", "x-span"])
        s.retain("folded =~ 'x-'")
        assert originals(s) == ["X-Trace", "x-span"]


class TestIndexSetOrder:
    """测试插入顺序"""

    def test_remove_then_reinsert_moves_to_end(self, filled_set):
        filled_set.remove("B")
        filled_set.insert("B")
        assert originals(filled_set) == ["A", "C", "B"]

    def test_replace_keeps_position(self, filled_set):
        old = filled_set.replace("b")
        assert old.original == "B"
        assert originals(filled_set) == ["A", "b", "C"]

    def test_replace_absent_appends(self, filled_set):
        assert filled_set.replace("d") is None
        assert originals(filled_set) == ["A", "B", "C", "d"]

    def test_reversed(self, filled_set):
        assert [str(k) for k in reversed(filled_set)] == ["C", "B", "A"]


class TestIndexSetAlgebra:
    """测试相等性与集合运算"""

    def test_equal_regardless_of_order_and_case(self):
        assert UniCaseIndexSet(["A", "B", "C"]) == UniCaseIndexSet(["c", "b", "a"])
        assert UniCaseIndexSet(["A"]) != UniCaseIndexSet(["A", "B"])

    def test_not_equal_to_other_kinds(self, filled_set):
        assert filled_set != {"A", "B", "C"}
        assert filled_set != UniCaseBTreeSet(filled_set)

    def test_bulk_duplicates(self):
        s = UniCaseIndexSet(["Key", "KEY", "other", "key"])
        assert len(s) == 2
        assert originals(s) == ["Key", "other"]

    def test_intersection_with_plain_strings(self, filled_set):
        common = filled_set & ["a", "c", "z"]
        assert isinstance(common, UniCaseIndexSet)
        assert originals(common) == ["a", "c"]

    def test_subset(self, filled_set):
        assert UniCaseIndexSet(["b"]) <= filled_set
        assert filled_set.isdisjoint(UniCaseIndexSet(["x", "y"]))

    def test_extend(self, filled_set):
        filled_set.extend(["d", "A"])
        assert originals(filled_set) == ["A", "B", "C", "d"]

    def test_repr(self, filled_set):
        assert repr(filled_set) == "UniCaseIndexSet(['A', 'B', 'C'])"
