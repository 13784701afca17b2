"""Unit tests for the trie engine and node arena."""

import pytest
from phone_forward.core.errors import AllocationFailureError
from phone_forward.core import trie as trie_module
from phone_forward.core.trie import NodeArena, Trie


def assert_no_dangling_nodes(trie):
    """Check that every non-root node has a redirect or a child, and child counts match."""
    arena = trie.arena
    stack = [trie.root]
    while stack:
        handle = stack.pop()
        node = arena[handle]
        children = [child for child in node.children if child is not None]
        assert node.child_count == len(children)
        if handle != trie.root:
            assert node.targets or children
        for child in children:
            assert arena[child].parent == handle
        stack.extend(children)


class TestNodeArena:
    """Test cases for the NodeArena class."""

    def test_allocate_and_release(self):
        """Test handing out and reusing node handles."""
        arena = NodeArena()
        first = arena.allocate(None, None)
        second = arena.allocate(first, 3)
        assert len(arena) == 2
        assert arena[second].parent == first
        assert arena[second].symbol == 3

        arena.release(second)
        assert len(arena) == 1
        with pytest.raises(KeyError):
            arena[second]

        third = arena.allocate(first, 4)
        assert third == second
        assert len(arena) == 2

    def test_capacity(self):
        """Test that allocation past the capacity fails."""
        arena = NodeArena(capacity=1)
        arena.allocate(None, None)

        with pytest.raises(AllocationFailureError):
            arena.allocate(None, None)
        assert len(arena) == 1

    def test_allocation_failure_is_memory_error(self):
        """Test that allocation failures are MemoryErrors."""
        arena = NodeArena(capacity=0)
        with pytest.raises(MemoryError):
            arena.allocate(None, None)


class TestTrie:
    """Test cases for the Trie class."""

    @pytest.fixture
    def trie(self):
        """Create a single-valued trie for testing."""
        return Trie(NodeArena())

    def test_initialization(self, trie):
        """Test trie initialization."""
        assert trie.is_empty()
        assert len(trie.arena) == 1
        assert trie.get_stats()["total_redirects"] == 0
        assert trie.get_stats()["total_nodes"] == 1
        assert trie.get_stats()["last_updated"] is None

    def test_insert_and_find(self, trie):
        """Test inserting a redirect and finding its node."""
        handle, displaced = trie.insert("123", "45")

        assert displaced == {}
        assert trie.find("123") == handle
        assert trie.arena[handle].targets == {"45": None}
        assert trie.find("12") is not None
        assert trie.find("124") is None
        assert trie.find("1234") is None
        assert trie.get_stats()["total_nodes"] == 4
        assert trie.get_stats()["total_redirects"] == 1

    def test_insert_overwrites(self, trie):
        """Test that a single-valued trie replaces an existing redirect."""
        handle, _ = trie.insert("12", "3", link=7)
        same_handle, displaced = trie.insert("12", "4")

        assert same_handle == handle
        assert displaced == {"3": 7}
        assert trie.arena[handle].targets == {"4": None}
        assert trie.get_stats()["total_redirects"] == 1

    def test_multi_valued_insert(self):
        """Test that a multi-valued trie keeps every redirect."""
        trie = Trie(NodeArena(), multi_valued=True)
        handle, _ = trie.insert("5", "1")
        _, displaced = trie.insert("5", "2")

        assert displaced == {}
        assert set(trie.arena[handle].targets) == {"1", "2"}
        assert trie.get_stats()["total_redirects"] == 2

    def test_longest_prefix_match(self, trie):
        """Test that the deepest matching node wins."""
        trie.insert("22", "44")
        trie.insert("22123", "55")

        match = trie.longest_prefix_match("22123999")
        assert match.depth == 5
        assert match.targets == {"55": None}

        match = trie.longest_prefix_match("2219")
        assert match.depth == 2
        assert match.targets == {"44": None}

    def test_longest_prefix_match_none(self, trie):
        """Test that no match is reported when no prefix carries a redirect."""
        trie.insert("123", "4")

        assert trie.longest_prefix_match("12") is None
        assert trie.longest_prefix_match("9") is None

    def test_iter_matches(self, trie):
        """Test visiting every redirect along a path."""
        trie.insert("1", "a")
        trie.insert("123", "b")
        trie.insert("1234", "c")

        depths = [match.depth for match in trie.iter_matches("12399")]
        assert depths == [1, 3]

    def test_remove_subtree(self, trie):
        """Test removing a node together with its descendants."""
        trie.insert("12", "5", link=1)
        trie.insert("123", "6", link=2)
        trie.insert("13", "7")

        removed = trie.remove("12")

        assert {(r.prefix, r.target, r.link) for r in removed} == {
            ("12", "5", 1),
            ("123", "6", 2),
        }
        assert trie.find("12") is None
        assert trie.find("13") is not None
        assert trie.get_stats()["total_redirects"] == 1
        assert_no_dangling_nodes(trie)

    def test_remove_prunes_ancestors(self, trie):
        """Test that emptied ancestors are pruned up to the root."""
        trie.insert("12345", "6")

        trie.remove("12345")

        assert trie.is_empty()
        assert len(trie.arena) == 1
        assert trie.get_stats()["total_nodes"] == 1

    def test_remove_keeps_ancestor_with_redirect(self, trie):
        """Test that pruning stops at an ancestor carrying a redirect."""
        trie.insert("1", "9")
        trie.insert("123", "8")

        trie.remove("12")

        assert trie.find("1") is not None
        assert trie.find("12") is None
        assert trie.get_stats()["total_nodes"] == 2
        assert_no_dangling_nodes(trie)

    def test_remove_missing_is_noop(self, trie):
        """Test that removing a path without a node changes nothing."""
        trie.insert("12", "3")

        assert trie.remove("13") == []
        assert trie.remove("123") == []
        assert trie.find("12") is not None

    def test_remove_intermediate_node(self, trie):
        """Test removing a path that has no redirect itself."""
        trie.insert("123", "4")

        removed = trie.remove("12")

        assert [(r.prefix, r.target) for r in removed] == [("123", "4")]
        assert trie.is_empty()

    def test_discard(self):
        """Test discarding one redirect from a multi-valued node."""
        trie = Trie(NodeArena(), multi_valued=True)
        handle, _ = trie.insert("34", "1")
        trie.insert("34", "2")

        assert trie.discard(handle, "1") is True
        assert trie.discard(handle, "1") is False
        assert trie.arena[handle].targets == {"2": None}

        assert trie.discard(handle, "2") is True
        assert trie.is_empty()
        assert len(trie.arena) == 1

    def test_restore(self, trie):
        """Test putting back displaced redirects."""
        handle, displaced = trie.insert("12", "3", link=5)
        trie.insert("12", "4")

        trie.restore(handle, {"3": 5})
        assert trie.arena[handle].targets == {"3": 5}

        new_handle, displaced = trie.insert("789", "1")
        trie.restore(new_handle, displaced)
        assert trie.find("7") is None
        assert_no_dangling_nodes(trie)

    def test_relink(self, trie):
        """Test pointing a redirect at a paired node."""
        handle, _ = trie.insert("1", "2")

        trie.relink(handle, "2", 42)
        assert trie.arena[handle].targets == {"2": 42}

        with pytest.raises(KeyError):
            trie.relink(handle, "3", 1)

    def test_failed_insert_unwinds(self):
        """Test that nodes created by a failed insert are released."""
        arena = NodeArena(capacity=4)
        trie = Trie(arena)
        trie.insert("1", "2")

        with pytest.raises(AllocationFailureError):
            trie.insert("1345", "6")

        assert len(arena) == 2
        assert trie.find("13") is None
        assert trie.get_stats()["total_nodes"] == 2
        assert trie.get_stats()["total_redirects"] == 1
        assert_no_dangling_nodes(trie)

    def test_out_of_memory_storing_redirect_unwinds(self, monkeypatch):
        """Test that running out of memory on the final write releases new nodes."""

        class ExhaustedTargets(dict):
            def __setitem__(self, key, value):
                raise MemoryError()

        class ExhaustedNode(trie_module.TrieNode):
            __slots__ = ()

            def __init__(self, parent, symbol):
                super().__init__(parent, symbol)
                self.targets = ExhaustedTargets()

        arena = NodeArena()
        trie = Trie(arena, multi_valued=True)
        monkeypatch.setattr(trie_module, "TrieNode", ExhaustedNode)

        with pytest.raises(AllocationFailureError):
            trie.insert("123", "4")

        assert len(arena) == 1
        assert trie.is_empty()
        assert trie.find("1") is None
        assert trie.get_stats()["total_nodes"] == 1
        assert trie.get_stats()["total_redirects"] == 0

    def test_items_in_number_order(self, trie):
        """Test listing all redirects in number order."""
        trie.insert("2", "a")
        trie.insert("#", "b")
        trie.insert("10", "c")
        trie.insert("1", "d")

        assert list(trie.items()) == [("1", "d"), ("10", "c"), ("2", "a"), ("#", "b")]

    def test_clear(self, trie):
        """Test releasing all nodes."""
        trie.insert("123", "4")
        trie.insert("5", "6")

        trie.clear()

        assert trie.is_empty()
        assert len(trie.arena) == 1
        assert list(trie.items()) == []

    def test_deep_trie_removal(self, trie):
        """Test that very deep subtrees are removed without recursion."""
        number = "1" * 5000
        trie.insert(number, "2")

        removed = trie.remove("1")

        assert len(removed) == 1
        assert trie.is_empty()
