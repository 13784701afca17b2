"""Prefix tree over the phone number alphabet backed by a shared node arena."""

import time
from typing import Dict, Iterator, List, NamedTuple, Optional, Tuple

from .alphabet import ALPHABET_SIZE, SYMBOLS, to_indices
from .errors import AllocationFailureError


class TrieNode:
    """Single trie node; children and links are arena handles."""

    __slots__ = ("parent", "symbol", "children", "child_count", "targets")

    def __init__(self, parent: Optional[int], symbol: Optional[int]) -> None:
        self.parent = parent
        self.symbol = symbol
        self.children: List[Optional[int]] = [None] * ALPHABET_SIZE
        self.child_count = 0
        # redirect value -> handle of the linked node in the paired trie
        self.targets: Dict[str, Optional[int]] = {}

    def is_empty(self) -> bool:
        """True when the node has neither children nor redirects."""
        return self.child_count == 0 and not self.targets


class NodeArena:
    """Handle-addressed node store shared by the forward and reverse tries."""

    def __init__(self, capacity: Optional[int] = None) -> None:
        """
        Initialize the arena.

        Args:
            capacity: Maximum number of live nodes, None for no limit
        """
        self.capacity = capacity
        self._nodes: List[Optional[TrieNode]] = []
        self._free: List[int] = []
        self._live = 0

    def allocate(self, parent: Optional[int], symbol: Optional[int]) -> int:
        """
        Create a node and return its handle.

        Raises:
            AllocationFailureError: If the capacity is exhausted or memory runs out
        """
        if self.capacity is not None and self._live >= self.capacity:
            raise AllocationFailureError(
                f"Node arena capacity of {self.capacity} nodes exhausted"
            )

        try:
            node = TrieNode(parent, symbol)
            if self._free:
                handle = self._free.pop()
                self._nodes[handle] = node
            else:
                self._nodes.append(node)
                handle = len(self._nodes) - 1
        except MemoryError as exc:
            raise AllocationFailureError("Out of memory while creating a trie node") from exc

        self._live += 1
        return handle

    def release(self, handle: int) -> None:
        """Return a node's slot to the free list."""
        self._nodes[handle] = None
        self._free.append(handle)
        self._live -= 1

    def __getitem__(self, handle: int) -> TrieNode:
        node = self._nodes[handle]
        if node is None:
            raise KeyError(f"Stale trie node handle: {handle}")
        return node

    def __len__(self) -> int:
        return self._live


class PrefixMatch(NamedTuple):
    """A node along a searched path that carries redirects."""

    depth: int
    handle: int
    targets: Dict[str, Optional[int]]


class RemovedRedirect(NamedTuple):
    """A redirect deleted together with its subtree."""

    prefix: str
    target: str
    link: Optional[int]


class Trie:
    """
    Prefix tree keyed by phone number symbols.

    A single-valued trie keeps at most one redirect per node and overwrites
    it on insert. A multi-valued trie keeps every inserted redirect.
    Every node other than the root carries a redirect or has a descendant
    that does.
    """

    def __init__(self, arena: NodeArena, multi_valued: bool = False) -> None:
        """
        Initialize the trie.

        Args:
            arena: Node store, possibly shared with a paired trie
            multi_valued: Whether a node may hold several redirects
        """
        self.arena = arena
        self.multi_valued = multi_valued
        self.root = arena.allocate(None, None)
        self._stats = {
            "total_redirects": 0,
            "total_nodes": 1,
            "last_updated": None
        }

    def insert(
        self,
        path: str,
        target: str,
        link: Optional[int] = None
    ) -> Tuple[int, Dict[str, Optional[int]]]:
        """
        Store a redirect at the node for ``path``, creating missing nodes.

        Args:
            path: Validated number naming the node
            target: Redirect value to store
            link: Handle of the paired node in the other trie

        Returns:
            The node handle and the redirects displaced by the insert
            (always empty for a multi-valued trie)

        Raises:
            AllocationFailureError: If a node or the redirect cannot be
                stored; nodes created by this call are released first
        """
        arena = self.arena
        handle = self.root
        # Nodes created by one insert form a single chain below this node.
        first_created: Optional[int] = None
        created = 0

        try:
            for symbol in to_indices(path):
                node = arena[handle]
                child = node.children[symbol]
                if child is None:
                    child = arena.allocate(handle, symbol)
                    node.children[symbol] = child
                    node.child_count += 1
                    created += 1
                    if first_created is None:
                        first_created = child
                handle = child

            node = arena[handle]
            if self.multi_valued:
                displaced: Dict[str, Optional[int]] = {}
                added = target not in node.targets
                node.targets[target] = link
            else:
                displaced = node.targets
                node.targets = {target: link}
        except AllocationFailureError:
            self._unwind(first_created)
            raise
        except MemoryError as exc:
            self._unwind(first_created)
            raise AllocationFailureError("Out of memory while storing a redirect") from exc

        if self.multi_valued:
            if added:
                self._stats["total_redirects"] += 1
        else:
            self._stats["total_redirects"] += 1 - len(displaced)

        self._stats["total_nodes"] += created
        self._stats["last_updated"] = time.time()
        return handle, displaced

    def relink(self, handle: int, target: str, link: Optional[int]) -> None:
        """Point an existing redirect at a node of the paired trie."""
        node = self.arena[handle]
        if target not in node.targets:
            raise KeyError(f"No redirect to {target!r} at node {handle}")
        node.targets[target] = link

    def restore(self, handle: int, targets: Dict[str, Optional[int]]) -> None:
        """
        Put back the redirects a single-valued insert displaced.

        Used to roll back an insert; the node is pruned if it ends up empty.
        """
        node = self.arena[handle]
        self._stats["total_redirects"] += len(targets) - len(node.targets)
        node.targets = dict(targets)
        self._prune(handle)
        self._stats["last_updated"] = time.time()

    def discard(self, handle: int, target: str) -> bool:
        """
        Remove one redirect from a node and prune emptied ancestors.

        Returns:
            True if the redirect was present
        """
        node = self.arena[handle]
        if target not in node.targets:
            return False

        del node.targets[target]
        self._stats["total_redirects"] -= 1
        self._stats["last_updated"] = time.time()
        self._prune(handle)
        return True

    def find(self, path: str) -> Optional[int]:
        """Return the handle of the node exactly matching ``path``, if any."""
        arena = self.arena
        handle: Optional[int] = self.root
        for symbol in to_indices(path):
            handle = arena[handle].children[symbol]
            if handle is None:
                return None
        return handle

    def iter_matches(self, path: str) -> Iterator[PrefixMatch]:
        """
        Yield every node along ``path`` that carries redirects.

        Matches are produced shallowest first; the walk stops at the end of
        the path or at the first missing child.
        """
        arena = self.arena
        handle: Optional[int] = self.root
        for depth, symbol in enumerate(to_indices(path), start=1):
            handle = arena[handle].children[symbol]
            if handle is None:
                return
            node = arena[handle]
            if node.targets:
                yield PrefixMatch(depth, handle, node.targets)

    def longest_prefix_match(self, path: str) -> Optional[PrefixMatch]:
        """Return the deepest node along ``path`` carrying redirects, or None."""
        match = None
        for match in self.iter_matches(path):
            pass
        return match

    def remove(self, path: str) -> List[RemovedRedirect]:
        """
        Delete the subtree rooted at ``path`` and prune emptied ancestors.

        A path with no node is a no-op.

        Returns:
            Every redirect removed, with its prefix and paired-trie link
        """
        handle = self.find(path)
        if handle is None or handle == self.root:
            return []

        arena = self.arena
        top = arena[handle]
        parent, symbol = top.parent, top.symbol

        removed: List[RemovedRedirect] = []
        released = 0
        stack = [(handle, path)]
        while stack:
            current, prefix = stack.pop()
            node = arena[current]
            for target, link in node.targets.items():
                removed.append(RemovedRedirect(prefix, target, link))
            for child_symbol, child in enumerate(node.children):
                if child is not None:
                    stack.append((child, prefix + SYMBOLS[child_symbol]))
            arena.release(current)
            released += 1

        self._detach(parent, symbol)
        self._stats["total_nodes"] -= released
        self._stats["total_redirects"] -= len(removed)
        self._stats["last_updated"] = time.time()
        self._prune(parent)
        return removed

    def items(self) -> Iterator[Tuple[str, str]]:
        """Yield all ``(prefix, target)`` pairs in number order."""
        arena = self.arena
        stack = [(self.root, "")]
        while stack:
            handle, prefix = stack.pop()
            node = arena[handle]
            for target in sorted(node.targets):
                yield prefix, target
            for symbol in range(ALPHABET_SIZE - 1, -1, -1):
                child = node.children[symbol]
                if child is not None:
                    stack.append((child, prefix + SYMBOLS[symbol]))

    def clear(self) -> None:
        """Release every node below the root."""
        arena = self.arena
        root = arena[self.root]
        stack = [child for child in root.children if child is not None]
        while stack:
            handle = stack.pop()
            stack.extend(child for child in arena[handle].children if child is not None)
            arena.release(handle)

        root.children = [None] * ALPHABET_SIZE
        root.child_count = 0
        root.targets = {}
        self._stats = {
            "total_redirects": 0,
            "total_nodes": 1,
            "last_updated": None
        }

    def is_empty(self) -> bool:
        """True when the trie holds nothing but its root."""
        return self.arena[self.root].is_empty()

    def get_stats(self) -> Dict[str, any]:
        """Get trie statistics."""
        return self._stats.copy()

    def _detach(self, parent: int, symbol: int) -> None:
        node = self.arena[parent]
        node.children[symbol] = None
        node.child_count -= 1

    def _prune(self, handle: int) -> None:
        # Walk upwards removing nodes left with no children and no redirects.
        arena = self.arena
        while handle != self.root:
            node = arena[handle]
            if not node.is_empty():
                break
            parent = node.parent
            self._detach(parent, node.symbol)
            arena.release(handle)
            self._stats["total_nodes"] -= 1
            handle = parent

    def _unwind(self, first_created: Optional[int]) -> None:
        # Cut the new chain off its parent, then release it top down.
        if first_created is None:
            return
        arena = self.arena
        node = arena[first_created]
        self._detach(node.parent, node.symbol)
        handle: Optional[int] = first_created
        while handle is not None:
            node = arena[handle]
            following = next((child for child in node.children if child is not None), None)
            arena.release(handle)
            handle = following
