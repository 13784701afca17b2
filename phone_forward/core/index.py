"""Forward and reverse redirection indexes built on paired tries."""

import time
from typing import Dict, List, Optional, Tuple

from .alphabet import validate_number
from .errors import AllocationFailureError, InvalidNumberError
from .result_list import ResultList
from .trie import NodeArena, RemovedRedirect, Trie


class ForwardIndex:
    """Forward index mapping number prefixes to replacement prefixes."""

    def __init__(self, arena: NodeArena) -> None:
        """
        Initialize the forward index.

        Args:
            arena: Node store shared with the reverse index
        """
        self.trie = Trie(arena)

    def get(self, number: str) -> str:
        """
        Redirect a validated number using the longest matching prefix.

        Args:
            number: The number to redirect

        Returns:
            The target of the longest matching prefix followed by the
            unmatched suffix, or the number itself if no prefix matches
        """
        match = self.trie.longest_prefix_match(number)
        if match is None:
            return number

        target = next(iter(match.targets))
        return target + number[match.depth:]

    def get_rule(self, prefix: str) -> Optional[str]:
        """
        Get the redirect stored exactly at a prefix.

        Args:
            prefix: The prefix to look up

        Returns:
            Target prefix or None if no rule starts at this prefix
        """
        handle = self.trie.find(prefix)
        if handle is None:
            return None

        targets = self.trie.arena[handle].targets
        return next(iter(targets)) if targets else None

    def get_all_rules(self) -> List[Tuple[str, str]]:
        """Get all ``(prefix, target)`` rules in number order."""
        return list(self.trie.items())

    def clear(self) -> None:
        """Clear all rules."""
        self.trie.clear()

    def get_stats(self) -> Dict[str, any]:
        """Get index statistics."""
        stats = self.trie.get_stats()
        return {
            "total_rules": stats["total_redirects"],
            "total_nodes": stats["total_nodes"],
            "last_updated": stats["last_updated"]
        }


class ReverseIndex:
    """Reverse index mapping target prefixes to the prefixes redirected to them."""

    def __init__(self, arena: NodeArena) -> None:
        """
        Initialize the reverse index.

        Args:
            arena: Node store shared with the forward index
        """
        self.trie = Trie(arena, multi_valued=True)

    def candidates(self, number: str) -> ResultList:
        """
        Collect every number that may redirect to ``number``.

        The number itself is always a candidate. Every node along its path
        holding original prefixes adds ``prefix + unmatched suffix``.

        Args:
            number: Validated number to look up

        Returns:
            Sorted, duplicate-free candidates
        """
        result = ResultList([number])
        for match in self.trie.iter_matches(number):
            suffix = number[match.depth:]
            for origin in match.targets:
                result.add(origin + suffix)
        return result

    def get_origins(self, prefix: str) -> List[str]:
        """Get the prefixes stored exactly at a target prefix, sorted."""
        handle = self.trie.find(prefix)
        if handle is None:
            return []
        return ResultList(self.trie.arena[handle].targets).to_list()

    def clear(self) -> None:
        """Clear all reverse entries."""
        self.trie.clear()

    def get_stats(self) -> Dict[str, any]:
        """Get index statistics."""
        stats = self.trie.get_stats()
        return {
            "total_entries": stats["total_redirects"],
            "total_nodes": stats["total_nodes"],
            "last_updated": stats["last_updated"]
        }


class IndexManager:
    """Manages both forward and reverse indexes with consistency."""

    def __init__(self, max_nodes: Optional[int] = None) -> None:
        """
        Initialize the index manager.

        Args:
            max_nodes: Capacity of the shared node arena, None for no limit

        Raises:
            AllocationFailureError: If the two root nodes cannot be created
        """
        self.arena = NodeArena(capacity=max_nodes)
        self.forward_index = ForwardIndex(self.arena)
        self.reverse_index = ReverseIndex(self.arena)
        self._last_updated: Optional[float] = None

    def add(self, num1: str, num2: str) -> bool:
        """
        Add a redirect from prefix ``num1`` to prefix ``num2`` in both indexes.

        Args:
            num1: Prefix being redirected
            num2: Replacement prefix

        Returns:
            True if the registry changed, False if the rule already existed

        Raises:
            InvalidNumberError: If either number is malformed or they are equal
            AllocationFailureError: If a node cannot be created; both indexes
                are left unchanged
        """
        validate_number(num1)
        validate_number(num2)
        if num1 == num2:
            raise InvalidNumberError(f"Cannot redirect {num1!r} to itself")

        if self.forward_index.get_rule(num1) == num2:
            return False

        forward = self.forward_index.trie
        reverse = self.reverse_index.trie

        forward_handle, displaced = forward.insert(num1, num2)
        try:
            reverse_handle, _ = reverse.insert(num2, num1, link=forward_handle)
        except (AllocationFailureError, MemoryError):
            forward.restore(forward_handle, displaced)
            raise

        forward.relink(forward_handle, num2, reverse_handle)

        # The overwritten rule's mirror no longer reflects the forward trie.
        for link in displaced.values():
            if link is not None:
                reverse.discard(link, num1)

        self._last_updated = time.time()
        return True

    def remove(self, prefix: str) -> int:
        """
        Remove every rule whose prefix starts with ``prefix``.

        Args:
            prefix: Prefix of the rules to remove

        Returns:
            Number of rules removed

        Raises:
            InvalidNumberError: If the prefix is malformed
        """
        validate_number(prefix)

        removed = self.forward_index.trie.remove(prefix)
        self._discard_mirrors(removed)

        if removed:
            self._last_updated = time.time()
        return len(removed)

    def get(self, number: str) -> ResultList:
        """
        Redirect a number.

        Raises:
            InvalidNumberError: If the number is malformed
        """
        validate_number(number)
        return ResultList([self.forward_index.get(number)])

    def reverse_lookup(self, number: str) -> ResultList:
        """
        Get all candidates that may redirect to a number.

        Raises:
            InvalidNumberError: If the number is malformed
        """
        validate_number(number)
        return self.reverse_index.candidates(number)

    def consistent_reverse_lookup(self, number: str) -> ResultList:
        """
        Get the candidates whose forward redirection yields exactly ``number``.

        Returns:
            Filtered candidates, or an absent result when none survive

        Raises:
            InvalidNumberError: If the number is malformed
        """
        validate_number(number)

        result = ResultList()
        for candidate in self.reverse_index.candidates(number):
            if self.forward_index.get(candidate) == number:
                result.add(candidate)

        if not result:
            return ResultList.absent_result()
        return result

    def clear(self) -> None:
        """Clear both indexes."""
        self.forward_index.clear()
        self.reverse_index.clear()
        self._last_updated = None

    def get_stats(self) -> Dict[str, any]:
        """Get combined statistics from both indexes."""
        return {
            "forward_index": self.forward_index.get_stats(),
            "reverse_index": self.reverse_index.get_stats(),
            "total_nodes": len(self.arena),
            "node_capacity": self.arena.capacity,
            "last_updated": self._last_updated
        }

    def _discard_mirrors(self, removed: List[RemovedRedirect]) -> None:
        reverse = self.reverse_index.trie
        for redirect in removed:
            if redirect.link is not None:
                reverse.discard(redirect.link, redirect.prefix)
