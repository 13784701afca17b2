"""Phone number redirection registry."""

import time
from typing import Callable, Dict, List, Optional, Tuple, TypeVar

import structlog

from .errors import AllocationFailureError, InvalidNumberError
from .index import IndexManager
from .result_list import ResultList

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class PhoneForward:
    """
    Registry of prefix redirection rules.

    Every operation is total: invalid input and allocation failures are
    logged and reported as ``False`` or ``None`` instead of raising.
    """

    def __init__(self, max_nodes: Optional[int] = None) -> None:
        """
        Initialize an empty registry.

        Args:
            max_nodes: Capacity of the trie node arena, None for no limit

        Raises:
            AllocationFailureError: If the trie roots cannot be allocated
        """
        self.index_manager = IndexManager(max_nodes=max_nodes)

        # Performance tracking
        self._stats = self._empty_stats()

    def load_rules(self, rules: Dict[str, str]) -> int:
        """
        Load redirection rules into the registry.

        Args:
            rules: Dictionary mapping prefixes to replacement prefixes

        Returns:
            Number of rules accepted
        """
        loaded = 0
        for num1, num2 in rules.items():
            if self.add(num1, num2):
                loaded += 1
        return loaded

    def add(self, num1: str, num2: str) -> bool:
        """
        Redirect every number starting with ``num1`` to start with ``num2``.

        Adding a rule that already exists succeeds without changes.

        Args:
            num1: Prefix being redirected
            num2: Replacement prefix

        Returns:
            True on success, False on invalid input or allocation failure
        """
        self._stats["total_adds"] += 1
        changed = self._run("add", lambda: self.index_manager.add(num1, num2), num1=num1, num2=num2)
        if changed is None:
            return False

        logger.debug("Redirect added", num1=num1, num2=num2, changed=changed)
        return True

    def remove(self, prefix: str) -> Optional[int]:
        """
        Remove all rules whose prefix starts with ``prefix``.

        Args:
            prefix: Prefix of the rules to remove

        Returns:
            Number of rules removed (0 when nothing matched), None on invalid input
        """
        self._stats["total_removes"] += 1
        removed = self._run("remove", lambda: self.index_manager.remove(prefix), prefix=prefix)
        if removed:
            logger.debug("Redirects removed", prefix=prefix, removed=removed)
        return removed

    def get(self, number: str) -> Optional[ResultList]:
        """
        Redirect a number.

        Args:
            number: The number to redirect

        Returns:
            Single-element ResultList with the redirected number, or None on failure
        """
        return self._query("get", lambda: self.index_manager.get(number), number)

    def reverse_lookup(self, number: str) -> Optional[ResultList]:
        """
        Find all numbers that may redirect to ``number``.

        Args:
            number: The number to look up

        Returns:
            Sorted candidates including ``number`` itself, or None on failure
        """
        return self._query(
            "reverse_lookup", lambda: self.index_manager.reverse_lookup(number), number
        )

    def consistent_reverse_lookup(self, number: str) -> Optional[ResultList]:
        """
        Find the numbers that redirect exactly to ``number``.

        Args:
            number: The number to look up

        Returns:
            Sorted matching numbers; an empty ResultList with ``absent`` set
            when no candidate survives; None on failure
        """
        return self._query(
            "consistent_reverse_lookup",
            lambda: self.index_manager.consistent_reverse_lookup(number),
            number
        )

    def get_rules(self) -> List[Tuple[str, str]]:
        """Get all stored ``(prefix, target)`` rules in number order."""
        return self.index_manager.forward_index.get_all_rules()

    def get_stats(self) -> Dict[str, any]:
        """Get registry statistics."""
        stats = self._stats.copy()

        if stats["total_queries"] > 0:
            stats["average_execution_time_ms"] = (
                stats["total_execution_time"] / stats["total_queries"]
            )
        else:
            stats["average_execution_time_ms"] = 0.0

        stats["index_stats"] = self.index_manager.get_stats()
        return stats

    def clear(self) -> None:
        """Remove all rules and reset statistics."""
        self.index_manager.clear()
        self._stats = self._empty_stats()

    def _query(
        self,
        operation: str,
        action: Callable[[], ResultList],
        number: str
    ) -> Optional[ResultList]:
        start_time = time.time()
        self._stats["total_queries"] += 1

        result = self._run(operation, action, number=number)

        self._stats["total_execution_time"] += (time.time() - start_time) * 1000
        return result

    def _run(self, operation: str, action: Callable[[], T], **context: str) -> Optional[T]:
        try:
            return action()
        except InvalidNumberError as e:
            self._stats["invalid_arguments"] += 1
            logger.warning("Invalid phone number", operation=operation, error=str(e), **context)
        except (AllocationFailureError, MemoryError) as e:
            self._stats["allocation_failures"] += 1
            logger.warning("Allocation failure", operation=operation, error=str(e), **context)
        return None

    @staticmethod
    def _empty_stats() -> Dict[str, any]:
        return {
            "total_adds": 0,
            "total_removes": 0,
            "total_queries": 0,
            "invalid_arguments": 0,
            "allocation_failures": 0,
            "total_execution_time": 0.0
        }
