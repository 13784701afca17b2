"""Sorted, duplicate-free list of phone numbers returned by registry queries."""

from bisect import bisect_left
from typing import Iterable, Iterator, List, Optional, Tuple

from .alphabet import is_valid_number, number_key


class ResultList:
    """
    Ordered collection of phone numbers.

    Numbers are kept sorted by ``number_key`` and each value appears once.
    The ``absent`` flag marks a consistent reverse lookup in which no
    candidate survived filtering; such a list is always empty.
    """

    def __init__(self, numbers: Optional[Iterable[str]] = None, absent: bool = False) -> None:
        self._keys: List[Tuple[int, ...]] = []
        self._numbers: List[str] = []
        self.absent = absent

        if numbers is not None:
            for number in numbers:
                self.add(number)

    @classmethod
    def absent_result(cls) -> "ResultList":
        """Create the empty result signalling that no candidate matched."""
        return cls(absent=True)

    def add(self, number: str) -> bool:
        """
        Insert a number at its sorted position.

        Args:
            number: Validated phone number

        Returns:
            True if inserted, False if the number was already present
        """
        key = number_key(number)
        position = bisect_left(self._keys, key)
        if position < len(self._keys) and self._keys[position] == key:
            return False

        self._keys.insert(position, key)
        self._numbers.insert(position, number)
        self.absent = False
        return True

    def get(self, idx: int) -> Optional[str]:
        """Return the number at ``idx``, or None when out of range."""
        if idx < 0 or idx >= len(self._numbers):
            return None
        return self._numbers[idx]

    def to_list(self) -> List[str]:
        """Get the numbers as a plain list."""
        return list(self._numbers)

    def __contains__(self, number: object) -> bool:
        if not is_valid_number(number):
            return False
        key = number_key(number)
        position = bisect_left(self._keys, key)
        return position < len(self._keys) and self._keys[position] == key

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._numbers))

    def __len__(self) -> int:
        return len(self._numbers)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ResultList):
            return self._numbers == other._numbers and self.absent == other.absent
        return NotImplemented

    def __repr__(self) -> str:
        if self.absent:
            return "ResultList(absent=True)"
        return f"ResultList({self._numbers!r})"
