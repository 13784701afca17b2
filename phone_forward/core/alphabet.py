"""Phone number alphabet: symbol validation, indexing and ordering."""

from typing import Any, Tuple

from .errors import InvalidNumberError

# Digits first, then the two signaling symbols.
SYMBOLS = "0123456789*#"
ALPHABET_SIZE = len(SYMBOLS)

_SYMBOL_INDEX = {symbol: index for index, symbol in enumerate(SYMBOLS)}


def symbol_index(char: str) -> int:
    """
    Map a single character to its index in the alphabet.

    Args:
        char: Character to convert

    Returns:
        Index between 0 and 11

    Raises:
        InvalidNumberError: If the character is not a phone number symbol
    """
    index = _SYMBOL_INDEX.get(char)
    if index is None:
        raise InvalidNumberError(f"Invalid phone number symbol: {char!r}")
    return index


def is_valid_number(number: Any) -> bool:
    """Check whether a value is a non-empty string over the alphabet."""
    if not isinstance(number, str) or not number:
        return False
    return all(char in _SYMBOL_INDEX for char in number)


def validate_number(number: Any) -> str:
    """
    Validate a phone number.

    Args:
        number: Value to validate

    Returns:
        The number, unchanged

    Raises:
        InvalidNumberError: If the number is missing, empty or contains
            a character outside the alphabet
    """
    if number is None:
        raise InvalidNumberError("Phone number is missing")
    if not isinstance(number, str):
        raise InvalidNumberError(f"Phone number must be a string, got {type(number).__name__}")
    if not number:
        raise InvalidNumberError("Phone number cannot be empty")

    for char in number:
        if char not in _SYMBOL_INDEX:
            raise InvalidNumberError(f"Invalid phone number symbol {char!r} in {number!r}")

    return number


def to_indices(number: str) -> Tuple[int, ...]:
    """Convert a validated number to its tuple of symbol indices."""
    return tuple(_SYMBOL_INDEX[char] for char in number)


def number_key(number: str) -> Tuple[int, ...]:
    """
    Sort key defining the total order of phone numbers.

    A number sorts before every longer number it is a prefix of; otherwise
    numbers compare symbol by symbol using alphabet indices, so that
    digits come before '*' and '*' before '#'.
    """
    return to_indices(number)


def compare_numbers(first: str, second: str) -> int:
    """Return -1, 0 or 1 as ``first`` sorts before, equal to or after ``second``."""
    first_key = number_key(first)
    second_key = number_key(second)
    if first_key < second_key:
        return -1
    if first_key > second_key:
        return 1
    return 0
