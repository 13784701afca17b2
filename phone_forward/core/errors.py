"""Exceptions raised by the redirection registry core."""


class PhoneForwardError(Exception):
    """Base class for registry errors."""


class InvalidNumberError(PhoneForwardError, ValueError):
    """A phone number is missing, empty or contains a symbol outside the alphabet."""


class AllocationFailureError(PhoneForwardError, MemoryError):
    """A trie node or result could not be allocated."""
