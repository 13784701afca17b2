"""
Phone Forward - prefix redirection registry for phone numbers.

This package stores rules that rewrite the beginning of phone numbers and
answers forward redirection and reverse lookup queries using a pair of
cross-referenced tries.
"""

__version__ = "1.0.0"

from .core.engine import PhoneForward
from .core.result_list import ResultList

__all__ = [
    "PhoneForward",
    "ResultList",
]
