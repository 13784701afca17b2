"""Core redirection registry functionality."""

from .engine import PhoneForward
from .errors import AllocationFailureError, InvalidNumberError, PhoneForwardError
from .index import ForwardIndex, IndexManager, ReverseIndex
from .result_list import ResultList
from .trie import NodeArena, Trie

__all__ = [
    "PhoneForward",
    "PhoneForwardError",
    "InvalidNumberError",
    "AllocationFailureError",
    "ForwardIndex",
    "ReverseIndex",
    "IndexManager",
    "ResultList",
    "NodeArena",
    "Trie",
]
