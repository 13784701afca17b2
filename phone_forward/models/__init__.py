"""Data models for the phone forward registry."""

from .response import (
    RedirectRule,
    RuleResponse,
    RuleListResponse,
    RemoveResponse,
    ForwardLookupResponse,
    ReverseLookupResponse,
    ErrorResponse,
    HealthResponse,
    MetricsResponse,
)
from .request import AddRuleRequest

__all__ = [
    "RedirectRule",
    "RuleResponse",
    "RuleListResponse",
    "RemoveResponse",
    "ForwardLookupResponse",
    "ReverseLookupResponse",
    "ErrorResponse",
    "HealthResponse",
    "MetricsResponse",
    "AddRuleRequest",
]
