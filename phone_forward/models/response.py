"""Response models for API endpoints."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class RedirectRule(BaseModel):
    """A single prefix redirection rule."""

    num1: str = Field(..., description="Prefix being redirected")
    num2: str = Field(..., description="Replacement prefix")


class RuleResponse(BaseModel):
    """Response for adding a rule."""

    num1: str = Field(..., description="Prefix being redirected")
    num2: str = Field(..., description="Replacement prefix")
    execution_time_ms: float = Field(..., description="Operation execution time in milliseconds")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Response timestamp")


class RuleListResponse(BaseModel):
    """Response listing every stored rule."""

    rules: List[RedirectRule] = Field(..., description="Rules in number order")
    total_rules: int = Field(..., description="Total number of rules")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Response timestamp")


class RemoveResponse(BaseModel):
    """Response for removing rules by prefix."""

    prefix: str = Field(..., description="Prefix of the removed rules")
    removed_rules: int = Field(..., description="Number of rules removed")
    execution_time_ms: float = Field(..., description="Operation execution time in milliseconds")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Response timestamp")


class ForwardLookupResponse(BaseModel):
    """Response for forward redirection queries."""

    number: str = Field(..., description="Queried number")
    forwarded_to: str = Field(..., description="Number after applying the longest matching rule")
    redirected: bool = Field(..., description="Whether any rule matched")
    execution_time_ms: float = Field(..., description="Query execution time in milliseconds")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Response timestamp")


class ReverseLookupResponse(BaseModel):
    """Response for reverse lookup queries."""

    number: str = Field(..., description="Queried number")
    numbers: List[str] = Field(..., description="Numbers that may redirect to the queried number")
    total_numbers: int = Field(..., description="Total number of results")
    consistent: bool = Field(..., description="Whether candidates were checked against forward redirection")
    absent: bool = Field(default=False, description="Whether no candidate survived the consistency check")
    execution_time_ms: float = Field(..., description="Query execution time in milliseconds")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Response timestamp")


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Error timestamp")
    request_id: Optional[str] = Field(None, description="Request identifier for tracking")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Application version")
    uptime: float = Field(..., description="Service uptime in seconds")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Check timestamp")
    dependencies: Dict[str, str] = Field(..., description="Dependency status")


class MetricsResponse(BaseModel):
    """Performance metrics response."""

    total_queries: int = Field(..., description="Total queries processed")
    total_rules: int = Field(..., description="Rules currently stored")
    total_nodes: int = Field(..., description="Live trie nodes in both indexes")
    average_response_time_ms: float = Field(..., description="Average query time")
    error_rate: float = Field(..., description="Share of operations that failed")
    memory_usage_mb: float = Field(..., description="Process resident memory in MB")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Metrics timestamp")
