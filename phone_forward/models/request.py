"""Request models for API endpoints."""

from pydantic import BaseModel, Field, validator


class AddRuleRequest(BaseModel):
    """Request model for adding a redirection rule."""

    num1: str = Field(..., min_length=1, description="Prefix being redirected")
    num2: str = Field(..., min_length=1, description="Replacement prefix")

    @validator('num1', 'num2')
    def validate_number(cls, v: str) -> str:
        """Strip surrounding whitespace."""
        if not v or not v.strip():
            raise ValueError("Number cannot be empty")
        return v.strip()
