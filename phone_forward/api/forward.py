"""Redirection rule and forward lookup API endpoints."""

import time

from fastapi import APIRouter, HTTPException, Path

from ..core.alphabet import is_valid_number
from ..models.request import AddRuleRequest
from ..models.response import (
    ForwardLookupResponse,
    RedirectRule,
    RemoveResponse,
    RuleListResponse,
    RuleResponse,
)
from ..config import get_settings

router = APIRouter(prefix="/api/v1", tags=["forward"])
settings = get_settings()

# Import the global registry instance
from ..engine_instance import registry


def check_number(number: str) -> None:
    """Reject numbers the registry would refuse with a 400 response."""
    if len(number) > settings.max_number_length:
        raise HTTPException(
            status_code=400,
            detail=f"Number longer than {settings.max_number_length} symbols"
        )
    if not is_valid_number(number):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid phone number '{number}': only digits, '*' and '#' are allowed"
        )


@router.post(
    "/forwards",
    response_model=RuleResponse,
    status_code=201,
    summary="Add a redirection rule",
    description="Redirect every number starting with num1 to start with num2 instead"
)
async def add_rule(request: AddRuleRequest) -> RuleResponse:
    """
    Add a prefix redirection rule.

    Adding a rule that already exists succeeds without changing anything.
    A rule for a prefix that already has one replaces the old target.
    """
    try:
        check_number(request.num1)
        check_number(request.num2)
        if request.num1 == request.num2:
            raise HTTPException(
                status_code=400,
                detail="A number cannot be redirected to itself"
            )

        start_time = time.time()
        if not registry.add(request.num1, request.num2):
            raise HTTPException(
                status_code=507,
                detail="Not enough storage to add the rule"
            )

        return RuleResponse(
            num1=request.num1,
            num2=request.num2,
            execution_time_ms=(time.time() - start_time) * 1000
        )

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Adding rule failed: {str(e)}"
        )


@router.get(
    "/forwards",
    response_model=RuleListResponse,
    summary="List redirection rules",
    description="Get every stored rule in number order"
)
async def list_rules() -> RuleListResponse:
    """List all stored redirection rules."""
    try:
        rules = [RedirectRule(num1=num1, num2=num2) for num1, num2 in registry.get_rules()]
        return RuleListResponse(rules=rules, total_rules=len(rules))

    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to list rules: {str(e)}"
        )


@router.delete(
    "/forwards/{prefix}",
    response_model=RemoveResponse,
    summary="Remove redirection rules",
    description="Remove every rule whose prefix starts with the given prefix"
)
async def remove_rules(
    prefix: str = Path(..., description="Prefix of the rules to remove")
) -> RemoveResponse:
    """
    Remove all rules under a prefix.

    Removing a prefix no rule starts with is not an error; the response
    then reports zero removed rules.
    """
    try:
        check_number(prefix)

        start_time = time.time()
        removed = registry.remove(prefix)
        if removed is None:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid phone number '{prefix}'"
            )

        return RemoveResponse(
            prefix=prefix,
            removed_rules=removed,
            execution_time_ms=(time.time() - start_time) * 1000
        )

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Removing rules failed: {str(e)}"
        )


@router.get(
    "/forward/{number}",
    response_model=ForwardLookupResponse,
    summary="Forward redirection",
    description="Apply the longest matching rule to a number"
)
async def forward_lookup(
    number: str = Path(..., description="The number to redirect")
) -> ForwardLookupResponse:
    """
    Redirect a number.

    The longest stored prefix of the number is replaced by its target;
    a number no rule applies to is returned unchanged.
    """
    try:
        check_number(number)

        start_time = time.time()
        result = registry.get(number)
        if result is None:
            raise HTTPException(
                status_code=507,
                detail="Not enough storage to build the result"
            )

        forwarded_to = result.get(0)
        return ForwardLookupResponse(
            number=number,
            forwarded_to=forwarded_to,
            redirected=forwarded_to != number,
            execution_time_ms=(time.time() - start_time) * 1000
        )

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Forward lookup failed: {str(e)}"
        )
