"""Reverse lookup API endpoints."""

import time

from fastapi import APIRouter, HTTPException, Path

from ..models.response import ReverseLookupResponse
from .forward import check_number

router = APIRouter(prefix="/api/v1", tags=["reverse"])

# Import the global registry instance
from ..engine_instance import registry


@router.get(
    "/reverse/{number}",
    response_model=ReverseLookupResponse,
    summary="Reverse lookup",
    description="Find every number that may redirect to the given number"
)
async def reverse_lookup(
    number: str = Path(..., description="The number to look up")
) -> ReverseLookupResponse:
    """
    Find all candidate numbers that may redirect to a number.

    The result always contains the number itself and is not checked
    against the forward rules, so it may include numbers that a more
    specific rule redirects elsewhere.
    """
    try:
        check_number(number)

        start_time = time.time()
        result = registry.reverse_lookup(number)
        if result is None:
            raise HTTPException(
                status_code=507,
                detail="Not enough storage to build the result"
            )

        numbers = result.to_list()
        return ReverseLookupResponse(
            number=number,
            numbers=numbers,
            total_numbers=len(numbers),
            consistent=False,
            execution_time_ms=(time.time() - start_time) * 1000
        )

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Reverse lookup failed: {str(e)}"
        )


@router.get(
    "/reverse/{number}/consistent",
    response_model=ReverseLookupResponse,
    summary="Consistent reverse lookup",
    description="Find every number whose forward redirection is exactly the given number"
)
async def consistent_reverse_lookup(
    number: str = Path(..., description="The number to look up")
) -> ReverseLookupResponse:
    """
    Find all numbers that redirect exactly to a number.

    When no candidate survives the check the response has an empty
    ``numbers`` list and ``absent`` set to true.
    """
    try:
        check_number(number)

        start_time = time.time()
        result = registry.consistent_reverse_lookup(number)
        if result is None:
            raise HTTPException(
                status_code=507,
                detail="Not enough storage to build the result"
            )

        numbers = result.to_list()
        return ReverseLookupResponse(
            number=number,
            numbers=numbers,
            total_numbers=len(numbers),
            consistent=True,
            absent=result.absent,
            execution_time_ms=(time.time() - start_time) * 1000
        )

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Consistent reverse lookup failed: {str(e)}"
        )
