from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from landed_cost.core.deps import get_db_session
from landed_cost.schemas.calculation import CalculationRequest, CalculationResponse
from landed_cost.services.calculator import CalculatorService

router = APIRouter(tags=["calculation"])


@router.post("/calculate", response_model=CalculationResponse)
async def calculate(payload: CalculationRequest, session=Depends(get_db_session)):
    service = CalculatorService(session)
    result = await service.calculate(payload)
    if result.status == "not_found":
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=result.message)
    return CalculationResponse(
        status=result.status,
        missing_fields=result.missing_fields,
        invalid_fields=result.invalid_fields,
        message=result.message,
        breakdown=result.breakdown,
        factories=result.factories,
        extra_costs=result.extra_costs,
        warnings=result.warnings,
        rates_fetched_at=result.rates_fetched_at,
        rates_stale=result.rates_stale,
    )
