"""
Deadline API Routes

Stateless deadline calculation and conversion date validation.
"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ..config import current_time
from ..models.deadlines import PlanStrategy
from ..services.deadlines import DeadlineCalculator, days_until_text, format_localized, validate_anchor
from ..services.errors import InvalidInputError


router = APIRouter(prefix="/deadlines", tags=["deadlines"])


class CalculateDeadlinesRequest(BaseModel):
    """Request to derive deadlines from a conversion date."""
    conversion_date: str = Field(..., description="Employment conversion date (YYYY-MM-DD)")
    strategy: PlanStrategy = Field(default=PlanStrategy.LONG_HORIZON, description="Plan end derivation rule")
    plan_end_date: Optional[date] = Field(None, description="Explicit plan end (CAREER_UP_SIX_MONTH only)")


class ValidateConversionDateRequest(BaseModel):
    conversion_date: str = Field(..., description="Employment conversion date (YYYY-MM-DD)")


@router.post("/calculate", response_model=dict)
async def calculate_deadlines(request: CalculateDeadlinesRequest):
    """
    Calculate every deadline for a conversion date.

    Includes the career plan filing deadline and the remaining-days text.
    """
    now = current_time()
    try:
        calc = DeadlineCalculator.compute(
            request.conversion_date, now, request.strategy, request.plan_end_date
        )
        career_plan = DeadlineCalculator.compute_career_plan_deadline(request.conversion_date, now)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        **calc.to_dict(),
        "application_deadline_end_localized": format_localized(calc.application_deadline_end),
        "days_until_deadline_text": days_until_text(calc.days_until_deadline),
        "career_plan": career_plan.to_dict(),
    }


@router.post("/validate", response_model=dict)
async def validate_conversion_date(request: ValidateConversionDateRequest):
    """Check that a conversion date is inside the accepted window."""
    return validate_anchor(request.conversion_date, current_time()).to_dict()
