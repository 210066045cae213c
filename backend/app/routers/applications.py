"""
Application API Routes

Create applications, edit conversion dates and override application windows.
Every write goes through ApplicationService so cached deadlines stay derived
from the conversion date.
"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..config import current_time
from ..database import get_db
from ..models.db_models import SubsidyType
from ..models.deadlines import PlanStrategy
from ..services.applications import ApplicationService
from ..services.errors import InvalidInputError, NotFoundError, StoreError


router = APIRouter(prefix="/applications", tags=["applications"])


# =============================================================================
# REQUEST MODELS
# =============================================================================

class CreateApplicationRequest(BaseModel):
    """Request to register a subsidy application."""
    company_name: str = Field(..., description="Applicant company")
    conversion_date: str = Field(..., description="Employment conversion date (YYYY-MM-DD)")
    contact_email: Optional[str] = Field(None, description="Reminder recipient")
    subsidy_type: SubsidyType = Field(default=SubsidyType.CAREER_UP, description="Subsidy course")
    strategy: PlanStrategy = Field(default=PlanStrategy.LONG_HORIZON, description="Plan end derivation rule")
    plan_end_date: Optional[date] = Field(None, description="Explicit plan end (CAREER_UP_SIX_MONTH only)")


class UpdateConversionDateRequest(BaseModel):
    conversion_date: str = Field(..., description="New employment conversion date")
    strategy: Optional[PlanStrategy] = Field(None, description="Keep the stored strategy when omitted")
    plan_end_date: Optional[date] = Field(None, description="Explicit plan end (CAREER_UP_SIX_MONTH only)")


class OverrideDeadlineRequest(BaseModel):
    """Admin replacement for the computed application window."""
    application_deadline_start: str = Field(..., description="Window start (YYYY-MM-DD)")
    application_deadline_end: str = Field(..., description="Window end (YYYY-MM-DD)")
    reason: Optional[str] = Field(None, description="Why the window was changed")


def _raise_http(e: Exception):
    if isinstance(e, NotFoundError):
        raise HTTPException(status_code=404, detail=str(e))
    if isinstance(e, InvalidInputError):
        raise HTTPException(status_code=400, detail=str(e))
    raise HTTPException(status_code=503, detail=str(e))


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post("", response_model=dict)
async def create_application(
    request: CreateApplicationRequest,
    db: Session = Depends(get_db),
):
    """Register an application and derive its deadlines."""
    service = ApplicationService(db)
    now = current_time()
    try:
        application = service.create_application(
            company_name=request.company_name,
            conversion_date=request.conversion_date,
            now=now,
            contact_email=request.contact_email,
            subsidy_type=request.subsidy_type.value,
            strategy=request.strategy,
            plan_end_date=request.plan_end_date,
        )
        return service.get_application_view(application.id, now)
    except (InvalidInputError, NotFoundError, StoreError) as e:
        _raise_http(e)


@router.get("/upcoming", response_model=dict)
async def get_upcoming_deadlines(days: int = 30, db: Session = Depends(get_db)):
    """
    Application windows closing in the next N days, soonest first.

    Overridden windows are used where set.
    """
    service = ApplicationService(db)
    try:
        return service.upcoming_deadlines(days, current_time())
    except (InvalidInputError, StoreError) as e:
        _raise_http(e)


@router.get("/{application_id}", response_model=dict)
async def get_application(application_id: str, db: Session = Depends(get_db)):
    """Application with effective deadlines, urgency and sent reminders."""
    service = ApplicationService(db)
    try:
        return service.get_application_view(application_id, current_time())
    except (NotFoundError, StoreError) as e:
        _raise_http(e)


@router.put("/{application_id}/conversion-date", response_model=dict)
async def update_conversion_date(
    application_id: str,
    request: UpdateConversionDateRequest,
    db: Session = Depends(get_db),
):
    """
    Re-edit the conversion date.

    Recomputes every deadline and clears any admin override.
    """
    service = ApplicationService(db)
    now = current_time()
    try:
        service.update_conversion_date(
            application_id, request.conversion_date, now, request.strategy, request.plan_end_date
        )
        return service.get_application_view(application_id, now)
    except (InvalidInputError, NotFoundError, StoreError) as e:
        _raise_http(e)


@router.put("/{application_id}/deadline", response_model=dict)
async def override_deadline(
    application_id: str,
    request: OverrideDeadlineRequest,
    db: Session = Depends(get_db),
):
    """Override the application window (admin)."""
    service = ApplicationService(db)
    try:
        service.override_deadlines(
            application_id,
            request.application_deadline_start,
            request.application_deadline_end,
            request.reason,
        )
        return service.get_application_view(application_id, current_time())
    except (InvalidInputError, NotFoundError, StoreError) as e:
        _raise_http(e)


@router.delete("/{application_id}/deadline", response_model=dict)
async def clear_deadline_override(application_id: str, db: Session = Depends(get_db)):
    """Return to the computed application window."""
    service = ApplicationService(db)
    try:
        service.clear_override(application_id)
        return service.get_application_view(application_id, current_time())
    except (NotFoundError, StoreError) as e:
        _raise_http(e)


@router.delete("/{application_id}", response_model=dict)
async def delete_application(application_id: str, db: Session = Depends(get_db)):
    """Delete an application together with its reminder history."""
    service = ApplicationService(db)
    try:
        service.delete_application(application_id)
    except (NotFoundError, StoreError) as e:
        _raise_http(e)
    return {"success": True, "application_id": application_id}
