"""
Reminder API Routes

Endpoints used by the scheduled job and by operators.
- POST /reminders/check: threshold reminder run over all applications
- PUT /reminders/manual: operator reminder for one application
"""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..config import current_time
from ..database import get_db
from ..services.applications import ApplicationStore
from ..services.errors import DeliveryError, NotFoundError
from ..services.reminders import Notifier, ReminderScheduler, get_notifier


router = APIRouter(prefix="/reminders", tags=["reminders"])


# =============================================================================
# REQUEST MODELS
# =============================================================================

class ManualReminderRequest(BaseModel):
    """Request to send a manual reminder."""
    applicationId: Optional[str] = Field(None, description="ID of the application to remind")
    message: Optional[str] = Field(None, description="Optional note from the operator")


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post("/check", response_model=dict)
async def run_reminder_check(
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    """
    Run the threshold reminder check.

    Sends 7/3/1-day reminders that are due today and not yet sent.
    Per-application failures are reported in the payload.
    """
    scheduler = ReminderScheduler(ApplicationStore(db), notifier)

    result = scheduler.run_check(current_time())

    if not result.completed:
        raise HTTPException(status_code=500, detail=result.to_dict())

    return result.to_dict()


@router.put("/manual", response_model=dict)
async def send_manual_reminder(
    request: ManualReminderRequest,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    """
    Send a reminder for one application right away.

    Not deduplicated: operators may resend as often as needed.
    """
    if not request.applicationId or not request.applicationId.strip():
        raise HTTPException(status_code=400, detail="applicationId is required")

    scheduler = ReminderScheduler(ApplicationStore(db), notifier)

    result = scheduler.send_manual(request.applicationId.strip(), request.message, current_time())

    if not result.success:
        if result.error_kind == NotFoundError.kind:
            raise HTTPException(status_code=404, detail=result.to_dict())
        if result.error_kind == DeliveryError.kind:
            raise HTTPException(status_code=502, detail=result.to_dict())
        raise HTTPException(status_code=500, detail=result.to_dict())

    return result.to_dict()
