"""
Application Store

SQLAlchemy-backed access to application records and reminder dispatch
history. Database failures surface as StoreError so the reminder scheduler
can isolate them per application.

Override substitution happens here: snapshots always carry the effective
application window.
"""
from datetime import date, datetime, timedelta
from typing import List, Optional, Union
from uuid import uuid4
import logging

from sqlalchemy import and_, case
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...models.db_models import ApplicationDB, ReminderDispatchDB
from ...models.deadlines import ApplicationSnapshot
from ..errors import StoreError


logger = logging.getLogger(__name__)


class ApplicationStore:
    """
    Read/write access to applications and their dispatch history.

    Usage:
        store = ApplicationStore(db)
        for application_id in store.list_application_ids():
            snapshot = store.get_snapshot(application_id)
    """

    def __init__(self, db: Session):
        self.db = db

    # =========================================================================
    # APPLICATIONS
    # =========================================================================

    def list_application_ids(self) -> List[str]:
        try:
            rows = self.db.query(ApplicationDB.id).order_by(ApplicationDB.created_at).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Could not list applications: {e}") from e
        return [row[0] for row in rows]

    def get_application(self, application_id: str) -> Optional[ApplicationDB]:
        try:
            return self.db.query(ApplicationDB).filter(ApplicationDB.id == application_id).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Could not load application {application_id}: {e}") from e

    def get_snapshot(self, application_id: str) -> Optional[ApplicationSnapshot]:
        """Snapshot with overridden deadlines substituted, or None if unknown."""
        application = self.get_application(application_id)
        if application is None:
            return None
        return self.to_snapshot(application)

    def list_upcoming(
        self,
        within_days: int,
        now: Union[date, datetime],
    ) -> List[ApplicationSnapshot]:
        """
        Applications whose effective application window closes within
        `within_days` days of `now`, soonest first. Past deadlines are excluded.
        """
        today = now.date() if isinstance(now, datetime) else now
        effective_end = case(
            (
                and_(
                    ApplicationDB.is_deadline_overridden.is_(True),
                    ApplicationDB.override_deadline_end.isnot(None),
                ),
                ApplicationDB.override_deadline_end,
            ),
            else_=ApplicationDB.application_deadline_end,
        )
        try:
            applications = self.db.query(ApplicationDB).filter(
                effective_end >= today,
                effective_end <= today + timedelta(days=within_days),
            ).order_by(effective_end, ApplicationDB.created_at).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Could not list upcoming deadlines: {e}") from e
        return [self.to_snapshot(application) for application in applications]

    @staticmethod
    def to_snapshot(application: ApplicationDB) -> ApplicationSnapshot:
        return ApplicationSnapshot(
            application_id=application.id,
            company_name=application.company_name,
            contact_email=application.contact_email,
            subsidy_type=application.subsidy_type,
            application_deadline_start=application.effective_deadline_start,
            application_deadline_end=application.effective_deadline_end,
            is_deadline_overridden=bool(application.is_deadline_overridden),
        )

    def save(self, application: ApplicationDB) -> ApplicationDB:
        try:
            self.db.add(application)
            self.db.commit()
            self.db.refresh(application)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Could not save application {application.id}: {e}") from e
        return application

    def delete(self, application: ApplicationDB) -> None:
        """Delete an application; its dispatch records cascade with it."""
        try:
            self.db.delete(application)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Could not delete application {application.id}: {e}") from e

    # =========================================================================
    # DISPATCH HISTORY
    # =========================================================================

    def has_dispatched(self, application_id: str, threshold: int) -> bool:
        try:
            count = self.db.query(ReminderDispatchDB).filter(
                ReminderDispatchDB.application_id == application_id,
                ReminderDispatchDB.threshold_days == threshold,
            ).count()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(
                f"Could not read dispatch history for {application_id}: {e}"
            ) from e
        return count > 0

    def record_dispatch(self, application_id: str, threshold: int, sent_at: datetime) -> bool:
        """
        Create the dispatch record if absent.

        Returns False when another run already recorded the same
        (application, threshold) pair.
        """
        record = ReminderDispatchDB(
            id=str(uuid4()),
            application_id=application_id,
            threshold_days=threshold,
            sent_at=sent_at,
        )
        try:
            self.db.add(record)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info(
                f"Dispatch record for {application_id} at {threshold} days already exists"
            )
            return False
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(
                f"Could not record dispatch for {application_id}: {e}"
            ) from e
        return True

    def list_dispatches(self, application_id: str) -> List[ReminderDispatchDB]:
        try:
            return self.db.query(ReminderDispatchDB).filter(
                ReminderDispatchDB.application_id == application_id
            ).order_by(ReminderDispatchDB.threshold_days.desc()).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(
                f"Could not read dispatch history for {application_id}: {e}"
            ) from e
