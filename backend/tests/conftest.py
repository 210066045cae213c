"""
Shared fixtures: in-memory database, recording notifier, sample applications.
"""
import pytest
from datetime import datetime
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base
from app.models import db_models  # noqa: F401  (registers tables)
from app.services.applications import ApplicationService
from app.services.errors import DeliveryError
from app.services.reminders import Notifier


# Conversion on 2024-01-15 puts the application window at 2024-08-16 .. 2024-10-16
CONVERSION_DATE = "2024-01-15"
REGISTERED_AT = datetime(2024, 6, 1, 9, 0)


class RecordingNotifier(Notifier):
    """Collects messages instead of sending them."""

    def __init__(self):
        self.sent = []
        self.fail_for = set()

    def send(self, message):
        if message.application_id in self.fail_for:
            raise DeliveryError(f"SMTP unavailable for {message.recipient}")
        self.sent.append(message)


@pytest.fixture
def db_session():
    """Fresh in-memory SQLite session per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = Session()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def make_application(db_session):
    """Factory registering an application through the normal edit path."""
    service = ApplicationService(db_session)

    def _make(
        company_name="Acme Staffing",
        conversion_date=CONVERSION_DATE,
        contact_email="hr@acme.example",
        **kwargs,
    ):
        return service.create_application(
            company_name=company_name,
            conversion_date=conversion_date,
            now=REGISTERED_AT,
            contact_email=contact_email,
            **kwargs,
        )

    return _make
