"""
Tests for the HTTP surface: reminders, applications and deadline routes.

Routes run against the in-memory session and the recording notifier.
The clock is pinned by patching current_time in each router module.
"""
import pytest
from datetime import datetime
from fastapi.testclient import TestClient

from app.database import get_db
from app.main import app
from app.services.applications import ApplicationService
from app.services.reminders import get_notifier


SEVEN_DAYS_BEFORE = datetime(2024, 10, 9, 8, 0)
REGISTERED_AT = datetime(2024, 6, 1, 9, 0)


@pytest.fixture
def client(db_session, notifier):
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_notifier] = lambda: notifier
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def clock(monkeypatch):
    """Set the wall clock seen by every router."""
    def _set(now):
        for module in ("reminders", "applications", "deadlines"):
            monkeypatch.setattr(f"app.routers.{module}.current_time", lambda: now)
    _set(REGISTERED_AT)
    return _set


# =============================================================================
# TEST: MANUAL REMINDER
# =============================================================================

class TestManualReminder:

    @pytest.mark.parametrize("payload", [{}, {"applicationId": ""}, {"applicationId": "   "}])
    def test_missing_application_id(self, client, clock, payload):
        response = client.put("/reminders/manual", json=payload)
        assert response.status_code == 400

    def test_unknown_application(self, client, clock, notifier):
        response = client.put("/reminders/manual", json={"applicationId": "missing"})

        assert response.status_code == 404
        assert response.json()["detail"]["error_kind"] == "not_found"
        assert notifier.sent == []

    def test_sends(self, client, clock, notifier, make_application):
        application = make_application()
        clock(SEVEN_DAYS_BEFORE)

        response = client.put(
            "/reminders/manual",
            json={"applicationId": application.id, "message": "Documents still missing"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["recipient"] == "hr@acme.example"
        assert body["days_until_deadline"] == 7
        assert "Documents still missing" in notifier.sent[0].body

    def test_delivery_failure_is_bad_gateway(self, client, clock, notifier, make_application):
        application = make_application()
        notifier.fail_for.add(application.id)

        response = client.put("/reminders/manual", json={"applicationId": application.id})

        assert response.status_code == 502
        assert response.json()["detail"]["error_kind"] == "delivery_error"


# =============================================================================
# TEST: REMINDER CHECK
# =============================================================================

class TestReminderCheck:

    def test_sends_once(self, client, clock, notifier, make_application):
        application = make_application()
        clock(SEVEN_DAYS_BEFORE)

        first = client.post("/reminders/check")
        second = client.post("/reminders/check")

        assert first.status_code == 200
        assert first.json()["success"] is True
        assert first.json()["sent"] == 1
        assert first.json()["reminders"] == [{"application_id": application.id, "threshold": 7}]
        assert second.json()["sent"] == 0
        assert len(notifier.sent) == 1

    def test_nothing_due(self, client, clock, make_application):
        make_application()
        clock(datetime(2024, 9, 1, 8, 0))

        response = client.post("/reminders/check")

        assert response.status_code == 200
        assert response.json()["evaluated"] == 1
        assert response.json()["sent"] == 0

    def test_partial_failure_still_succeeds(self, client, clock, notifier, make_application):
        failing = make_application()
        make_application(company_name="Beta Works", contact_email="office@beta.example")
        notifier.fail_for.add(failing.id)
        clock(SEVEN_DAYS_BEFORE)

        response = client.post("/reminders/check")

        assert response.status_code == 200
        assert response.json()["sent"] == 1
        assert response.json()["failed"] == 1
        assert response.json()["failures"][0]["application_id"] == failing.id


# =============================================================================
# TEST: APPLICATIONS
# =============================================================================

class TestApplicationRoutes:

    def test_create(self, client, clock):
        response = client.post(
            "/applications",
            json={"company_name": "Acme Staffing", "conversion_date": "2024-01-15"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["application_deadline_start"] == "2024-08-16"
        assert body["application_deadline_end"] == "2024-10-16"
        assert body["plan_end_date"] == "2029-01-15"
        assert body["is_deadline_overridden"] is False

    @pytest.mark.parametrize("conversion_date", ["not-a-date", "2021-01-01", "2024-08-01"])
    def test_create_rejects_invalid_conversion_date(self, client, clock, conversion_date):
        response = client.post(
            "/applications",
            json={"company_name": "Acme Staffing", "conversion_date": conversion_date},
        )
        assert response.status_code == 400

    def test_get_unknown(self, client, clock):
        assert client.get("/applications/missing").status_code == 404

    def test_override_and_clear(self, client, clock, make_application):
        application = make_application()

        overridden = client.put(
            f"/applications/{application.id}/deadline",
            json={
                "application_deadline_start": "2024-09-01",
                "application_deadline_end": "2024-11-30",
                "reason": "Extension granted by the labour bureau",
            },
        )
        cleared = client.delete(f"/applications/{application.id}/deadline")

        assert overridden.status_code == 200
        assert overridden.json()["application_deadline_end"] == "2024-11-30"
        assert overridden.json()["is_deadline_overridden"] is True
        assert cleared.json()["application_deadline_end"] == "2024-10-16"

    def test_override_rejects_inverted_range(self, client, clock, make_application):
        application = make_application()

        response = client.put(
            f"/applications/{application.id}/deadline",
            json={"application_deadline_start": "2024-11-30", "application_deadline_end": "2024-09-01"},
        )

        assert response.status_code == 400

    def test_update_conversion_date(self, client, clock, make_application):
        application = make_application()

        response = client.put(
            f"/applications/{application.id}/conversion-date",
            json={"conversion_date": "2024-03-01"},
        )

        assert response.status_code == 200
        assert response.json()["application_deadline_end"] == "2024-12-02"

    def test_upcoming_uses_overrides(self, client, clock, db_session, make_application):
        computed = make_application(company_name="Computed")
        make_application(company_name="Later", conversion_date="2024-03-01")
        shortened = make_application(company_name="Shortened")
        ApplicationService(db_session).override_deadlines(shortened.id, "2024-08-16", "2024-10-12")
        clock(SEVEN_DAYS_BEFORE)

        response = client.get("/applications/upcoming", params={"days": 30})

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert body["urgent_count"] == 2
        assert [d["application_id"] for d in body["deadlines"]] == [shortened.id, computed.id]
        assert body["deadlines"][0]["is_deadline_overridden"] is True
        assert body["deadlines"][0]["days_until_deadline"] == 3

    def test_upcoming_default_window(self, client, clock, make_application):
        make_application()
        clock(datetime(2024, 9, 20, 8, 0))

        body = client.get("/applications/upcoming").json()

        assert body["days_ahead"] == 30
        assert body["count"] == 1
        assert body["urgent_count"] == 0

    def test_upcoming_rejects_negative_days(self, client, clock):
        assert client.get("/applications/upcoming", params={"days": -1}).status_code == 400

    def test_delete(self, client, clock, make_application):
        application = make_application()

        assert client.delete(f"/applications/{application.id}").status_code == 200
        assert client.get(f"/applications/{application.id}").status_code == 404


# =============================================================================
# TEST: DEADLINES
# =============================================================================

class TestDeadlineRoutes:

    def test_calculate(self, client, clock):
        response = client.post("/deadlines/calculate", json={"conversion_date": "2024-01-15"})

        assert response.status_code == 200
        body = response.json()
        assert body["application_deadline_end"] == "2024-10-16"
        assert body["application_deadline_end_localized"] == "2024年10月16日"
        assert body["career_plan"]["deadline_date"] == "2024-01-14"
        assert body["career_plan"]["is_overdue"] is True

    def test_calculate_six_month_plan(self, client, clock):
        response = client.post(
            "/deadlines/calculate",
            json={"conversion_date": "2024-01-15", "strategy": "CAREER_UP_SIX_MONTH"},
        )
        assert response.json()["plan_end_date"] == "2024-07-15"

    def test_calculate_invalid(self, client, clock):
        response = client.post("/deadlines/calculate", json={"conversion_date": "2024-02-30"})
        assert response.status_code == 400

    def test_validate(self, client, clock):
        ok = client.post("/deadlines/validate", json={"conversion_date": "2024-06-15"})
        too_far = client.post("/deadlines/validate", json={"conversion_date": "2024-08-15"})

        assert ok.json() == {"is_valid": True}
        assert too_far.json()["is_valid"] is False
        assert "1 month" in too_far.json()["error_message"]
