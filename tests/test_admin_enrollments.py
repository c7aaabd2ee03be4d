import asyncio
import re
from datetime import date, timedelta

import pytest

from app.admin.crud.certificates import issue_certificate
from app.admin.crud.enrollments import change_enrollment_status
from app.admin.models.certificates import Certificate
from app.admin.models.enrollments import Enrollment, EnrollmentStatus
from app.core.database import async_session
from app.core.exceptions import BusinessLogicError, InvalidStatusTransitionError

API = "/api/v1/admin"


def enrollment_ids(response):
    assert response.status_code == 200, response.text
    return {item["id"] for item in response.json()["enrollments"]}


def test_admin_bound_to_hatisala_sees_only_hatisala(client, auth, seed):
    headers = auth("admin-hatisala")

    for center in ("all", str(seed.satulia_id), ""):
        r = client.get(f"{API}/enrollments", params={"center": center}, headers=headers)
        assert enrollment_ids(r) == {seed.s1_dca, seed.s1_adca}
        assert {item["center_name"] for item in r.json()["enrollments"]} == {"Hatisala"}


def test_global_admin_sees_selected_center_or_everything(client, auth, seed):
    headers = auth("admin-global")

    everything = client.get(f"{API}/enrollments", params={"center": "all"}, headers=headers)
    assert enrollment_ids(everything) == {seed.s1_dca, seed.s1_adca, seed.s2_dca, seed.s3_dca}
    assert everything.json()["total"] == 4

    satulia = client.get(f"{API}/enrollments", params={"center": seed.satulia_id}, headers=headers)
    # Enrollments without a center only show up under "all"
    assert enrollment_ids(satulia) == {seed.s2_dca}


def test_enrollment_search_and_status_filter(client, auth, seed, db):
    headers = auth("admin-global")

    r = client.get(f"{API}/enrollments", params={"search": "advanced"}, headers=headers)
    assert enrollment_ids(r) == {seed.s1_adca}

    db.get(Enrollment, seed.s2_dca).status = EnrollmentStatus.cancelled
    db.commit()
    r = client.get(f"{API}/enrollments", params={"status": "cancelled"}, headers=headers)
    assert enrollment_ids(r) == {seed.s2_dca}


def test_admin_endpoints_require_admin_role(client, auth):
    r = client.get(f"{API}/enrollments", headers=auth("student-1"))
    assert r.status_code == 403
    assert r.json()["message"] == "Not permitted"


def test_admin_endpoints_require_token(client):
    r = client.get(f"{API}/enrollments")
    assert r.status_code == 401

    r = client.get(f"{API}/enrollments", headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == 401


def test_full_payment_marks_enrollment_paid(client, auth, seed):
    r = client.post(
        f"{API}/enrollments/{seed.s2_dca}/payments",
        json={"amount": 6000, "payment_method": "cash"},
        headers=auth("admin-global"),
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["enrollment"]["amount_paid"] == 6000
    assert body["enrollment"]["payment_status"] == "paid"
    assert body["enrollment"]["amount_due"] == 0
    assert re.fullmatch(r"RCPT-\d{8}-[A-Z0-9]{6}", body["payment"]["receipt_number"])


def test_partial_payment(client, auth, seed):
    r = client.post(
        f"{API}/enrollments/{seed.s1_adca}/payments",
        json={"amount": 3000},
        headers=auth("admin-hatisala"),
    )
    assert r.status_code == 201, r.text
    enrollment = r.json()["enrollment"]
    assert enrollment["amount_paid"] == 3000
    assert enrollment["payment_status"] == "partial"
    assert enrollment["amount_due"] == 5000


def test_amount_paid_is_sum_of_ledger(client, auth, seed):
    headers = auth("admin-global")
    for amount in (1000, 2000, 3000):
        r = client.post(
            f"{API}/enrollments/{seed.s1_dca}/payments", json={"amount": amount}, headers=headers
        )
        assert r.status_code == 201, r.text

    assert r.json()["enrollment"]["amount_paid"] == 6000
    assert r.json()["enrollment"]["payment_status"] == "paid"

    ledger = client.get(f"{API}/enrollments/{seed.s1_dca}/payments", headers=headers)
    assert ledger.status_code == 200
    assert sorted(p["amount"] for p in ledger.json()) == [1000, 2000, 3000]


def test_payment_validation(client, auth, seed, db):
    headers = auth("admin-global")

    r = client.post(f"{API}/enrollments/{seed.s1_dca}/payments", json={"amount": 0}, headers=headers)
    assert r.status_code == 422

    db.get(Enrollment, seed.s1_dca).status = EnrollmentStatus.cancelled
    db.commit()
    r = client.post(f"{API}/enrollments/{seed.s1_dca}/payments", json={"amount": 500}, headers=headers)
    assert r.status_code == 400
    assert r.json()["error"] == "BUSINESS_LOGIC_ERROR"


def test_out_of_scope_and_missing_enrollments_look_the_same(client, auth, seed):
    bound = auth("admin-hatisala")

    other_center = client.post(
        f"{API}/enrollments/{seed.s2_dca}/payments", json={"amount": 100}, headers=bound
    )
    missing = client.post(f"{API}/enrollments/999999/payments", json={"amount": 100}, headers=bound)
    assert other_center.status_code == missing.status_code == 403
    assert other_center.json()["message"] == missing.json()["message"] == "Not permitted"

    r = client.post(
        f"{API}/enrollments/999999/payments", json={"amount": 100}, headers=auth("admin-global")
    )
    assert r.status_code == 404


def test_status_lifecycle(client, auth, seed):
    headers = auth("admin-global")
    url = f"{API}/enrollments/{seed.s1_dca}/status"

    r = client.patch(url, json={"status": "active"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["changed"] is False

    r = client.patch(url, json={"status": "cancelled"}, headers=headers)
    assert r.json()["changed"] is True
    assert r.json()["enrollment"]["status"] == "cancelled"

    r = client.patch(url, json={"status": "active"}, headers=headers)
    assert r.json()["enrollment"]["status"] == "active"

    r = client.patch(url, json={"status": "completed"}, headers=headers)
    assert r.json()["enrollment"]["status"] == "completed"

    r = client.patch(url, json={"status": "active"}, headers=headers)
    assert r.status_code == 409
    assert r.json()["error"] == "INVALID_STATUS_TRANSITION"


def test_attendance_percentage(client, auth, seed):
    headers = auth("admin-hatisala")
    start = date(2024, 2, 1)
    for day in range(10):
        r = client.put(
            f"{API}/enrollments/{seed.s1_dca}/attendance",
            json={"session_date": (start + timedelta(days=day)).isoformat(), "present": day < 7},
            headers=headers,
        )
        assert r.status_code == 200, r.text

    summary = client.get(
        f"/api/v1/students/enrollments/{seed.s1_dca}/attendance", headers=auth("student-1")
    )
    assert summary.status_code == 200, summary.text
    body = summary.json()
    assert body["total_sessions"] == 10
    assert body["days_present"] == 7
    assert body["attendance_percentage"] == 70


def test_marking_same_day_twice_updates_it(client, auth, seed):
    headers = auth("admin-global")
    url = f"{API}/enrollments/{seed.s1_dca}/attendance"

    first = client.put(url, json={"session_date": "2024-03-01", "present": False}, headers=headers)
    second = client.put(url, json={"session_date": "2024-03-01", "present": True}, headers=headers)
    assert first.json()["id"] == second.json()["id"]
    assert second.json()["present"] is True


def test_certificate_issued_once(client, auth, seed, sent_emails):
    headers = auth("admin-global")
    url = f"{API}/enrollments/{seed.s1_dca}/certificate"

    first = client.post(url, headers=headers)
    assert first.status_code == 200, first.text
    assert first.json()["already_issued"] is False
    number = first.json()["certificate"]["certificate_number"]
    assert re.fullmatch(r"AMC-\d{4}-[A-Z0-9]{6}", number)

    second = client.post(url, headers=headers)
    assert second.status_code == 200
    assert second.json()["already_issued"] is True
    assert second.json()["certificate"]["certificate_number"] == number

    completion_emails = [e for e in sent_emails if "Completed" in e["subject"]]
    assert len(completion_emails) == 1
    assert completion_emails[0]["to"] == "student1@example.com"
    assert number in completion_emails[0]["html"]


def test_certificate_completes_active_enrollment(client, auth, seed, db):
    r = client.post(f"{API}/enrollments/{seed.s1_dca}/certificate", headers=auth("admin-global"))
    assert r.status_code == 200

    db.expire_all()
    assert db.get(Enrollment, seed.s1_dca).status == EnrollmentStatus.completed


def test_certificate_refused_for_cancelled_enrollment(client, auth, seed, db):
    db.get(Enrollment, seed.s1_dca).status = EnrollmentStatus.cancelled
    db.commit()

    r = client.post(f"{API}/enrollments/{seed.s1_dca}/certificate", headers=auth("admin-global"))
    assert r.status_code == 400


def test_center_bound_admin_creates_enrollment_in_own_center(client, auth, seed, sent_emails):
    headers = auth("admin-hatisala")

    r = client.post(
        f"{API}/enrollments",
        json={"user_id": "student-2", "course_id": seed.adca_id, "batch_timing": "Morning"},
        headers=headers,
    )
    assert r.status_code == 201, r.text
    assert r.json()["center_id"] == seed.hatisala_id
    assert r.json()["payment_status"] == "pending"
    assert any("Admission Confirmed" in e["subject"] for e in sent_emails)

    duplicate = client.post(
        f"{API}/enrollments",
        json={"user_id": "student-2", "course_id": seed.adca_id},
        headers=headers,
    )
    assert duplicate.status_code == 409

    other_center = client.post(
        f"{API}/enrollments",
        json={"user_id": "student-3", "course_id": seed.adca_id, "center_id": seed.satulia_id},
        headers=headers,
    )
    assert other_center.status_code == 403


def test_payment_reminder_uses_ledger_balance(client, auth, seed, sent_emails):
    headers = auth("admin-global")
    client.post(f"{API}/enrollments/{seed.s1_adca}/payments", json={"amount": 3000}, headers=headers)

    r = client.post(
        f"{API}/enrollments/{seed.s1_adca}/payment-reminder",
        json={"due_date": "2024-07-01"},
        headers=headers,
    )
    assert r.status_code == 200, r.text
    assert r.json()["email_sent"] is True
    assert r.json()["notification"]["type"] == "payment_reminder"
    assert "5000" in sent_emails[-1]["html"]

    client.post(f"{API}/enrollments/{seed.s1_adca}/payments", json={"amount": 5000}, headers=headers)
    r = client.post(f"{API}/enrollments/{seed.s1_adca}/payment-reminder", json={}, headers=headers)
    assert r.status_code == 400


def test_admin_dashboard_is_scoped(client, auth, seed):
    client.post(
        f"{API}/enrollments/{seed.s2_dca}/payments", json={"amount": 6000}, headers=auth("admin-global")
    )

    bound = client.get(f"{API}/dashboard", params={"center": "all"}, headers=auth("admin-hatisala"))
    assert bound.status_code == 200, bound.text
    assert bound.json()["center_id"] == seed.hatisala_id
    assert bound.json()["total_enrollments"] == 2
    assert bound.json()["total_revenue"] == 0
    assert bound.json()["outstanding_dues"] == 14000

    everything = client.get(f"{API}/dashboard", headers=auth("admin-global"))
    assert everything.json()["total_enrollments"] == 4
    assert everything.json()["total_students"] == 3
    assert everything.json()["total_revenue"] == 6000
    assert everything.json()["payment_status_counts"]["paid"] == 1


def test_payment_ledger_is_scoped(client, auth, seed):
    headers = auth("admin-global")
    client.post(f"{API}/enrollments/{seed.s1_dca}/payments", json={"amount": 1000}, headers=headers)
    client.post(f"{API}/enrollments/{seed.s2_dca}/payments", json={"amount": 2000}, headers=headers)

    everything = client.get(f"{API}/payments", headers=headers)
    assert everything.json()["total"] == 2
    assert everything.json()["total_amount"] == 3000

    bound = client.get(f"{API}/payments", headers=auth("admin-hatisala"))
    assert bound.json()["total"] == 1
    assert bound.json()["total_amount"] == 1000
    assert bound.json()["payments"][0]["student_name"] == "Student One"


def _set_status_elsewhere(db, enrollment_id, status):
    other = db.get(Enrollment, enrollment_id)
    other.status = status
    db.commit()


def test_status_change_rechecks_current_row(seed, db):
    async def scenario():
        async with async_session() as session:
            stale = await session.get(Enrollment, seed.s1_dca)
            assert stale.status == EnrollmentStatus.active

            _set_status_elsewhere(db, seed.s1_dca, EnrollmentStatus.completed)

            with pytest.raises(InvalidStatusTransitionError):
                await change_enrollment_status(
                    session, stale, EnrollmentStatus.cancelled, "admin-global"
                )

    asyncio.run(scenario())

    db.expire_all()
    assert db.get(Enrollment, seed.s1_dca).status == EnrollmentStatus.completed


def test_certificate_rechecks_current_row(seed, db):
    async def scenario():
        async with async_session() as session:
            stale = await session.get(Enrollment, seed.s1_dca)
            assert stale.status == EnrollmentStatus.active

            _set_status_elsewhere(db, seed.s1_dca, EnrollmentStatus.cancelled)

            with pytest.raises(BusinessLogicError):
                await issue_certificate(session, stale, "admin-global")

    asyncio.run(scenario())

    db.expire_all()
    assert db.get(Enrollment, seed.s1_dca).status == EnrollmentStatus.cancelled
    assert db.query(Certificate).count() == 0


def test_error_stats_for_global_admins(client, auth):
    from app.core.logging_utils import error_tracker

    error_tracker.reset_stats()
    error_tracker.track_error("CHECKOUT_NOT_INITIATED", "Gateway unavailable", {"request_id": 7})

    assert client.get(f"{API}/dashboard/errors", headers=auth("admin-hatisala")).status_code == 403

    r = client.get(f"{API}/dashboard/errors", headers=auth("admin-global"))
    assert r.status_code == 200, r.text
    stats = r.json()
    assert stats["error_counts"] == {"CHECKOUT_NOT_INITIATED": 1}
    assert stats["last_errors"][0]["context"] == {"request_id": 7}

    assert client.delete(f"{API}/dashboard/errors", headers=auth("admin-global")).status_code == 204
    assert client.get(f"{API}/dashboard/errors", headers=auth("admin-global")).json()["total_errors"] == 0
