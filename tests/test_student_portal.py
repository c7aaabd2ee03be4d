from app.admin.models.lessons import Lesson

API = "/api/v1/students"


def test_student_dashboard_lists_own_enrollments(client, auth, seed):
    client.post(
        f"/api/v1/admin/enrollments/{seed.s1_adca}/payments",
        json={"amount": 3000},
        headers=auth("admin-global"),
    )

    r = client.get(f"{API}/dashboard", headers=auth("student-1"))
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["user_id"] == "student-1"
    assert body["full_name"] == "Student One"
    assert body["total_enrollments"] == 2
    assert body["active_enrollments"] == 2
    assert body["total_paid"] == 3000
    assert body["total_due"] == 11000
    assert {e["enrollment_id"] for e in body["enrollments"]} == {seed.s1_dca, seed.s1_adca}


def test_student_center_filter(client, auth, seed):
    r = client.get(f"{API}/enrollments", params={"center": seed.satulia_id}, headers=auth("student-1"))
    assert r.status_code == 200
    assert r.json() == []

    r = client.get(f"{API}/enrollments", params={"center": "all"}, headers=auth("student-1"))
    assert len(r.json()) == 2


def test_admin_personal_dashboard_is_empty(client, auth):
    r = client.get(f"{API}/dashboard", headers=auth("admin-global"))
    assert r.status_code == 200
    assert r.json()["total_enrollments"] == 0
    assert r.json()["average_progress"] == 0


def test_other_students_records_are_forbidden(client, auth, seed):
    headers = auth("student-1")
    for url in (
        f"{API}/enrollments/{seed.s2_dca}/attendance",
        f"{API}/enrollments/{seed.s2_dca}/lessons",
        f"{API}/enrollments/{seed.s2_dca}/statement.pdf",
        f"{API}/enrollments/999999/lessons",
    ):
        r = client.get(url, headers=headers)
        assert r.status_code == 403, url


def test_completing_a_lesson_twice_changes_nothing(client, auth, seed):
    headers = auth("student-1")
    url = f"{API}/enrollments/{seed.s1_dca}/lessons/{seed.lesson_ids[0]}/complete"

    first = client.post(url, headers=headers)
    assert first.status_code == 200, first.text
    assert first.json()["completion_percentage"] == 25
    completed_at = next(l for l in first.json()["lessons"] if l["completed"])["completed_at"]

    second = client.post(url, headers=headers)
    assert second.json()["completion_percentage"] == 25
    assert second.json()["completed_lessons"] == 1
    assert next(l for l in second.json()["lessons"] if l["completed"])["completed_at"] == completed_at


def test_all_lessons_completed_is_one_hundred_percent(client, auth, seed):
    headers = auth("student-1")
    for lesson_id in seed.lesson_ids:
        r = client.post(
            f"{API}/enrollments/{seed.s1_dca}/lessons/{lesson_id}/complete", headers=headers
        )
        assert r.status_code == 200

    progress = client.get(f"{API}/enrollments/{seed.s1_dca}/lessons", headers=headers)
    assert progress.json()["completion_percentage"] == 100
    assert [l["order_index"] for l in progress.json()["lessons"]] == [1, 2, 3, 4]

    dashboard = client.get(f"{API}/dashboard", headers=headers).json()
    dca = next(e for e in dashboard["enrollments"] if e["enrollment_id"] == seed.s1_dca)
    assert dca["completion_percentage"] == 100
    # ADCA has no lessons
    assert dashboard["average_progress"] == 50.0


def test_lesson_from_another_course_is_not_found(client, auth, seed, db):
    adca_lesson = Lesson(course_id=seed.adca_id, title="ADCA Lesson 1", order_index=1)
    db.add(adca_lesson)
    db.commit()

    r = client.post(
        f"{API}/enrollments/{seed.s1_dca}/lessons/{adca_lesson.id}/complete",
        headers=auth("student-1"),
    )
    assert r.status_code == 404


def test_cancelled_enrollment_accepts_no_progress(client, auth, seed):
    cancelled = client.patch(
        f"/api/v1/admin/enrollments/{seed.s1_dca}/status",
        json={"status": "cancelled"},
        headers=auth("admin-global"),
    )
    assert cancelled.status_code == 200, cancelled.text

    r = client.post(
        f"{API}/enrollments/{seed.s1_dca}/lessons/{seed.lesson_ids[0]}/complete",
        headers=auth("student-1"),
    )
    assert r.status_code == 400
    assert r.json()["error"] == "BUSINESS_LOGIC_ERROR"

    progress = client.get(f"{API}/enrollments/{seed.s1_dca}/lessons", headers=auth("student-1"))
    assert progress.json()["completed_lessons"] == 0


def test_student_certificates(client, auth, seed):
    client.post(f"/api/v1/admin/enrollments/{seed.s1_dca}/certificate", headers=auth("admin-global"))

    r = client.get(f"{API}/certificates", headers=auth("student-1"))
    assert r.status_code == 200
    assert len(r.json()) == 1
    assert r.json()[0]["course_name"] == "DCA"

    assert client.get(f"{API}/certificates", headers=auth("student-2")).json() == []


def test_certificate_pdf(client, auth, seed):
    url = f"{API}/enrollments/{seed.s1_dca}/certificate.pdf"
    assert client.get(url, headers=auth("student-1")).status_code == 404

    issued = client.post(
        f"/api/v1/admin/enrollments/{seed.s1_dca}/certificate", headers=auth("admin-global")
    )
    number = issued.json()["certificate"]["certificate_number"]
    assert issued.json()["certificate"]["file_url"] == url

    listed = client.get(f"{API}/certificates", headers=auth("student-1")).json()
    assert listed[0]["file_url"] == url

    pdf = client.get(url, headers=auth("student-1"))
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content.startswith(b"%PDF")
    assert f"certificate-{number}.pdf" in pdf.headers["content-disposition"]

    assert client.get(url, headers=auth("student-2")).status_code == 403

    admin_url = f"/api/v1/admin/enrollments/{seed.s1_dca}/certificate.pdf"
    assert client.get(admin_url, headers=auth("admin-hatisala")).status_code == 200
    other_center = f"/api/v1/admin/enrollments/{seed.s2_dca}/certificate.pdf"
    assert client.get(other_center, headers=auth("admin-hatisala")).status_code == 403


def test_statement_and_receipt_pdfs(client, auth, seed):
    payment = client.post(
        f"/api/v1/admin/enrollments/{seed.s1_dca}/payments",
        json={"amount": 2500, "payment_method": "upi"},
        headers=auth("admin-global"),
    )
    payment_id = payment.json()["payment"]["id"]

    statement = client.get(f"{API}/enrollments/{seed.s1_dca}/statement.pdf", headers=auth("student-1"))
    assert statement.status_code == 200
    assert statement.headers["content-type"] == "application/pdf"
    assert statement.content.startswith(b"%PDF")

    receipt = client.get(f"{API}/payments/{payment_id}/receipt.pdf", headers=auth("student-1"))
    assert receipt.status_code == 200
    assert receipt.content.startswith(b"%PDF")
    assert "receipt-RCPT-" in receipt.headers["content-disposition"]

    assert client.get(f"{API}/payments/{payment_id}/receipt.pdf", headers=auth("student-2")).status_code == 403

    admin_receipt = client.get(
        f"/api/v1/admin/payments/{payment_id}/receipt.pdf", headers=auth("admin-hatisala")
    )
    assert admin_receipt.status_code == 200
    admin_statement = client.get(
        f"/api/v1/admin/enrollments/{seed.s2_dca}/statement.pdf", headers=auth("admin-hatisala")
    )
    assert admin_statement.status_code == 403


def test_expired_token_is_rejected(client, make_token):
    token = make_token("student-1", expires_in=-60)
    r = client.get(f"{API}/dashboard", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert r.json()["message"] == "Token has expired"
