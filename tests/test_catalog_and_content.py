from app.admin.models.notifications import Notification
from app.admin.models.profiles import Profile
from app.admin.models.user_roles import UserRole
from app.students.models.testimonials import Testimonial

ADMIN = "/api/v1/admin"
CATALOG = "/api/v1/catalog"


def test_catalog_lists_centers_and_courses(client):
    centers = client.get(f"{CATALOG}/centers")
    assert centers.status_code == 200
    assert [c["name"] for c in centers.json()] == ["Hatisala", "Satulia"]

    courses = client.get(f"{CATALOG}/courses")
    # Popular courses first
    assert [c["name"] for c in courses.json()] == ["ADCA", "DCA"]
    assert courses.json()[1]["fee"] == 6000


def test_only_published_testimonials_are_listed(client, seed, db):
    db.add_all(
        [
            Testimonial(user_id="student-1", course_id=seed.dca_id, content="Great teachers", rating=5, is_published=True),
            Testimonial(user_id="student-2", content="Pending review", rating=4, is_published=False),
        ]
    )
    db.commit()

    r = client.get(f"{CATALOG}/testimonials")
    assert r.status_code == 200
    assert len(r.json()) == 1
    assert r.json()[0]["student_name"] == "Student One"
    assert r.json()[0]["course_name"] == "Diploma in Computer Applications"


def test_center_bound_admin_publishes_into_own_center(client, auth, seed):
    r = client.post(
        f"{ADMIN}/videos",
        json={"title": "Typing basics", "video_url": "https://example.com/v/1"},
        headers=auth("admin-hatisala"),
    )
    assert r.status_code == 201, r.text
    assert r.json()["center_id"] == seed.hatisala_id

    r = client.post(
        f"{ADMIN}/videos",
        json={"title": "Elsewhere", "video_url": "https://example.com/v/2", "center_id": seed.satulia_id},
        headers=auth("admin-hatisala"),
    )
    assert r.status_code == 403


def test_public_videos_follow_center_filter(client, auth, seed):
    headers = auth("admin-global")
    client.post(
        f"{ADMIN}/videos",
        json={"title": "Hatisala tour", "video_url": "https://example.com/v/h", "center_id": seed.hatisala_id},
        headers=headers,
    )
    client.post(
        f"{ADMIN}/videos",
        json={"title": "Institute intro", "video_url": "https://example.com/v/all"},
        headers=headers,
    )
    client.post(
        f"{ADMIN}/videos",
        json={"title": "Draft", "video_url": "https://example.com/v/d", "is_public": False},
        headers=headers,
    )

    everything = client.get(f"{CATALOG}/videos", params={"center": "all"})
    assert {v["title"] for v in everything.json()} == {"Hatisala tour", "Institute intro"}

    satulia = client.get(f"{CATALOG}/videos", params={"center": seed.satulia_id})
    assert satulia.json() == []


def test_achievement_delete_is_scoped(client, auth, seed):
    created = client.post(
        f"{ADMIN}/achievements",
        json={"title": "State topper", "student_name": "Student Two", "center_id": seed.satulia_id},
        headers=auth("admin-global"),
    )
    achievement_id = created.json()["id"]

    r = client.delete(f"{ADMIN}/achievements/{achievement_id}", headers=auth("admin-hatisala"))
    assert r.status_code == 403

    r = client.delete(f"{ADMIN}/achievements/{achievement_id}", headers=auth("admin-global"))
    assert r.status_code == 204
    assert client.get(f"{CATALOG}/achievements").json() == []


def test_profiles_are_scoped(client, auth, seed):
    bound = client.get(f"{ADMIN}/profiles", params={"center": "all"}, headers=auth("admin-hatisala"))
    assert bound.status_code == 200
    assert {p["user_id"] for p in bound.json()["profiles"]} == {"admin-hatisala", "student-1"}

    found = client.get(f"{ADMIN}/profiles", params={"search": "two"}, headers=auth("admin-global"))
    assert [p["user_id"] for p in found.json()["profiles"]] == ["student-2"]


def test_only_global_admin_moves_profiles(client, auth, seed, db):
    profile_id = db.query(Profile).filter(Profile.user_id == "student-3").one().id

    r = client.patch(
        f"{ADMIN}/profiles/{profile_id}/center",
        json={"center_id": seed.hatisala_id},
        headers=auth("admin-hatisala"),
    )
    assert r.status_code == 403

    r = client.patch(
        f"{ADMIN}/profiles/{profile_id}/center",
        json={"center_id": seed.satulia_id},
        headers=auth("admin-global"),
    )
    assert r.status_code == 200, r.text
    assert r.json()["center_name"] == "Satulia"


def test_profile_delete_removes_role(client, auth, seed, db):
    profile_id = db.query(Profile).filter(Profile.user_id == "admin-hatisala").one().id
    own_id = db.query(Profile).filter(Profile.user_id == "admin-global").one().id

    assert client.delete(f"{ADMIN}/profiles/{own_id}", headers=auth("admin-global")).status_code == 400

    r = client.delete(f"{ADMIN}/profiles/{profile_id}", headers=auth("admin-global"))
    assert r.status_code == 204
    assert db.query(UserRole).filter(UserRole.user_id == "admin-hatisala").count() == 0

    # Without a role the former admin is treated as a student
    assert client.get(f"{ADMIN}/dashboard", headers=auth("admin-hatisala")).status_code == 403


def test_dispatch_notification(client, auth, sent_emails):
    r = client.post(
        f"{ADMIN}/notifications/dispatch",
        json={"type": "admission", "user_id": "student-2", "data": {"course_name": "DCA"}},
        headers=auth("admin-global"),
    )
    assert r.status_code == 200, r.text
    assert r.json()["email_sent"] is True
    assert sent_emails[-1]["to"] == "student2@example.com"
    assert "Student Two" in sent_emails[-1]["html"]


def test_dispatch_without_email_stores_notification_only(client, auth, db, sent_emails):
    r = client.post(
        f"{ADMIN}/notifications/dispatch",
        json={"type": "payment_reminder", "user_id": "student-3", "data": {"amount_due": 500}},
        headers=auth("admin-global"),
    )
    assert r.status_code == 200
    assert r.json()["email_sent"] is False
    assert sent_emails == []
    assert db.query(Notification).filter(Notification.user_id == "student-3").count() == 1


def test_dispatch_to_unknown_profile(client, auth):
    r = client.post(
        f"{ADMIN}/notifications/dispatch",
        json={"type": "admission", "user_id": "nobody"},
        headers=auth("admin-global"),
    )
    assert r.status_code == 404


def test_failed_delivery_is_reported_after_storing(client, auth, db, monkeypatch):
    from app.core import email_sender
    from app.core.exceptions import NotificationDeliveryError

    async def failing_send_email(to, subject, html, sender=None):
        raise NotificationDeliveryError("Email provider returned 500")

    monkeypatch.setattr(email_sender, "send_email", failing_send_email)

    r = client.post(
        f"{ADMIN}/notifications/dispatch",
        json={"type": "admission", "user_id": "student-1"},
        headers=auth("admin-global"),
    )
    assert r.status_code == 502
    assert db.query(Notification).filter(Notification.user_id == "student-1").count() == 1


def test_staff_inbox_lists_unaddressed_notifications(client, auth, seed):
    client.post(
        "/api/v1/enrollment-requests",
        json={
            "name": "Walk In",
            "phone": "9876543210",
            "course_id": seed.dca_id,
            "center_id": seed.satulia_id,
        },
    )
    r = client.get(f"{ADMIN}/notifications", headers=auth("admin-global"))
    assert r.status_code == 200
    assert [n["type"] for n in r.json()] == ["new_enrollment"]


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["database"] == "ok"
