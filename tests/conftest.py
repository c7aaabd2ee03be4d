import hashlib
import hmac
import os
import time
from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

# Settings are read at import time
TEST_DB_FILE = "test_portal.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///./{TEST_DB_FILE}"
os.environ["AUTH_JWT_SECRET"] = "test-secret-key-for-the-portal-suite"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_portal"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_portal"
os.environ["RESEND_API_KEY"] = "re_test_portal"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_FORMAT"] = "text"
os.environ["DB_RETRY_DELAY"] = "0"

import jwt  # noqa: E402
import pytest  # noqa: E402
import stripe  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from app.core import email_sender  # noqa: E402
from app.core.database import Base, get_session  # noqa: E402
from app.main import app  # noqa: E402
from app.admin.models.centers import Center  # noqa: E402
from app.admin.models.courses import Course  # noqa: E402
from app.admin.models.enrollments import Enrollment, EnrollmentStatus  # noqa: E402
from app.admin.models.lessons import Lesson  # noqa: E402
from app.admin.models.profiles import Profile  # noqa: E402
from app.admin.models.user_roles import AppRole, UserRole  # noqa: E402

engine = create_engine(
    f"sqlite:///./{TEST_DB_FILE}",
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

async_engine = create_async_engine(os.environ["DATABASE_URL"], poolclass=NullPool)
TestingAsyncSession = async_sessionmaker(async_engine, expire_on_commit=False, autoflush=False)


async def override_get_session():
    async with TestingAsyncSession() as session:
        yield session


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """Create a fresh schema once for the whole test session."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if os.path.exists(TEST_DB_FILE):
        os.remove(TEST_DB_FILE)


@pytest.fixture(autouse=True)
def seed():
    """
    Two centers, two courses and five people:

    - admin-global: admin without a center
    - admin-hatisala: admin bound to Hatisala
    - student-1 (Hatisala, DCA + ADCA), student-2 (Satulia, DCA),
      student-3 (no center, DCA)
    """
    db = TestingSessionLocal()
    try:
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(table.delete())
        db.commit()

        hatisala = Center(name="Hatisala")
        satulia = Center(name="Satulia")
        db.add_all([hatisala, satulia])
        db.commit()

        dca = Course(
            name="DCA",
            full_name="Diploma in Computer Applications",
            duration="6 Months",
            category="Diploma",
            fee=6000,
        )
        adca = Course(
            name="ADCA",
            full_name="Advanced Diploma in Computer Applications",
            duration="12 Months",
            category="Diploma",
            fee=8000,
            is_popular=True,
        )
        db.add_all([dca, adca])
        db.commit()

        lessons = [
            Lesson(course_id=dca.id, title=f"DCA Lesson {i}", order_index=i)
            for i in range(1, 5)
        ]
        db.add_all(lessons)

        people = [
            ("admin-global", "Global Admin", "admin@example.com", None, AppRole.admin),
            ("admin-hatisala", "Hatisala Admin", "hatisala@example.com", hatisala.id, AppRole.admin),
            ("student-1", "Student One", "student1@example.com", hatisala.id, None),
            ("student-2", "Student Two", "student2@example.com", satulia.id, None),
            ("student-3", "Student Three", None, None, None),
        ]
        for user_id, full_name, email, center_id, role in people:
            db.add(Profile(user_id=user_id, full_name=full_name, email=email, center_id=center_id))
            if role is not None:
                db.add(UserRole(user_id=user_id, role=role))

        enrollments = {
            "s1_dca": Enrollment(user_id="student-1", course_id=dca.id, center_id=hatisala.id),
            "s1_adca": Enrollment(user_id="student-1", course_id=adca.id, center_id=hatisala.id),
            "s2_dca": Enrollment(user_id="student-2", course_id=dca.id, center_id=satulia.id),
            "s3_dca": Enrollment(user_id="student-3", course_id=dca.id, center_id=None),
        }
        for enrollment in enrollments.values():
            enrollment.status = EnrollmentStatus.active
            enrollment.enrollment_date = date(2024, 1, 15)
        db.add_all(enrollments.values())
        db.commit()

        yield SimpleNamespace(
            hatisala_id=hatisala.id,
            satulia_id=satulia.id,
            dca_id=dca.id,
            adca_id=adca.id,
            lesson_ids=[lesson.id for lesson in lessons],
            **{name: enrollment.id for name, enrollment in enrollments.items()},
        )
    finally:
        db.close()


@pytest.fixture()
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client():
    """Test client that uses the test DB session via dependency override."""
    app.dependency_overrides[get_session] = override_get_session
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _make_token(user_id: str, expires_in: int = 3600) -> str:
    payload = {
        "sub": user_id,
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    return jwt.encode(payload, os.environ["AUTH_JWT_SECRET"], algorithm="HS256")


@pytest.fixture()
def auth():
    def _auth(user_id: str) -> dict:
        return {"Authorization": f"Bearer {_make_token(user_id)}"}

    return _auth


@pytest.fixture()
def make_token():
    return _make_token


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch):
    """Record outgoing email instead of calling the provider."""
    sent = []

    async def fake_send_email(to, subject, html, sender=None):
        sent.append({"to": to, "subject": subject, "html": html})
        return f"email_{len(sent)}"

    monkeypatch.setattr(email_sender, "send_email", fake_send_email)
    return sent


@pytest.fixture()
def checkout_sessions(monkeypatch):
    """Record checkout session requests instead of calling Stripe."""
    created = []

    def fake_create(**params):
        created.append(params)
        session_id = f"cs_test_{len(created)}"
        return SimpleNamespace(id=session_id, url=f"https://checkout.stripe.com/c/pay/{session_id}")

    monkeypatch.setattr(stripe.checkout.Session, "create", fake_create)
    return created


@pytest.fixture()
def sign_webhook():
    def _sign(payload: str, secret: str = None, timestamp: int = None) -> str:
        secret = secret or os.environ["STRIPE_WEBHOOK_SECRET"]
        timestamp = timestamp or int(time.time())
        signature = hmac.new(
            secret.encode("utf-8"),
            f"{timestamp}.{payload}".encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()
        return f"t={timestamp},v1={signature}"

    return _sign
