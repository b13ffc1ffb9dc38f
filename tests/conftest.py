import os

# Must be set before salon.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_API_TOKEN"] = "test-admin-token"
os.environ["SALON_TIMEZONE"] = "America/Tijuana"
os.environ["OPENING_HOUR"] = "9"
os.environ["CLOSING_HOUR"] = "21"
os.environ["SLOT_MINUTES"] = "60"
os.environ["CLOSED_DAYS"] = ""
os.environ["PUBLIC_API_URL"] = "https://api.salon.test"
os.environ.pop("RESEND_API_KEY", None)

from datetime import datetime, timedelta  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from salon.database import Base, enable_sqlite_foreign_keys, get_db  # noqa: E402
from salon.main import app  # noqa: E402
from salon.models import Booking, Service  # noqa: E402
from salon.services.notification_service import get_notification_dispatcher  # noqa: E402

ADMIN_HEADERS = {"Authorization": "Bearer test-admin-token"}


class FakeDispatcher:
    """Records notifications instead of sending email"""

    def __init__(self):
        self.invitations = []
        self.confirmations = []
        self.fail = False

    async def send_assignment_email(self, to, booking_summary, accept_url, expires_at):
        self.invitations.append(
            {"to": to, "summary": booking_summary, "accept_url": accept_url, "expires_at": expires_at}
        )
        if self.fail:
            return f"Could not send assignment invitation email to {to}: provider down"
        return None

    async def send_booking_confirmation(self, to, booking_summary, collaborator=None):
        if not to:
            return None
        self.confirmations.append({"to": to, "summary": booking_summary, "collaborator": collaborator})
        if self.fail:
            return f"Could not send booking confirmation email to {to}: provider down"
        return None


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def dispatcher():
    return FakeDispatcher()


@pytest.fixture
def client(db, dispatcher):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_dispatcher] = lambda: dispatcher
    with TestClient(app, headers=ADMIN_HEADERS) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def manicure(db):
    service = Service(name="Manicure", price=Decimal("250.00"), duration=45)
    db.add(service)
    db.commit()
    db.refresh(service)
    return service


@pytest.fixture
def make_booking(db, manicure):
    """Insert a booking directly; start times are naive UTC"""

    def _make(start=datetime(2024, 6, 10, 17, 0), service=None, status="scheduled", **fields):
        service = service or manicure
        booking = Booking(
            client_name=fields.pop("client_name", "Ana López"),
            service_id=service.id,
            start_time=start,
            end_time=fields.pop("end_time", None) or start + timedelta(minutes=service.duration),
            status=status,
            invited_emails=[],
            **fields,
        )
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    return _make
