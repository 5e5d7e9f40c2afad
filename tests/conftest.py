"""Pytest fixtures for testing"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from dataclasses import dataclass
from typing import Generator, List, Optional
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from ccb_gateway.api.dependencies import get_mail_client
from ccb_gateway.api.main import create_app
from ccb_gateway.infrastructure.clients.mail import MailClient
from ccb_gateway.infrastructure.database.models import Base, User
from ccb_gateway.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

ACCOUNT_PIN = "2468"

REGISTRATION = {
    "first_name": "Ada",
    "middle_name": "King",
    "last_name": "Lovelace",
    "email": "ada@example.com",
    "phone_number": "+12074021612",
    "gender": "Female",
    "date_of_birth": "1990-12-10",
    "account_type": "savings",
    "address": "12 Harbor Road",
    "postal_code": "04101",
    "state": "ME",
    "country": "USA",
    "currency": "USD",
    "password": "s3cret-pass",
    "confirm_password": "s3cret-pass",
    "account_pin": ACCOUNT_PIN,
}


@dataclass
class SentMail:
    to: str
    subject: str
    text: str
    html: Optional[str]


class RecordingMailClient(MailClient):
    """Mail client that keeps messages in memory instead of calling the relay"""

    def __init__(self):
        super().__init__(api_url="http://mail-relay.invalid/send")
        self.sent: List[SentMail] = []

    async def send(self, to: str, subject: str, text: str, html: Optional[str] = None) -> bool:
        self.sent.append(SentMail(to=to, subject=subject, text=text, html=html))
        return True


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def mail_client() -> RecordingMailClient:
    return RecordingMailClient()


@pytest.fixture
def client(db: Session, mail_client: RecordingMailClient) -> TestClient:
    """Create FastAPI test client with test database and in-memory mail"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mail_client] = lambda: mail_client
    return TestClient(app)


@pytest.fixture
def registered_user(client: TestClient) -> dict:
    """Register the sample user; returns the response's user payload"""
    response = client.post("/v1/users/register", json=REGISTRATION)
    assert response.status_code == 201
    return response.json()["user"]


@pytest.fixture
def account_number(registered_user: dict) -> str:
    return registered_user["accounts"][0]["account_number"]


@pytest.fixture
def funded_account(client: TestClient, account_number: str) -> str:
    """Sample user's first account with a balance of 100.00"""
    response = client.post(
        "/v1/accounts/deposit",
        json={"account_number": account_number, "account_pin": REGISTRATION["account_pin"], "amount": "100.00"},
    )
    assert response.status_code == 200
    return account_number


@pytest.fixture
def registration() -> dict:
    return dict(REGISTRATION)


@pytest.fixture
def stored_otp(db: Session):
    """Read the OTP currently stored for an email"""

    def read(email: str) -> Optional[str]:
        db.expire_all()
        return db.query(User).filter(User.email == email).one().otp

    return read
