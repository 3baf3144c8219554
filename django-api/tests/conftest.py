"""Pytest configuration and shared fixtures."""

import time
import uuid
from datetime import timedelta

import pytest
from django.utils import timezone
from jose import jwt
from rest_framework.test import APIClient

from tests.fakes import FakePaymentGateway, FixedClock, InMemoryWorkshopStore
from workshops import models as orm

JWT_SECRET = "test-jwt-secret"
JWT_AUDIENCE = "authenticated"


def make_token(user_id: uuid.UUID, roles=(), **claims) -> str:
    payload = {
        "sub": str(user_id),
        "aud": JWT_AUDIENCE,
        "exp": int(time.time()) + 3600,
        "email": "member@example.com",
        "app_metadata": {"roles": list(roles)},
        **claims,
    }
    return jwt.encode(payload, JWT_SECRET, algorithm="HS256")


@pytest.fixture(autouse=True)
def jwt_settings(settings):
    settings.SUPABASE_JWT_SECRET = JWT_SECRET
    settings.SUPABASE_JWT_ALGORITHM = "HS256"
    settings.SUPABASE_JWT_AUDIENCE = JWT_AUDIENCE


@pytest.fixture(autouse=True)
def payment_gateway(monkeypatch) -> FakePaymentGateway:
    """Keep every test away from the real payment provider."""
    gateway = FakePaymentGateway()
    monkeypatch.setattr("workshops.factory.get_payment_gateway", lambda: gateway)
    return gateway


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def store(clock: FixedClock) -> InMemoryWorkshopStore:
    return InMemoryWorkshopStore(clock)


@pytest.fixture
def gateway() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def coordinator_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def coordinator_client(coordinator_id: uuid.UUID) -> APIClient:
    client = APIClient()
    token = make_token(coordinator_id, roles=["workshop_coordinator"])
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    return client


@pytest.fixture
def member_profile(db) -> orm.MemberProfile:
    return orm.MemberProfile.objects.create(
        user_id=uuid.uuid4(),
        first_name="Ada",
        last_name="Fencer",
        email="ada@example.com",
    )


@pytest.fixture
def member_client(member_profile: orm.MemberProfile) -> APIClient:
    client = APIClient()
    token = make_token(member_profile.user_id)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    return client


@pytest.fixture
def make_workshop(db):
    """Create workshop rows directly, bypassing API validation."""

    def _make(**overrides) -> orm.Workshop:
        start = timezone.now() + timedelta(days=10)
        values = {
            "title": "Longsword fundamentals",
            "location": "Main hall",
            "start_date": start,
            "end_date": start + timedelta(hours=3),
            "capacity": 2,
            "price_member": 2500,
            "refund_window_days": 3,
            "status": orm.WorkshopStatus.PUBLISHED,
        }
        values.update(overrides)
        return orm.Workshop.objects.create(**values)

    return _make


@pytest.fixture
def make_member(db):
    def _make(first_name: str = "Bo", user_id: uuid.UUID | None = None):
        return orm.MemberProfile.objects.create(
            user_id=user_id,
            first_name=first_name,
            last_name="Fencer",
            email=f"{first_name.lower()}@example.com",
        )

    return _make
