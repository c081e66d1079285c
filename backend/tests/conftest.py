"""Shared fixtures for the Endangered Animal Tracker API tests."""

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from animal_tracker.db import Base
from animal_tracker.main import app
from animal_tracker.settings import settings
from animal_tracker.store import SqlProjectStore, get_store

STUDENT_ID = "8d0f7a52-1c3e-4a8b-9d7e-000000000001"
OTHER_STUDENT_ID = "8d0f7a52-1c3e-4a8b-9d7e-000000000002"

KOALA_FORM = {
	"studentName": "Maya",
	"className": "5B",
	"population": 92000,
	"femalePopulation": 47840,
	"birthsPerCycle": 1,
	"birthFrequency": "1",
	"lifespan": 15,
	"ageAtFirstBirth": 3,
	"declineRatePercent": 6,
	"risks": "Bushfires and land clearing for housing.",
	"climateImpact": "Hotter droughts dry out eucalyptus leaves.",
	"actions": "Plant corridors of food trees between forests.",
}


def make_token(
	sub: str = STUDENT_ID,
	*,
	email: str = "maya@example.com",
	metadata: dict | None = None,
	secret: str | None = None,
	audience: str | None = None,
	expires_in: timedelta = timedelta(hours=1),
) -> str:
	claims = {
		"sub": sub,
		"email": email,
		"aud": audience or settings.jwt_audience,
		"exp": datetime.now(timezone.utc) + expires_in,
		"user_metadata": metadata if metadata is not None else {"student_name": "Maya", "class_name": "5B"},
	}
	return jwt.encode(claims, secret or settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def auth_header(token: str) -> dict:
	return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def anyio_backend() -> str:
	return "asyncio"


@pytest.fixture
def session_factory():
	"""Fresh in-memory database per test."""
	engine = create_engine(
		"sqlite://",
		connect_args={"check_same_thread": False},
		poolclass=StaticPool,
		future=True,
	)
	Base.metadata.create_all(bind=engine)
	try:
		yield sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
	finally:
		Base.metadata.drop_all(bind=engine)
		engine.dispose()


@pytest.fixture
def store(session_factory) -> SqlProjectStore:
	return SqlProjectStore(session_factory)


@pytest.fixture
async def client(store) -> AsyncGenerator[AsyncClient, None]:
	app.dependency_overrides[get_store] = lambda: store
	try:
		async with AsyncClient(
			transport=ASGITransport(app=app),
			base_url="http://test",
		) as ac:
			yield ac
	finally:
		app.dependency_overrides.pop(get_store, None)


@pytest.fixture
def student_headers() -> dict:
	return auth_header(make_token())
