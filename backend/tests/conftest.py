"""Shared test configuration, fixtures and pytest markers."""

import os
import tempfile

# Must be set before config/database are imported anywhere
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(tempfile.gettempdir(), "jobly_test.db")
os.environ["GEMINI_API_KEY"] = ""

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from models.schemas.resume_data import Experience, PersonalInfo, ResumeData, Skills  # noqa: E402


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "api: exercises the FastAPI app against a temporary SQLite database"
    )


@pytest.fixture
def client():
    """TestClient over a freshly created schema, with rate limiting off."""
    from api.router import limiter
    from database import Base, engine
    from main import app

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    limiter.enabled = False
    try:
        with TestClient(app) as c:
            yield c
    finally:
        limiter.enabled = True


def register_and_login(client: TestClient, email: str, password: str = "s3cret-pass") -> dict:
    client.post(
        "/auth/register",
        json={"email": email, "password": password, "confirm_password": password},
    )
    token = client.post("/auth/login", json={"email": email, "password": password}).json()
    return {"Authorization": f"Bearer {token['access_token']}"}


@pytest.fixture
def auth_headers(client) -> dict:
    return register_and_login(client, "jane@example.com")


@pytest.fixture
def other_headers(client) -> dict:
    return register_and_login(client, "mallory@example.com")


@pytest.fixture
def sample_resume() -> ResumeData:
    return ResumeData(
        personal_info=PersonalInfo(full_name="Jane Doe", email="jane@example.com"),
        experience=[
            Experience(
                title="Software Engineer",
                company="Acme",
                start_date="2021",
                end_date="Present",
                bullets=["Built stuff", "Fixed bugs"],
            )
        ],
        skills=Skills(languages="Java, Go"),
    )
