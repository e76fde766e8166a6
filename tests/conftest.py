from __future__ import annotations

from datetime import timedelta
from pathlib import Path
import sys
from types import SimpleNamespace
from uuid import uuid4

import pytest
from sqlalchemy import select

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from codecrew import create_app
from codecrew.config import Settings
from codecrew.extensions import db
from codecrew.models import Hackathon, User
from codecrew.utils.dates import utcnow

API = "/api/v1"
PASSWORD = "secret123"


def make_settings(tmp_path: Path, **overrides) -> Settings:
    values = {
        "_env_file": None,
        "flask_env": "testing",
        "secret_key": "testing-secret",
        "jwt_secret": "testing-jwt-secret",
        "database_url": f"sqlite:///{tmp_path / 'codecrew-test.db'}",
        "redis_url": None,
        "database_sslmode": None,
        "maintenance_interval_seconds": 0,
        "auto_bootstrap_admin": False,
        "cors_origins": "http://localhost:5173",
        "api_prefix": "/api/v1",
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def app(tmp_path):
    app = create_app(make_settings(tmp_path))
    app.config["TESTING"] = True
    yield app
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


def register(client, name: str, email: str, password: str = PASSWORD):
    return client.post(f"{API}/auth/register", json={"name": name, "email": email, "password": password})


def login(client, email: str, password: str = PASSWORD):
    return client.post(f"{API}/auth/login", json={"email": email, "password": password})


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user(app):
    """Register, optionally adjust, and log in a user with a throwaway client.

    The returned namespace carries ``id``, ``email``, ``token`` and ``headers``.
    """

    def _make(name: str = "Test User", email: str | None = None, role: str = "user", **fields):
        email = email or f"user-{uuid4().hex[:10]}@example.com"
        scratch = app.test_client()
        response = register(scratch, name, email)
        assert response.status_code == 201, response.get_json()

        with app.app_context():
            user = db.session.scalar(select(User).where(User.email == email.lower()))
            user.role = role
            for attr, value in fields.items():
                setattr(user, attr, value)
            db.session.commit()
            user_id = user.id

        response = login(scratch, email)
        assert response.status_code == 200, response.get_json()
        token = response.get_json()["token"]
        return SimpleNamespace(id=user_id, name=name, email=email.lower(), token=token, headers=bearer(token))

    return _make


@pytest.fixture
def make_hackathon(app):
    """Insert a hackathon directly, with dates relative to now."""

    def _make(creator_id: str, start_in_days: float = 10, length_days: float = 2, deadline_days_before: float = 1, **fields):
        now = utcnow()
        start = now + timedelta(days=start_in_days)
        values = {
            "title": "Test Hackathon",
            "description": "A hackathon used by the test-suite.",
            "organizer": "Test Org",
            "start_date": start,
            "end_date": start + timedelta(days=length_days),
            "registration_deadline": start - timedelta(days=deadline_days_before),
            "created_by_id": creator_id,
        }
        values.update(fields)
        with app.app_context():
            hackathon = Hackathon(**values)
            if "status" not in fields:
                hackathon.sync_status()
            db.session.add(hackathon)
            db.session.commit()
            return hackathon.id

    return _make


@pytest.fixture
def admin(make_user):
    return make_user(name="Admin User", role="admin")
