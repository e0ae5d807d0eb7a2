"""Pytest configuration and fixtures."""

import pytest

from app import create_app
from config import Config
from tests.fakes import FakeStore


@pytest.fixture
def store() -> FakeStore:
    """Fake backend seeded with two projects and a handful of listings."""
    fake = FakeStore()
    fake.tables["projects"] = [
        {
            "id": 1,
            "slug": "lumina",
            "name_th": "ลูมินา",
            "name_en": "Lumina",
            "created_at": "2024-01-10T08:00:00+00:00",
            "updated_at": "2024-03-05T23:30:00+00:00",
            "developer": "Estato Dev",
            "year_built": 2020,
            "highlights": ["Pool", "Gym", "Garden", "Sky lounge"],
            "facilities": ["Pool", "Gym"],
            "bts": "Asok",
        },
        {
            "id": 2,
            "slug": "riverside",
            "name_th": "ริเวอร์ไซด์",
            "name_en": "Riverside",
            "created_at": "2024-02-01T00:00:00+00:00",
            "updated_at": None,
        },
    ]
    fake.tables["properties"] = [
        {
            "id": 42,
            "created_at": "2024-04-01T10:00:00+00:00",
            "project_slug": "lumina",
            "type": "rent",
            "title_th": "ห้องสวย",
            "price": 25000,
            "bedrooms": 1,
            "bathrooms": 1,
            "size_sqm": 35,
            "images": ["https://img.example/42-a.jpg", "https://img.example/42-b.jpg"],
            "status": "available",
        },
        {
            "id": 7,
            "created_at": "2024-03-01T10:00:00+00:00",
            "project_slug": "lumina",
            "type": "buy",
            "title_th": "ขายห้องวิวแม่น้ำ",
            "slug_en": "Riverside Suite",
            "price": 8500000,
            "bedrooms": 3,
            "bathrooms": 2,
            "size_sqm": 120,
            "status": "available",
        },
        {
            "id": 9,
            "created_at": "2024-05-01T10:00:00+00:00",
            "project_slug": "riverside",
            "type": "rent",
            "title_th": "สตูดิโอ",
            "title_en": "Cozy Studio",
            "price": 12000,
            "bedrooms": 0,
            "bathrooms": 1,
            "size_sqm": 24,
            "status": "unavailable",
        },
    ]
    fake.users["agent@example.com"] = "secret"
    yield fake
    fake.cancel_timers()


@pytest.fixture
def config_class(tmp_path):
    class TestConfig(Config):
        TESTING = True
        SECRET_KEY = "test-secret"
        SUPABASE_URL = "https://example.supabase.co"
        SUPABASE_ANON_KEY = "anon-key"
        SITE_ORIGIN = "https://estato.example"
        SESSION_COOKIE_SECURE = False
        LOG_DIR = tmp_path / "logs"
        LOG_FILE = tmp_path / "logs" / "app.log"

    return TestConfig


@pytest.fixture
def app(store, config_class):
    return create_app(config_class, client_factory=store.client_factory)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def signed_in_client(client):
    """Test client with a stored, unexpired session."""
    with client.session_transaction() as sess:
        sess["auth_session"] = {
            "access_token": "token-agent",
            "refresh_token": "refresh-1",
            "user_id": "user-1",
            "email": "agent@example.com",
            "expires_at": 4102444800,
        }
    return client
