"""
Shared fixtures for the Gold 2 Money API tests.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from gold2money.core.config import Settings
from gold2money.core.email import Mailer
from gold2money.main import create_app
from gold2money.modules.loan_applications.notifications import Notifier

ADMIN_PASSWORD = "correct-horse-battery"
STAFF_EMAIL = "staff@gold2money.test"


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the environment, with a temporary upload dir."""
    return Settings(
        _env_file=None,
        python_env="test",
        upload_dir=tmp_path / "uploads",
        notification_recipient=STAFF_EMAIL,
        admin_password=ADMIN_PASSWORD,
        admin_password_hash=None,
        resend_api_key=None,
        redis_url=None,
        scheduler_enabled=False,
    )


@pytest.fixture
def mock_mailer():
    """Create a mock mailer that accepts every message."""
    mailer = MagicMock(spec=Mailer)
    mailer.send = AsyncMock(return_value="email-id")
    return mailer


@pytest.fixture
def mock_redis():
    """Create a mock Redis client."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock()
    redis.delete = AsyncMock()
    redis.expire = AsyncMock()
    redis.pipeline = MagicMock()
    pipe = MagicMock()
    pipe.zremrangebyscore = MagicMock()
    pipe.zcard = MagicMock()
    pipe.zadd = MagicMock()
    pipe.expire = MagicMock()
    pipe.execute = AsyncMock(return_value=[0, 0, 1, True])
    redis.pipeline.return_value = pipe
    return redis


@pytest.fixture
def app(settings, mock_mailer):
    """Application wired to the mock mailer."""
    application = create_app(settings)
    application.state.notifier = Notifier(mock_mailer, application.state.uploads, settings)
    return application


@pytest.fixture
def client(app):
    """Test client with the application lifespan running."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def valid_form():
    """Form fields that pass every validation rule."""
    return {
        "name": "Asha Patil",
        "email": "asha@example.com",
        "phone": "9876543210",
        "city": "Mumbai",
        "loanType": "New",
        "loanAmount": "50000",
        "jewelryType": "Necklace",
        "grams": "25",
        "message": "Please call after 5pm.",
    }
