"""
Shared fixtures for sandboxbot tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

from sandboxbot.config import Settings

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _day(n: float, hours: float = 0) -> datetime:
    """Instant n days (plus hours) after the Unix epoch."""
    return EPOCH + timedelta(days=n, hours=hours)


def _iso(n: float, hours: float = 0) -> str:
    """RFC 3339 string for _day(n, hours), as the platform API formats it."""
    return _day(n, hours).strftime("%Y-%m-%dT%H:%M:%SZ")


@pytest.fixture
def epoch():
    return EPOCH


@pytest.fixture
def day():
    return _day


@pytest.fixture
def iso():
    return _iso


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        cf_api_url="https://api.example.com",
        cf_token="token",
        smtp_host="smtp.example.com",
        smtp_user="bot",
        smtp_pass="secret",
        smtp_from="sandbox-bot@example.com",
        org_prefix="sandbox-",
        notify_days=7,
        purge_days=14,
        time_starts_at=EPOCH,
    )
