from zoneinfo import ZoneInfo

import pytest

from healthtrack.config import Settings


def test_timezone_resolved_up_front(monkeypatch):
    monkeypatch.setenv("APP_TIMEZONE", "Europe/Kyiv")
    assert Settings().tz == ZoneInfo("Europe/Kyiv")


def test_unknown_timezone_fails_at_startup(monkeypatch):
    monkeypatch.setenv("APP_TIMEZONE", "Mars/Olympus_Mons")
    with pytest.raises(ValueError, match="APP_TIMEZONE"):
        Settings()
