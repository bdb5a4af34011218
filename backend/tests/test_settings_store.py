"""Tests for the settings table accessors."""

import pytest

from hotspot_portal.models import Setting
from hotspot_portal.utils.helpers import is_public_http_url
from hotspot_portal.utils.settings_store import (
    ALERT_WEBHOOK_KEY,
    SESSION_DURATION_KEY,
    SettingsStore,
)


def test_set_creates_then_updates(db):
    store = SettingsStore(db)

    store.set("portal_title", "Guest WiFi")
    store.set("portal_title", "Visitors")

    assert db.query(Setting).count() == 1
    assert store.get_string("portal_title") == "Visitors"


def test_missing_values_fall_back_to_defaults(db):
    store = SettingsStore(db)

    assert store.get_string("nope", "fallback") == "fallback"
    assert store.get_int("nope", 7) == 7
    assert store.get_session_duration_hours() == 48
    assert store.get_alert_webhook_url() == ""


def test_int_and_webhook_parsing(db):
    store = SettingsStore(db)
    store.set(SESSION_DURATION_KEY, " 24 ")
    store.set(ALERT_WEBHOOK_KEY, "  https://hooks.example.com/x  ")

    assert store.get_session_duration_hours() == 24
    assert store.get_alert_webhook_url() == "https://hooks.example.com/x"


def test_none_is_stored_as_empty_string(db):
    store = SettingsStore(db)
    store.set("something", None)

    assert store.get_string("something") == ""


@pytest.mark.parametrize("url", [
    "http://localhost:8080/hook",
    "http://127.0.0.1/hook",
    "http://[::1]/hook",
    "http://0.0.0.0/hook",
    "http://10.1.2.3/hook",
    "http://172.20.0.5/hook",
    "https://192.168.1.10/hook",
    "ftp://hooks.example.com/hook",
    "file:///etc/passwd",
    "not a url",
])
def test_internal_or_non_http_webhook_is_ignored(db, url):
    store = SettingsStore(db)
    store.set(ALERT_WEBHOOK_KEY, url)

    assert store.get_alert_webhook_url() == ""


@pytest.mark.parametrize("url,expected", [
    ("https://discord.com/api/webhooks/1/abc", True),
    ("http://8.8.8.8/hook", True),
    ("https://172.32.0.1/hook", True),
])
def test_is_public_http_url(url, expected):
    assert is_public_http_url(url) is expected
