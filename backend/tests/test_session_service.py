"""Tests for SessionLifecycle."""

import asyncio
from datetime import timedelta

import pytest

from helpers import FakeGateway
from hotspot_portal.models import Session as PortalSession, User
from hotspot_portal.services.session_service import SessionLifecycle
from hotspot_portal.utils.helpers import utcnow
from hotspot_portal.utils.settings_store import SESSION_DURATION_KEY, SettingsStore


@pytest.fixture()
def user(db):
    user = User(user_key="12345678901", full_name="Maria Silva")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def add_session(db, user, expires_in, active=True):
    now = utcnow()
    session = PortalSession(
        user_id=user.id,
        started_at=now - timedelta(hours=1),
        expires_at=now + expires_in,
        active=active,
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


def test_create_or_reuse_returns_same_session(db, user):
    lifecycle = SessionLifecycle(db, gateway=FakeGateway())

    first = lifecycle.create_or_reuse(user.id, "AA:BB:CC:DD:EE:FF", "10.0.0.5")
    second = lifecycle.create_or_reuse(user.id, "11:22:33:44:55:66", "10.0.0.6")

    assert first.id == second.id
    assert db.query(PortalSession).count() == 1


def test_default_duration_is_48_hours(db, user):
    session = SessionLifecycle(db, gateway=FakeGateway()).create_session(user.id)

    assert session.expires_at - session.started_at == timedelta(hours=48)


@pytest.mark.parametrize("stored,expected", [
    ("12", 12),
    ("0", 1),
    ("-3", 1),
    ("9999", 720),
    ("abc", 48),
])
def test_duration_setting_is_clamped(db, user, stored, expected):
    SettingsStore(db).set(SESSION_DURATION_KEY, stored)

    session = SessionLifecycle(db, gateway=FakeGateway()).create_session(user.id)

    assert session.expires_at - session.started_at == timedelta(hours=expected)


def test_expired_session_is_not_reused(db, user):
    old = add_session(db, user, timedelta(minutes=-5))

    session = SessionLifecycle(db, gateway=FakeGateway()).create_or_reuse(user.id)

    assert session.id != old.id


def test_expire_overdue_deactivates_and_deauthorizes(db, user):
    overdue = add_session(db, user, timedelta(minutes=-5))
    current = add_session(db, user, timedelta(hours=5))
    gateway = FakeGateway()
    lifecycle = SessionLifecycle(db, gateway=gateway)

    assert asyncio.run(lifecycle.expire_overdue()) == 1
    assert asyncio.run(lifecycle.expire_overdue()) == 0

    db.refresh(overdue)
    db.refresh(current)
    assert overdue.active is False
    assert current.active is True
    assert gateway.deauthorized == [("12345678901", False)]


def test_expire_overdue_continues_after_router_failure(db, user):
    other = User(user_key="98765432100", full_name="Joao")
    db.add(other)
    db.commit()
    add_session(db, user, timedelta(minutes=-10))
    add_session(db, other, timedelta(minutes=-10))

    gateway = FakeGateway(deauthorize_result=RuntimeError("router gone"))
    lifecycle = SessionLifecycle(db, gateway=gateway)

    assert asyncio.run(lifecycle.expire_overdue()) == 2
    assert len(gateway.deauthorized) == 2
    assert db.query(PortalSession).filter(PortalSession.active == True).count() == 0


def test_grant_access_success(db, user):
    gateway = FakeGateway()
    lifecycle = SessionLifecycle(db, gateway=gateway)

    session = asyncio.run(lifecycle.grant_access(user, "AA:BB:CC:DD:EE:FF", "10.0.0.5"))

    assert session is not None and session.active
    assert gateway.authorized == [("AA:BB:CC:DD:EE:FF", "10.0.0.5", "12345678901", "Maria Silva")]


def test_grant_access_failure_removes_new_session(db, user):
    lifecycle = SessionLifecycle(db, gateway=FakeGateway(authorize_result=False))

    assert asyncio.run(lifecycle.grant_access(user, None, "10.0.0.5")) is None
    assert db.query(PortalSession).count() == 0


def test_grant_access_failure_keeps_existing_session(db, user):
    existing = add_session(db, user, timedelta(hours=3))
    lifecycle = SessionLifecycle(db, gateway=FakeGateway(authorize_result=False))

    assert asyncio.run(lifecycle.grant_access(user, None, "10.0.0.5")) is None
    db.refresh(existing)
    assert existing.active is True


def test_terminate_session(db, user):
    session = add_session(db, user, timedelta(hours=3))
    gateway = FakeGateway()
    lifecycle = SessionLifecycle(db, gateway=gateway)

    assert asyncio.run(lifecycle.terminate_session(session.id)) is True
    assert asyncio.run(lifecycle.terminate_session(session.id)) is False
    assert asyncio.run(lifecycle.terminate_session(9999)) is False
    assert gateway.deauthorized == [("12345678901", False)]


def test_delete_user_cascades_sessions(db, user):
    add_session(db, user, timedelta(hours=3))
    add_session(db, user, timedelta(hours=-3), active=False)
    gateway = FakeGateway()

    assert asyncio.run(SessionLifecycle(db, gateway=gateway).delete_user(user.id)) is True
    assert db.query(User).count() == 0
    assert db.query(PortalSession).count() == 0
    assert gateway.deauthorized == [("12345678901", True)]
