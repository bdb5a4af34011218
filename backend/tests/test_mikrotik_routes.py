"""Tests for the telemetry ingestion endpoints."""

from unittest.mock import patch

import pytest

from hotspot_portal.models import ClientConnection, DnsEntry, TrafficRanking, WanStat
from hotspot_portal.utils.settings_store import INGESTION_KEY, SettingsStore

KEY = "router-push-key"


@pytest.fixture()
def configured(db):
    SettingsStore(db).set(INGESTION_KEY, KEY)


def test_traffic_push(client, db, configured):
    with patch("hotspot_portal.routes.mikrotik.purge_expired") as purge:
        response = client.post("/api/mikrotik/traffic", data={
            "key": KEY,
            "router": "rb-main",
            "data": "10.0.0.5,LAPTOP [AA:BB:CC:DD:EE:FF],100,200;junk;",
            "iface": "eth0,500,700,up;wlan0,10,20,down;",
        })

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert db.query(TrafficRanking).one().router_name == "rb-main"
    assert db.query(WanStat).count() == 2
    purge.assert_called_once_with()


def test_traffic_push_invalid_key(client, db, configured):
    response = client.post("/api/mikrotik/traffic", data={"key": "wrong", "data": "10.0.0.5,A,1,2;"})

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid key."}
    assert db.query(TrafficRanking).count() == 0


def test_push_rejected_when_no_key_configured(client):
    response = client.post("/api/mikrotik/details", data={"key": "", "dns": "a.com>1.1.1.1;"})

    assert response.status_code == 401


def test_details_push_replaces_snapshot(client, db, configured):
    client.post("/api/mikrotik/details", data={
        "key": KEY, "router": "rb", "connections": "10.0.0.5,1.1.1.1,443,1,2;", "dns": "a.com>1.1.1.1;",
    })
    response = client.post("/api/mikrotik/details", data={
        "key": KEY, "router": "rb", "connections": "10.0.0.6,8.8.8.8,x,3,4;", "dns": "",
    })

    assert response.json() == {"ok": True}
    connection = db.query(ClientConnection).one()
    assert connection.src_ip == "10.0.0.6"
    assert connection.dst_port is None
    assert db.query(DnsEntry).count() == 0


def test_details_push_storage_failure(client, configured):
    with patch(
        "hotspot_portal.routes.mikrotik.TelemetryIngestor.receive_details",
        side_effect=RuntimeError("db down"),
    ):
        response = client.post("/api/mikrotik/details", data={"key": KEY})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal error."}


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
