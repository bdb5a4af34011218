"""Fakes shared by the test modules."""

import itertools
import threading
import time

from hotspot_portal.services.routeros_service import RouterOSError


class FakeRouterOS:
    """In-memory stand-in for RouterOSClient; tables keyed by REST path."""

    _ids = itertools.count(1)

    def __init__(self, connect_delay: float = 0.0, fail_connect: bool = False):
        self.connect_delay = connect_delay
        self.fail_connect = fail_connect
        self.fail_on = set()  # (method, path) pairs that raise
        self.tables = {"ip/hotspot/user": [], "ip/hotspot/ip-binding": []}
        self.calls = []
        self.connects = 0
        self.closed = False
        self._lock = threading.Lock()

    def connect(self):
        with self._lock:
            self.connects += 1
        if self.connect_delay:
            time.sleep(self.connect_delay)
        if self.fail_connect:
            raise RouterOSError("connection refused")
        return {"name": "fake-router"}

    def _check(self, method, path):
        self.calls.append((method, path))
        if (method, path) in self.fail_on:
            raise RouterOSError(f"{method} /{path} failed", status_code=500)

    def find(self, path, **filters):
        self._check("find", path)
        return [
            dict(row) for row in self.tables[path]
            if all(row.get(k) == v for k, v in filters.items())
        ]

    def add(self, path, **fields):
        self._check("add", path)
        row = {".id": f"*{next(self._ids)}", **fields}
        self.tables[path].append(row)
        return dict(row)

    def remove(self, path, record_id):
        self._check("remove", path)
        self.tables[path] = [row for row in self.tables[path] if row[".id"] != record_id]

    def close(self):
        self.closed = True

    def users(self):
        return self.tables["ip/hotspot/user"]

    def bindings(self):
        return self.tables["ip/hotspot/ip-binding"]


class FakeGateway:
    """Records authorize/deauthorize calls made by the session layer."""

    def __init__(self, authorize_result=True, deauthorize_result=True):
        self.authorize_result = authorize_result
        self.deauthorize_result = deauthorize_result
        self.authorized = []
        self.deauthorized = []

    async def authorize(self, mac, ip, user_key, display_name):
        self.authorized.append((mac, ip, user_key, display_name))
        return self.authorize_result

    async def deauthorize(self, user_key, full_delete=False):
        self.deauthorized.append((user_key, full_delete))
        if isinstance(self.deauthorize_result, Exception):
            raise self.deauthorize_result
        return self.deauthorize_result


class RecordingAlertSender:
    def __init__(self):
        self.sent = []

    async def notify(self, webhook_url, ap):
        self.sent.append((webhook_url, ap.name, ap.ip_address))
