"""
MikroTik RouterOS REST client (RouterOS v7, /rest API)

Blocking client built on requests. One instance holds one authenticated
HTTP session; request/response pairs are serialized with a lock so the
instance can be shared by worker threads.
"""
import logging
import threading
from typing import Dict, List, Optional

import requests
import urllib3

from ..config import settings

# RouterOS ships a self-signed certificate by default
urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

logger = logging.getLogger(__name__)

HOTSPOT_USER_PATH = "ip/hotspot/user"
IP_BINDING_PATH = "ip/hotspot/ip-binding"


class RouterOSError(Exception):
    """Raised for transport failures and error replies from the router"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RouterOSClient:
    def __init__(
        self,
        host: str,
        username: str,
        password: str,
        port: int = 443,
        use_ssl: bool = True,
        verify_ssl: bool = False,
        timeout: int = 10
    ):
        scheme = "https" if use_ssl else "http"
        self.host = host
        self.base_url = f"{scheme}://{host}:{port}/rest"
        self.timeout = timeout
        self.session = requests.Session()
        self.session.auth = (username, password)
        self.session.verify = verify_ssl
        self.session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json"
        })
        self._lock = threading.Lock()
        self.identity = None

    @classmethod
    def from_settings(cls) -> "RouterOSClient":
        return cls(
            host=settings.MIKROTIK_HOST,
            username=settings.MIKROTIK_USER,
            password=settings.MIKROTIK_PASS,
            port=settings.MIKROTIK_PORT,
            use_ssl=settings.MIKROTIK_USE_SSL,
            verify_ssl=settings.MIKROTIK_VERIFY_SSL,
            timeout=settings.MIKROTIK_TIMEOUT
        )

    def _request(self, method: str, path: str, **kwargs):
        url = f"{self.base_url}/{path}"
        with self._lock:
            try:
                response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            except requests.RequestException as e:
                raise RouterOSError(f"{method} /{path} failed: {e}") from e

        if response.status_code >= 400:
            detail = response.text
            try:
                body = response.json()
                detail = body.get("detail") or body.get("message") or detail
            except ValueError:
                pass
            raise RouterOSError(
                f"{method} /{path} returned HTTP {response.status_code}: {detail}",
                status_code=response.status_code
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RouterOSError(f"{method} /{path} returned invalid JSON") from e

    def connect(self) -> Dict:
        """Authenticate by reading the router identity; raises RouterOSError"""
        if not self.host:
            raise RouterOSError("MIKROTIK_HOST is not configured")

        data = self._request("GET", "system/identity") or {}
        self.identity = data.get("name")
        logger.info(f"Connected to RouterOS at {self.host} (identity: {self.identity})")
        return data

    def find(self, path: str, **filters) -> List[Dict]:
        """List records at `path`, filtered by exact field values"""
        data = self._request("GET", path, params=filters or None)
        if data is None:
            return []
        if isinstance(data, dict):
            return [data]
        return list(data)

    def add(self, path: str, **fields) -> Dict:
        data = self._request("PUT", path, json=fields)
        return data or {}

    def remove(self, path: str, record_id: str) -> None:
        self._request("DELETE", f"{path}/{record_id}")

    def close(self):
        """Release pooled HTTP connections"""
        try:
            self.session.close()
        except Exception as e:
            logger.debug(f"Ignoring error while closing RouterOS session: {e}")
