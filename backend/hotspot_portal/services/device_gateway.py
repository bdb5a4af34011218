"""
Device Authorization Gateway
Grants and revokes network access on the MikroTik hotspot
"""
import asyncio
import functools
import logging
import weakref
from typing import Callable, Optional

from ..utils.helpers import sanitize_remote_text
from .routeros_service import RouterOSClient, HOTSPOT_USER_PATH, IP_BINDING_PATH

logger = logging.getLogger(__name__)

BINDING_TAG_PREFIX = "captive-portal:"


def binding_tag(user_key: str) -> str:
    return f"{BINDING_TAG_PREFIX}{user_key}"


class DeviceGateway:
    """
    Owns the single connection to the router control API.

    - The connection is opened lazily and reused while healthy
    - Callers arriving while a connect is in flight await that same attempt
    - A failed operation invalidates the connection it used; the next call reconnects
    - Calls for the same user key are serialized, other keys run concurrently

    authorize/deauthorize never raise: they return False on any control-plane
    error and do not roll back steps that already succeeded.
    """

    def __init__(self, client_factory: Callable[[], RouterOSClient] = None):
        self._client_factory = client_factory or RouterOSClient.from_settings
        self._client: Optional[RouterOSClient] = None
        self._connecting: Optional[asyncio.Future] = None
        self._user_locks = weakref.WeakValueDictionary()

    @property
    def connected(self) -> bool:
        return self._client is not None

    async def acquire(self) -> RouterOSClient:
        """Return the live connection, opening it if needed"""
        if self._client is not None:
            return self._client

        # a finished attempt that left no client failed; start over
        if self._connecting is None or self._connecting.done():
            self._connecting = asyncio.ensure_future(self._connect())
            self._connecting.add_done_callback(self._clear_connecting)

        # shield: a cancelled waiter must not cancel the attempt shared by others
        return await asyncio.shield(self._connecting)

    async def _connect(self) -> RouterOSClient:
        client = self._client_factory()
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, client.connect)
        except Exception as e:
            logger.error(f"[Mikrotik] Connection failed: {e}")
            client.close()
            raise
        self._client = client
        return client

    def _clear_connecting(self, future: asyncio.Future):
        if self._connecting is future:
            self._connecting = None

    def invalidate(self, client: Optional[RouterOSClient] = None):
        """
        Drop the connection so the next call starts from scratch.
        With `client`, only that connection is dropped: a failure seen on a
        connection that was already replaced leaves the new one alone.
        """
        if client is not None and client is not self._client:
            return
        client, self._client = self._client, None
        if client is not None:
            client.close()
            logger.warning("[Mikrotik] Connection marked unhealthy")

    async def close(self):
        if self._connecting is not None:
            try:
                await asyncio.shield(self._connecting)
            except Exception as e:
                logger.debug(f"[Mikrotik] Pending connect failed during shutdown: {e}")
        client, self._client = self._client, None
        if client is not None:
            client.close()
            logger.info("[Mikrotik] Connection closed")

    def _lock_for(self, user_key: str) -> asyncio.Lock:
        lock = self._user_locks.get(user_key)
        if lock is None:
            lock = asyncio.Lock()
            self._user_locks[user_key] = lock
        return lock

    @staticmethod
    async def _call(fn, *args, **kwargs):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(fn, *args, **kwargs))

    async def _remove_bindings(self, client: RouterOSClient, user_key: str) -> int:
        bindings = await self._call(client.find, IP_BINDING_PATH, comment=binding_tag(user_key))
        for binding in bindings:
            await self._call(client.remove, IP_BINDING_PATH, binding[".id"])
        return len(bindings)

    async def authorize(
        self,
        mac: Optional[str],
        ip: Optional[str],
        user_key: str,
        display_name: str
    ) -> bool:
        """
        Ensure a hotspot user exists for `user_key` and, when `ip` is given,
        replace its bypass binding with exactly one fresh binding for `ip`.

        The MAC is only logged: devices randomize it per network.
        """
        async with self._lock_for(user_key):
            client = None
            try:
                client = await self.acquire()

                existing = await self._call(client.find, HOTSPOT_USER_PATH, name=user_key)
                if not existing:
                    await self._call(
                        client.add,
                        HOTSPOT_USER_PATH,
                        name=user_key,
                        comment=sanitize_remote_text(display_name),
                        server="all"
                    )
                    logger.info(f"[Mikrotik] Hotspot user created: {user_key}")

                if ip:
                    removed = await self._remove_bindings(client, user_key)
                    if removed:
                        logger.info(f"[Mikrotik] Removed {removed} previous binding(s) for {user_key}")

                    await self._call(
                        client.add,
                        IP_BINDING_PATH,
                        address=ip,
                        type="bypassed",
                        comment=binding_tag(user_key)
                    )
                    logger.info(f"[Mikrotik] IP binding created for {ip} ({user_key}, mac: {mac or '-'})")

                return True

            except Exception as e:
                logger.error(f"[Mikrotik] Failed to authorize {user_key}: {e}")
                if client is not None:
                    self.invalidate(client)
                return False

    async def deauthorize(self, user_key: str, full_delete: bool = False) -> bool:
        """
        Remove every binding tagged for `user_key`.
        `full_delete` also removes the hotspot user (permanent data deletion).
        """
        async with self._lock_for(user_key):
            client = None
            try:
                client = await self.acquire()

                await self._remove_bindings(client, user_key)

                if full_delete:
                    users = await self._call(client.find, HOTSPOT_USER_PATH, name=user_key)
                    for user in users:
                        await self._call(client.remove, HOTSPOT_USER_PATH, user[".id"])
                    logger.info(f"[Mikrotik] Hotspot user deleted: {user_key}")

                logger.info(f"[Mikrotik] Authorizations removed for {user_key}")
                return True

            except Exception as e:
                logger.error(f"[Mikrotik] Failed to deauthorize {user_key}: {e}")
                if client is not None:
                    self.invalidate(client)
                return False


# Global instance
device_gateway = DeviceGateway()
