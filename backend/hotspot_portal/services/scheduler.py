"""
Background jobs: session expiry sweep and access point probing
"""
import asyncio
import logging
from typing import Awaitable, Callable

from ..config import settings
from ..database import SessionLocal
from .ap_monitor import ap_monitor
from .session_service import SessionLifecycle

logger = logging.getLogger(__name__)


class IntervalJob:
    """Runs an async callable every `interval` seconds until stopped"""

    def __init__(self, name: str, func: Callable[[], Awaitable], interval: int):
        self.name = name
        self.func = func
        self.interval = interval
        self.running = False
        self._task = None

    async def start(self):
        if self.running:
            logger.warning(f"{self.name} already running")
            return
        self.running = True
        self._task = asyncio.create_task(self._loop())
        logger.info(f"{self.name} started (every {self.interval}s)")

    async def stop(self):
        self.running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info(f"{self.name} stopped")

    async def _loop(self):
        while self.running:
            await asyncio.sleep(self.interval)
            try:
                await self.func()
            except Exception as e:
                logger.error(f"{self.name} error: {e}", exc_info=True)


async def expire_sessions_job():
    db = SessionLocal()
    try:
        await SessionLifecycle(db).expire_overdue()
    finally:
        db.close()


async def probe_access_points_job():
    await ap_monitor.probe_all()


session_expiry_job = IntervalJob("Session expiry", expire_sessions_job, settings.SESSION_EXPIRY_INTERVAL)
ap_ping_job = IntervalJob("AP monitor", probe_access_points_job, settings.AP_PING_INTERVAL)
