"""
Webhook alerts for access points going offline
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional, Sequence
from zoneinfo import ZoneInfo

import requests

from ..config import settings

logger = logging.getLogger(__name__)

# Delay before each attempt, in seconds
RETRY_DELAYS = (0, 2, 5)


class AlertSender:
    def __init__(
        self,
        timeout: int = None,
        retry_delays: Sequence[float] = RETRY_DELAYS,
        tz_name: str = None
    ):
        self.timeout = timeout or settings.WEBHOOK_TIMEOUT
        self.retry_delays = tuple(retry_delays)
        self.tz = ZoneInfo(tz_name or settings.ALERT_TIMEZONE)

    def build_message(self, name: str, ip_address: str, location: Optional[str] = None, when: datetime = None) -> str:
        when = (when or datetime.now(timezone.utc)).astimezone(self.tz)
        where = f" — {location}" if location else ""
        return f"AP OFFLINE: {name} ({ip_address}){where} | {when.strftime('%d/%m/%Y %H:%M:%S')}"

    def _post(self, webhook_url: str, payload: dict) -> requests.Response:
        return requests.post(webhook_url, json=payload, timeout=self.timeout)

    async def notify(self, webhook_url: str, ap) -> None:
        """
        Deliver an offline alert for `ap` (anything with name, ip_address and
        location). Never raises; gives up after the last retry.
        """
        if not webhook_url:
            return

        message = self.build_message(ap.name, ap.ip_address, getattr(ap, "location", None))
        # Slack-style receivers read "text", Discord reads "content"
        payload = {"text": message, "content": message}

        loop = asyncio.get_running_loop()
        attempts = len(self.retry_delays)

        for attempt, delay in enumerate(self.retry_delays, start=1):
            if delay:
                await asyncio.sleep(delay)
            try:
                response = await loop.run_in_executor(None, self._post, webhook_url, payload)
                if response.ok:
                    logger.info(f"[Alert] Webhook delivered for {ap.name} (attempt {attempt})")
                    return
                logger.warning(f"[Alert] Webhook HTTP {response.status_code} (attempt {attempt}/{attempts})")
            except requests.RequestException as e:
                logger.warning(f"[Alert] Webhook error (attempt {attempt}/{attempts}): {e}")

        logger.error(f"[Alert] Giving up on webhook for {ap.name} after {attempts} attempts")


# Global instance
alert_sender = AlertSender()
