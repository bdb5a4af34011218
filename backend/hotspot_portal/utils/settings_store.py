"""
Typed access to the key/value settings table.

Services depend on this provider instead of querying Setting rows directly.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..config import settings as app_settings
from ..models.setting import Setting
from .helpers import is_public_http_url

logger = logging.getLogger(__name__)

SESSION_DURATION_KEY = "session_duration_hours"
INGESTION_KEY = "mikrotik_data_key"
ALERT_WEBHOOK_KEY = "alert_webhook_url"

DEFAULT_SESSION_HOURS = 48
MIN_SESSION_HOURS = 1
MAX_SESSION_HOURS = 720


class SettingsStore:
    def __init__(self, db: Session):
        self.db = db
    
    def _find(self, key: str) -> Optional[Setting]:
        return self.db.query(Setting).filter(Setting.key == key).first()
    
    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        row = self._find(key)
        return row.value if row else default
    
    def get_int(self, key: str, default: int) -> int:
        raw = self.get_string(key)
        if raw is None:
            return default
        try:
            return int(str(raw).strip())
        except ValueError:
            logger.warning(f"Setting {key}={raw!r} is not an integer, using {default}")
            return default
    
    def set(self, key: str, value) -> Setting:
        value = "" if value is None else str(value)
        row = self._find(key)
        if row is None:
            row = Setting(key=key, value=value)
            self.db.add(row)
        elif row.value != value:
            row.value = value
        self.db.commit()
        return row
    
    def get_session_duration_hours(self) -> int:
        """Session length policy, clamped to [1, 720] hours"""
        hours = self.get_int(SESSION_DURATION_KEY, DEFAULT_SESSION_HOURS)
        return max(MIN_SESSION_HOURS, min(MAX_SESSION_HOURS, hours))
    
    def get_ingestion_key(self) -> str:
        """
        Key routers must present when pushing telemetry.
        A row in the settings table wins over the environment, even when empty.
        """
        value = self.get_string(INGESTION_KEY)
        if value is None:
            value = app_settings.MIKROTIK_DATA_KEY
        return (value or "").strip()
    
    def get_alert_webhook_url(self) -> str:
        """Configured webhook, or "" when unset or pointing at an internal address"""
        url = (self.get_string(ALERT_WEBHOOK_KEY, "") or "").strip()
        if url and not is_public_http_url(url):
            logger.warning(f"Ignoring alert webhook {url!r}: only public http(s) URLs are allowed")
            return ""
        return url
