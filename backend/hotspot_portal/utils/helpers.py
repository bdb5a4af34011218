import ipaddress
import re
from datetime import datetime, timezone
from urllib.parse import urlparse

# Letters (including Latin-1 accented), digits, space and hyphen
_UNSAFE_TEXT = re.compile(r"[^A-Za-z0-9À-ÖØ-öø-ÿ \-]")
MAX_REMOTE_TEXT = 100


def utcnow() -> datetime:
    """Timezone-aware current time in UTC"""
    return datetime.now(timezone.utc)


def sanitize_remote_text(value: str, max_length: int = MAX_REMOTE_TEXT) -> str:
    """Strip characters the router API should never receive in free-text fields"""
    if not value:
        return ""
    return _UNSAFE_TEXT.sub("", value)[:max_length]


def is_public_http_url(url: str) -> bool:
    """http(s) URL whose host is not localhost or a private/loopback address"""
    try:
        parsed = urlparse((url or "").strip())
        hostname = parsed.hostname
    except ValueError:
        return False

    if parsed.scheme not in ("http", "https") or not hostname:
        return False
    if hostname == "localhost" or hostname.endswith(".localhost"):
        return False

    try:
        address = ipaddress.ip_address(hostname)
    except ValueError:
        return True
    return not (address.is_private or address.is_loopback or address.is_unspecified or address.is_link_local)
