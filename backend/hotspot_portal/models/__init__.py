"""
Models package - Import all SQLAlchemy models here
"""

from .user import User
from .session import Session
from .access_point import AccessPoint, ApPingHistory
from .telemetry import TrafficRanking, WanStat, ClientConnection, DnsEntry
from .setting import Setting

__all__ = [
    "User",
    "Session",
    "AccessPoint",
    "ApPingHistory",
    "TrafficRanking",
    "WanStat",
    "ClientConnection",
    "DnsEntry",
    "Setting"
]
