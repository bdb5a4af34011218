"""
Access Point Health Monitor
Pings every active access point, keeps a bounded history and alerts on
online -> offline transitions
"""
import asyncio
import logging
from collections import Counter
from datetime import datetime
from typing import Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..database import SessionLocal
from ..models.access_point import AccessPoint, ApPingHistory
from ..schemas.access_point import ProbeResult, Transition
from ..utils.helpers import utcnow
from ..utils.settings_store import SettingsStore
from .alert_service import AlertSender, alert_sender as default_alert_sender
from .ping_service import ping_host

logger = logging.getLogger(__name__)


def classify_transition(was_online: Optional[bool], now_online: bool) -> Transition:
    """Unknown previous state never counts as a transition"""
    if was_online is True and not now_online:
        return Transition.WENT_OFFLINE
    if was_online is False and now_online:
        return Transition.RECOVERED
    return Transition.NONE


class AccessPointMonitor:
    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        alert_sender: AlertSender = None,
        prober=ping_host,
        ping_timeout: int = None
    ):
        self.session_factory = session_factory
        self.alert_sender = alert_sender or default_alert_sender
        self.prober = prober
        self.ping_timeout = ping_timeout or settings.PING_TIMEOUT
        self._pending_alerts = set()

    async def probe_all(self) -> List[ProbeResult]:
        """One probe cycle over all active APs, run concurrently"""
        db = self.session_factory()
        try:
            aps = db.query(AccessPoint).filter(AccessPoint.active == True).all()
            if not aps:
                return []

            webhook_url = SettingsStore(db).get_alert_webhook_url()
            results = await asyncio.gather(*(self._check(db, ap, webhook_url) for ap in aps))

            online = sum(1 for r in results if r.online)
            logger.info(f"[Ping] {len(results)} AP(s) checked: {online} online, {len(results) - online} offline")
            return list(results)
        finally:
            db.close()

    async def _check(self, db: Session, ap: AccessPoint, webhook_url: str) -> ProbeResult:
        # Snapshot before probing; other coroutines may commit on this session meanwhile
        ap_id, name, ip_address, location = ap.id, ap.name, ap.ip_address, ap.location
        was_online = ap.is_online

        ping = await self.prober(ip_address, self.ping_timeout)
        checked_at = utcnow()

        result = ProbeResult(
            id=ap_id,
            name=name,
            ip_address=ip_address,
            location=location,
            online=ping.online,
            latency_ms=ping.latency_ms
        )

        try:
            ap.is_online = ping.online
            ap.latency_ms = ping.latency_ms
            ap.last_checked_at = checked_at
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"[Ping] Could not update AP {name} ({ip_address}): {e}")
            result.history_saved = False
            return result

        result.history_saved = self._record_history(db, ap_id, ping.online, ping.latency_ms, checked_at)
        result.transition = classify_transition(was_online, ping.online)

        if result.transition == Transition.WENT_OFFLINE:
            logger.warning(f"[Ping] AP went offline: {name} ({ip_address})")
            self._dispatch_alert(webhook_url, result)
        elif result.transition == Transition.RECOVERED:
            logger.info(f"[Ping] AP back online: {name} ({ip_address})")

        return result

    def _record_history(
        self,
        db: Session,
        ap_id: int,
        is_online: bool,
        latency_ms: Optional[int],
        checked_at: datetime
    ) -> bool:
        """Append one history row and trim to MAX_PER_AP; failures are logged only"""
        try:
            db.add(ApPingHistory(
                ap_id=ap_id,
                is_online=is_online,
                latency_ms=latency_ms,
                checked_at=checked_at
            ))
            db.flush()

            stale_ids = [
                row.id for row in db.query(ApPingHistory.id)
                .filter(ApPingHistory.ap_id == ap_id)
                .order_by(ApPingHistory.checked_at.desc(), ApPingHistory.id.desc())
                .offset(ApPingHistory.MAX_PER_AP)
                .all()
            ]
            if stale_ids:
                db.query(ApPingHistory).filter(
                    ApPingHistory.id.in_(stale_ids)
                ).delete(synchronize_session=False)

            db.commit()
            return True
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning(f"[Ping] Could not record history for AP {ap_id}: {e}")
            return False

    def _dispatch_alert(self, webhook_url: str, result: ProbeResult):
        if not webhook_url:
            return
        task = asyncio.create_task(self.alert_sender.notify(webhook_url, result))
        self._pending_alerts.add(task)
        task.add_done_callback(self._pending_alerts.discard)

    async def drain_alerts(self):
        """Wait for alerts still being delivered (shutdown, tests)"""
        if self._pending_alerts:
            await asyncio.gather(*list(self._pending_alerts), return_exceptions=True)


def status_label(is_online: Optional[bool]) -> str:
    if is_online is None:
        return "unknown"
    return "online" if is_online else "offline"


def access_point_status(ap: AccessPoint) -> Dict:
    return {
        "id": ap.id,
        "name": ap.name,
        "ip_address": ap.ip_address,
        "location": ap.location,
        "active": ap.active,
        "is_online": ap.is_online,
        "latency_ms": ap.latency_ms,
        "last_checked_at": ap.last_checked_at,
        "status": status_label(ap.is_online),
    }


def list_access_points(db: Session) -> Dict:
    """All APs by name with their last probe state and online/offline/unknown counts"""
    aps = db.query(AccessPoint).order_by(AccessPoint.name.asc(), AccessPoint.id.asc()).all()

    items = [access_point_status(ap) for ap in aps]
    counts = Counter(item["status"] for item in items)
    return {
        "access_points": items,
        "online": counts["online"],
        "offline": counts["offline"],
        "unknown": counts["unknown"],
    }


def create_access_point(db: Session, name: str, ip_address: str, location: Optional[str] = None) -> AccessPoint:
    """Register an AP; its state stays unknown until the first probe"""
    ap = AccessPoint(name=name, ip_address=ip_address, location=location, active=True)
    db.add(ap)
    db.commit()
    db.refresh(ap)
    logger.info(f"[Ping] AP added: {ap.name} ({ap.ip_address})")
    return ap


def get_history(db: Session, ap_id: int, limit: int = 100) -> List[ApPingHistory]:
    """Most recent probes first"""
    return (
        db.query(ApPingHistory)
        .filter(ApPingHistory.ap_id == ap_id)
        .order_by(ApPingHistory.checked_at.desc(), ApPingHistory.id.desc())
        .limit(limit)
        .all()
    )


def delete_access_point(db: Session, ap_id: int) -> bool:
    """Delete an AP together with its ping history"""
    ap = db.query(AccessPoint).filter(AccessPoint.id == ap_id).first()
    if not ap:
        return False

    logger.info(f"[Ping] AP removed: {ap.name} ({ap.ip_address})")
    db.delete(ap)
    db.commit()
    return True


# Global instance
ap_monitor = AccessPointMonitor()
