"""
Telemetry Ingestion Service
Receives traffic and connection snapshots pushed by MikroTik scheduler scripts
"""
import hmac
import logging
from datetime import timedelta
from typing import Callable, Dict, Optional

from sqlalchemy.orm import Session

from ..database import SessionLocal
from ..models.telemetry import TrafficRanking, WanStat, ClientConnection, DnsEntry
from ..utils import wire_format
from ..utils.helpers import utcnow
from ..utils.settings_store import SettingsStore

logger = logging.getLogger(__name__)

TRAFFIC_RETENTION = timedelta(days=30)
WAN_RETENTION = timedelta(days=7)
MAX_ROUTER_NAME = 100


class InvalidIngestionKey(Exception):
    """The pushed key does not match the configured ingestion key"""


def keys_match(supplied: Optional[str], configured: Optional[str]) -> bool:
    """Constant-time comparison; an empty configured key rejects everything"""
    if not supplied or not configured:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), configured.encode("utf-8"))


class TelemetryIngestor:
    def __init__(self, db: Session):
        self.db = db
        self.settings = SettingsStore(db)

    def is_key_valid(self, key: Optional[str]) -> bool:
        return keys_match(key, self.settings.get_ingestion_key())

    def _authenticate(self, key: Optional[str]):
        if not self.is_key_valid(key):
            logger.warning("[MikrotikData] Push rejected: invalid key")
            raise InvalidIngestionKey()

    def receive_traffic(
        self,
        key: Optional[str],
        router: Optional[str],
        clients_csv: Optional[str],
        iface_csv: Optional[str]
    ) -> Dict:
        """Append client ranking and WAN rows; old rows are purged separately"""
        self._authenticate(key)

        now = utcnow()
        router_name = (router or "")[:MAX_ROUTER_NAME]

        clients = wire_format.parse_clients(clients_csv)
        ifaces = wire_format.parse_interfaces(iface_csv)

        try:
            if clients:
                self.db.bulk_insert_mappings(
                    TrafficRanking,
                    [{**c, "router_name": router_name, "recorded_at": now} for c in clients]
                )
            if ifaces:
                self.db.bulk_insert_mappings(
                    WanStat,
                    [{**i, "router_name": router_name, "recorded_at": now} for i in ifaces]
                )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"[MikrotikData] Traffic: {len(clients)} clients, {len(ifaces)} interfaces (router: {router_name})"
        )
        return {"router_name": router_name, "clients": len(clients), "interfaces": len(ifaces)}

    def receive_details(
        self,
        key: Optional[str],
        router: Optional[str],
        connections_csv: Optional[str],
        dns_csv: Optional[str]
    ) -> Dict:
        """
        Replace the connection and DNS snapshots in a single transaction.
        If anything fails the delete is rolled back and the previous
        snapshot stays in place.
        """
        self._authenticate(key)

        now = utcnow()
        router_name = (router or "")[:MAX_ROUTER_NAME]

        connections = wire_format.parse_connections(connections_csv)
        dns_entries = wire_format.parse_dns(dns_csv)

        try:
            self.db.query(ClientConnection).delete(synchronize_session=False)
            if connections:
                self.db.bulk_insert_mappings(
                    ClientConnection,
                    [{**c, "router_name": router_name, "recorded_at": now} for c in connections]
                )

            self.db.query(DnsEntry).delete(synchronize_session=False)
            if dns_entries:
                self.db.bulk_insert_mappings(
                    DnsEntry,
                    [{**d, "router_name": router_name, "recorded_at": now} for d in dns_entries]
                )

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"[MikrotikData] Details: {len(connections)} connections, {len(dns_entries)} DNS entries (router: {router_name})"
        )
        return {"router_name": router_name, "connections": len(connections), "dns_entries": len(dns_entries)}


def purge_expired(session_factory: Callable[[], Session] = SessionLocal) -> Dict[str, int]:
    """
    Drop traffic rows older than 30 days and WAN rows older than 7 days.
    Runs after the response is sent; errors are logged, never raised.
    """
    purged = {"traffic": 0, "wan": 0}
    db = session_factory()
    try:
        now = utcnow()
        for label, model, retention in (
            ("traffic", TrafficRanking, TRAFFIC_RETENTION),
            ("wan", WanStat, WAN_RETENTION),
        ):
            try:
                purged[label] = db.query(model).filter(
                    model.recorded_at < now - retention
                ).delete(synchronize_session=False)
                db.commit()
            except Exception as e:
                db.rollback()
                logger.warning(f"[MikrotikData] Could not purge {model.__tablename__}: {e}")
    finally:
        db.close()

    if purged["traffic"] or purged["wan"]:
        logger.info(f"[MikrotikData] Purged {purged['traffic']} traffic and {purged['wan']} WAN rows")
    return purged
