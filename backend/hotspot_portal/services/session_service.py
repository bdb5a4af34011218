"""
Session Management Service
Creates, reuses and expires portal sessions and keeps the router in sync
"""
import logging
from datetime import timedelta
from typing import Optional

from sqlalchemy import and_
from sqlalchemy.orm import Session as DBSession

from ..models.session import Session as PortalSession
from ..models.user import User
from ..utils.helpers import utcnow
from ..utils.settings_store import SettingsStore
from .device_gateway import DeviceGateway, device_gateway

logger = logging.getLogger(__name__)


class SessionLifecycle:
    def __init__(self, db: DBSession, gateway: DeviceGateway = None):
        self.db = db
        self.gateway = gateway or device_gateway
        self.settings = SettingsStore(db)

    def get_active_session(self, user_id: int) -> Optional[PortalSession]:
        """Active, not yet expired session for the user"""
        return self.db.query(PortalSession).filter(
            and_(
                PortalSession.user_id == user_id,
                PortalSession.active == True,
                PortalSession.expires_at > utcnow()
            )
        ).order_by(PortalSession.expires_at.desc()).first()

    def create_session(self, user_id: int, mac: Optional[str] = None, ip: Optional[str] = None) -> PortalSession:
        duration_hours = self.settings.get_session_duration_hours()
        now = utcnow()

        session = PortalSession(
            user_id=user_id,
            mac_address=mac or None,
            ip_address=ip or None,
            started_at=now,
            expires_at=now + timedelta(hours=duration_hours),
            active=True
        )
        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)

        logger.info(f"[Session] Created for user {user_id}, expires in {duration_hours}h")
        return session

    def create_or_reuse(self, user_id: int, mac: Optional[str] = None, ip: Optional[str] = None) -> PortalSession:
        existing = self.get_active_session(user_id)
        if existing:
            logger.info(f"[Session] Reusing session {existing.id} for user {user_id}")
            return existing
        return self.create_session(user_id, mac, ip)

    async def grant_access(self, user: User, mac: Optional[str] = None, ip: Optional[str] = None) -> Optional[PortalSession]:
        """
        Session + router authorization for a portal login.
        Returns None when the router refused; a session created by this call
        is removed again so the two sides stay consistent.
        """
        existing = self.get_active_session(user.id)
        session = existing or self.create_session(user.id, mac, ip)

        authorized = await self.gateway.authorize(mac, ip, user.user_key, user.full_name)
        if authorized:
            return session

        logger.warning(f"[Session] Router did not authorize {user.user_key}")
        if existing is None:
            session_id = session.id
            self.db.delete(session)
            self.db.commit()
            logger.info(f"[Session] Rolled back session {session_id} for user {user.id}")
        return None

    async def expire_overdue(self) -> int:
        """
        Deactivate every overdue session and revoke its router access.
        Best effort: a failure on one session does not stop the sweep.
        """
        expired = self.db.query(PortalSession).filter(
            and_(
                PortalSession.active == True,
                PortalSession.expires_at <= utcnow()
            )
        ).all()

        if not expired:
            return 0

        logger.info(f"[Session] Expiring {len(expired)} session(s)...")

        for session in expired:
            try:
                session.active = False
                self.db.commit()

                user = session.user
                if user is not None:
                    if not await self.gateway.deauthorize(user.user_key, full_delete=False):
                        logger.warning(f"[Session] Router deauthorization failed for session {session.id}")
            except Exception as e:
                logger.error(f"[Session] Error expiring session {session.id}: {e}")
                self.db.rollback()

        logger.info(f"[Session] {len(expired)} session(s) expired")
        return len(expired)

    async def terminate_session(self, session_id: int) -> bool:
        """Manual termination from the admin API"""
        session = self.db.query(PortalSession).filter(PortalSession.id == session_id).first()
        if not session or not session.active:
            return False

        if session.user is not None:
            await self.gateway.deauthorize(session.user.user_key)

        session.active = False
        self.db.commit()
        logger.info(f"[Session] Session {session.id} terminated manually")
        return True

    async def delete_user(self, user_id: int) -> bool:
        """Permanent deletion: router user, sessions and the user row"""
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            return False

        if not await self.gateway.deauthorize(user.user_key, full_delete=True):
            logger.warning(f"[Session] Router cleanup failed while deleting user {user.user_key}")

        self.db.delete(user)
        self.db.commit()
        logger.info(f"[Session] User {user.user_key} deleted")
        return True
