"""
Session administration routes
Manual termination, on-demand expiry sweep and permanent user deletion
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..services.session_service import SessionLifecycle
from ..utils.security import require_admin_key

router = APIRouter(tags=["Sessions"])


@router.post("/sessions/{session_id}/terminate")
async def terminate_session(
    session_id: int,
    _admin: bool = Depends(require_admin_key),
    db: Session = Depends(get_db)
):
    if not await SessionLifecycle(db).terminate_session(session_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found or already ended"
        )
    return {"success": True}


@router.post("/sessions/expire")
async def expire_sessions(
    _admin: bool = Depends(require_admin_key),
    db: Session = Depends(get_db)
):
    expired = await SessionLifecycle(db).expire_overdue()
    return {"success": True, "expired": expired}


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: int,
    _admin: bool = Depends(require_admin_key),
    db: Session = Depends(get_db)
):
    """Permanent deletion of a portal user, including the router account"""
    if not await SessionLifecycle(db).delete_user(user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return {"success": True}
