"""
Access point management routes
Registration, status listing, on-demand probe cycle, ping history and removal
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.access_point import AccessPoint, ApPingHistory
from ..schemas.access_point import (
    AccessPointCreate, AccessPointStatus, AccessPointListResponse,
    ProbeCycleResponse, PingHistoryResponse
)
from ..services.ap_monitor import (
    ap_monitor, get_history, delete_access_point, create_access_point, list_access_points, access_point_status
)
from ..utils.helpers import utcnow
from ..utils.security import require_admin_key

router = APIRouter(prefix="/access-points", tags=["Access Points"])


@router.get("", response_model=AccessPointListResponse)
async def get_access_points(
    _admin: bool = Depends(require_admin_key),
    db: Session = Depends(get_db)
):
    """Every AP with its last known state plus online/offline/unknown totals"""
    return list_access_points(db)


@router.post("", response_model=AccessPointStatus, status_code=status.HTTP_201_CREATED)
async def add_access_point(
    payload: AccessPointCreate,
    _admin: bool = Depends(require_admin_key),
    db: Session = Depends(get_db)
):
    ap = create_access_point(db, payload.name, payload.ip_address, payload.location)
    return access_point_status(ap)


@router.post("/ping", response_model=ProbeCycleResponse)
async def ping_access_points(_admin: bool = Depends(require_admin_key)):
    """Run a probe cycle now instead of waiting for the scheduler"""
    results = await ap_monitor.probe_all()
    return {"ok": True, "results": results, "checked_at": utcnow()}


@router.get("/{ap_id}/history", response_model=PingHistoryResponse)
async def access_point_history(
    ap_id: int,
    limit: int = 100,
    _admin: bool = Depends(require_admin_key),
    db: Session = Depends(get_db)
):
    ap = db.query(AccessPoint).filter(AccessPoint.id == ap_id).first()
    if not ap:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Access point not found")
    
    limit = max(1, min(limit, ApPingHistory.MAX_PER_AP))
    return {"ap": ap, "history": get_history(db, ap_id, limit)}


@router.delete("/{ap_id}")
async def remove_access_point(
    ap_id: int,
    _admin: bool = Depends(require_admin_key),
    db: Session = Depends(get_db)
):
    if not delete_access_point(db, ap_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Access point not found")
    return {"success": True}
