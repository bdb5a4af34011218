"""
Telemetry ingestion endpoints called by the router scheduler scripts
Form-encoded POSTs authenticated by the shared ingestion key
"""
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Form, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..database import get_db
from ..limiter import limiter, INGESTION_LIMIT
from ..services.telemetry_ingestor import TelemetryIngestor, InvalidIngestionKey, purge_expired

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/mikrotik", tags=["MikroTik Telemetry"])


def _invalid_key_response() -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"error": "Invalid key."})


def _internal_error_response() -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": "Internal error."})


@router.post("/traffic")
@limiter.limit(INGESTION_LIMIT)
async def receive_traffic(
    request: Request,
    background_tasks: BackgroundTasks,
    key: str = Form(""),
    router_name: str = Form("", alias="router"),
    data: str = Form(""),
    iface: str = Form(""),
    db: Session = Depends(get_db)
):
    """Client ranking (data) and WAN interface deltas (iface)"""
    try:
        TelemetryIngestor(db).receive_traffic(key, router_name, data, iface)
    except InvalidIngestionKey:
        return _invalid_key_response()
    except Exception as e:
        logger.error(f"[MikrotikData] receive_traffic failed: {e}")
        return _internal_error_response()
    
    background_tasks.add_task(purge_expired)
    return {"ok": True}


@router.post("/details")
@limiter.limit(INGESTION_LIMIT)
async def receive_details(
    request: Request,
    key: str = Form(""),
    router_name: str = Form("", alias="router"),
    connections: str = Form(""),
    dns: str = Form(""),
    db: Session = Depends(get_db)
):
    """Connection tracking and DNS cache snapshots"""
    try:
        TelemetryIngestor(db).receive_details(key, router_name, connections, dns)
    except InvalidIngestionKey:
        return _invalid_key_response()
    except Exception as e:
        logger.error(f"[MikrotikData] receive_details failed: {e}")
        return _internal_error_response()
    
    return {"ok": True}
