"""
Admin API key check for the management endpoints
"""
import hmac
from typing import Optional

from fastapi import Header, HTTPException, status

from ..config import settings


def require_admin_key(x_admin_key: Optional[str] = Header(None)) -> bool:
    """
    Verify the X-Admin-Key header against ADMIN_API_KEY.
    Management endpoints stay closed while no key is configured.
    """
    if not settings.ADMIN_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Admin API key not configured on server"
        )
    
    if not x_admin_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Admin-Key header",
            headers={"WWW-Authenticate": "ApiKey"}
        )
    
    if not hmac.compare_digest(x_admin_key.encode("utf-8"), settings.ADMIN_API_KEY.encode("utf-8")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin key",
            headers={"WWW-Authenticate": "ApiKey"}
        )
    
    return True
