from pydantic import BaseModel, validator
from typing import Optional, List
from datetime import datetime
from enum import Enum

from ..services.ping_service import is_valid_ipv4


class Transition(str, Enum):
    NONE = "none"
    WENT_OFFLINE = "went_offline"
    RECOVERED = "recovered"


class ProbeResult(BaseModel):
    id: int
    name: str
    ip_address: str
    location: Optional[str] = None
    online: bool
    latency_ms: Optional[int] = None
    transition: Transition = Transition.NONE
    history_saved: bool = True


class ProbeCycleResponse(BaseModel):
    ok: bool = True
    results: List[ProbeResult]
    checked_at: datetime


class PingHistoryItem(BaseModel):
    is_online: bool
    latency_ms: Optional[int] = None
    checked_at: datetime
    
    class Config:
        from_attributes = True


class AccessPointSummary(BaseModel):
    id: int
    name: str
    ip_address: str
    
    class Config:
        from_attributes = True


class PingHistoryResponse(BaseModel):
    ap: AccessPointSummary
    history: List[PingHistoryItem]


class AccessPointCreate(BaseModel):
    name: str
    ip_address: str
    location: Optional[str] = None
    
    @validator('name')
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError('Name is required')
        if len(v.strip()) > 100:
            raise ValueError('Name must be at most 100 characters')
        return v.strip()
    
    @validator('ip_address')
    def validate_ip_address(cls, v):
        v = (v or "").strip()
        if not is_valid_ipv4(v):
            raise ValueError('Invalid IPv4 address')
        return v
    
    @validator('location')
    def validate_location(cls, v):
        if v is None or not v.strip():
            return None
        if len(v.strip()) > 200:
            raise ValueError('Location must be at most 200 characters')
        return v.strip()


class AccessPointStatus(BaseModel):
    id: int
    name: str
    ip_address: str
    location: Optional[str] = None
    active: bool
    is_online: Optional[bool] = None
    latency_ms: Optional[int] = None
    last_checked_at: Optional[datetime] = None
    status: str
    
    class Config:
        from_attributes = True


class AccessPointListResponse(BaseModel):
    access_points: List[AccessPointStatus]
    online: int
    offline: int
    unknown: int
