from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from hotspot_portal.database import Base

class AccessPoint(Base):
    __tablename__ = "access_points"
    
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    ip_address = Column(String(45), nullable=False)
    location = Column(String(200), nullable=True)
    
    is_online = Column(Boolean, nullable=True, default=None)  # NULL = never checked
    latency_ms = Column(Integer, nullable=True)
    last_checked_at = Column(DateTime(timezone=True), nullable=True)
    
    active = Column(Boolean, nullable=False, default=True)  # False = monitoring paused
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    
    history = relationship(
        "ApPingHistory",
        back_populates="access_point",
        cascade="all, delete-orphan"
    )


class ApPingHistory(Base):
    """One row per probe; trimmed to MAX_PER_AP rows per access point."""
    __tablename__ = "ap_ping_history"
    
    MAX_PER_AP = 200
    
    id = Column(Integer, primary_key=True, index=True)
    ap_id = Column(Integer, ForeignKey('access_points.id', ondelete='CASCADE'), nullable=False)
    is_online = Column(Boolean, nullable=False)
    latency_ms = Column(Integer, nullable=True)
    checked_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    
    access_point = relationship("AccessPoint", back_populates="history")
    
    __table_args__ = (
        Index("ix_ap_ping_history_ap_checked", "ap_id", "checked_at"),
    )
