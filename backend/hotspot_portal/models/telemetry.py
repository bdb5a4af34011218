from sqlalchemy import Column, Integer, String, DateTime, Boolean, BigInteger, Index
from sqlalchemy.sql import func
from hotspot_portal.database import Base

# BigInteger primary keys do not autoincrement on SQLite
BigIntId = BigInteger().with_variant(Integer, "sqlite")


class TrafficRanking(Base):
    """Per-client byte counters; appended on every push, purged after 30 days."""
    __tablename__ = "traffic_rankings"
    
    id = Column(BigIntId, primary_key=True)
    ip_address = Column(String(45), nullable=False)
    hostname = Column(String(255), nullable=True)
    mac_address = Column(String(17), nullable=True)
    bytes_up = Column(BigInteger, nullable=False, default=0)
    bytes_down = Column(BigInteger, nullable=False, default=0)
    router_name = Column(String(100), nullable=True)
    recorded_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    
    __table_args__ = (
        Index("ix_traffic_rankings_ip_recorded", "ip_address", "recorded_at"),
        Index("ix_traffic_rankings_recorded", "recorded_at"),
    )


class WanStat(Base):
    """WAN interface deltas; appended on every push, purged after 7 days."""
    __tablename__ = "wan_stats"
    
    id = Column(BigIntId, primary_key=True)
    interface_name = Column(String(100), nullable=False)
    tx_bytes = Column(BigInteger, nullable=False, default=0)
    rx_bytes = Column(BigInteger, nullable=False, default=0)
    is_up = Column(Boolean, nullable=False, default=True)
    router_name = Column(String(100), nullable=True)
    recorded_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    
    __table_args__ = (
        Index("ix_wan_stats_iface_recorded", "interface_name", "recorded_at"),
        Index("ix_wan_stats_recorded", "recorded_at"),
    )


class ClientConnection(Base):
    """Connection-tracking snapshot; only the latest push is kept."""
    __tablename__ = "client_connections"
    
    id = Column(BigIntId, primary_key=True)
    src_ip = Column(String(45), nullable=False)
    dst_ip = Column(String(45), nullable=False)
    dst_port = Column(Integer, nullable=True)
    bytes_orig = Column(BigInteger, nullable=False, default=0)
    bytes_reply = Column(BigInteger, nullable=False, default=0)
    router_name = Column(String(100), nullable=True)
    recorded_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class DnsEntry(Base):
    """DNS cache snapshot; only the latest push is kept."""
    __tablename__ = "dns_entries"
    
    id = Column(BigIntId, primary_key=True)
    domain = Column(String(255), nullable=False, index=True)
    ip_address = Column(String(45), nullable=True)
    router_name = Column(String(100), nullable=True)
    recorded_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
