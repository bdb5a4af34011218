from sqlalchemy import Column, Integer, String
from hotspot_portal.database import Base

class Setting(Base):
    __tablename__ = "settings"
    
    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(100), unique=True, nullable=False)
    value = Column(String(1024), nullable=False, default='')
