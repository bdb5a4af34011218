"""
Initialize database tables and default portal settings
Run this script once to set up the database
"""
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from hotspot_portal.database import SessionLocal, engine, Base
from hotspot_portal import models  # noqa: F401  (registers tables)
from hotspot_portal.utils.settings_store import (
    SettingsStore, SESSION_DURATION_KEY, ALERT_WEBHOOK_KEY, DEFAULT_SESSION_HOURS
)

DEFAULT_SETTINGS = {
    SESSION_DURATION_KEY: str(DEFAULT_SESSION_HOURS),
    ALERT_WEBHOOK_KEY: "",
}


def init_database():
    """Create tables and default settings rows"""
    
    print("=" * 60)
    print("Hotspot Portal - Database Initialization")
    print("=" * 60)
    
    print("\n📦 Creating database tables...")
    try:
        Base.metadata.create_all(bind=engine)
        print("✅ Database tables created successfully!")
    except Exception as e:
        print(f"❌ Error creating tables: {str(e)}")
        return
    
    db = SessionLocal()
    
    try:
        store = SettingsStore(db)
        for key, value in DEFAULT_SETTINGS.items():
            if store.get_string(key) is None:
                store.set(key, value)
                print(f"   + {key} = {value!r}")
            else:
                print(f"   = {key} already set")
        
        print("\n✅ Default settings in place")
        print("\n🚀 You can now start the backend server:")
        print("   uvicorn hotspot_portal.main:app --reload\n")
    
    except Exception as e:
        print(f"\n❌ Error: {str(e)}")
        db.rollback()
    
    finally:
        db.close()

if __name__ == "__main__":
    init_database()
