#!/usr/bin/env python3
"""
Telemetry ingestion key generator

Generates the shared key MikroTik scheduler scripts send with every push.
Use --save to store it in the settings table (takes precedence over .env).
"""

import os
import secrets
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))


def generate_api_key(length=32):
    """Generate a secure API key"""
    return secrets.token_urlsafe(length)


def print_header(title):
    """Print formatted header"""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def save_key(key: str):
    from hotspot_portal.database import SessionLocal, engine, Base
    from hotspot_portal import models  # noqa: F401
    from hotspot_portal.utils.settings_store import SettingsStore, INGESTION_KEY

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        SettingsStore(db).set(INGESTION_KEY, key)
    finally:
        db.close()


def main():
    print_header("Telemetry Ingestion Key Generator")
    
    key = generate_api_key()
    print("\nAdd to your .env file:")
    print("-" * 70)
    print(f"MIKROTIK_DATA_KEY={key}")
    print(f"\n   Length: {len(key)} characters")
    
    print_header("RouterOS script usage")
    print("""
/tool fetch url="https://portal.example/api/mikrotik/traffic" \\
    http-method=post \\
    http-data="key={key}&router=$[/system identity get name]&data=$clients&iface=$ifaces" \\
    output=none
""".format(key=key))
    
    if "--save" in sys.argv:
        save_key(key)
        print("💾 Key stored in the settings table (overrides MIKROTIK_DATA_KEY)")
    
    print("⚠️  Keep this key secret. Pushes with any other key are rejected.\n")


if __name__ == "__main__":
    main()
