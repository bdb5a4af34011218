from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Hotspot Portal"
    APP_ENV: str = "development"
    DEBUG: bool = True
    ENABLE_API_DOCS: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Database
    DATABASE_URL: str = "sqlite:///./hotspot_portal.db"

    # Admin API (access points, sessions)
    ADMIN_API_KEY: str = ""

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    @property
    def origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    # MikroTik RouterOS (REST API, RouterOS v7)
    MIKROTIK_HOST: str = ""
    MIKROTIK_USER: str = "admin"
    MIKROTIK_PASS: str = ""
    MIKROTIK_PORT: int = 443
    MIKROTIK_USE_SSL: bool = True
    MIKROTIK_VERIFY_SSL: bool = False
    MIKROTIK_TIMEOUT: int = 10

    # Telemetry ingestion key (fallback when not set in the settings table)
    MIKROTIK_DATA_KEY: str = ""

    # Background jobs
    ENABLE_SCHEDULER: bool = True
    SESSION_EXPIRY_INTERVAL: int = 1800  # 30 minutes
    AP_PING_INTERVAL: int = 300  # 5 minutes
    PING_TIMEOUT: int = 2  # seconds

    # Alerts
    ALERT_TIMEZONE: str = "America/Sao_Paulo"
    WEBHOOK_TIMEOUT: int = 5

    # Rate limiting (slowapi / limits storage URI, e.g. redis://localhost:6379/0)
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"


# Create settings instance
settings = Settings()
