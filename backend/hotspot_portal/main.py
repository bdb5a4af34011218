import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .config import settings
from .database import engine, Base
from .limiter import limiter
from .middleware.security import SecurityHeadersMiddleware
from .services.ap_monitor import ap_monitor
from .services.device_gateway import device_gateway
from .services.scheduler import session_expiry_job, ap_ping_job
from .utils.logger import setup_logging

# Import all models (required for SQLAlchemy to create tables)
from .models import (
    User, Session, AccessPoint, ApPingHistory,
    TrafficRanking, WanStat, ClientConnection, DnsEntry, Setting
)

# Import routes
from .routes import mikrotik, access_points, sessions

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Captive portal core: router authorization, AP monitoring and telemetry ingestion",
    version="1.0.0",
    docs_url="/api/docs" if settings.ENABLE_API_DOCS else None,
    redoc_url="/api/redoc" if settings.ENABLE_API_DOCS else None
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
    max_age=3600,
)
app.add_middleware(SecurityHeadersMiddleware)

# Include routers
app.include_router(mikrotik.router, prefix="/api")
app.include_router(access_points.router, prefix="/api")
app.include_router(sessions.router, prefix="/api")

@app.on_event("startup")
async def startup_event():
    """Initialize logging, database tables and background jobs"""
    setup_logging()
    Base.metadata.create_all(bind=engine)
    logger.info(f"{settings.APP_NAME} started ({settings.APP_ENV})")
    
    if settings.ENABLE_SCHEDULER:
        await session_expiry_job.start()
        await ap_ping_job.start()
    else:
        logger.info("Background jobs disabled (ENABLE_SCHEDULER=false)")

@app.on_event("shutdown")
async def shutdown_event():
    """Stop background jobs and release the router connection"""
    await session_expiry_job.stop()
    await ap_ping_job.stop()
    await ap_monitor.drain_alerts()
    await device_gateway.close()
    logger.info(f"{settings.APP_NAME} shutting down")

@app.get("/api/health")
async def health_check():
    return {
        "status": "healthy",
        "environment": settings.APP_ENV,
        "router_connected": device_gateway.connected
    }
