"""
Shared Rate Limiter Instance

This module provides a singleton rate limiter instance that can be imported
throughout the application without causing circular import issues.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import settings

# Routers push every 5 minutes; the ingestion routes allow 60 requests per 5 minutes per IP
INGESTION_LIMIT = "60 per 5 minutes"

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["1000/hour"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI
)
