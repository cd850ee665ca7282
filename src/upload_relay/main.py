"""Upload Relay – FastAPI application entry-point."""

import logging

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from src.upload_relay.config import settings
from src.upload_relay.handlers import register_exception_handlers
from src.upload_relay.router import health, upload

# Configure logging from settings
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────
# Application factory
# ──────────────────────────────────────────────
app = FastAPI(
    title="Upload Relay API",
    description="Zip uploaded photos and share them through a one-time download link.",
    version="1.0.0",
)

# ── CORS middleware (configured from environment variables) ──
app.add_middleware(
    middleware_class=CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_methods_list,
    allow_headers=settings.cors_headers_list,
)

logger.info("CORS configured with origins: %s", settings.cors_origins_list)
logger.info("Relaying archives to %s", settings.upload_endpoint)

# ── error envelope for every failure path ──
register_exception_handlers(app)

# ── register routers ──
app.get('/')(lambda: {"message": "Welcome to the Upload Relay API! Visit /docs for API documentation."})
app.include_router(health.router)
app.include_router(upload.router)
