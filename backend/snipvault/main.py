import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from snipvault.config import settings
from snipvault.middleware.exceptions import register_exception_handlers
from snipvault.routers import health, items, recycle_bin

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="SnipVault",
    description="Snippet & media library with a recoverable recycle bin",
    version="0.1.0",
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware ───────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ──────────────────────────────────────────────────
# Public
app.include_router(health.router)

# Owner-scoped (require a bearer token)
app.include_router(items.router, prefix="/api/items", tags=["items"])
app.include_router(recycle_bin.router, prefix="/api/recycle-bin", tags=["recycle-bin"])
