"""
Natural-language SQL generator.
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import health, query, executions
from api.deps import build_services
from config import settings

# ── Logging ──────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger("sqlgen")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("SQL generator starting up…")
    app.state.services = build_services()
    yield
    app.state.services.close()
    logger.info("SQL generator shutting down.")


# ── App ───────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="AI SQL Generator",
    description="Turns natural-language questions into read-only SQL, runs it, and returns display configs.",
    version="1.0.0",
    lifespan=lifespan,
)

# ── CORS ──────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(health.router,     prefix="/api")
app.include_router(query.router,      prefix="/api")
app.include_router(executions.router, prefix="/api")
