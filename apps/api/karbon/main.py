from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

import structlog
from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from karbon.core.config import settings
from karbon.core.errors import global_exception_handler, http_exception_handler

import karbon.models  # noqa: F401

from karbon.modules.certification.router import router as certification_router
from karbon.modules.companies.router import router as companies_router
from karbon.modules.emission_sources.router import router as emission_sources_router
from karbon.modules.emissions.router import router as emissions_router
from karbon.core.sentry import init_sentry

# ── Sentry must be initialised before the FastAPI app is created ───────────────
init_sentry(settings.SENTRY_DSN, settings.SENTRY_ENVIRONMENT, settings.APP_VERSION)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
    logger.info("Starting Karbon API", env=settings.APP_ENV)
    if settings.DB_CREATE_ALL:
        from karbon.core.database import create_all

        await create_all()
    yield
    logger.info("Shutting down Karbon API")


_is_prod = settings.APP_ENV == "production"

app = FastAPI(
    title="Karbon API",
    description="Monthly carbon-emission bookkeeping, sector tiering and certification for companies.",
    version="0.1.0",
    # No interactive docs in production
    docs_url=None if _is_prod else "/docs",
    redoc_url=None if _is_prod else "/redoc",
    openapi_url=None if _is_prod else "/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "X-Request-ID"],
)

app.add_exception_handler(HTTPException, http_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(Exception, global_exception_handler)


# ── X-API-Version response header ────────────────────────────────────────────


@app.middleware("http")
async def add_version_header(request: Request, call_next) -> Response:
    response = await call_next(request)
    response.headers["X-API-Version"] = "v1"
    return response


# ── Health check (root-level, not under /v1) ─────────────────────────────────


@app.get("/health")
async def health_check() -> dict:
    """Probes the database with a trivial query."""
    checks: dict[str, dict] = {}

    try:
        from sqlalchemy import text
        from karbon.core.database import async_session_factory
        async with async_session_factory() as db:
            await db.execute(text("SELECT 1"))
        checks["database"] = {"status": "healthy"}
    except Exception as exc:
        checks["database"] = {"status": "unhealthy", "error": str(exc)}

    overall = (
        "healthy"
        if all(c["status"] == "healthy" for c in checks.values())
        else "degraded"
    )
    return {"status": overall, "service": "karbon-api", "checks": checks}


# ── /v1 versioned router ──────────────────────────────────────────────────────

api_v1 = APIRouter(prefix="/v1")

api_v1.include_router(companies_router)
api_v1.include_router(emission_sources_router)
api_v1.include_router(emissions_router)
api_v1.include_router(certification_router)

app.include_router(api_v1)
