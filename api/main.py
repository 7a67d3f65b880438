from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from common.core.config import settings
from common.core.constants import Environment
from common.core.exceptions import AppException
from common.core.otel_axiom_exporter import get_logger, shutdown_telemetry
from common.db.session import dispose_engines, init_db
from common.providers.caching import close_cache_provider
from api.v1.routes.router import api_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.app_name} ({settings.environment.value})")
    await init_db()
    yield
    logger.info("Shutting down")
    await close_cache_provider()
    await dispose_engines()
    shutdown_telemetry()


# OpenAPI docs only in local development
_docs_enabled = settings.environment == Environment.LOCAL

app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs" if _docs_enabled else None,
    redoc_url="/redoc" if _docs_enabled else None,
    openapi_url="/openapi.json" if _docs_enabled else None,
)


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    """Typed service failures become ``{"detail", "code"}`` responses."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


# Instrument FastAPI with OpenTelemetry
FastAPIInstrumentor.instrument_app(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers (identity enforced via dependencies at router level)
app.include_router(api_router, prefix="/api/v1")


# Internal health endpoint for k8s probes - not under /api/v1
@app.get("/healthz", include_in_schema=False)
async def healthz():
    return {"status": "ok"}
