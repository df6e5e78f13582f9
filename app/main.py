# app/main.py
"""
FastAPI application entry point.
Includes security middleware, global error handlers, all routers,
and the daily alert sweep scheduler.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from app.routers import alerts, buses, documents, health, incidents, maintenances, shifts
from app.database import SessionLocal, create_tables
from app.config import settings
from app.services.catalog_service import seed_catalogs
from app.services.recipients import validate_alert_roles
from app.services.scheduler import start_scheduler, stop_scheduler
from app.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Fleet Back Office API",
    description="Bus fleet records, derived bus status, and e-mail alerts.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (allow the back-office frontend to call the API) ────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Restrict to the frontend origin in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Optional lightweight API key auth.
    Set API_KEY in .env. Leave empty to disable auth.
    """
    async def dispatch(self, request: Request, call_next):
        open_paths = {"/api/v1/health", "/docs", "/redoc", "/openapi.json"}
        if request.url.path in open_paths or not settings.API_KEY:
            return await call_next(request)

        api_key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if api_key != settings.API_KEY:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid or missing API key"},
            )
        return await call_next(request)


if settings.API_KEY:
    app.add_middleware(APIKeyMiddleware)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Global Exception Handlers ────────────────────────────────────────────────
@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    logger.warning(f"Rejected request on {request.url.path}: {exc}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(buses.router,        prefix="/api/v1", tags=["🚌 Buses"])
app.include_router(incidents.router,    prefix="/api/v1", tags=["🚨 Incidents"])
app.include_router(maintenances.router, prefix="/api/v1", tags=["🛠 Maintenance"])
app.include_router(shifts.router,       prefix="/api/v1", tags=["🗓 Shifts"])
app.include_router(documents.router,    prefix="/api/v1", tags=["📄 Documents"])
app.include_router(alerts.router,       prefix="/api/v1", tags=["🔔 Alerts"])
app.include_router(health.router,       prefix="/api/v1", tags=["💚 Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 Fleet backend starting up...")
    create_tables()
    db = SessionLocal()
    try:
        seed_catalogs(db)
        # Fails fast on a misconfigured ALERTS_*_ROLES value
        validate_alert_roles(db)
    finally:
        db.close()
    logger.info("✅ Database tables and catalogs ready")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_HOST}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")
    start_scheduler()


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Fleet backend shutting down...")
    stop_scheduler()
