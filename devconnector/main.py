"""
DevConnector API — entry point.

Startup sequence:
  1. Configure OTel tracing (→ Jaeger via OTLP)
  2. Initialise DB connection pool
  3. Create tables if not present
  4. Expose Prometheus /metrics endpoint
"""
import logging

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from devconnector.config import settings
from devconnector.database import init_db
from devconnector.errors import ApiError
from devconnector.routers import posts, profile
from devconnector.routers.users import auth_router, users_router
from devconnector.telemetry import setup_tracing, instrument_app

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)

# Set up tracing before the app is created so all imports are instrumented
setup_tracing()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage startup and shutdown of the database connection."""
    logger.info("Starting DevConnector API (env=%s)", settings.environment)
    await init_db()
    logger.info("Database connected. API ready.")
    yield
    logger.info("Shutting down...")


app = FastAPI(
    title="DevConnector API",
    description="Developer profiles, posts, likes and comments behind token auth.",
    version="1.0.0",
    lifespan=lifespan,
)


# ── Error handling ─────────────────────────────────────────────────────────
@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    if exc.status_code >= 500:
        logger.error("Internal error on %s: %s", request.url.path, exc.msg)
        return JSONResponse(status_code=500, content={"msg": "Server error"})
    return JSONResponse(status_code=exc.status_code, content={"msg": exc.msg})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"msg": err["msg"], "param": str(err["loc"][-1]) if err["loc"] else None}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"errors": errors})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"msg": "Server error"})


# ── Routers ────────────────────────────────────────────────────────────────
app.include_router(users_router, prefix="/api/users", tags=["Users"])
app.include_router(auth_router, prefix="/api/auth", tags=["Auth"])
app.include_router(profile.router, prefix="/api/profile", tags=["Profile"])
app.include_router(posts.router, prefix="/api/posts", tags=["Posts"])

# ── Prometheus metrics endpoint ────────────────────────────────────────────
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)

# ── OTel FastAPI instrumentation ──────────────────────────────────────────
instrument_app(app)


@app.get("/health", tags=["Health"])
async def health():
    return {"status": "ok", "service": settings.service_name}
