from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from vacations_api.core.config import get_settings
from vacations_api.core.logging_setup import configure_logging
from vacations_api.core.utils import now_iso
from vacations_api.domain.seed import ensure_reference_data, ensure_seed_users
from vacations_api.repositories.json_storage import get_store
from vacations_api.routers import admin as admin_router
from vacations_api.routers import audit as audit_router
from vacations_api.routers import bookings as bookings_router
from vacations_api.routers import favorites as favorites_router
from vacations_api.routers import notifications as notifications_router
from vacations_api.routers import promotions as promotions_router
from vacations_api.routers import roles as roles_router
from vacations_api.routers import training as training_router
from vacations_api.routers import trips as trips_router
from vacations_api.routers import two_factor as two_factor_router
from vacations_api.routers import users as users_router

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (anti clickjacking, sniffing, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer-when-downgrade")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


@asynccontextmanager
async def lifespan(_app: FastAPI):
    configure_logging()
    store = get_store()
    added = ensure_seed_users(store)
    filled = ensure_reference_data(store)
    if added or filled:
        logger.info("Seeded users %s and collections %s", added, filled)
    logger.info("Serving data from %s", store.path)
    yield


app = FastAPI(title="Southwest Vacations API", lifespan=lifespan)

settings = get_settings()
allowed_cors = set()
if settings.app_env != "prod":
    allowed_cors.update(
        {
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:8000",
            "http://127.0.0.1:8000",
        }
    )
if allowed_cors:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=sorted(allowed_cors),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse({"error": message}, status_code=400)


@app.exception_handler(Exception)
async def server_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"error": "Server error"}, status_code=500)


@app.get("/")
def root():
    return {"message": "Welcome to the Southwest Vacations API"}


@app.get("/api/health")
def health():
    return {"status": "ok", "timestamp": now_iso()}


app.include_router(users_router.router)
app.include_router(trips_router.router)
app.include_router(bookings_router.router)
app.include_router(favorites_router.router)
app.include_router(promotions_router.router)
app.include_router(admin_router.router)
app.include_router(training_router.router)
app.include_router(notifications_router.router)
app.include_router(roles_router.router)
app.include_router(audit_router.router)
app.include_router(two_factor_router.router)


def create_app() -> FastAPI:
    """Factory compatible with uvicorn/gunicorn."""
    return app
