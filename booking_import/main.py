from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from contextlib import asynccontextmanager
import logging
import uuid

from . import __version__
from .config import settings
from .database import create_tables
from .routers import email_imports
from .utils.logging_config import setup_logging, set_request_context, clear_request_context

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    setup_logging(level=settings.log_level, json_format=settings.log_json)
    logger.info(f"Starting booking import engine ({settings.environment})")

    create_tables()

    yield

    logger.info("Shutting down booking import engine")


app = FastAPI(
    title="Booking Import Engine",
    description="Reconciles parsed OTA booking emails with the booking store",
    version=__version__,
    lifespan=lifespan
)


# Request ID Middleware
class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4())[:8])
        request.state.request_id = request_id
        set_request_context(request_id)
        try:
            response = await call_next(request)
        finally:
            clear_request_context()
        response.headers["X-Request-ID"] = request_id
        return response


app.add_middleware(RequestIdMiddleware)

app.include_router(email_imports.router)


@app.get("/health")
@app.get("/health/")
async def health_check():
    return {"status": "healthy", "version": __version__}
