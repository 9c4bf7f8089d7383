"""
DropSync — Dropshipping Synchronization Engine

Builds the supplier registry, orchestrator and scheduler once per process,
mounts the dropshipping router and maps typed service errors to JSON.
"""
import os
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from loguru import logger

from .config import settings
from .connector_status import log_supplier_status
from .database import SessionLocal
from .exceptions import DropshippingError
from .http_client import close_clients
from .logging_config import setup_logging
from .rate_limit import install_rate_limiting
from .routers import dropshipping
from .scheduler import DropshippingScheduler
from .schemas.errors import ErrorResponse
from .services.dropshipping_service import DropshippingService
from .services.supplier_registry import SupplierRegistry
from .startup import run_startup_migrations


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()

    registry = SupplierRegistry()
    service = DropshippingService(registry)
    scheduler = DropshippingScheduler(service, SessionLocal)
    app.state.registry = registry
    app.state.dropshipping = service
    app.state.scheduler = scheduler

    if not os.environ.get("TESTING"):
        db = SessionLocal()
        try:
            run_startup_migrations(db, service)
            registry.initialize(db)
            log_supplier_status(db, registry)
        finally:
            db.close()
        if settings.scheduler_enabled:
            scheduler.start()

    yield

    scheduler.stop()
    await scheduler.wait_idle()
    await close_clients()
    logger.info("Shutdown complete")


app = FastAPI(title="DropSync", version="1.0.0", lifespan=lifespan)
install_rate_limiting(app)
app.include_router(dropshipping.router)


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id") or uuid.uuid4().hex[:12]


@app.exception_handler(DropshippingError)
async def dropshipping_error_handler(request: Request, exc: DropshippingError):
    rid = _request_id(request)
    logger.warning(
        "{} on {} {}: {}", type(exc).__name__, request.method, request.url.path, exc.message
    )
    body = ErrorResponse(error=exc.message, status_code=exc.status_code, request_id=rid)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    body = ErrorResponse(
        error=str(exc.detail), status_code=exc.status_code, request_id=_request_id(request)
    )
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.get("/health")
async def health():
    return {"status": "ok"}
