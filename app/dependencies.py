"""
dependencies.py — Shared FastAPI Dependencies

The orchestrator, registry and scheduler are built once in main.py's
lifespan and parked on app.state; routes reach them through these
functions so tests can swap in fresh instances via dependency_overrides.

Called by: routers/dropshipping.py
Depends on: services/dropshipping_service.py, scheduler.py
"""

from fastapi import Request

from .scheduler import DropshippingScheduler
from .services.dropshipping_service import DropshippingService


def get_dropshipping_service(request: Request) -> DropshippingService:
    return request.app.state.dropshipping


def get_scheduler(request: Request) -> DropshippingScheduler:
    return request.app.state.scheduler
