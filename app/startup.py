"""
startup.py — Idempotent startup work

Creates any missing tables (checkfirst) and provisions the known supplier
rows so the admin UI always has something to configure. Safe to call on
every boot.

Called by: main.py lifespan
Depends on: database.py (engine), models.py (Base)
"""

import logging
import os

from sqlalchemy.orm import Session

from .database import engine

log = logging.getLogger(__name__)


def run_startup_migrations(db: Session, service) -> None:
    if os.environ.get("TESTING"):
        log.info("TESTING mode — skipping startup migrations")
        return

    from .models import Base
    Base.metadata.create_all(bind=engine, checkfirst=True)
    log.info("ORM schema sync complete (create_all checkfirst=True)")

    service.init_suppliers(db)
    log.info("Startup migrations complete")
