"""Background scheduler — unattended stock/price sync for imported products.

One asyncio task per process: sleep for the configured period, run
bulk_sync_all, write one "scheduled_sync" log row, repeat.

  - start(): (re)arm; an existing timer is cancelled first, never doubled
  - stop(): cancel the pending trigger; a batch already running finishes
"""

import asyncio
import logging
from datetime import timedelta

from .config import settings
from .services.sync_log_service import SyncLogStore

log = logging.getLogger(__name__)

SCHEDULED_SUPPLIER_ID = "scheduled"


class DropshippingScheduler:
    def __init__(
        self,
        service,
        session_factory,
        interval: timedelta | None = None,
        sync_logs: SyncLogStore | None = None,
    ):
        self.service = service
        self.session_factory = session_factory
        self.interval = interval or timedelta(hours=settings.sync_interval_hours)
        self.sync_logs = sync_logs or SyncLogStore()
        self._task: asyncio.Task | None = None
        self._in_flight: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def state(self) -> str:
        return "running" if self.running else "stopped"

    def start(self) -> None:
        """Arm the recurring trigger. Must be called from a running event loop."""
        if self._task is not None:
            self._task.cancel()
        self._task = asyncio.get_running_loop().create_task(self._loop())
        log.info(f"Dropshipping scheduler started — bulk sync every {self.interval}")

    def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        self._task = None
        log.info("Dropshipping scheduler stopped")

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval.total_seconds())
            try:
                run = asyncio.ensure_future(self.run_once())
                self._in_flight.add(run)
                run.add_done_callback(self._in_flight.discard)
                # stop() cancels this loop, not the batch behind the shield
                await asyncio.shield(run)
            except Exception as e:
                log.error(f"Scheduled bulk sync tick failed: {e!r}")

    async def run_once(self) -> dict | None:
        """One trigger: bulk sync everything and record the batch outcome."""
        log.info("Scheduled bulk sync starting")
        db = self.session_factory()
        try:
            try:
                results = await self.service.bulk_sync_all(db)
            except Exception as e:
                log.error(f"Scheduled bulk sync failed: {e}")
                db.rollback()
                self.sync_logs.record(
                    db,
                    supplier_id=SCHEDULED_SUPPLIER_ID,
                    action="scheduled_sync",
                    status="failed",
                    error_message=str(e) or type(e).__name__,
                )
                return None

            self.sync_logs.record(
                db,
                supplier_id=SCHEDULED_SUPPLIER_ID,
                action="scheduled_sync",
                status="success",
                items_processed=results["synced"],
                items_failed=results["failed"],
            )
            log.info(f"Scheduled bulk sync: {results['synced']} synced, {results['failed']} failed")
            return results
        finally:
            db.close()

    async def wait_idle(self) -> None:
        """Wait for batches that outlived stop() (used on shutdown and in tests)."""
        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)
