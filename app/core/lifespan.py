import contextlib
from contextlib import asynccontextmanager
import asyncio
import logging

from app.core.config import settings
from app.storage import get_analysis_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    store = get_analysis_store()
    store.init()
    store.purge_stale_records(settings.analysis_retention_days)

    stop_event = asyncio.Event()

    async def periodic_purge() -> None:
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=3600)
            except asyncio.TimeoutError:
                pass
            if stop_event.is_set():
                break
            try:
                store.purge_stale_records(settings.analysis_retention_days)
            except Exception as exc:  # noqa: BLE001
                logger.warning("analysis_retention_purge_failed: %s", exc)

    purge_task = asyncio.create_task(periodic_purge())
    yield
    stop_event.set()
    if not purge_task.done():
        purge_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await purge_task
    store.close()
