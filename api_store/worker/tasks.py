import asyncio
import logging
from typing import Dict

from api_store.core.config import settings
from api_store.db.session import create_engine, create_session_factory
from api_store.services import catalog as catalog_service
from api_store.worker.celery_app import celery_app

logger = logging.getLogger(__name__)


async def run_sweep() -> Dict[str, int]:
    engine = create_engine(settings)
    session_factory = create_session_factory(engine)
    try:
        async with session_factory() as db:
            return await catalog_service.sweep_orphans(db)
    finally:
        await engine.dispose()


@celery_app.task(name="api_store.worker.tasks.sweep_orphaned_catalog_rows")
def sweep_orphaned_catalog_rows():
    """
    Deletes non-default endpoints and groups that no user references.
    Catches rows left behind by a failed bulk-replace cleanup.
    """
    logger.info("Sweeping orphaned catalog rows...")
    deleted = asyncio.run(run_sweep())
    return {"status": "Sweep completed", **deleted}
