import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

import api_store.repo.api_key as api_key_repo
import api_store.repo.preferences as preferences_repo
from api_store.db.session import reading, transactional
from api_store.models.api_key import ApiUsageLog
from api_store.schemas.api_key import ApiUsageLogCreate, ApiUsageLogEntry
from api_store.utils.identifiers import generate_uuid

logger = logging.getLogger(__name__)

TOKENS_PER_CREDIT = 50


def token_cost(total_tokens: int) -> int:
    """Credits charged for a request: one per 50 tokens, at least one when any token was used."""
    if total_tokens <= 0:
        return 0
    return max(total_tokens // TOKENS_PER_CREDIT, 1)


async def log_api_usage(db: AsyncSession, obj_in: ApiUsageLogCreate) -> str:
    """Stores a usage record and debits the token cost from the key owner's balance."""
    log_id = generate_uuid()
    cost = token_cost(obj_in.total_tokens or 0)
    async with transactional(db):
        await api_key_repo.create_usage_log_in_db(db, ApiUsageLog(id=log_id, **obj_in.model_dump()))
        if cost:
            await preferences_repo.ensure_preferences(db, obj_in.email)
            await preferences_repo.add_credit(db, obj_in.email, -cost)
    if cost:
        logger.info(f"Charged {cost} credits to {obj_in.email} for {obj_in.total_tokens} tokens")
    return log_id


async def get_api_usage_logs(db: AsyncSession, key_id: str, limit: int = 100) -> List[ApiUsageLogEntry]:
    async with reading(db):
        logs = await api_key_repo.get_usage_logs(db, key_id, limit)
    return [ApiUsageLogEntry.model_validate(log) for log in logs]
