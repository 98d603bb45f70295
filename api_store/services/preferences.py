import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

import api_store.repo.preferences as preferences_repo
from api_store.core.errors import CatalogValidationError
from api_store.db.session import reading, transactional
from api_store.schemas.account import UserPreferencesOut

logger = logging.getLogger(__name__)

HIDE_DEFAULT = "hide_default"
SHOW_DEFAULT = "show_default"


def _split(hidden_defaults: str) -> List[str]:
    return [item for item in (hidden_defaults or "").split(",") if item]


async def get_hidden_defaults(db: AsyncSession, email: str) -> List[str]:
    async with reading(db):
        hidden_defaults = await preferences_repo.get_hidden_defaults(db, email)
    return _split(hidden_defaults)


async def get_user_preferences(db: AsyncSession, email: str) -> UserPreferencesOut:
    return UserPreferencesOut(email=email, hidden_defaults=await get_hidden_defaults(db, email))


async def update_user_preferences(db: AsyncSession, email: str, action: str, endpoint_id: str) -> UserPreferencesOut:
    """Hides or shows one default endpoint in the user's catalog view."""
    if action not in (HIDE_DEFAULT, SHOW_DEFAULT):
        raise CatalogValidationError(f"Invalid action: {action}", email=email)
    if not endpoint_id:
        raise CatalogValidationError("Endpoint id cannot be empty", email=email)

    async with transactional(db):
        await preferences_repo.ensure_preferences(db, email)
        hidden = _split(await preferences_repo.get_hidden_defaults(db, email))
        if action == HIDE_DEFAULT and endpoint_id not in hidden:
            hidden.append(endpoint_id)
        elif action == SHOW_DEFAULT and endpoint_id in hidden:
            hidden.remove(endpoint_id)
        await preferences_repo.set_hidden_defaults(db, email, ",".join(hidden))

    logger.info(f"Preferences updated for {email}: {action} {endpoint_id}")
    return UserPreferencesOut(email=email, hidden_defaults=hidden)


async def reset_user_preferences(db: AsyncSession, email: str) -> None:
    """Clears hidden defaults. The credit balance is kept."""
    async with transactional(db):
        await preferences_repo.set_hidden_defaults(db, email, "")
    logger.info(f"Preferences reset for {email}")
