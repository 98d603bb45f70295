"""
API keys and the credit balance attached to a user.

Only a SHA-256 hash of each key is stored. The plain key is returned once,
when it is generated.
"""
import base64
import hashlib
import logging
import secrets
import time
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

import api_store.repo.api_key as api_key_repo
import api_store.repo.preferences as preferences_repo
from api_store.core.errors import CatalogValidationError
from api_store.db.session import reading, transactional
from api_store.models.api_key import ApiKey
from api_store.schemas.api_key import ApiKeyInfo, KeyPreference, KeyUsage
from api_store.utils.identifiers import generate_uuid

logger = logging.getLogger(__name__)

KEY_PREFIX = "sk_live_"


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def create_raw_key() -> str:
    seed = f"{time.time_ns()}{secrets.randbits(64)}".encode("utf-8")
    return KEY_PREFIX + _b64(hashlib.sha256(seed).digest())[:32]


def hash_api_key(api_key: str) -> str:
    return _b64(hashlib.sha256(api_key.encode("utf-8")).digest())


def display_prefix(api_key: str) -> str:
    """Short, non-secret prefix shown in key listings, e.g. ``sk_AbC123``."""
    parts = api_key.split("_")
    if len(parts) >= 3:
        return "sk_" + parts[2][:6]
    return "sk_" + api_key[7:13]


async def generate_api_key(db: AsyncSession, email: str, key_name: str) -> Tuple[str, str, str]:
    """Creates a key for the user. Returns (plain key, display prefix, key id)."""
    if not key_name or not key_name.strip():
        raise CatalogValidationError("Key name cannot be empty", email=email)

    api_key = create_raw_key()
    key_prefix = display_prefix(api_key)
    key_id = generate_uuid()
    async with transactional(db):
        await preferences_repo.ensure_preferences(db, email)
        await api_key_repo.create_api_key_in_db(
            db,
            ApiKey(
                id=key_id,
                key_hash=hash_api_key(api_key),
                key_prefix=key_prefix,
                key_name=key_name.strip(),
                email=email,
                usage_count=0,
                is_active=True,
            ),
        )
    logger.info(f"Generated API key {key_id} for {email}")
    return api_key, key_prefix, key_id


async def get_api_keys_status(db: AsyncSession, email: str) -> KeyPreference:
    async with transactional(db):
        await preferences_repo.ensure_preferences(db, email)
        keys = await api_key_repo.get_active_keys(db, email)
        balance = await preferences_repo.get_credit_balance(db, email)
    return KeyPreference(
        has_keys=bool(keys),
        active_key_count=len(keys),
        keys=[ApiKeyInfo.model_validate(key) for key in keys],
        balance=balance or 0,
    )


async def revoke_api_key(db: AsyncSession, email: str, key_id: str) -> bool:
    async with transactional(db):
        revoked = await api_key_repo.deactivate_key(db, email, key_id)
    if revoked:
        logger.info(f"Revoked API key {key_id} for {email}")
    return revoked


async def revoke_all_api_keys(db: AsyncSession, email: str) -> int:
    async with transactional(db):
        count = await api_key_repo.deactivate_all_keys(db, email)
    logger.info(f"Revoked {count} API keys for {email}")
    return count


async def validate_api_key(db: AsyncSession, api_key: str) -> Optional[Tuple[str, str]]:
    """Returns (email, key id) for an active key, None otherwise."""
    if not api_key.startswith(KEY_PREFIX):
        return None
    async with reading(db):
        key = await api_key_repo.get_active_key_by_hash(db, hash_api_key(api_key))
    if key is None:
        return None
    return key.email, key.id


async def record_api_key_usage(db: AsyncSession, key_id: str) -> None:
    async with transactional(db):
        await api_key_repo.record_usage(db, key_id)


async def get_api_key_usage(db: AsyncSession, key_id: str) -> Optional[KeyUsage]:
    async with reading(db):
        key = await api_key_repo.get_key_by_id(db, key_id)
    if key is None:
        return None
    return KeyUsage(key_id=key.id, usage_count=key.usage_count, last_used=key.last_used)


async def get_credit_balance(db: AsyncSession, email: str) -> int:
    async with reading(db):
        balance = await preferences_repo.get_credit_balance(db, email)
    return balance or 0


async def update_credit_balance(db: AsyncSession, email: str, amount: int) -> int:
    """Adds amount (negative to debit) to the user's balance and returns the new balance."""
    async with transactional(db):
        await preferences_repo.ensure_preferences(db, email)
        balance = await preferences_repo.add_credit(db, email, amount)
    logger.info(f"Credit balance for {email} changed by {amount}: {balance}")
    return balance
