"""
Reference documents attached to a user (price lists, city tables, ...).

Uploads arrive base64 encoded. A file that is already valid JSON is stored as
is; anything else is sent to the remote formatter first, which has to return
JSON. The formatter is always called before a transaction opens.
"""
import json
import logging
from typing import Any, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

import api_store.repo.reference_data as reference_data_repo
from api_store.core.errors import CatalogValidationError
from api_store.db.session import reading, transactional
from api_store.models.reference_data import ReferenceData
from api_store.schemas.account import ReferenceDataCreate
from api_store.utils.documents import decode_content
from api_store.utils.formatter import YamlFormatter
from api_store.utils.identifiers import generate_uuid

logger = logging.getLogger(__name__)


async def save_reference_data(db: AsyncSession, *, obj_in: ReferenceDataCreate) -> ReferenceData:
    if not obj_in.name or not obj_in.name.strip():
        raise CatalogValidationError("Reference data name cannot be empty", email=obj_in.email)

    item = ReferenceData(id=generate_uuid(), email=obj_in.email, name=obj_in.name, data=obj_in.data)
    async with transactional(db):
        await reference_data_repo.create_reference_data_in_db(db, item)
    logger.info(f"Saved reference data {item.id} ({obj_in.name}) for {obj_in.email}")
    return item


async def _extract_data(email: str, file_name: str, content: str, formatter: Optional[YamlFormatter]) -> Any:
    if file_name.lower().endswith(".json"):
        try:
            return json.loads(content)
        except json.JSONDecodeError:
            logger.info(f"{file_name} is not valid JSON, sending it to the formatter")

    formatter = formatter or YamlFormatter()
    formatted = await formatter.format_reference_data(content, file_name)
    try:
        return json.loads(formatted)
    except json.JSONDecodeError as e:
        raise CatalogValidationError(f"Failed to parse extracted data: {e}", email=email) from e


async def upload_reference_data(
    db: AsyncSession,
    email: str,
    file_name: str,
    file_content: str,
    formatter: Optional[YamlFormatter] = None,
) -> ReferenceData:
    """Decodes, extracts and stores an uploaded reference document under its file name."""
    content = decode_content(file_content)
    data = await _extract_data(email, file_name, content, formatter)
    if not isinstance(data, (dict, list)):
        raise CatalogValidationError("Reference data must be a JSON object or array", email=email)
    return await save_reference_data(db, obj_in=ReferenceDataCreate(email=email, name=file_name, data=data))


async def get_reference_data(db: AsyncSession, email: str) -> List[ReferenceData]:
    async with reading(db):
        return await reference_data_repo.get_reference_data_by_email(db, email)
