import base64
import binascii
import json
import logging
from typing import Optional

import yaml
from pydantic import ValidationError

from api_store.core.errors import CatalogValidationError, FormatterError
from api_store.schemas.catalog import ApiStorage
from api_store.utils.formatter import YamlFormatter

logger = logging.getLogger(__name__)

YAML_EXTENSIONS = (".yaml", ".yml")


def decode_content(file_content: str) -> str:
    try:
        return base64.b64decode(file_content, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise CatalogValidationError(f"Invalid base64 content: {e}") from e


def is_yaml(file_name: str) -> bool:
    return file_name.lower().endswith(YAML_EXTENSIONS)


def parse_api_storage(content: str, file_name: str) -> ApiStorage:
    """Parses a YAML or JSON catalog document with a top-level ``api_groups`` list."""
    lowered = file_name.lower()
    try:
        if is_yaml(lowered):
            document = yaml.safe_load(content)
            if not isinstance(document, dict) or "api_groups" not in document:
                raise CatalogValidationError("Invalid YAML format. Expected structure with 'api_groups'.")
        elif lowered.endswith(".json"):
            document = json.loads(content)
            if not isinstance(document, dict):
                raise CatalogValidationError("Invalid JSON format. Expected an object with 'api_groups'.")
        else:
            raise CatalogValidationError("Unsupported file format. Use YAML or JSON.")
        storage = ApiStorage.model_validate(document)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise CatalogValidationError(f"Failed to parse {file_name}: {e}") from e
    except ValidationError as e:
        raise CatalogValidationError(f"Invalid API group document: {e.errors()[0]['msg']}") from e

    if not storage.api_groups:
        raise CatalogValidationError("No API groups found in the file")
    return storage


async def load_uploaded_document(
    file_name: str, file_content: str, formatter: Optional[YamlFormatter] = None
) -> ApiStorage:
    """
    Decodes an uploaded catalog. YAML goes through the remote formatter first;
    when the formatter is unavailable the raw text is parsed as is.
    """
    content = decode_content(file_content)
    if is_yaml(file_name):
        formatter = formatter or YamlFormatter()
        try:
            content = await formatter.format_yaml(content, file_name)
        except FormatterError as e:
            logger.warning(f"YAML formatter unavailable, using raw content: {e}")
    return parse_api_storage(content, file_name)
