import logging
from typing import Optional

import httpx

from api_store.core.config import settings
from api_store.core.errors import FormatterError

logger = logging.getLogger(__name__)


class YamlFormatter:
    """Client of the external service that normalizes uploaded YAML documents."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.formatter_url
        self.timeout = timeout or settings.FORMATTER_TIMEOUT
        self.transport = transport

    async def _post_file(self, path: str, content: str, file_name: str) -> str:
        url = f"{self.base_url}{path}"
        files = {"file": (file_name, content.encode("utf-8"), "application/x-yaml")}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(url, files=files)
        except httpx.HTTPError as e:
            raise FormatterError(f"Formatter request to {url} failed: {e}") from e
        if response.status_code >= 400:
            raise FormatterError(f"Formatter returned HTTP {response.status_code}: {response.text}")
        return response.text

    async def format_yaml(self, content: str, file_name: str = "api.yaml") -> str:
        logger.info(f"Formatting {file_name} ({len(content)} bytes)")
        return await self._post_file("/format-yaml", content, file_name)

    async def format_reference_data(self, content: str, file_name: str = "reference.yaml") -> str:
        return await self._post_file("/format-reference-data", content, file_name)
