import base64
import json
from unittest.mock import patch

import httpx
import pytest

from tests.mocks.services import MockYamlFormatter

EMAIL = "alice@example.com"


def encode(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


@pytest.mark.asyncio
async def test_upload_json_replaces_catalog(async_client: httpx.AsyncClient):
    document = {
        "api_groups": [
            {
                "name": "Weather",
                "base": "https://w.example",
                "endpoints": [{"text": "get forecast", "path": "/forecast"}],
            }
        ]
    }

    response = await async_client.post(
        "/api/v1/upload",
        json={"email": EMAIL, "file_name": "catalog.json", "file_content": encode(json.dumps(document))},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["imported_count"] == 1
    assert body["group_count"] == 1
    groups = (await async_client.get(f"/api/v1/groups/{EMAIL}")).json()["api_groups"]
    assert groups[0]["id"].startswith("weather-")
    assert groups[0]["endpoints"][0]["id"].startswith("get-forecast-")


@pytest.mark.asyncio
async def test_upload_yaml_uses_formatter(async_client: httpx.AsyncClient):
    document = "api_groups:\n  - name: Weather\n    base: https://w.example\n    endpoints:\n      - text: get forecast\n"
    formatter = MockYamlFormatter()

    with patch("api_store.utils.documents.YamlFormatter", return_value=formatter):
        response = await async_client.post(
            "/api/v1/upload",
            json={"email": EMAIL, "file_name": "catalog.yaml", "file_content": encode(document)},
        )

    assert response.status_code == 200
    assert response.json()["imported_count"] == 1
    assert formatter.calls == ["catalog.yaml"]


@pytest.mark.asyncio
async def test_upload_rejects_unsupported_format(async_client: httpx.AsyncClient):
    response = await async_client.post(
        "/api/v1/upload",
        json={"email": EMAIL, "file_name": "catalog.txt", "file_content": encode("{}")},
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Unsupported file format. Use YAML or JSON."


@pytest.mark.asyncio
async def test_upload_rejects_empty_document(async_client: httpx.AsyncClient):
    response = await async_client.post(
        "/api/v1/upload",
        json={"email": EMAIL, "file_name": "catalog.json", "file_content": encode('{"api_groups": []}')},
    )

    assert response.status_code == 400
    assert response.json()["message"] == "No API groups found in the file"


@pytest.mark.asyncio
async def test_upload_reference_data(async_client: httpx.AsyncClient):
    response = await async_client.post(
        "/api/v1/reference-data/upload",
        json={"email": EMAIL, "file_name": "rates.json", "file_content": encode(json.dumps({"EUR": 1.0}))},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["name"] == "rates.json"
    assert body["data"]["data"] == {"EUR": 1.0}
    items = (await async_client.get(f"/api/v1/reference-data/{EMAIL}")).json()
    assert [item["id"] for item in items] == [body["data"]["id"]]


@pytest.mark.asyncio
async def test_upload_reference_data_formatter_outage(async_client: httpx.AsyncClient):
    with patch("api_store.services.reference_data.YamlFormatter", return_value=MockYamlFormatter(fail=True)):
        response = await async_client.post(
            "/api/v1/reference-data/upload",
            json={"email": EMAIL, "file_name": "rates.csv", "file_content": encode("code,rate\nEUR,1.0\n")},
        )

    assert response.status_code == 502
    assert response.json() == {"success": False, "message": "formatter unavailable"}
