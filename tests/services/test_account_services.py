"""
Tests for preferences, tenants, authorized domains, reference data and health checks.
"""
import base64
import json

import pytest
from sqlalchemy.exc import OperationalError

from api_store.core.errors import CatalogValidationError, FormatterError
from api_store.models.domain import Domain
from api_store.models.reference_data import ReferenceData
from api_store.models.tenant import TenantUser
from api_store.models.user import UserPreferences
from api_store.schemas.account import ReferenceDataCreate
from api_store.services import api_key as api_key_service
from api_store.services import domain as domain_service
from api_store.services import health as health_service
from api_store.services import preferences as preferences_service
from api_store.services import reference_data as reference_data_service
from api_store.services import tenant as tenant_service
from tests.mocks.services import MockYamlFormatter
from tests.utils.factories import count_rows, fetch_row

EMAIL = "alice@example.com"


@pytest.mark.asyncio
async def test_hide_and_show_default_endpoints(db_session):
    await preferences_service.update_user_preferences(db_session, EMAIL, "hide_default", "e-1")
    await preferences_service.update_user_preferences(db_session, EMAIL, "hide_default", "e-1")
    prefs = await preferences_service.update_user_preferences(db_session, EMAIL, "hide_default", "e-2")
    assert prefs.hidden_defaults == ["e-1", "e-2"]

    prefs = await preferences_service.update_user_preferences(db_session, EMAIL, "show_default", "e-1")
    assert prefs.hidden_defaults == ["e-2"]
    assert (await preferences_service.get_user_preferences(db_session, EMAIL)).hidden_defaults == ["e-2"]


@pytest.mark.asyncio
async def test_unknown_preference_action_is_rejected(db_session):
    with pytest.raises(CatalogValidationError):
        await preferences_service.update_user_preferences(db_session, EMAIL, "delete_default", "e-1")


@pytest.mark.asyncio
async def test_reset_preferences_keeps_balance(db_session):
    await api_key_service.update_credit_balance(db_session, EMAIL, 25)
    await preferences_service.update_user_preferences(db_session, EMAIL, "hide_default", "e-1")

    await preferences_service.reset_user_preferences(db_session, EMAIL)

    assert await preferences_service.get_hidden_defaults(db_session, EMAIL) == []
    assert await api_key_service.get_credit_balance(db_session, EMAIL) == 25


@pytest.mark.asyncio
async def test_personal_tenant_is_created_once(db_session, session_factory):
    first = await tenant_service.get_or_create_personal_tenant(db_session, EMAIL)
    second = await tenant_service.get_or_create_personal_tenant(db_session, EMAIL)

    assert first.id == second.id
    assert first.name == EMAIL
    assert first.credit_balance == 0
    owner = await fetch_row(session_factory, TenantUser, TenantUser.tenant_id == first.id)
    assert owner.email == EMAIL
    assert owner.role == "owner"
    prefs = await fetch_row(session_factory, UserPreferences, UserPreferences.email == EMAIL)
    assert prefs.default_tenant_id == first.id


@pytest.mark.asyncio
async def test_authorized_domains_fall_back_when_empty(db_session):
    assert await domain_service.get_all_authorized_domains(db_session) == domain_service.SYSTEM_DOMAINS


@pytest.mark.asyncio
async def test_system_domains_are_seeded_once(db_session, session_factory):
    assert await domain_service.initialize_system_domains(db_session) is True
    assert await domain_service.initialize_system_domains(db_session) is False
    assert await count_rows(session_factory, Domain) == len(domain_service.SYSTEM_DOMAINS)


@pytest.mark.asyncio
async def test_only_verified_user_domains_are_authorized(db_session):
    await domain_service.initialize_system_domains(db_session)
    db_session.add(Domain(email=EMAIL, domain="https://a.example", verified=True))
    db_session.add(Domain(email=EMAIL, domain="https://b.example", verified=False))
    db_session.add(Domain(email="bob@example.com", domain="https://app.api0.ai", verified=True))
    await db_session.commit()

    domains = await domain_service.get_all_authorized_domains(db_session)

    assert "https://a.example" in domains
    assert "https://b.example" not in domains
    assert domains == sorted(domains)
    assert domains.count("https://app.api0.ai") == 1


@pytest.mark.asyncio
async def test_reference_data_is_listed_newest_first(db_session):
    first = await reference_data_service.save_reference_data(
        db_session, obj_in=ReferenceDataCreate(email=EMAIL, name="cities", data={"cities": ["Oslo"]})
    )
    second = await reference_data_service.save_reference_data(
        db_session, obj_in=ReferenceDataCreate(email=EMAIL, name="currencies", data={"codes": ["EUR"]})
    )

    items = await reference_data_service.get_reference_data(db_session, EMAIL)

    assert [item.id for item in items] == [second.id, first.id]
    assert items[1].data == {"cities": ["Oslo"]}
    assert await reference_data_service.get_reference_data(db_session, "bob@example.com") == []


@pytest.mark.asyncio
async def test_reference_data_requires_name(db_session):
    with pytest.raises(CatalogValidationError):
        await reference_data_service.save_reference_data(
            db_session, obj_in=ReferenceDataCreate(email=EMAIL, name="", data={})
        )



def encode(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


@pytest.mark.asyncio
async def test_json_reference_upload_skips_formatter(db_session):
    formatter = MockYamlFormatter()

    item = await reference_data_service.upload_reference_data(
        db_session, EMAIL, "cities.json", encode(json.dumps({"cities": ["Oslo"]})), formatter=formatter
    )

    assert formatter.calls == []
    assert item.name == "cities.json"
    assert item.data == {"cities": ["Oslo"]}


@pytest.mark.asyncio
async def test_non_json_reference_upload_goes_through_formatter(db_session, session_factory):
    formatter = MockYamlFormatter(response=json.dumps([{"city": "Oslo"}, {"city": "Bergen"}]))

    item = await reference_data_service.upload_reference_data(
        db_session, EMAIL, "cities.csv", encode("city\nOslo\nBergen\n"), formatter=formatter
    )

    assert formatter.calls == ["cities.csv"]
    stored = await fetch_row(session_factory, ReferenceData, ReferenceData.id == item.id)
    assert stored.data == [{"city": "Oslo"}, {"city": "Bergen"}]


@pytest.mark.asyncio
async def test_broken_json_file_falls_back_to_formatter(db_session):
    formatter = MockYamlFormatter(response='{"cities": ["Oslo"]}')

    item = await reference_data_service.upload_reference_data(
        db_session, EMAIL, "cities.json", encode("{cities: Oslo"), formatter=formatter
    )

    assert formatter.calls == ["cities.json"]
    assert item.data == {"cities": ["Oslo"]}


@pytest.mark.asyncio
async def test_reference_upload_failures_store_nothing(db_session, session_factory):
    with pytest.raises(CatalogValidationError) as exc_info:
        await reference_data_service.upload_reference_data(
            db_session, EMAIL, "cities.csv", encode("city\nOslo\n"), formatter=MockYamlFormatter(response="not json")
        )
    assert exc_info.value.message.startswith("Failed to parse extracted data")

    with pytest.raises(FormatterError):
        await reference_data_service.upload_reference_data(
            db_session, EMAIL, "cities.csv", encode("city\nOslo\n"), formatter=MockYamlFormatter(fail=True)
        )

    with pytest.raises(CatalogValidationError):
        await reference_data_service.upload_reference_data(db_session, EMAIL, "cities.json", "***")

    assert await count_rows(session_factory, ReferenceData) == 0


@pytest.mark.asyncio
async def test_health_check(db_session, mock_session):
    assert await health_service.check_database(db_session) is True

    mock_session.execute.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))
    assert await health_service.check_database(mock_session) is False
