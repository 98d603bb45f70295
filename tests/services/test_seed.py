"""
Tests for default seeding and lazy per-user provisioning.
"""
from unittest.mock import AsyncMock, patch

import pytest

from api_store.core.config import DEFAULT_ENDPOINTS_FILE
from api_store.models.endpoint import Endpoint, ParameterAlternative, UserEndpoint
from api_store.models.group import ApiGroup, UserGroup
from api_store.services import catalog as catalog_service
from api_store.services import preferences as preferences_service
from api_store.services import seed as seed_service
from tests.utils.factories import count_rows, make_endpoint, make_group, seed_defaults

EMAIL = "user@x.com"


@pytest.mark.asyncio
async def test_initialize_if_empty_seeds_once(db_session, session_factory):
    groups = [make_group(id="g-1", endpoints=[make_endpoint(id="e-1")])]

    first = await seed_service.initialize_if_empty(db_session, groups)
    second = await seed_service.initialize_if_empty(db_session, groups)

    assert first is True
    assert second is False
    assert await count_rows(session_factory, ApiGroup, ApiGroup.is_default.is_(True)) == 1
    assert await count_rows(session_factory, Endpoint, Endpoint.is_default.is_(True)) == 1
    assert await count_rows(session_factory, ParameterAlternative) == 2
    assert await count_rows(
        session_factory, UserGroup, UserGroup.email == seed_service.DEFAULT_USER_EMAIL
    ) == 1


@pytest.mark.asyncio
async def test_concurrent_seed_is_treated_as_already_seeded(db_session, session_factory):
    groups = await seed_defaults(db_session)

    # A second seeder that passed the emptiness check before the first one committed
    with patch("api_store.repo.group.count_default_groups", AsyncMock(return_value=0)):
        async with session_factory() as other_session:
            seeded = await seed_service.initialize_if_empty(other_session, groups)

    assert seeded is False
    assert await count_rows(session_factory, ApiGroup) == 1


@pytest.mark.asyncio
async def test_first_read_provisions_defaults_once(db_session, session_factory):
    # Arrange
    await seed_defaults(db_session)

    # Act
    first = await catalog_service.get_or_create_user_api_groups(db_session, EMAIL)
    second = await catalog_service.get_or_create_user_api_groups(db_session, EMAIL)

    # Assert
    assert [g.id for g in first] == ["g-1"]
    assert [e.id for e in first[0].endpoints] == ["e-1"]
    assert second == first
    assert await count_rows(session_factory, UserGroup, UserGroup.email == EMAIL) == 1
    assert await count_rows(session_factory, UserEndpoint, UserEndpoint.email == EMAIL) == 1
    # Provisioning shares the default rows instead of copying them
    assert await count_rows(session_factory, ApiGroup) == 1


@pytest.mark.asyncio
async def test_read_only_lookup_falls_back_to_defaults_without_writing(db_session, session_factory):
    await seed_defaults(db_session)

    groups = await catalog_service.get_api_groups_by_email(db_session, EMAIL)

    assert [g.id for g in groups] == ["g-1"]
    assert groups[0].endpoints[0].parameters[0].alternatives == ["per_page", "size"]
    assert await count_rows(session_factory, UserGroup, UserGroup.email == EMAIL) == 0


@pytest.mark.asyncio
async def test_hidden_defaults_are_filtered_and_empty_groups_dropped(db_session):
    await seed_defaults(
        db_session,
        [
            make_group(id="g-1", endpoints=[make_endpoint(id="e-1")]),
            make_group(
                id="g-2",
                name="Other",
                endpoints=[make_endpoint(id="e-2", text="two"), make_endpoint(id="e-3", text="three")],
            ),
        ],
    )
    await preferences_service.update_user_preferences(db_session, EMAIL, "hide_default", "e-1")
    await preferences_service.update_user_preferences(db_session, EMAIL, "hide_default", "e-2")

    groups = await catalog_service.get_api_groups_with_preferences(db_session, EMAIL)

    assert [g.id for g in groups] == ["g-2"]
    assert [e.id for e in groups[0].endpoints] == ["e-3"]


@pytest.mark.asyncio
async def test_default_catalog_lookups(db_session):
    await seed_defaults(db_session)

    defaults = await catalog_service.get_default_api_groups(db_session)
    endpoints = await catalog_service.get_endpoints_by_group_id(db_session, "g-1")

    assert [g.id for g in defaults] == ["g-1"]
    assert [e.id for e in endpoints] == ["e-1"]
    assert await catalog_service.get_group_base_url(db_session, "g-1") == "https://default.example"
    assert await catalog_service.get_group_base_url(db_session, "missing") is None
    assert await catalog_service.check_is_default_group(db_session, "missing") is False


def test_load_bundled_default_catalog():
    groups = seed_service.load_default_api_groups(str(DEFAULT_ENDPOINTS_FILE))

    assert [g.id for g in groups] == ["weather", "currency"]
    currency = groups[1]
    latest = currency.endpoints[0]
    assert latest.parameters[0].name == "from"
    assert latest.parameters[0].required is False
    assert latest.parameters[0].alternatives == ["base", "currency"]
    assert currency.endpoints[1].id == "currency-convert"
    assert all(p.required for p in currency.endpoints[1].parameters)
    assert groups[0].base_url == "https://api.open-meteo.com"


def test_missing_default_catalog_file_yields_nothing(tmp_path):
    assert seed_service.load_default_api_groups(str(tmp_path / "missing.yaml")) == []
