"""
Tests for cascade deletion and orphan cleanup.
"""
import pytest

from api_store.core.errors import DefaultGroupError
from api_store.models.endpoint import Endpoint, Parameter, ParameterAlternative, UserEndpoint
from api_store.models.group import ApiGroup, UserGroup
from api_store.services import catalog as catalog_service
from tests.utils.factories import count_rows, make_endpoint, make_group, seed_defaults

ALICE = "alice@example.com"
BOB = "bob@example.com"


def shared_group():
    return make_group(
        id="shared",
        endpoints=[make_endpoint(id="shared-list"), make_endpoint(id="shared-get", text="get item")],
    )


@pytest.mark.asyncio
async def test_delete_endpoint_without_association_returns_false(db_session, session_factory):
    await catalog_service.add_user_api_group(db_session, BOB, shared_group())

    deleted = await catalog_service.delete_user_endpoint(db_session, ALICE, "shared-list")

    assert deleted is False
    assert await count_rows(session_factory, UserEndpoint) == 2


@pytest.mark.asyncio
async def test_delete_shared_endpoint_keeps_row_for_other_user(db_session, session_factory):
    # Arrange
    await catalog_service.add_user_api_group(db_session, ALICE, shared_group())
    await catalog_service.add_user_api_group(db_session, BOB, shared_group())

    # Act
    deleted = await catalog_service.delete_user_endpoint(db_session, ALICE, "shared-list")

    # Assert
    assert deleted is True
    assert await count_rows(session_factory, Endpoint, Endpoint.id == "shared-list") == 1
    assert await count_rows(session_factory, Parameter, Parameter.endpoint_id == "shared-list") == 1
    assert await count_rows(
        session_factory, UserEndpoint, UserEndpoint.email == ALICE, UserEndpoint.endpoint_id == "shared-list"
    ) == 0
    assert await count_rows(
        session_factory, UserEndpoint, UserEndpoint.email == BOB, UserEndpoint.endpoint_id == "shared-list"
    ) == 1


@pytest.mark.asyncio
async def test_delete_last_reference_removes_endpoint_and_parameters(db_session, session_factory):
    await catalog_service.add_user_api_group(db_session, ALICE, shared_group())

    deleted = await catalog_service.delete_user_endpoint(db_session, ALICE, "shared-list")

    assert deleted is True
    assert await count_rows(session_factory, Endpoint, Endpoint.id == "shared-list") == 0
    assert await count_rows(session_factory, Parameter, Parameter.endpoint_id == "shared-list") == 0
    assert await count_rows(
        session_factory, ParameterAlternative, ParameterAlternative.endpoint_id == "shared-list"
    ) == 0
    # The sibling endpoint and the group are still referenced
    assert await count_rows(session_factory, Endpoint, Endpoint.id == "shared-get") == 1
    assert await count_rows(session_factory, ApiGroup, ApiGroup.id == "shared") == 1


@pytest.mark.asyncio
async def test_delete_default_endpoint_only_drops_association(db_session, session_factory):
    await seed_defaults(db_session)
    await catalog_service.get_or_create_user_api_groups(db_session, ALICE)

    deleted = await catalog_service.delete_user_endpoint(db_session, ALICE, "e-1")

    assert deleted is True
    assert await count_rows(session_factory, Endpoint, Endpoint.id == "e-1") == 1
    assert await count_rows(session_factory, Parameter, Parameter.endpoint_id == "e-1") == 1
    assert await count_rows(session_factory, UserEndpoint, UserEndpoint.email == ALICE) == 0


@pytest.mark.asyncio
async def test_delete_group_shared_with_other_user_is_isolated(db_session, session_factory):
    # Arrange
    await catalog_service.add_user_api_group(db_session, ALICE, shared_group())
    await catalog_service.add_user_api_group(db_session, BOB, shared_group())

    # Act
    deleted = await catalog_service.delete_user_api_group(db_session, ALICE, "shared")

    # Assert
    assert deleted is True
    assert await count_rows(session_factory, ApiGroup, ApiGroup.id == "shared") == 1
    assert await count_rows(session_factory, Endpoint, Endpoint.group_id == "shared") == 2
    assert await count_rows(session_factory, Parameter) == 2
    assert await count_rows(session_factory, UserGroup, UserGroup.email == ALICE) == 0
    assert await count_rows(session_factory, UserEndpoint, UserEndpoint.email == ALICE) == 0
    assert await count_rows(session_factory, UserGroup, UserGroup.email == BOB) == 1
    assert await count_rows(session_factory, UserEndpoint, UserEndpoint.email == BOB) == 2


@pytest.mark.asyncio
async def test_delete_group_by_sole_owner_removes_everything(db_session, session_factory, mock_kafka):
    await catalog_service.add_user_api_group(db_session, ALICE, shared_group())

    deleted = await catalog_service.delete_user_api_group(db_session, ALICE, "shared")

    assert deleted is True
    assert await count_rows(session_factory, ApiGroup) == 0
    assert await count_rows(session_factory, Endpoint) == 0
    assert await count_rows(session_factory, Parameter) == 0
    assert await count_rows(session_factory, ParameterAlternative) == 0
    assert "api_group_deleted" in mock_kafka.event_types()


@pytest.mark.asyncio
async def test_delete_group_without_association_returns_false(db_session, session_factory):
    await catalog_service.add_user_api_group(db_session, BOB, shared_group())

    deleted = await catalog_service.delete_user_api_group(db_session, ALICE, "shared")

    assert deleted is False
    assert await count_rows(session_factory, UserGroup) == 1


@pytest.mark.asyncio
async def test_delete_default_group_is_rejected(db_session, session_factory):
    # Arrange
    await seed_defaults(db_session)
    await catalog_service.get_or_create_user_api_groups(db_session, ALICE)
    groups_before = await count_rows(session_factory, UserGroup)
    endpoints_before = await count_rows(session_factory, UserEndpoint)

    # Act
    with pytest.raises(DefaultGroupError) as exc_info:
        await catalog_service.delete_user_api_group(db_session, ALICE, "g-1")

    # Assert
    assert exc_info.value.group_id == "g-1"
    assert await count_rows(session_factory, ApiGroup, ApiGroup.id == "g-1") == 1
    assert await count_rows(session_factory, UserGroup) == groups_before
    assert await count_rows(session_factory, UserEndpoint) == endpoints_before
    assert await catalog_service.check_is_default_group(db_session, "g-1") is True


@pytest.mark.asyncio
async def test_sweep_orphans_removes_unreferenced_custom_rows(db_session, session_factory):
    await seed_defaults(db_session)
    db_session.add(ApiGroup(id="lost", name="Lost", description="", base_url="https://lost.example", is_default=False))
    await db_session.flush()
    db_session.add(
        Endpoint(
            id="lost-e",
            text="lost",
            description="",
            verb="GET",
            base_url="https://lost.example",
            path="/",
            group_id="lost",
            is_default=False,
        )
    )
    await db_session.flush()
    db_session.add(Parameter(endpoint_id="lost-e", name="q", description="", required=False))
    await db_session.commit()

    deleted = await catalog_service.sweep_orphans(db_session)

    assert deleted == {"endpoints": 1, "groups": 1}
    assert await count_rows(session_factory, ApiGroup, ApiGroup.id == "lost") == 0
    assert await count_rows(session_factory, Parameter, Parameter.endpoint_id == "lost-e") == 0
    # Defaults without user references are never swept
    assert await count_rows(session_factory, ApiGroup, ApiGroup.id == "g-1") == 1
