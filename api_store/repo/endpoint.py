from typing import Dict, Iterable, List, Optional

from sqlalchemy import delete, exists, insert, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from api_store.models.endpoint import Endpoint, Parameter, ParameterAlternative, UserEndpoint
from api_store.repo.base import dialect_name, get_for_update, insert_ignore
from api_store.schemas import catalog as schemas


async def get_endpoint_by_id(db: AsyncSession, endpoint_id: str) -> Optional[Endpoint]:
    """Gets an endpoint by id"""
    result = await db.execute(select(Endpoint).where(Endpoint.id == endpoint_id))
    return result.scalars().first()


async def get_endpoints_by_group(db: AsyncSession, group_id: str) -> List[Endpoint]:
    """Gets every endpoint of a group"""
    result = await db.execute(select(Endpoint).where(Endpoint.group_id == group_id).order_by(Endpoint.text))
    return result.scalars().all()


async def get_user_endpoints_by_group(db: AsyncSession, email: str, group_id: str) -> List[Endpoint]:
    """Gets the endpoints of a group that are associated with a user"""
    result = await db.execute(
        select(Endpoint)
        .join(UserEndpoint, UserEndpoint.endpoint_id == Endpoint.id)
        .where(UserEndpoint.email == email, Endpoint.group_id == group_id)
        .order_by(Endpoint.text)
    )
    return result.scalars().all()


async def insert_endpoint(
    db: AsyncSession, endpoint: schemas.Endpoint, *, group_id: str, is_default: bool = False
) -> None:
    """Inserts an endpoint row"""
    db.add(
        Endpoint(
            id=endpoint.id,
            text=endpoint.text,
            description=endpoint.description,
            verb=endpoint.verb,
            base_url=endpoint.base_url,
            path=endpoint.path,
            group_id=group_id,
            is_default=is_default,
        )
    )
    await db.flush()


async def update_custom_endpoint(db: AsyncSession, endpoint: schemas.Endpoint, *, group_id: str) -> bool:
    """Overwrites a non-default endpoint and points it at group_id"""
    result = await db.execute(
        update(Endpoint)
        .where(Endpoint.id == endpoint.id, Endpoint.is_default.is_(False))
        .values(
            text=endpoint.text,
            description=endpoint.description,
            verb=endpoint.verb,
            base_url=endpoint.base_url,
            path=endpoint.path,
            group_id=group_id,
        )
    )
    return result.rowcount > 0


async def add_user_endpoint(db: AsyncSession, email: str, endpoint_id: str) -> bool:
    """Associates an endpoint with a user unless already associated"""
    return await insert_ignore(db, UserEndpoint, email=email, endpoint_id=endpoint_id)


async def get_user_endpoint_ids(db: AsyncSession, email: str, group_id: Optional[str] = None) -> List[str]:
    """Ids of the endpoints associated with a user, optionally limited to one group"""
    stmt = select(UserEndpoint.endpoint_id).where(UserEndpoint.email == email)
    if group_id is not None:
        stmt = stmt.join(Endpoint, Endpoint.id == UserEndpoint.endpoint_id).where(Endpoint.group_id == group_id)
    result = await db.execute(stmt)
    return result.scalars().all()


async def delete_user_endpoint(db: AsyncSession, email: str, endpoint_id: str) -> bool:
    """Removes one user-endpoint association"""
    result = await db.execute(
        delete(UserEndpoint).where(UserEndpoint.email == email, UserEndpoint.endpoint_id == endpoint_id)
    )
    return result.rowcount > 0


async def delete_user_endpoints_for_email(db: AsyncSession, email: str) -> int:
    """Removes every endpoint association of a user"""
    result = await db.execute(delete(UserEndpoint).where(UserEndpoint.email == email))
    return result.rowcount


async def get_parameters(db: AsyncSession, endpoint_ids: Iterable[str]) -> Dict[str, List[schemas.Parameter]]:
    """Loads parameters with their alternatives, keyed by endpoint id"""
    endpoint_ids = list(endpoint_ids)
    if not endpoint_ids:
        return {}
    params = await db.execute(
        select(Parameter).where(Parameter.endpoint_id.in_(endpoint_ids)).order_by(Parameter.name)
    )
    alternatives = await db.execute(
        select(ParameterAlternative)
        .where(ParameterAlternative.endpoint_id.in_(endpoint_ids))
        .order_by(ParameterAlternative.alternative)
    )
    alts_by_param: Dict[tuple, List[str]] = {}
    for alt in alternatives.scalars().all():
        alts_by_param.setdefault((alt.endpoint_id, alt.parameter_name), []).append(alt.alternative)

    result: Dict[str, List[schemas.Parameter]] = {}
    for param in params.scalars().all():
        result.setdefault(param.endpoint_id, []).append(
            schemas.Parameter(
                name=param.name,
                description=param.description,
                required=param.required,
                alternatives=alts_by_param.get((param.endpoint_id, param.name), []),
            )
        )
    return result


async def delete_parameters(db: AsyncSession, endpoint_ids: List[str]) -> None:
    """Deletes alternatives, then parameters, of the given endpoints"""
    if not endpoint_ids:
        return
    await db.execute(delete(ParameterAlternative).where(ParameterAlternative.endpoint_id.in_(endpoint_ids)))
    await db.execute(delete(Parameter).where(Parameter.endpoint_id.in_(endpoint_ids)))


async def insert_parameters(db: AsyncSession, endpoint_id: str, parameters: List[schemas.Parameter]) -> None:
    if not parameters:
        return
    await db.execute(
        insert(Parameter),
        [
            {"endpoint_id": endpoint_id, "name": p.name, "description": p.description, "required": p.required}
            for p in parameters
        ],
    )
    alternatives = [
        {"endpoint_id": endpoint_id, "parameter_name": p.name, "alternative": alt}
        for p in parameters
        for alt in p.alternatives
    ]
    if alternatives:
        await db.execute(insert(ParameterAlternative), alternatives)


async def replace_parameters(db: AsyncSession, endpoint_id: str, parameters: List[schemas.Parameter]) -> None:
    """Full replace: every parameter and alternative of the endpoint is deleted and recreated"""
    await delete_parameters(db, [endpoint_id])
    await insert_parameters(db, endpoint_id, parameters)


async def delete_endpoint_if_orphaned(db: AsyncSession, endpoint_id: str) -> bool:
    """
    Deletes a non-default endpoint, with its parameters, when no user references it.
    The endpoint row stays locked between the reference check and the delete.
    """
    endpoint = await get_for_update(db, Endpoint, Endpoint.id == endpoint_id)
    if endpoint is None or endpoint.is_default:
        return False
    referenced = await db.execute(select(exists().where(UserEndpoint.endpoint_id == endpoint_id)))
    if referenced.scalar():
        return False
    await delete_parameters(db, [endpoint_id])
    result = await db.execute(
        delete(Endpoint).where(Endpoint.id == endpoint_id, Endpoint.is_default.is_(False))
    )
    return result.rowcount > 0


async def get_orphaned_endpoint_ids(db: AsyncSession, endpoint_ids: Optional[List[str]] = None) -> List[str]:
    """Non-default endpoints with no user association"""
    stmt = select(Endpoint.id).where(
        Endpoint.is_default.is_(False),
        ~exists().where(UserEndpoint.endpoint_id == Endpoint.id),
    )
    if endpoint_ids is not None:
        stmt = stmt.where(Endpoint.id.in_(endpoint_ids))
    if dialect_name(db) == "postgresql":
        stmt = stmt.with_for_update()
    result = await db.execute(stmt)
    return result.scalars().all()


async def delete_endpoints(db: AsyncSession, endpoint_ids: List[str]) -> int:
    """Deletes non-default endpoints together with their parameters"""
    if not endpoint_ids:
        return 0
    await delete_parameters(db, endpoint_ids)
    result = await db.execute(
        delete(Endpoint).where(Endpoint.id.in_(endpoint_ids), Endpoint.is_default.is_(False))
    )
    return result.rowcount
