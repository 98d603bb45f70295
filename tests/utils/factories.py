"""
Helpers for building catalog payloads and inspecting stored rows.
"""
import random
import string
from typing import Any, List, Optional

from sqlalchemy import func
from sqlalchemy.future import select
from sqlalchemy.orm import sessionmaker

from api_store.schemas.catalog import ApiGroup, Endpoint, Parameter
from api_store.services import seed as seed_service


def random_string(length: int = 8) -> str:
    return "".join(random.choices(string.ascii_lowercase, k=length))


def random_email() -> str:
    return f"{random_string(8)}@{random_string(6)}.com"


def make_endpoint(
    id: str = "",
    text: str = "list items",
    verb: str = "GET",
    path: str = "/items",
    base_url: str = "",
    parameters: Optional[List[Parameter]] = None,
) -> Endpoint:
    return Endpoint(
        id=id,
        text=text,
        description=f"{text} endpoint",
        verb=verb,
        base_url=base_url,
        path=path,
        parameters=parameters if parameters is not None else [
            Parameter(name="limit", description="Page size", required=False, alternatives=["size", "per_page"]),
        ],
    )


def make_group(
    id: str = "",
    name: str = "Inventory",
    base_url: str = "https://inventory.example",
    endpoints: Optional[List[Endpoint]] = None,
) -> ApiGroup:
    return ApiGroup(
        id=id,
        name=name,
        description=f"{name} API",
        base_url=base_url,
        endpoints=endpoints if endpoints is not None else [make_endpoint()],
    )


async def seed_defaults(db, groups: Optional[List[ApiGroup]] = None) -> List[ApiGroup]:
    """Seed a default catalog: group g-1 with endpoint e-1 unless groups are given."""
    if groups is None:
        groups = [
            make_group(
                id="g-1",
                name="Default",
                base_url="https://default.example",
                endpoints=[make_endpoint(id="e-1", text="default endpoint", path="/default")],
            )
        ]
    await seed_service.initialize_if_empty(db, groups)
    return groups


async def count_rows(session_factory: sessionmaker, model: Any, *criteria: Any) -> int:
    """Count rows through a fresh session so cached objects never hide the stored state."""
    async with session_factory() as session:
        stmt = select(func.count()).select_from(model)
        if criteria:
            stmt = stmt.where(*criteria)
        result = await session.execute(stmt)
        return result.scalar_one()


async def fetch_row(session_factory: sessionmaker, model: Any, *criteria: Any) -> Any:
    async with session_factory() as session:
        result = await session.execute(select(model).where(*criteria))
        return result.scalars().first()
