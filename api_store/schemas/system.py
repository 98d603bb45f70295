from datetime import datetime
from typing import List

from pydantic import BaseModel


class AuthorizedDomains(BaseModel):
    domains: List[str]


class HealthStatus(BaseModel):
    status: str
    database: str
    timestamp: datetime
