from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel


class UserPreferencesOut(BaseModel):
    email: str
    hidden_defaults: List[str] = []


class UpdatePreferencesRequest(BaseModel):
    email: str
    action: str  # hide_default | show_default
    endpoint_id: str


class Tenant(BaseModel):
    id: str
    name: str
    credit_balance: int = 0
    created_at: datetime

    class Config:
        from_attributes = True


class ReferenceDataCreate(BaseModel):
    email: str
    name: str
    data: Union[Dict[str, Any], List[Any]]


class ReferenceData(ReferenceDataCreate):
    id: str
    created_at: datetime

    class Config:
        from_attributes = True


class ReferenceDataUploadRequest(BaseModel):
    email: str
    file_name: str
    file_content: str  # base64


class ReferenceDataUploadResponse(BaseModel):
    success: bool
    message: str
    data: Optional[ReferenceData] = None
