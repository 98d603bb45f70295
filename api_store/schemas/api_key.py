from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class GenerateApiKeyRequest(BaseModel):
    email: str
    key_name: str


class GenerateApiKeyResponse(BaseModel):
    success: bool
    message: str
    api_key: str
    key_prefix: str
    key_id: str


class ApiKeyInfo(BaseModel):
    id: str
    key_prefix: str
    key_name: str
    generated_at: datetime
    last_used: Optional[datetime] = None
    usage_count: int = 0

    class Config:
        from_attributes = True


class KeyPreference(BaseModel):
    has_keys: bool
    active_key_count: int
    keys: List[ApiKeyInfo] = []
    balance: int = 0


class RevokeApiKeyRequest(BaseModel):
    email: str
    key_id: str


class ValidateApiKeyRequest(BaseModel):
    api_key: str


class ValidateApiKeyResponse(BaseModel):
    valid: bool
    email: Optional[str] = None
    key_id: Optional[str] = None


class KeyUsage(BaseModel):
    key_id: str
    usage_count: int
    last_used: Optional[datetime] = None


class CreditBalanceUpdate(BaseModel):
    email: str
    amount: int


class CreditBalanceResponse(BaseModel):
    email: str
    balance: int


class ApiUsageLogCreate(BaseModel):
    key_id: str
    email: str
    endpoint_path: str
    method: str
    response_status: Optional[int] = None
    response_time_ms: Optional[int] = None
    request_size: Optional[int] = None
    response_size: Optional[int] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    request_id: Optional[str] = None
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    total_tokens: Optional[int] = None
    model_used: Optional[str] = None


class ApiUsageLogEntry(ApiUsageLogCreate):
    id: str
    timestamp: datetime

    class Config:
        from_attributes = True
