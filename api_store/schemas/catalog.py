from typing import List, Optional, Union

from pydantic import AliasChoices, BaseModel, Field, field_validator


class Parameter(BaseModel):
    name: str
    description: str = ""
    required: bool = False
    alternatives: List[str] = []

    @field_validator("required", mode="before")
    @classmethod
    def parse_required(cls, value: Union[bool, str, None]) -> bool:
        # Catalog documents carry either a YAML boolean or the strings "true"/"false".
        if value is None:
            return False
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return bool(value)

    @field_validator("alternatives", mode="before")
    @classmethod
    def dedupe_alternatives(cls, value: Optional[List[str]]) -> List[str]:
        if not value:
            return []
        return list(dict.fromkeys(str(v) for v in value))

    class Config:
        from_attributes = True


class Endpoint(BaseModel):
    id: str = ""
    text: str
    description: str = ""
    verb: str = Field(default="GET", validation_alias=AliasChoices("verb", "method"))
    base_url: str = Field(default="", validation_alias=AliasChoices("base_url", "base"))
    path: str = ""
    group_id: str = ""
    parameters: List[Parameter] = []

    @field_validator("description", "path", "base_url", mode="before")
    @classmethod
    def none_to_empty(cls, value: Optional[str]) -> str:
        return value or ""

    class Config:
        from_attributes = True


class ApiGroup(BaseModel):
    id: str = ""
    name: str
    description: str = ""
    base_url: str = Field(default="", validation_alias=AliasChoices("base_url", "base"))
    endpoints: List[Endpoint] = []

    @field_validator("description", "base_url", mode="before")
    @classmethod
    def none_to_empty(cls, value: Optional[str]) -> str:
        return value or ""

    class Config:
        from_attributes = True


class ApiStorage(BaseModel):
    """Top-level shape of an uploaded or bundled catalog document."""

    api_groups: List[ApiGroup] = []


class ApiGroupsResponse(BaseModel):
    api_groups: List[ApiGroup]


class ApiGroupRequest(BaseModel):
    email: str
    api_group: ApiGroup


class ApiGroupResponse(BaseModel):
    success: bool
    message: str
    group_id: Optional[str] = None
    endpoint_count: int = 0


class EndpointRequest(BaseModel):
    email: str
    group_id: str
    endpoint: Endpoint


class EndpointResponse(BaseModel):
    success: bool
    message: str
    endpoint_id: str
    action: str


class DeleteResponse(BaseModel):
    success: bool
    message: str


class UploadRequest(BaseModel):
    email: str
    file_name: str
    file_content: str  # base64


class UploadResponse(BaseModel):
    success: bool
    message: str
    imported_count: int = 0
    group_count: int = 0
