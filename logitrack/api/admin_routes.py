"""
Name: Admin API Key Routes

Responsibilities:
  - Create, list and deactivate integration API keys (Admin only)

Constraints:
  - The plaintext secret appears only in the creation response
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..container import get_api_key_service
from ..domain.entities import ApiKeyRecord
from ..identity.access import require_admin
from ..identity.api_keys import ApiKeyService
from ..platform.error_responses import OPENAPI_ERROR_RESPONSES

router = APIRouter(
    prefix="/admin/apikeys",
    tags=["AdminApiKeys"],
    responses=OPENAPI_ERROR_RESPONSES,
    dependencies=[Depends(require_admin())],
)


class CreateApiKeyRequest(BaseModel):
    name: Optional[str] = Field(default=None, max_length=512)


class ApiKeyResponse(BaseModel):
    id: int
    name: str
    is_active: bool
    created_utc: datetime


class CreatedApiKeyResponse(ApiKeyResponse):
    api_key: str


class MessageResponse(BaseModel):
    message: str


def _to_response(record: ApiKeyRecord) -> ApiKeyResponse:
    return ApiKeyResponse(
        id=record.id,
        name=record.name,
        is_active=record.is_active,
        created_utc=record.created_utc,
    )


@router.get("", response_model=list[ApiKeyResponse])
def list_api_keys(api_keys: ApiKeyService = Depends(get_api_key_service)):
    return [_to_response(record) for record in api_keys.list()]


@router.post("", response_model=CreatedApiKeyResponse)
def create_api_key(
    req: CreateApiKeyRequest,
    api_keys: ApiKeyService = Depends(get_api_key_service),
):
    record = api_keys.create(req.name)
    return CreatedApiKeyResponse(
        **_to_response(record).model_dump(),
        api_key=record.key,
    )


@router.patch("/{key_id}/deactivate", response_model=MessageResponse)
def deactivate_api_key(
    key_id: int,
    api_keys: ApiKeyService = Depends(get_api_key_service),
):
    api_keys.deactivate(key_id)
    return MessageResponse(message="API key deactivated.")
