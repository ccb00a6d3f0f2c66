"""
Name: Auth Routes (JWT)

Responsibilities:
  - Register users and log them in, returning session tokens
  - Expose /auth/me with the caller's claim set
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..container import get_account_service
from ..identity.access import Principal, allow_anonymous, require_user
from ..identity.accounts import AccountService, AuthResult
from ..identity.roles import DEFAULT_ROLE
from ..platform.error_responses import OPENAPI_ERROR_RESPONSES

router = APIRouter(prefix="/auth", tags=["Auth"], responses=OPENAPI_ERROR_RESPONSES)


class RegisterRequest(BaseModel):
    email: str = Field(..., max_length=320)
    password: str = Field(..., max_length=512)
    username: Optional[str] = Field(default=None, max_length=256)
    role: str = Field(default=DEFAULT_ROLE, max_length=256)


class LoginRequest(BaseModel):
    email_or_username: str = Field(..., max_length=320)
    password: str = Field(..., max_length=512)


class AuthResponse(BaseModel):
    user_id: str
    email: str
    username: Optional[str]
    token: str
    token_type: str = "bearer"
    expires_in: int
    roles: list[str]


class ClaimResponse(BaseModel):
    type: str
    value: str


def _to_auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        user_id=result.user.id,
        email=result.user.email,
        username=result.user.username,
        token=result.token.token,
        expires_in=result.token.expires_in,
        roles=result.roles,
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    dependencies=[Depends(allow_anonymous())],
)
def register(
    req: RegisterRequest,
    accounts: AccountService = Depends(get_account_service),
):
    result = accounts.register(
        email=req.email,
        password=req.password,
        username=req.username,
        role=req.role,
    )
    return _to_auth_response(result)


@router.post(
    "/login",
    response_model=AuthResponse,
    dependencies=[Depends(allow_anonymous())],
)
def login(
    req: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
):
    return _to_auth_response(accounts.login(req.email_or_username, req.password))


@router.get("/me", response_model=list[ClaimResponse])
def me(principal: Principal = Depends(require_user())):
    return [ClaimResponse(**claim) for claim in principal.claims.as_claim_list()]
