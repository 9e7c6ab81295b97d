"""Account routes: register, login and the authenticated profile endpoints."""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse

from src.core.errors import ServiceError
from src.core.security import PasswordHasher, TokenService
from src.core.stores import IdentityStore
from src.domain.account import AccountSummary
from src.interface.dependencies import get_identity_store, get_password_hasher, get_token_service, require_account
from src.interface.responses import error_response, success_response
from src.services import account_service
from src.services.account_service import AuthResult


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_response(result: AuthResult, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return success_response(
        {"token": result.token, "user": AccountSummary.from_account(result.account).to_api()},
        status_code=status_code,
    )


@router.post("/register")
async def register(
    *,
    payload: dict[str, Any] | None = Body(default=None),
    identity_store: IdentityStore = Depends(get_identity_store),
    token_service: TokenService = Depends(get_token_service),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> JSONResponse:
    """Create an account and return a session assertion."""
    result = await account_service.register(
        identity_store=identity_store, token_service=token_service, hasher=hasher, payload=payload or {}
    )
    if isinstance(result, ServiceError):
        return error_response(result)
    return _auth_response(result, status_code=status.HTTP_201_CREATED)


@router.post("/login")
async def login(
    *,
    payload: dict[str, Any] | None = Body(default=None),
    identity_store: IdentityStore = Depends(get_identity_store),
    token_service: TokenService = Depends(get_token_service),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> JSONResponse:
    """Exchange email and password for a session assertion."""
    result = await account_service.login(
        identity_store=identity_store, token_service=token_service, hasher=hasher, payload=payload or {}
    )
    if isinstance(result, ServiceError):
        return error_response(result)
    return _auth_response(result)


@router.get("/me")
async def get_me(
    *,
    account_id: str = Depends(require_account),
    identity_store: IdentityStore = Depends(get_identity_store),
) -> JSONResponse:
    """Return the caller's account summary."""
    result = await account_service.get_account(identity_store=identity_store, account_id=account_id)
    if isinstance(result, ServiceError):
        return error_response(result)
    return success_response({"user": AccountSummary.from_account(result, include_created=True).to_api()})


@router.put("/profile")
async def update_profile(
    *,
    account_id: str = Depends(require_account),
    payload: dict[str, Any] | None = Body(default=None),
    identity_store: IdentityStore = Depends(get_identity_store),
) -> JSONResponse:
    """Update the caller's name, bio or avatar."""
    result = await account_service.update_profile(
        identity_store=identity_store, account_id=account_id, payload=payload or {}
    )
    if isinstance(result, ServiceError):
        return error_response(result)
    return success_response({"user": AccountSummary.from_account(result).to_api()})


@router.put("/password")
async def change_password(
    *,
    account_id: str = Depends(require_account),
    payload: dict[str, Any] | None = Body(default=None),
    identity_store: IdentityStore = Depends(get_identity_store),
    token_service: TokenService = Depends(get_token_service),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> JSONResponse:
    """Change the caller's password and return a fresh assertion."""
    result = await account_service.change_password(
        identity_store=identity_store,
        token_service=token_service,
        hasher=hasher,
        account_id=account_id,
        payload=payload or {},
    )
    if isinstance(result, ServiceError):
        return error_response(result)
    return success_response({"token": result.token, "message": "Password updated successfully"})
