"""Account service for registration, login and profile management."""

import logging
from typing import Any

from pydantic import BaseModel, ValidationError

from src.core.db_client import DatabaseError, RecordNotFoundError
from src.core.errors import (
    ErrorCode,
    ServiceError,
    conflict,
    invalid_input_from_validation,
    unauthenticated,
    upstream,
)
from src.core.logging import log_with_user_context, span
from src.core.security import PasswordHasher, TokenService
from src.core.stores import IdentityStore
from src.domain.account import Account
from src.domain.create_models import AccountCreate, LoginRequest
from src.domain.update_models import PasswordChange, ProfileUpdate


logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"
INCORRECT_PASSWORD_MESSAGE = "Current password is incorrect"


class AuthResult(BaseModel):
    """An account together with a freshly issued session assertion."""

    token: str
    account: Account


def _invalid_credentials() -> ServiceError:
    return unauthenticated(INVALID_CREDENTIALS_MESSAGE, ErrorCode.ERR_INVALID_CREDENTIALS)


async def register(
    *,
    identity_store: IdentityStore,
    token_service: TokenService,
    hasher: PasswordHasher,
    payload: dict[str, Any],
) -> AuthResult | ServiceError:
    """Register a new account and issue an assertion for it.

    Email uniqueness is checked by lookup-then-create, which is not atomic: two
    concurrent registrations for the same email can both succeed.

    Returns:
        AuthResult, or INVALID_INPUT / CONFLICT / UPSTREAM ServiceError
    """
    with span("account_service.register"):
        try:
            data = AccountCreate.model_validate(payload)
        except ValidationError as e:
            return invalid_input_from_validation(e)

        try:
            existing = await identity_store.find_by_email(data.email)
            if existing is not None:
                logger.warning("Registration attempted with a taken email")
                return conflict("Email already registered")

            password_hash = await hasher.hash(data.password)
            account = await identity_store.create(
                {"name": data.name, "email": data.email, "password_hash": password_hash}
            )
        except (DatabaseError, ValidationError) as e:
            logger.error("register_failed", extra={"error": str(e)})
            return upstream()

        log_with_user_context(logger, "info", "Account registered", account_id=account.id)
        return AuthResult(token=token_service.issue(account.id), account=account)


async def login(
    *,
    identity_store: IdentityStore,
    token_service: TokenService,
    hasher: PasswordHasher,
    payload: dict[str, Any],
) -> AuthResult | ServiceError:
    """Check credentials and issue an assertion.

    Unknown email, an account without a password (externally authenticated) and
    a wrong password all return the same failure. No assertion is issued on failure.
    """
    with span("account_service.login"):
        try:
            data = LoginRequest.model_validate(payload)
        except ValidationError as e:
            return invalid_input_from_validation(e)

        try:
            account = await identity_store.find_by_email(data.email)
        except (DatabaseError, ValidationError) as e:
            logger.error("login_lookup_failed", extra={"error": str(e)})
            return upstream()

        if account is None or not await hasher.verify(data.password, account.password_hash):
            logger.warning("login_failed")
            return _invalid_credentials()

        log_with_user_context(logger, "info", "Account logged in", account_id=account.id)
        return AuthResult(token=token_service.issue(account.id), account=account)


async def get_account(*, identity_store: IdentityStore, account_id: str) -> Account | ServiceError:
    """Fetch the authenticated account.

    An account that vanished after authentication is reported as UNAUTHENTICATED.
    """
    try:
        account = await identity_store.get_by_id(account_id)
    except (DatabaseError, ValidationError) as e:
        logger.error("get_account_failed", extra={"account_id": account_id, "error": str(e)})
        return upstream()
    return account if account is not None else unauthenticated()


async def update_profile(
    *, identity_store: IdentityStore, account_id: str, payload: dict[str, Any]
) -> Account | ServiceError:
    """Update any of name, bio and avatar."""
    with span("account_service.update_profile"):
        try:
            changes = ProfileUpdate.model_validate(payload).model_dump(exclude_unset=True)
        except ValidationError as e:
            return invalid_input_from_validation(e)

        try:
            account = await identity_store.update_by_id(account_id, changes)
        except RecordNotFoundError:
            return unauthenticated()
        except (DatabaseError, ValidationError) as e:
            logger.error("update_profile_failed", extra={"account_id": account_id, "error": str(e)})
            return upstream()

        log_with_user_context(logger, "info", "Profile updated", account_id=account_id, fields=sorted(changes))
        return account


async def change_password(
    *,
    identity_store: IdentityStore,
    token_service: TokenService,
    hasher: PasswordHasher,
    account_id: str,
    payload: dict[str, Any],
) -> AuthResult | ServiceError:
    """Replace the password after checking the current one, then issue a new assertion.

    Assertions issued before the change stay valid until they expire.
    """
    with span("account_service.change_password"):
        try:
            data = PasswordChange.model_validate(payload)
        except ValidationError as e:
            return invalid_input_from_validation(e)

        account = await get_account(identity_store=identity_store, account_id=account_id)
        if isinstance(account, ServiceError):
            return account

        if not await hasher.verify(data.current_password, account.password_hash):
            logger.warning("change_password_wrong_current", extra={"account_id": account_id})
            return unauthenticated(INCORRECT_PASSWORD_MESSAGE, ErrorCode.ERR_INCORRECT_PASSWORD)

        try:
            password_hash = await hasher.hash(data.new_password)
            account = await identity_store.update_by_id(account_id, {"password_hash": password_hash})
        except RecordNotFoundError:
            return unauthenticated()
        except (DatabaseError, ValidationError) as e:
            logger.error("change_password_failed", extra={"account_id": account_id, "error": str(e)})
            return upstream()

        log_with_user_context(logger, "info", "Password changed", account_id=account_id)
        return AuthResult(token=token_service.issue(account.id), account=account)
