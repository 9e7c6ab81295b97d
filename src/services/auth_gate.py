"""Resolve an inbound bearer assertion to a verified account ID."""

import logging

from pydantic import ValidationError

from src.core.db_client import DatabaseError
from src.core.errors import ServiceError, unauthenticated, upstream
from src.core.security import TokenService
from src.core.stores import IdentityStore


logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from an ``Authorization: Bearer <token>`` header, if well formed."""
    if not authorization:
        return None
    parts = authorization.strip().split()
    if len(parts) != 2 or parts[0].lower() != BEARER_SCHEME:  # noqa: PLR2004
        return None
    return parts[1]


async def authenticate(
    *,
    authorization: str | None,
    token_service: TokenService,
    identity_store: IdentityStore,
) -> str | ServiceError:
    """Turn an Authorization header into an account ID.

    A missing or malformed header, a rejected assertion, and an assertion for an
    account that no longer exists all produce the same UNAUTHENTICATED failure.

    Returns:
        The account ID, or an UNAUTHENTICATED / UPSTREAM ServiceError
    """
    token = extract_bearer_token(authorization)
    if token is None:
        logger.warning("auth_missing_bearer")
        return unauthenticated()

    account_id = token_service.verify(token)
    if account_id is None:
        logger.warning("auth_invalid_or_expired_assertion")
        return unauthenticated()

    try:
        account = await identity_store.get_by_id(account_id)
    except (DatabaseError, ValidationError) as e:
        logger.error("auth_account_lookup_failed", extra={"account_id": account_id, "error": str(e)})
        return upstream()

    if account is None:
        logger.warning("auth_account_missing", extra={"account_id": account_id})
        return unauthenticated()

    return account.id
