"""FastAPI dependency providers.

The document store, token service and password hasher are built once in the
application lifespan and kept on ``app.state``; request handlers receive them
through these providers, so tests swap in fakes by setting ``app.state`` directly.
"""

from fastapi import Depends, Header, Request

from src.core.db_client import DocumentStore
from src.core.errors import ServiceError
from src.core.security import PasswordHasher, TokenService
from src.core.stores import IdentityStore, TaskStore
from src.interface.responses import ServiceErrorException
from src.services import auth_gate


def get_document_store(request: Request) -> DocumentStore:
    return request.app.state.document_store


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_identity_store(db: DocumentStore = Depends(get_document_store)) -> IdentityStore:
    return IdentityStore(db)


def get_task_store(db: DocumentStore = Depends(get_document_store)) -> TaskStore:
    return TaskStore(db)


async def require_account(
    authorization: str | None = Header(default=None),
    token_service: TokenService = Depends(get_token_service),
    identity_store: IdentityStore = Depends(get_identity_store),
) -> str:
    """Resolve the caller's account ID or reject the request with 401."""
    result = await auth_gate.authenticate(
        authorization=authorization,
        token_service=token_service,
        identity_store=identity_store,
    )
    if isinstance(result, ServiceError):
        raise ServiceErrorException(result)
    return result
