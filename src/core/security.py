"""Password hashing and signed session assertions."""

import asyncio
import base64
import hashlib
import logging
import time
from collections.abc import Callable

import bcrypt
from itsdangerous import BadData, SignatureExpired, TimestampSigner, URLSafeTimedSerializer


logger = logging.getLogger(__name__)

ASSERTION_SALT = "session-assertion"


def _pw_prehash(password: str) -> bytes:
    """Pre-hash so passwords longer than bcrypt's 72-byte input limit still count in full."""
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


class PasswordHasher:
    """bcrypt hashing, run in a worker thread so the event loop stays free."""

    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds

    def hash_sync(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(_pw_prehash(password), salt).decode("utf-8")

    def verify_sync(self, password: str, password_hash: str | None) -> bool:
        if not password_hash:
            return False
        try:
            return bcrypt.checkpw(_pw_prehash(password), password_hash.encode("utf-8"))
        except ValueError:
            logger.warning("Stored password hash is malformed")
            return False

    async def hash(self, password: str) -> str:
        return await asyncio.to_thread(self.hash_sync, password)

    async def verify(self, password: str, password_hash: str | None) -> bool:
        return await asyncio.to_thread(self.verify_sync, password, password_hash)


def clocked_signer(clock: Callable[[], float]) -> type[TimestampSigner]:
    """Build a TimestampSigner whose timestamps come from ``clock``."""

    class ClockedSigner(TimestampSigner):
        def get_timestamp(self) -> int:
            return int(clock())

    return ClockedSigner


class TokenService:
    """Issues and verifies signed, time-bound identity assertions.

    The assertion payload is ``{"sub": account_id}``. The serializer signs the
    issue time alongside it, and ``verify`` rejects anything older than
    ``ttl_seconds`` via ``max_age``. There is no server-side session state and
    no revocation.
    """

    def __init__(
        self,
        secret_key: str,
        ttl_seconds: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret_key:
            raise ValueError("TokenService requires a non-empty secret key")
        self._serializer = URLSafeTimedSerializer(
            secret_key,
            salt=ASSERTION_SALT,
            signer=clocked_signer(clock),
        )
        self._ttl_seconds = ttl_seconds

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def issue(self, account_id: str) -> str:
        """Sign an assertion for ``account_id``, stamped with the current time."""
        return self._serializer.dumps({"sub": account_id})

    def verify(self, assertion: str) -> str | None:
        """Return the bound account id, or None if the assertion is not acceptable.

        Fails closed: bad signature, an age past ``ttl_seconds`` (or a timestamp
        in the future), and a payload of the wrong shape all yield None.
        """
        try:
            payload = self._serializer.loads(assertion, max_age=self._ttl_seconds)
        except SignatureExpired:
            logger.warning("Session assertion expired")
            return None
        except BadData:
            return None

        if not isinstance(payload, dict):
            return None

        account_id = payload.get("sub")
        if not isinstance(account_id, str) or not account_id:
            return None

        return account_id
