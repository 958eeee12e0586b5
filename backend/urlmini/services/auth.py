"""Authentication service: credentials, login and access-token renewal."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerifyMismatchError

from urlmini.models.session import Session
from urlmini.models.user import User
from urlmini.services.payload import IdentityGenerationError, Payload
from urlmini.services.store import NotFoundError, Store, StoreError
from urlmini.services.token_codec import InvalidTokenError, TokenCodec

logger = logging.getLogger(__name__)

# Argon2 password hasher with recommended parameters
# Memory: 64 MiB, Time: 3 iterations, Parallelism: 4
ph = PasswordHasher(
    time_cost=3,
    memory_cost=65536,
    parallelism=4,
    hash_len=32,
    salt_len=16,
)

# Verified against when the username is unknown so both paths cost the same
_DUMMY_HASH = ph.hash("urlmini-dummy-password")


class AuthError(Exception):
    """Base authentication error."""

    pass


class InvalidCredentialsError(AuthError):
    """Invalid username or password."""

    pass


class SessionUnusableError(AuthError):
    """Refresh session is missing, expired or blocked."""

    pass


class TokenIssueError(AuthError):
    """A new token could not be minted."""

    pass


def hash_password(password: str) -> str:
    """Hash a password using Argon2id."""
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash using constant-time comparison."""
    try:
        ph.verify(password_hash, password)
        return True
    except (VerifyMismatchError, InvalidHashError):
        return False


@dataclass(frozen=True)
class IssuedToken:
    token: str
    payload: Payload

    @property
    def expires_at(self) -> datetime:
        return self.payload.expires_at


@dataclass(frozen=True)
class LoginResult:
    user: User
    session: Session
    access: IssuedToken
    refresh: IssuedToken


class AuthService:
    """Login and refresh orchestration over a Store and a TokenCodec."""

    def __init__(
        self,
        store: Store,
        codec: TokenCodec,
        access_token_duration: timedelta,
        refresh_token_duration: timedelta,
    ):
        self.store = store
        self.codec = codec
        self.access_token_duration = access_token_duration
        self.refresh_token_duration = refresh_token_duration

    async def authenticate(self, username: str, password: str) -> User:
        """Return the user for valid credentials.

        Raises InvalidCredentialsError for both "user not found" and
        "wrong password" to prevent user enumeration.
        """
        try:
            user = await self.store.get_user_by_username(username)
        except NotFoundError as e:
            verify_password(password, _DUMMY_HASH)
            raise InvalidCredentialsError("Invalid username or password") from e

        if not verify_password(password, user.hashed_password):
            raise InvalidCredentialsError("Invalid username or password")

        return user

    async def login(
        self, username: str, password: str, client_ip: str, user_agent: str
    ) -> LoginResult:
        """Verify credentials, mint both tokens and persist the refresh session.

        Store failures while persisting propagate as StoreError; tokens are
        only returned once the session row has been committed.
        """
        user = await self.authenticate(username, password)

        access = self._issue(user.id, self.access_token_duration)
        refresh = self._issue(user.id, self.refresh_token_duration)

        session = await self.store.create_session(
            id=refresh.payload.id,
            user_id=user.id,
            client_ip=client_ip,
            user_agent=user_agent,
            refresh_token=refresh.token,
            expires_at=refresh.expires_at,
            is_blocked=False,
        )
        logger.info(
            f"User logged in: {user.username}",
            extra={"user_id": user.id, "session_id": str(session.id), "client_ip": client_ip},
        )
        return LoginResult(user=user, session=session, access=access, refresh=refresh)

    async def renew_access_token(self, refresh_token: str) -> IssuedToken:
        """Exchange a refresh token for a new access token.

        The refresh token is not rotated and stays usable until it expires
        or its session is blocked.

        Raises:
            InvalidTokenError: The refresh token does not decode.
            SessionUnusableError: No session, or it is expired or blocked.
            TokenIssueError: The access token could not be minted.
        """
        payload = self.codec.decode(refresh_token)

        try:
            session = await self.store.get_session(payload.id)
        except StoreError as e:
            raise SessionUnusableError("no session created") from e

        if datetime.now(UTC) > session.expires_at:
            raise SessionUnusableError("session expired")

        # Blocked sessions look exactly like expired ones to the client
        if session.is_blocked:
            logger.warning(
                "Refresh attempted on blocked session",
                extra={"user_id": session.user_id, "session_id": str(session.id)},
            )
            raise SessionUnusableError("session expired")

        return self._issue(session.user_id, self.access_token_duration)

    def _issue(self, subject_id: int, duration: timedelta) -> IssuedToken:
        try:
            token, payload = self.codec.create_token(subject_id, duration)
        except IdentityGenerationError as e:
            logger.exception("Failed to mint token")
            raise TokenIssueError("Could not issue token") from e
        return IssuedToken(token=token, payload=payload)


__all__ = [
    "AuthError",
    "AuthService",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "IssuedToken",
    "LoginResult",
    "SessionUnusableError",
    "TokenIssueError",
    "hash_password",
    "verify_password",
]
