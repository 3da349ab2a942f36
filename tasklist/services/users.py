"""
User directory - registration, credential login and session lists.

The directory owns User records. A user's ``sessions`` list is the
revocation state for tokens: login appends a session, logout pulls one,
and both are single atomic storage operations so concurrent logins for
the same user never lose an entry.
"""

from __future__ import annotations

import asyncio
import logging
import secrets

from email_validator import EmailNotValidError, validate_email

from tasklist.auth.passwords import PasswordHasher
from tasklist.auth.tokens import TokenService
from tasklist.core.errors import AuthError, ValidationError
from tasklist.core.models import Session, User
from tasklist.storage.base import Collections, DuplicateKeyError, MetadataStorage

logger = logging.getLogger(__name__)


class UserDirectory:
    """Creates users, checks credentials and maintains session lists."""

    def __init__(
        self,
        storage: MetadataStorage,
        hasher: PasswordHasher,
        tokens: TokenService,
        password_min_length: int = 6,
    ):
        self.storage = storage
        self.hasher = hasher
        self.tokens = tokens
        self.password_min_length = password_min_length

        # Email uniqueness is enforced by the store, not only by a pre-check
        self.storage.ensure_unique(Collections.USERS, "email")

        # Verified against when the email is unknown, so both login
        # failures cost one hash
        self._dummy_hash = hasher.hash(secrets.token_hex(16))

    # =========================================================================
    # Lookups
    # =========================================================================

    async def find_by_id(self, user_id: str) -> User | None:
        """Get user by ID."""
        data = await self.storage.get(Collections.USERS, user_id)
        return User.model_validate(data) if data else None

    async def find_by_email(self, email: str) -> User | None:
        """Get user by email (exact match after trimming)."""
        data = await self.storage.find_one(Collections.USERS, {"email": email.strip()})
        return User.model_validate(data) if data else None

    # =========================================================================
    # Registration / Login / Logout
    # =========================================================================

    def _validate_credentials(self, email: object, password: object) -> str:
        if not isinstance(email, str) or not email.strip():
            raise ValidationError("invalid_email")
        email = email.strip()
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError as e:
            raise ValidationError("invalid_email", str(e))

        if not isinstance(password, str) or len(password) < self.password_min_length:
            raise ValidationError(
                "weak_password",
                f"Password must be at least {self.password_min_length} characters",
            )
        return email

    async def register(self, email: str, password: str) -> tuple[User, str]:
        """
        Create a new account and its first session.

        Returns:
            (user, token) where the token is already listed in user.sessions

        Raises:
            ValidationError: invalid_email, weak_password or duplicate_email
        """
        email = self._validate_credentials(email, password)

        if await self.find_by_email(email):
            raise ValidationError("duplicate_email")

        # PBKDF2 is CPU-bound; keep it off the event loop
        password_hash = await asyncio.to_thread(self.hasher.hash, password)
        user = User(email=email, password_hash=password_hash)
        try:
            await self.storage.insert(Collections.USERS, user.model_dump(mode="json"))
        except DuplicateKeyError:
            # Lost a race with a concurrent registration
            raise ValidationError("duplicate_email")

        token = await self._start_session(user)
        logger.info(f"Registered user {user.id}")
        return user, token

    async def login(self, email: str, password: str) -> tuple[User, str]:
        """
        Check credentials and open an additional session.

        Existing sessions stay valid.

        Raises:
            AuthError("invalid_credentials"): unknown email or wrong password
        """
        user = None
        if isinstance(email, str) and email.strip():
            user = await self.find_by_email(email)

        if not isinstance(password, str):
            password = ""

        if user is None:
            await asyncio.to_thread(self.hasher.verify, password, self._dummy_hash)
            raise AuthError("invalid_credentials")
        if not await asyncio.to_thread(self.hasher.verify, password, user.password_hash):
            raise AuthError("invalid_credentials")

        token = await self._start_session(user)
        logger.info(f"User {user.id} logged in ({len(user.sessions)} active sessions)")
        return user, token

    async def logout(self, user: User, token: str) -> None:
        """Remove exactly one session. Missing sessions are not an error."""
        await self.storage.pull(Collections.USERS, user.id, "sessions", {"token": token})
        user.sessions = [s for s in user.sessions if s.token != token]
        logger.info(f"User {user.id} logged out of one session")

    async def _start_session(self, user: User) -> str:
        token = self.tokens.issue(user.id)
        session = Session(token=token)
        pushed = await self.storage.push(
            Collections.USERS, user.id, "sessions", session.model_dump(mode="json")
        )
        if not pushed:
            raise AuthError("unknown_subject")
        user.sessions.append(session)
        return token
