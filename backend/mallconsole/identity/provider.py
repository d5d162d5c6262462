"""Identity provider: credential storage, password hashing, id tokens.

Plays the part of the external authentication backend. It knows nothing
about roles; failures are reported as ``ProviderError`` carrying an
``auth/...`` code that the identity gateway maps to a readable reason.
"""

from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, List, Optional

import structlog
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mallconsole.models.credential import Credential
from mallconsole.schemas.auth import Identity

logger = structlog.get_logger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

_email_adapter = TypeAdapter(EmailStr)

AuthStateCallback = Callable[[Optional[Identity]], Awaitable[None]]


class ProviderError(Exception):
    """Error raised by the identity provider, tagged with a provider code."""

    def __init__(self, code: str, message: str = ""):
        self.code = code
        self.message = message or code
        super().__init__(self.message)


def hash_password(password: str) -> str:
    """Hash a plaintext password."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plaintext password against a stored hash."""
    return pwd_context.verify(plain_password, hashed_password)


class IdentityProvider:
    """Email/password identity provider with an auth-state listener channel."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        secret_key: str,
        algorithm: str = "HS256",
        token_expire_minutes: int = 60 * 24,
        min_password_length: int = 6,
    ):
        self._session_factory = session_factory
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.token_expire_minutes = token_expire_minutes
        self.min_password_length = min_password_length
        self.current_user: Optional[Identity] = None
        self._listeners: List[AuthStateCallback] = []
        self.logger = logger.bind(service="identity_provider")

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def create_id_token(self, uid: str) -> str:
        """Create a signed id token for the given uid."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": uid,
            "exp": now + timedelta(minutes=self.token_expire_minutes),
            "iat": now,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_id_token(self, token: str) -> Optional[str]:
        """Decode an id token and return its uid, or None if invalid."""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
            return payload.get("sub")
        except JWTError:
            return None

    # ------------------------------------------------------------------
    # Listener channel
    # ------------------------------------------------------------------

    def on_auth_state_changed(self, callback: AuthStateCallback) -> Callable[[], None]:
        """Register a listener called with the new identity (or None)."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    async def _notify(self) -> None:
        for callback in list(self._listeners):
            await callback(self.current_user)

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def _normalize_email(self, email: str) -> str:
        try:
            return str(_email_adapter.validate_python((email or "").strip())).lower()
        except PydanticValidationError:
            raise ProviderError("auth/invalid-email", "The email address is badly formatted.")

    async def create_user(self, email: str, password: str) -> Identity:
        """Create a credential. Does not sign the new account in.

        Raises:
            ProviderError: auth/invalid-email, auth/weak-password,
                auth/email-already-in-use or auth/network-request-failed
        """
        normalized = self._normalize_email(email)
        if len(password or "") < self.min_password_length:
            raise ProviderError("auth/weak-password", "Password is too weak.")

        try:
            async with self._session_factory() as session:
                existing = await session.execute(
                    select(Credential).where(Credential.email == normalized)
                )
                if existing.scalar_one_or_none():
                    raise ProviderError(
                        "auth/email-already-in-use",
                        "The email address is already in use by another account.",
                    )

                credential = Credential(
                    email=normalized,
                    hashed_password=hash_password(password),
                )
                session.add(credential)
                try:
                    await session.commit()
                except IntegrityError:
                    await session.rollback()
                    raise ProviderError(
                        "auth/email-already-in-use",
                        "The email address is already in use by another account.",
                    )
        except SQLAlchemyError as e:
            self.logger.error("create_user_failed", error=str(e))
            raise ProviderError("auth/network-request-failed", str(e))

        self.logger.info("user_created", uid=credential.id)
        return Identity(uid=credential.id, email=credential.email)

    async def sign_in(self, email: str, password: str) -> Identity:
        """Verify credentials, make the identity current and notify listeners.

        Raises:
            ProviderError: auth/invalid-email, auth/user-not-found,
                auth/wrong-password, auth/user-disabled or
                auth/network-request-failed
        """
        normalized = self._normalize_email(email)

        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(Credential).where(Credential.email == normalized)
                )
                credential = result.scalar_one_or_none()

                if not credential:
                    raise ProviderError(
                        "auth/user-not-found",
                        "There is no user record corresponding to this identifier.",
                    )
                if not verify_password(password or "", credential.hashed_password):
                    raise ProviderError(
                        "auth/wrong-password",
                        "The password is invalid.",
                    )
                if not credential.is_active:
                    raise ProviderError(
                        "auth/user-disabled",
                        "The user account has been disabled by an administrator.",
                    )

                credential.last_login_at = datetime.now(timezone.utc)
                await session.commit()
                uid, stored_email = credential.id, credential.email
        except SQLAlchemyError as e:
            self.logger.error("sign_in_failed", error=str(e))
            raise ProviderError("auth/network-request-failed", str(e))

        self.current_user = Identity(
            uid=uid,
            email=stored_email,
            id_token=self.create_id_token(uid),
        )
        self.logger.info("user_signed_in", uid=uid)
        await self._notify()
        return self.current_user

    async def sign_out(self) -> None:
        """Forget the current identity and notify listeners."""
        self.current_user = None
        self.logger.info("user_signed_out")
        await self._notify()
