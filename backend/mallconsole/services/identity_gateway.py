"""Identity gateway: authentication plus the role side record.

Wraps the identity provider and the ``users`` collection. Listeners are told
about every identity transition together with the role resolved for it.
"""

from typing import Awaitable, Callable, List, Optional

import structlog

from mallconsole.config import settings
from mallconsole.core.exceptions import AuthError
from mallconsole.identity.provider import IdentityProvider, ProviderError
from mallconsole.schemas.auth import Identity, SignInResult
from mallconsole.schemas.common import ServiceResult
from mallconsole.store.document_store import SERVER_TIMESTAMP, DocumentStore, DocumentStoreError

logger = structlog.get_logger(__name__)

USERS_COLLECTION = "users"
ROLES = ("user", "admin")

ERROR_MESSAGES = {
    "auth/user-not-found": "No account found with this email.",
    "auth/wrong-password": "Incorrect password.",
    "auth/email-already-in-use": "Email is already registered.",
    "auth/weak-password": "Password should be at least 6 characters.",
    "auth/invalid-email": "Invalid email address.",
    "auth/network-request-failed": "Network error. Please check your connection.",
}
DEFAULT_ERROR_MESSAGE = "An error occurred. Please try again."

IdentityListener = Callable[[Optional[Identity], Optional[str]], Awaitable[None]]


def auth_error(code: Optional[str], message: Optional[str] = None) -> AuthError:
    """Map a provider error code to a user-facing ``AuthError``."""
    reason = ERROR_MESSAGES.get(code or "") or message or DEFAULT_ERROR_MESSAGE
    return AuthError(reason, provider_code=code)


class IdentityGateway:
    """Session-scoped view of who is signed in and with which role.

    The role is read once per identity change and then trusted for the rest
    of the session.
    """

    def __init__(
        self,
        provider: IdentityProvider,
        store: DocumentStore,
        default_role: str = settings.DEFAULT_ROLE,
    ):
        self.provider = provider
        self.store = store
        self.default_role = default_role
        self.current_identity: Optional[Identity] = None
        self.current_role: Optional[str] = None
        self._listeners: List[IdentityListener] = []
        self.logger = logger.bind(service="identity_gateway")
        self._detach = provider.on_auth_state_changed(self._on_provider_change)

    # ------------------------------------------------------------------
    # Listener channel
    # ------------------------------------------------------------------

    def subscribe(self, callback: IdentityListener) -> Callable[[], None]:
        """Register a listener called with (identity, role) on every transition.

        Listeners run in registration order.

        Returns:
            A callable that removes the listener again
        """
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    async def _notify(self) -> None:
        for callback in list(self._listeners):
            await callback(self.current_identity, self.current_role)

    async def _on_provider_change(self, identity: Optional[Identity]) -> None:
        if identity is None:
            self.current_identity = None
            self.current_role = None
        else:
            role = await self.get_user_role(identity.uid)
            self.current_identity = identity
            self.current_role = role
            self.logger.info("identity_resolved", uid=identity.uid, role=role)
        await self._notify()

    # ------------------------------------------------------------------
    # Roles
    # ------------------------------------------------------------------

    async def get_user_role(self, uid: str) -> str:
        """Read the role side record; missing or unreadable means the default role."""
        try:
            record = await self.store.collection(USERS_COLLECTION).get(uid)
        except DocumentStoreError as e:
            self.logger.warning("role_lookup_failed", uid=uid, error=str(e))
            return self.default_role

        role = (record or {}).get("role")
        return role if role in ROLES else self.default_role

    def is_admin(self) -> bool:
        return self.current_role == "admin"

    def is_authenticated(self) -> bool:
        return self.current_identity is not None

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def sign_up(self, email: str, password: str, role: Optional[str] = None) -> ServiceResult:
        """Create an account and its role record. The new account is not signed in.

        Returns:
            ServiceResult with the new ``Identity`` as data, or an AuthError
        """
        role = role if role in ROLES else self.default_role
        try:
            identity = await self.provider.create_user(email, password)
        except ProviderError as e:
            self.logger.warning("sign_up_rejected", code=e.code)
            return ServiceResult.fail(auth_error(e.code, e.message))

        try:
            await self.store.collection(USERS_COLLECTION).set(
                identity.uid,
                {"email": identity.email, "role": role, "createdAt": SERVER_TIMESTAMP},
            )
        except DocumentStoreError as e:
            self.logger.error("role_record_write_failed", uid=identity.uid, error=str(e))
            return ServiceResult.fail(auth_error(None, str(e)))

        self.logger.info("user_signed_up", uid=identity.uid, role=role)
        return ServiceResult.ok(identity, id=identity.uid)

    async def sign_in(self, email: str, password: str) -> ServiceResult:
        """Authenticate and resolve the role.

        Listeners have already been notified by the time this returns.

        Returns:
            ServiceResult with a ``SignInResult``, or an AuthError
        """
        try:
            identity = await self.provider.sign_in(email, password)
        except ProviderError as e:
            self.logger.warning("sign_in_rejected", code=e.code)
            return ServiceResult.fail(auth_error(e.code, e.message))

        if self.current_identity is None or self.current_identity.uid != identity.uid:
            # Provider did not report the change; resolve here instead.
            await self._on_provider_change(identity)

        return ServiceResult.ok(
            SignInResult(identity=identity, role=self.current_role or self.default_role),
            id=identity.uid,
        )

    async def sign_out(self) -> ServiceResult:
        """Sign out at the provider, then drop the cached identity and role.

        If the provider fails, the cache is left as it was.
        """
        try:
            await self.provider.sign_out()
        except ProviderError as e:
            self.logger.error("sign_out_failed", code=e.code)
            return ServiceResult.fail(auth_error(e.code, e.message))

        if self.current_identity is not None:
            await self._on_provider_change(None)
        return ServiceResult.ok()
