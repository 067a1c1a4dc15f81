"""Session store: cached copy of the signed-in user, kept in step with the auth provider."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable

from rhdocs.models.auth import AuthEvent, AuthSession, AuthUser
from rhdocs.models.results import ErrorInfo, ErrorKind, SignInResult
from rhdocs.services.backend_client import AuthClient, BackendError, Subscription
from rhdocs.services.notifications import NotificationCenter

logger = logging.getLogger(__name__)

Observer = Callable[["SessionStore"], None]

DEFAULT_PRIVILEGED_ROLE = "hr_manager"


class SessionStore:
    def __init__(
        self,
        auth: AuthClient,
        notifications: NotificationCenter,
        privileged_role: str = DEFAULT_PRIVILEGED_ROLE,
    ) -> None:
        self.auth = auth
        self.notifications = notifications
        self.privileged_role = privileged_role
        self.user: AuthUser | None = None
        self.loading = True
        self._subscription: Subscription | None = None
        self._observers: dict[int, Observer] = {}
        self._ids = itertools.count()

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_privileged_role(self) -> bool:
        if self.user is None:
            return False
        return self.user.role == self.privileged_role

    @property
    def display_name(self) -> str | None:
        if self.user is None:
            return None
        return self.user.user_metadata.get("name") or self.user.email

    @property
    def role_label(self) -> str:
        return "Chefe do RH" if self.is_privileged_role else "Funcionário"

    async def start(self) -> None:
        session = await self.auth.get_session()
        self._update(session.user if session else None, loading=False)
        if self._subscription is None:
            self._subscription = self.auth.on_auth_state_change(self._on_auth_state_change)

    async def current_user(self) -> AuthUser | None:
        """Return the signed-in user, refreshing an expired session first.

        A failed refresh signs the workspace out through the auth listener.
        """
        await self.auth.get_session()
        return self.user

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        key = next(self._ids)
        self._observers[key] = observer

        def dispose() -> None:
            self._observers.pop(key, None)

        return dispose

    async def sign_in(self, email: str, password: str) -> SignInResult:
        self._update(self.user, loading=True)
        try:
            session = await self.auth.sign_in_with_password(email, password)
            self.user = session.user
            self.notifications.success("Login realizado com sucesso", "Bem-vindo ao sistema RH-DOCS")
            return SignInResult(user=session.user)
        except BackendError as e:
            self.notifications.error("Erro no login", e.message)
            return SignInResult(
                error=ErrorInfo(kind=ErrorKind.AUTHENTICATION, message=e.message, status=e.status)
            )
        finally:
            self._update(self.user, loading=False)

    async def sign_out(self) -> ErrorInfo | None:
        try:
            await self.auth.sign_out()
        except BackendError as e:
            # Session is left as-is; the provider may still consider it valid.
            self.notifications.error("Erro ao sair", e.message)
            return ErrorInfo(kind=ErrorKind.AUTHENTICATION, message=e.message, status=e.status)

        self._update(None, loading=False)
        self.notifications.success("Logout realizado", "Até logo!")
        return None

    def _on_auth_state_change(self, event: AuthEvent, session: AuthSession | None) -> None:
        logger.debug("Auth state change: %s", event.value)
        self._update(session.user if session else None, loading=False)

    def _update(self, user: AuthUser | None, *, loading: bool) -> None:
        self.user = user
        self.loading = loading
        for observer in list(self._observers.values()):
            observer(self)
