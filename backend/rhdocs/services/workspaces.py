"""Per-browser workspaces holding the session, directory and form state."""

from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Callable

from rhdocs.core.config import Settings
from rhdocs.services.backend_client import BackendClient
from rhdocs.services.employee_directory import EmployeeDirectory
from rhdocs.services.notifications import NotificationCenter
from rhdocs.services.registration_form import RegistrationForm
from rhdocs.services.session_store import SessionStore

logger = logging.getLogger(__name__)


class Workspace:
    def __init__(
        self,
        workspace_id: str,
        session: SessionStore,
        directory: EmployeeDirectory,
        form: RegistrationForm,
        notifications: NotificationCenter,
    ) -> None:
        self.id = workspace_id
        self.session = session
        self.directory = directory
        self.form = form
        self.notifications = notifications
        self.last_seen = time.monotonic()
        self._disposers: list[Callable[[], None]] = []
        self._user_id: str | None = None
        self.closed = False

    async def open(self) -> None:
        await self.session.start()
        self._user_id = self.session.user.id if self.session.user else None
        self._disposers.append(self.form.bind(self.session))
        self._disposers.append(self.session.subscribe(self._on_session_change))

    def touch(self) -> None:
        self.last_seen = time.monotonic()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        for dispose in self._disposers:
            dispose()
        self._disposers.clear()
        self.session.stop()

    def _on_session_change(self, session: SessionStore) -> None:
        if session.loading:
            return
        user_id = session.user.id if session.user else None
        if user_id == self._user_id:
            return
        self._user_id = user_id
        # Cached rows belong to the previous user's row policies.
        logger.debug("Workspace %s changed user, dropping directory cache", self.id)
        self.directory.reset()


class WorkspaceRegistry:
    """Live workspaces by id, least recently used first."""

    def __init__(self, backend: BackendClient, settings: Settings) -> None:
        self.backend = backend
        self.settings = settings
        self.workspaces: dict[str, Workspace] = {}

    async def acquire(self, workspace_id: str | None) -> Workspace:
        self._evict_idle()

        workspace = self.workspaces.pop(workspace_id, None) if workspace_id else None
        if workspace is not None:
            workspace.touch()
            self.workspaces[workspace.id] = workspace
            return workspace

        workspace = self._build(secrets.token_urlsafe(16))
        await workspace.open()
        self.workspaces[workspace.id] = workspace
        while len(self.workspaces) > self.settings.WORKSPACE_MAX_LIVE:
            self._evict(next(iter(self.workspaces)))
        logger.info("Opened workspace %s (%d live)", workspace.id, len(self.workspaces))
        return workspace

    def close(self) -> None:
        for workspace in self.workspaces.values():
            workspace.close()
        self.workspaces.clear()

    def _evict_idle(self) -> None:
        cutoff = time.monotonic() - self.settings.WORKSPACE_IDLE_SECONDS
        idle = [key for key, workspace in self.workspaces.items() if workspace.last_seen < cutoff]
        for key in idle:
            self._evict(key)

    def _evict(self, workspace_id: str) -> None:
        workspace = self.workspaces.pop(workspace_id)
        workspace.close()
        logger.debug("Evicted workspace %s", workspace_id)

    def _build(self, workspace_id: str) -> Workspace:
        scope = self.backend.scope()
        notifications = NotificationCenter()
        session = SessionStore(scope.auth, notifications, self.settings.PRIVILEGED_ROLE)
        directory = EmployeeDirectory(scope, notifications)
        form = RegistrationForm(directory, notifications)
        return Workspace(workspace_id, session, directory, form, notifications)
