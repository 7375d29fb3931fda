"""
ClientApplication - ties the identity client, the Task API client,
routing and views together.

The current view is a function of the session state and the current
path. Whenever the session changes, the current path is resolved again,
so signing in on /login lands on /tasks and signing out on /tasks lands
on /login.
"""
import logging
from pathlib import Path
from typing import Optional

from django.conf import settings

from .api_client import TaskApiClient
from .identity import IdentityClient
from .routing import (
    HOME,
    HOME_VIEW,
    LOADING_VIEW,
    LOGIN_VIEW,
    NOT_FOUND_VIEW,
    REGISTER_VIEW,
    TASKS_VIEW,
    resolve_route,
)
from .session import SessionState
from .views import (
    HomeView,
    LoadingView,
    LoginView,
    NotFoundView,
    RegisterView,
    TaskManagerView,
    View,
)

logger = logging.getLogger(__name__)

MAX_REDIRECTS = 5


class ClientApplication:

    def __init__(self, identity: IdentityClient, api: TaskApiClient):
        self.identity = identity
        self.api = api
        self.path = HOME
        self.view: View = LoadingView()
        self._view_name = LOADING_VIEW
        self._unsubscribe = identity.on_auth_state_changed(self._on_session_changed)

    @property
    def session(self) -> SessionState:
        return self.identity.state

    def start(self) -> View:
        """Resolve the persisted session; the view follows the result."""
        self.identity.restore()
        return self.view

    def navigate(self, path: str) -> View:
        self.path = path
        return self._render_current(force=True)

    def close(self) -> None:
        self._unsubscribe()
        self.api.close()
        self.identity.close()

    def _on_session_changed(self, state: SessionState) -> None:
        self._render_current(force=False)

    def _render_current(self, force: bool) -> View:
        path = self.path
        for _ in range(MAX_REDIRECTS):
            route = resolve_route(self.session, path)
            if not route.is_redirect:
                break
            logger.debug(f"Redirect {path} -> {route.redirect_to}")
            path = route.redirect_to
        else:
            raise RuntimeError(f"Too many redirects resolving {self.path}")

        self.path = path
        if force or route.view != self._view_name:
            self._view_name = route.view
            self.view = self._build_view(route.view)
        return self.view

    def _build_view(self, name: str) -> View:
        if name == LOADING_VIEW:
            return LoadingView()
        if name == HOME_VIEW:
            return HomeView()
        if name == LOGIN_VIEW:
            return LoginView(self.identity)
        if name == REGISTER_VIEW:
            return RegisterView(self.identity)
        if name == TASKS_VIEW:
            view = TaskManagerView(self.api)
            view.load()
            return view
        if name == NOT_FOUND_VIEW:
            return NotFoundView()
        raise ValueError(f"Unknown view: {name}")


def build_client_application(
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    session_file: Optional[Path] = None,
) -> ClientApplication:
    """Build a client from Django settings, with optional overrides."""
    timeout = getattr(settings, 'TASK_CLIENT_TIMEOUT', 10.0)
    identity = IdentityClient(
        api_key=api_key or settings.FIREBASE_WEB_API_KEY,
        session_file=session_file or getattr(settings, 'TASK_CLIENT_SESSION_FILE', None),
        timeout=timeout,
    )
    api = TaskApiClient(
        base_url=base_url or settings.TASK_API_BASE_URL,
        identity=identity,
        timeout=timeout,
    )
    return ClientApplication(identity, api)
