"""
Client routing.

resolve_route() is a pure function of the session state and the requested
path: it either names the view to render or the path to redirect to.
"""
from dataclasses import dataclass
from typing import Optional

from .session import SessionState

HOME = '/'
LOGIN = '/login'
REGISTER = '/register'
TASKS = '/tasks'

LOADING_VIEW = 'loading'
HOME_VIEW = 'home'
LOGIN_VIEW = 'login'
REGISTER_VIEW = 'register'
TASKS_VIEW = 'tasks'
NOT_FOUND_VIEW = 'not_found'


@dataclass(frozen=True)
class Route:
    view: Optional[str] = None
    redirect_to: Optional[str] = None

    @property
    def is_redirect(self) -> bool:
        return self.redirect_to is not None


def resolve_route(state: SessionState, path: str) -> Route:
    if state.is_loading:
        return Route(view=LOADING_VIEW)

    path = _normalize(path)
    signed_in = state.is_authenticated

    if path == HOME:
        return Route(redirect_to=TASKS) if signed_in else Route(view=HOME_VIEW)
    if path == LOGIN:
        return Route(redirect_to=TASKS) if signed_in else Route(view=LOGIN_VIEW)
    if path == REGISTER:
        return Route(redirect_to=TASKS) if signed_in else Route(view=REGISTER_VIEW)
    if path == TASKS:
        return Route(view=TASKS_VIEW) if signed_in else Route(redirect_to=LOGIN)
    return Route(view=NOT_FOUND_VIEW)


def nav_links(state: SessionState) -> list:
    """Links shown in the navigation bar."""
    if state.is_loading:
        return []
    if state.is_authenticated:
        return [('Home', HOME), ('My Tasks', TASKS)]
    return [('Home', HOME), ('Login', LOGIN), ('Register', REGISTER)]


def _normalize(path: str) -> str:
    path = (path or HOME).split('?', 1)[0].split('#', 1)[0]
    if not path.startswith('/'):
        path = '/' + path
    if len(path) > 1:
        path = path.rstrip('/') or HOME
    return path
