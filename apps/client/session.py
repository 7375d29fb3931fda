"""
Client-side session state.

The identity client reports one of three states:
- Loading: the persisted session has not been resolved yet
- Unauthenticated: no signed-in user
- Authenticated: a signed-in user with a current ID token
"""
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class SessionUser:
    uid: str
    email: Optional[str]
    id_token: str
    refresh_token: str
    expires_at: datetime

    def with_tokens(self, id_token: str, refresh_token: str, expires_at: datetime) -> 'SessionUser':
        return replace(self, id_token=id_token, refresh_token=refresh_token, expires_at=expires_at)


class SessionState:
    is_authenticated = False
    is_loading = False


@dataclass(frozen=True)
class Loading(SessionState):
    is_loading = True


@dataclass(frozen=True)
class Unauthenticated(SessionState):
    pass


@dataclass(frozen=True)
class Authenticated(SessionState):
    user: SessionUser
    is_authenticated = True
