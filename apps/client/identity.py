"""
Identity provider client (Firebase Authentication REST API).

Sign-in, registration and token refresh go straight to the identity
provider; the Task API never sees passwords. The client keeps the current
session and notifies listeners whenever it changes.

Endpoints:
    accounts:signInWithPassword  email + password sign-in
    accounts:signUp              email + password registration
    accounts:signInWithIdp       federated sign-in with a provider credential
    securetoken /v1/token        ID token refresh
"""
import json
import logging
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, List, Optional
from urllib.parse import urlencode

import httpx

from .session import Authenticated, Loading, SessionState, SessionUser, Unauthenticated

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = 'https://identitytoolkit.googleapis.com/v1'
SECURE_TOKEN_URL = 'https://securetoken.googleapis.com/v1/token'

GOOGLE_PROVIDER_ID = 'google.com'

# Refresh a token this long before it expires.
TOKEN_REFRESH_MARGIN = timedelta(minutes=5)

StateListener = Callable[[SessionState], None]


class IdentityProviderError(Exception):
    """The identity provider rejected a request (e.g. EMAIL_NOT_FOUND)."""

    def __init__(self, code: str, status_code: Optional[int] = None):
        super().__init__(code)
        self.code = code
        self.status_code = status_code


class NoActiveSessionError(Exception):
    """An ID token was requested while no user is signed in."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IdentityClient:
    """
    Firebase Authentication client.

    Starts in the Loading state; call restore() to resolve it from the
    persisted session (if any).
    """

    def __init__(
        self,
        api_key: str,
        http_client: Optional[httpx.Client] = None,
        session_file: Optional[Path] = None,
        clock: Callable[[], datetime] = _utcnow,
        timeout: float = 10.0,
    ):
        self._api_key = api_key
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(timeout=timeout)
        self._session_file = Path(session_file) if session_file else None
        self._clock = clock
        self._state: SessionState = Loading()
        self._listeners: List[StateListener] = []

    # =========================================================================
    # Session state
    # =========================================================================

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def current_user(self) -> Optional[SessionUser]:
        if isinstance(self._state, Authenticated):
            return self._state.user
        return None

    def on_auth_state_changed(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a listener. It is called immediately with the current
        state and again on every change. Returns an unsubscribe callable.
        """
        self._listeners.append(listener)
        listener(self._state)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            self._http.close()

    def _set_state(self, state: SessionState) -> None:
        self._state = state
        if isinstance(state, Authenticated):
            self._persist(state.user)
        for listener in list(self._listeners):
            listener(state)

    def restore(self) -> SessionState:
        """Resolve the Loading state from the persisted session."""
        stored = self._load_persisted()
        if not stored:
            self._set_state(Unauthenticated())
            return self._state

        try:
            user = self._refresh(
                SessionUser(
                    uid=stored['uid'],
                    email=stored.get('email'),
                    id_token='',
                    refresh_token=stored['refresh_token'],
                    expires_at=self._clock(),
                )
            )
        except (IdentityProviderError, httpx.HTTPError) as e:
            logger.warning(f"Could not restore session: {e}")
            self._set_state(Unauthenticated())
        else:
            self._set_state(Authenticated(user))
        return self._state

    # =========================================================================
    # Sign-in flows
    # =========================================================================

    def sign_in_with_email_and_password(self, email: str, password: str) -> SessionUser:
        data = self._post(
            f'{IDENTITY_TOOLKIT_URL}/accounts:signInWithPassword',
            body={'email': email, 'password': password, 'returnSecureToken': True},
        )
        return self._sign_in(data)

    def create_user_with_email_and_password(self, email: str, password: str) -> SessionUser:
        data = self._post(
            f'{IDENTITY_TOOLKIT_URL}/accounts:signUp',
            body={'email': email, 'password': password, 'returnSecureToken': True},
        )
        return self._sign_in(data)

    def sign_in_with_idp(
        self,
        id_token: str,
        provider_id: str = GOOGLE_PROVIDER_ID,
        request_uri: str = 'http://localhost',
    ) -> SessionUser:
        """
        Federated sign-in with a credential issued by another provider
        (a Google ID token by default).
        """
        data = self._post(
            f'{IDENTITY_TOOLKIT_URL}/accounts:signInWithIdp',
            body={
                'postBody': urlencode({'id_token': id_token, 'providerId': provider_id}),
                'requestUri': request_uri,
                'returnSecureToken': True,
                'returnIdpCredential': True,
            },
        )
        return self._sign_in(data)

    def sign_out(self) -> None:
        if self._session_file:
            try:
                self._session_file.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not remove session file {self._session_file}: {e}")
        self._set_state(Unauthenticated())

    def _sign_in(self, data: dict) -> SessionUser:
        user = SessionUser(
            uid=data['localId'],
            email=data.get('email'),
            id_token=data['idToken'],
            refresh_token=data['refreshToken'],
            expires_at=self._clock() + timedelta(seconds=int(data['expiresIn'])),
        )
        logger.info(f"Signed in as {user.email or user.uid}")
        self._set_state(Authenticated(user))
        return user

    # =========================================================================
    # Tokens
    # =========================================================================

    def get_id_token(self, force_refresh: bool = False) -> str:
        """
        Return an ID token for the signed-in user.

        The stored token is reused until it is within TOKEN_REFRESH_MARGIN
        of expiry, then refreshed with the provider.
        """
        user = self.current_user
        if user is None:
            raise NoActiveSessionError("No user is signed in")

        if force_refresh or user.expires_at - TOKEN_REFRESH_MARGIN <= self._clock():
            user = self._refresh(user)
            # Same user, new tokens: listeners are not notified.
            self._state = Authenticated(user)
            self._persist(user)
        return user.id_token

    def _refresh(self, user: SessionUser) -> SessionUser:
        data = self._post(
            SECURE_TOKEN_URL,
            form={'grant_type': 'refresh_token', 'refresh_token': user.refresh_token},
        )
        return user.with_tokens(
            id_token=data['id_token'],
            refresh_token=data['refresh_token'],
            expires_at=self._clock() + timedelta(seconds=int(data['expires_in'])),
        )

    # =========================================================================
    # Transport & persistence
    # =========================================================================

    def _post(self, url: str, body: Optional[dict] = None, form: Optional[dict] = None) -> dict:
        response = self._http.post(url, params={'key': self._api_key}, json=body, data=form)
        if response.is_error:
            raise IdentityProviderError(_error_code(response), response.status_code)
        return response.json()

    def _load_persisted(self) -> Optional[dict]:
        if not self._session_file or not self._session_file.exists():
            return None
        try:
            stored = json.loads(self._session_file.read_text())
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable session file {self._session_file}: {e}")
            return None
        if not isinstance(stored, dict):
            logger.warning(f"Ignoring malformed session file {self._session_file}")
            return None
        if not stored.get('uid') or not stored.get('refresh_token'):
            return None
        return stored

    def _persist(self, user: SessionUser) -> None:
        if not self._session_file:
            return

        payload = json.dumps({
            'uid': user.uid,
            'email': user.email,
            'refresh_token': user.refresh_token,
        })
        # The session stays usable in memory if it cannot be saved.
        try:
            self._session_file.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self._session_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, 'w') as f:
                os.fchmod(f.fileno(), 0o600)
                f.write(payload)
        except OSError as e:
            logger.warning(f"Could not save session to {self._session_file}: {e}")


def _error_code(response: httpx.Response) -> str:
    """Extract the provider's error code, e.g. INVALID_PASSWORD."""
    try:
        body = response.json()
    except ValueError:
        return f'HTTP_{response.status_code}'

    error = body.get('error') if isinstance(body, dict) else None
    if isinstance(error, dict):
        return error.get('message') or f'HTTP_{response.status_code}'
    if isinstance(error, str):
        # securetoken returns {"error": "invalid_grant", ...} on some failures
        return error
    return f'HTTP_{response.status_code}'
