"""
Firebase Identity Backend - Token verification via firebase-admin.

Usage:
    Set IDENTITY_BACKEND=firebase in your .env file.
    Requires:
    - A Firebase project with Authentication enabled
    - A service account key file, or application default credentials

Environment Variables:
    FIREBASE_CREDENTIALS_PATH: Path to the service account JSON key
    FIREBASE_PROJECT_ID: Project id override (optional)
    FIREBASE_CHECK_REVOKED: Also reject revoked tokens (default: false)
"""

import logging
import threading
from typing import Optional

import firebase_admin
from firebase_admin import auth, credentials, exceptions

from apps.identity.verifier import IdentityVerifier, TokenVerificationError, VerifiedIdentity

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = 'task-manager'


class FirebaseIdentityVerifier(IdentityVerifier):
    """
    Verify Firebase ID tokens.

    The firebase_admin app is initialized once, on first use, and shared
    by every request handled by this process.
    """

    def __init__(
        self,
        credentials_path: Optional[str] = None,
        project_id: Optional[str] = None,
        check_revoked: bool = False,
    ):
        self._credentials_path = credentials_path
        self._project_id = project_id
        self._check_revoked = check_revoked
        self._app = None
        self._lock = threading.Lock()

    @property
    def app(self) -> firebase_admin.App:
        """Lazy initialization of the firebase_admin app."""
        if self._app is None:
            with self._lock:
                if self._app is None:
                    self._app = self._initialize_app()
        return self._app

    def _initialize_app(self) -> firebase_admin.App:
        try:
            return firebase_admin.get_app(FIREBASE_APP_NAME)
        except ValueError:
            pass

        if self._credentials_path:
            cred = credentials.Certificate(self._credentials_path)
        else:
            logger.warning(
                "[FIREBASE] FIREBASE_CREDENTIALS_PATH not set. "
                "Falling back to application default credentials."
            )
            cred = credentials.ApplicationDefault()

        options = {'projectId': self._project_id} if self._project_id else None
        app = firebase_admin.initialize_app(cred, options, name=FIREBASE_APP_NAME)
        logger.info("[FIREBASE] Admin SDK initialized")
        return app

    def verify(self, token: str) -> VerifiedIdentity:
        # Setup errors (bad key file, missing credentials) propagate as server errors.
        app = self.app
        try:
            decoded = auth.verify_id_token(
                token, app=app, check_revoked=self._check_revoked
            )
        except auth.ExpiredIdTokenError as e:
            raise TokenVerificationError("Token expired") from e
        except (ValueError, exceptions.FirebaseError) as e:
            raise TokenVerificationError(str(e)) from e

        return VerifiedIdentity(
            uid=decoded['uid'],
            email=decoded.get('email'),
            claims=decoded,
        )
