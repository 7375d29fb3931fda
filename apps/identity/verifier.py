"""
IdentityVerifier - Abstraction over the identity provider's token verification.

Sign-in and token issuance are handled entirely by the identity provider
(Firebase Authentication). The API only verifies the ID tokens presented
as bearer credentials.

The verifier is built once at process bootstrap (see IdentityConfig.ready)
and read from the app config by the auth layer.

Environment Configuration:
    IDENTITY_BACKEND=firebase  # firebase-admin token verification (production)
    IDENTITY_BACKEND=local     # Static token table (development)
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict

from django.conf import settings

logger = logging.getLogger(__name__)


class TokenVerificationError(Exception):
    """Raised when a presented token is expired, malformed or otherwise rejected."""


@dataclass(frozen=True)
class VerifiedIdentity:
    """The subject a verified token belongs to."""
    uid: str
    email: str | None = None
    claims: Dict[str, Any] = field(default_factory=dict)


class IdentityVerifier(ABC):
    """
    Abstract interface for bearer token verification.

    Implementations:
    - FirebaseIdentityVerifier: firebase-admin verify_id_token
    - LocalIdentityVerifier: fixed token -> uid table
    """

    @abstractmethod
    def verify(self, token: str) -> VerifiedIdentity:
        """
        Verify a bearer token.

        Returns:
            The verified identity.

        Raises:
            TokenVerificationError: if the token is not acceptable.
        """
        pass


def build_verifier() -> IdentityVerifier:
    """Build the configured verifier based on the IDENTITY_BACKEND setting."""
    backend = getattr(settings, 'IDENTITY_BACKEND', 'firebase')

    if backend == 'firebase':
        from apps.identity.backends.firebase_backend import FirebaseIdentityVerifier
        return FirebaseIdentityVerifier(
            credentials_path=getattr(settings, 'FIREBASE_CREDENTIALS_PATH', None),
            project_id=getattr(settings, 'FIREBASE_PROJECT_ID', None),
            check_revoked=getattr(settings, 'FIREBASE_CHECK_REVOKED', False),
        )
    elif backend == 'local':
        from apps.identity.backends.local_backend import LocalIdentityVerifier, parse_token_table
        logger.warning("Using local identity backend. Do not use in production.")
        tokens = getattr(settings, 'LOCAL_IDENTITY_TOKENS', {})
        if isinstance(tokens, str):
            tokens = parse_token_table(tokens)
        return LocalIdentityVerifier(tokens)
    else:
        raise ValueError(f"Unknown IDENTITY_BACKEND: {backend}")
