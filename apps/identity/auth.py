"""
Bearer token authentication for the Task API.

Every task route runs behind BearerTokenAuth:
- no bearer token -> 401 (ninja AuthenticationError)
- token rejected by the identity provider -> 403
- token accepted -> request.uid is bound to the verified subject id
"""
import logging
from typing import Optional

from django.apps import apps
from django.http import HttpRequest
from ninja.errors import HttpError
from ninja.security import HttpBearer

from .verifier import IdentityVerifier, TokenVerificationError, VerifiedIdentity

logger = logging.getLogger(__name__)


def get_verifier() -> IdentityVerifier:
    """Return the verifier built at bootstrap."""
    verifier = apps.get_app_config('identity').verifier
    if verifier is None:
        raise RuntimeError("Identity verifier has not been initialized")
    return verifier


class BearerTokenAuth(HttpBearer):
    """
    Verify the Authorization bearer token against the identity provider.

    A verifier may be passed in explicitly; otherwise the one built at
    bootstrap is used.
    """

    def __init__(self, verifier: Optional[IdentityVerifier] = None):
        super().__init__()
        self._verifier = verifier

    @property
    def verifier(self) -> IdentityVerifier:
        return self._verifier or get_verifier()

    def authenticate(self, request: HttpRequest, token: str) -> Optional[VerifiedIdentity]:
        if not token:
            return None

        try:
            identity = self.verifier.verify(token)
        except TokenVerificationError as e:
            logger.warning(f"Rejected bearer token on {request.method} {request.path}: {e}")
            raise HttpError(403, "Forbidden")

        request.uid = identity.uid
        return identity


token_auth = BearerTokenAuth()
