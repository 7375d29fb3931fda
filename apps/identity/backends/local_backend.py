"""
Local Identity Backend - Static token table for development.

Tokens are mapped to subject ids through the LOCAL_IDENTITY_TOKENS setting,
configured as "token:uid,token:uid". No identity provider is contacted.

Usage:
    Set IDENTITY_BACKEND=local in your .env file.
"""

import logging
from typing import Dict

from apps.identity.verifier import IdentityVerifier, TokenVerificationError, VerifiedIdentity

logger = logging.getLogger(__name__)


def parse_token_table(raw: str) -> Dict[str, str]:
    """Parse "token:uid,token:uid" into a dict. Malformed entries are skipped."""
    table = {}
    for entry in raw.split(','):
        token, sep, uid = entry.strip().partition(':')
        if not sep or not token or not uid:
            if entry.strip():
                logger.warning(f"[LOCAL] Ignoring malformed token entry: {entry!r}")
            continue
        table[token] = uid
    return table


class LocalIdentityVerifier(IdentityVerifier):
    """Accept only the tokens listed in the table."""

    def __init__(self, tokens: Dict[str, str]):
        self._tokens = dict(tokens)

    def verify(self, token: str) -> VerifiedIdentity:
        uid = self._tokens.get(token)
        if uid is None:
            raise TokenVerificationError("Unknown token")
        return VerifiedIdentity(uid=uid)
