"""
Social Identity Providers
===========================
Each provider verifies an externally issued identity token and returns the
asserted email/name. Only cryptographically verified assertions are accepted.
Registry pattern for provider lookup by name.
"""

import logging
import re
import threading
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

import httpx
from jose import jwt, JWTError

from config.settings import FIREBASE_PROJECT_ID, FIREBASE_CERTS_URL

logger = logging.getLogger("blackbasket.identity")


class IdentityVerificationError(Exception):
    """Raised when a token cannot be verified by its provider."""


@dataclass
class VerifiedIdentity:
    """Claims extracted from a verified identity token."""
    email: str
    name: str = ""
    subject: str = ""
    provider: str = ""
    email_verified: bool = False


class BaseIdentityProvider:
    """Abstract provider interface."""
    name: str = ""

    def verify(self, token: str) -> VerifiedIdentity:
        raise NotImplementedError


# ── Registry ──

_PROVIDERS: Dict[str, BaseIdentityProvider] = {}


def register_provider(provider: BaseIdentityProvider):
    _PROVIDERS[provider.name] = provider


def unregister_provider(name: str):
    _PROVIDERS.pop(name, None)


def get_provider(name: str) -> Optional[BaseIdentityProvider]:
    return _PROVIDERS.get(name)


def get_all_provider_names() -> List[str]:
    return list(_PROVIDERS.keys())


# ==========================================
# Firebase (Google securetoken) ID tokens
# ==========================================

_MAX_AGE_RE = re.compile(r"max-age=(\d+)")


class FirebaseIdentityProvider(BaseIdentityProvider):
    """
    Verifies Firebase ID tokens (RS256) against Google's published x509 certs.
    Checks signature, audience (project id), issuer and expiry.
    """
    name = "firebase"

    def __init__(self, project_id: str, certs_url: str = FIREBASE_CERTS_URL, timeout: float = 10.0):
        self.project_id = project_id
        self.certs_url = certs_url
        self.timeout = timeout
        self._certs: Dict[str, str] = {}
        self._certs_expire_at = 0.0
        self._lock = threading.Lock()

    @property
    def issuer(self) -> str:
        return f"https://securetoken.google.com/{self.project_id}"

    def _public_certs(self) -> Dict[str, str]:
        with self._lock:
            if self._certs and time.time() < self._certs_expire_at:
                return self._certs
            try:
                resp = httpx.get(self.certs_url, timeout=self.timeout)
                resp.raise_for_status()
            except httpx.HTTPError as e:
                raise IdentityVerificationError(f"Could not fetch signing certificates: {e}") from e

            match = _MAX_AGE_RE.search(resp.headers.get("cache-control", ""))
            ttl = int(match.group(1)) if match else 3600
            self._certs = resp.json()
            self._certs_expire_at = time.time() + ttl
            return self._certs

    def verify(self, token: str) -> VerifiedIdentity:
        try:
            header = jwt.get_unverified_header(token)
        except JWTError as e:
            raise IdentityVerificationError("Invalid token format") from e

        if header.get("alg") != "RS256":
            raise IdentityVerificationError("Unexpected signing algorithm")

        cert = self._public_certs().get(header.get("kid", ""))
        if not cert:
            raise IdentityVerificationError("Unknown signing key")

        try:
            claims = jwt.decode(
                token,
                cert,
                algorithms=["RS256"],
                audience=self.project_id,
                issuer=self.issuer,
                options={"verify_at_hash": False},
            )
        except JWTError as e:
            raise IdentityVerificationError(f"Token verification failed: {e}") from e

        if not claims.get("sub"):
            raise IdentityVerificationError("Token has no subject")

        return VerifiedIdentity(
            email=claims.get("email", "") or "",
            name=claims.get("name", "") or "",
            subject=claims["sub"],
            provider=self.name,
            email_verified=claims.get("email_verified") is True,
        )


if FIREBASE_PROJECT_ID:
    register_provider(FirebaseIdentityProvider(FIREBASE_PROJECT_ID))
else:
    logger.info("FIREBASE_PROJECT_ID not set; firebase social login disabled")
