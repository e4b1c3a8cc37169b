# hazardscan/core/identity.py
"""Bearer-session verification against the external identity provider."""
from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging

import jwt
from jwt import PyJWKClient
from jwt.exceptions import InvalidTokenError, PyJWKClientError

from hazardscan.core.exceptions import Unauthenticated

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """Verified caller, as seen by the identity provider."""
    user_id: str
    role: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    image_url: Optional[str] = None


def _claim(payload: Dict[str, Any], path: str) -> Any:
    """Resolve a dotted claim path such as `metadata.appRole`."""
    value: Any = payload
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _optional_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


class JWTIdentityProvider:
    """
    Resolve a session token into a stable user id and an optional role.

    Tokens are signed either with a shared secret (HS*) or with keys
    published at a JWKS endpoint (RS*/ES*).
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: str = "HS256",
        jwks_url: Optional[str] = None,
        issuer: Optional[str] = None,
        audience: Optional[str] = None,
        role_claim: str = "metadata.appRole",
    ):
        if not secret_key and not jwks_url:
            logger.warning("No JWT secret or JWKS URL configured, all requests will be rejected")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.issuer = issuer
        self.audience = audience
        self.role_claim = role_claim
        self._jwks_client = PyJWKClient(jwks_url) if jwks_url else None

    def _signing_key(self, token: str) -> Any:
        if self._jwks_client is not None:
            return self._jwks_client.get_signing_key_from_jwt(token).key
        if self.secret_key:
            return self.secret_key
        raise Unauthenticated("Identity provider is not configured")

    def resolve(self, token: str) -> Identity:
        try:
            payload = jwt.decode(
                token,
                self._signing_key(token),
                algorithms=[self.algorithm],
                issuer=self.issuer,
                audience=self.audience,
                options={"require": ["sub"], "verify_aud": self.audience is not None},
            )
        except (InvalidTokenError, PyJWKClientError) as e:
            logger.info(f"Rejected session token: {e}")
            raise Unauthenticated("Could not validate credentials")

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            raise Unauthenticated("Could not validate credentials")

        return Identity(
            user_id=subject,
            role=_optional_str(_claim(payload, self.role_claim)),
            email=_optional_str(payload.get("email")),
            first_name=_optional_str(payload.get("given_name") or payload.get("first_name")),
            last_name=_optional_str(payload.get("family_name") or payload.get("last_name")),
            image_url=_optional_str(payload.get("picture") or payload.get("image_url")),
        )
