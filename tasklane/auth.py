"""
Bearer-token authentication.

The token verifier is an external collaborator: it turns a bearer token into
a VerifiedIdentity or None. Nothing else in the package parses tokens.
"""

import logging
from functools import wraps

import jwt
from flask import current_app, g, request

from .config import FIREBASE_PROJECT_ID
from .db import get_db
from .errors import Unauthenticated
from .identity import VerifiedIdentity, resolve

logger = logging.getLogger(__name__)
audit_log = logging.getLogger("audit")

GOOGLE_JWKS_URL = (
    "https://www.googleapis.com/service_accounts/v1/jwk/"
    "securetoken@system.gserviceaccount.com"
)


class FirebaseTokenVerifier:
    """Checks Firebase ID tokens (RS256) against Google's published signing keys."""

    def __init__(self, project_id, jwks_url=GOOGLE_JWKS_URL, leeway=10):
        if not project_id:
            raise ValueError("FIREBASE_PROJECT_ID is not set")
        self.project_id = project_id
        self.issuer = f"https://securetoken.google.com/{project_id}"
        self.leeway = leeway
        self._jwks = jwt.PyJWKClient(jwks_url, cache_keys=True)

    def verify(self, token):
        try:
            signing_key = self._jwks.get_signing_key_from_jwt(token)
            claims = jwt.decode(
                token, signing_key.key, algorithms=["RS256"],
                audience=self.project_id, issuer=self.issuer,
                leeway=self.leeway,
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            logger.info("Rejected expired token")
            return None
        except jwt.PyJWTError as exc:
            logger.info("Rejected token: %s", exc)
            return None
        if not claims.get("sub"):
            return None
        return VerifiedIdentity(subject_id=claims["sub"], email=claims.get("email") or "")


def get_verifier():
    verifier = current_app.config.get("TOKEN_VERIFIER")
    if verifier is None:
        verifier = FirebaseTokenVerifier(FIREBASE_PROJECT_ID)
        current_app.config["TOKEN_VERIFIER"] = verifier
    return verifier


def bearer_token():
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def auth_required(f):
    """Verify the bearer token, resolve the user, and expose it as ``g.user``."""
    @wraps(f)
    def decorated(*args, **kwargs):
        token = bearer_token()
        if token is None:
            raise Unauthenticated("Missing Authorization header")
        identity = get_verifier().verify(token)
        if identity is None:
            audit_log.warning("AUTH rejected — ip=%s path=%s", request.remote_addr, request.path)
            raise Unauthenticated("Invalid or expired token")
        g.user = resolve(get_db(), identity)
        return f(*args, **kwargs)
    return decorated


def current_user():
    return g.user
