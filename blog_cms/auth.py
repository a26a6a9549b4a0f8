"""
Auth gate: password hashing, signed session tokens, credential checks.

Tokens are HS256 JWTs carrying the editor's ``id``, ``email`` and ``name``.
The request layer only ever asks one question of this module: "does this
credential yield an identity?"
"""

import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Dict, Optional

import bcrypt
import jwt
from jwt.exceptions import PyJWTError

from blog_cms.config import Settings, get_settings
from blog_cms.exceptions import ValidationError
from blog_cms.models import AuthUser
from blog_cms.utils import utc_now

if TYPE_CHECKING:
    from blog_cms.storage import PostStore

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
BCRYPT_ROUNDS = 10


# =============================================================================
# PASSWORDS
# =============================================================================


def hash_password(password: str) -> str:
    """Return a salted bcrypt hash of *password*.

    Raises:
        ValidationError: If *password* is empty or longer than bcrypt's
            72-byte limit.
    """
    if not password:
        raise ValidationError("password cannot be empty")
    encoded = password.encode("utf-8")
    if len(encoded) > 72:
        raise ValidationError("password cannot be longer than 72 bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check *password* against a ``$2a$``/``$2b$`` bcrypt hash."""
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError as exc:
        logger.warning("[AUTH] Unusable password hash: %s", exc)
        return False


# =============================================================================
# TOKENS
# =============================================================================


def create_token(user: AuthUser, settings: Optional[Settings] = None) -> str:
    """Sign a session token for *user*, valid for ``jwt_expire_days``."""
    settings = settings or get_settings()
    now = utc_now()
    payload: Dict[str, Any] = {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "iat": now,
        "exp": now + timedelta(days=settings.jwt_expire_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGORITHM)


def verify_token(token: Optional[str], settings: Optional[Settings] = None) -> Optional[AuthUser]:
    """Decode a session token.

    Returns:
        The identity it carries, or ``None`` for a missing, tampered,
        expired or malformed token.
    """
    if not token:
        return None
    settings = settings or get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[ALGORITHM])
    except PyJWTError:
        return None

    try:
        return AuthUser(
            id=str(payload["id"]),
            email=payload["email"],
            name=payload.get("name", ""),
        )
    except KeyError:
        return None


# =============================================================================
# LOGIN
# =============================================================================


async def authenticate(store: "PostStore", email: str, password: str) -> Optional[AuthUser]:
    """Resolve an email/password pair to an identity.

    Returns:
        The editor identity, or ``None`` when the user is unknown, has no
        password hash, or the password does not match.
    """
    user = await store.get_user_by_email(email)
    if user is None:
        logger.warning("[AUTH] Login failed: user not found for email %s", email)
        return None
    if not user.password:
        logger.warning("[AUTH] Login failed: user %s has no password hash", email)
        return None
    if not verify_password(password, user.password):
        logger.warning("[AUTH] Login failed: password mismatch for email %s", email)
        return None
    return user.identity()


__all__ = [
    "ALGORITHM",
    "hash_password",
    "verify_password",
    "create_token",
    "verify_token",
    "authenticate",
]
