"""
Authentication module for Task Hub.
Turns a bearer credential issued by the auth service into a trusted identity.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from .config import Settings, get_settings
from .exceptions import AuthenticationError

# Configure logging
logger = logging.getLogger(__name__)

# Security scheme; missing credentials are reported as 401 by get_current_user
security = HTTPBearer(
    scheme_name="Bearer Token",
    description="JWT Bearer token from Auth Service",
    auto_error=False,
)

BEARER_PREFIX = "Bearer "


class CurrentUser:
    """Represents the current authenticated user."""

    def __init__(self, user_id: int, role: str, admin_role: str = "admin", **kwargs):
        self.user_id = user_id
        self.role = role
        self.admin_role = admin_role
        self.extra_data = kwargs

    @property
    def is_admin(self) -> bool:
        return self.role == self.admin_role

    def __str__(self):
        return f"User(id={self.user_id}, role={self.role})"

    def __repr__(self):
        return self.__str__()

    @classmethod
    def from_claims(cls, claims: Dict[str, Any], admin_role: str = "admin") -> "CurrentUser":
        """
        Create CurrentUser from decoded token claims.

        ``userId``/``role`` are preferred; ``sub``/``user_type`` are what the
        companion auth service puts in its tokens.
        """
        raw_id = claims.get("userId", claims.get("sub"))
        role = claims.get("role", claims.get("user_type"))
        if raw_id is None or not role:
            raise AuthenticationError("Invalid token", reason="invalid")
        try:
            user_id = int(raw_id)
        except (TypeError, ValueError):
            raise AuthenticationError("Invalid token", reason="invalid")
        return cls(
            user_id=user_id,
            role=str(role),
            admin_role=admin_role,
            **{k: v for k, v in claims.items() if k not in ["userId", "sub", "role", "user_type"]}
        )


def decode_token(token: str, settings: Settings) -> Dict[str, Any]:
    """
    Verify the token signature and expiry.

    Raises:
        AuthenticationError: With reason ``expired`` or ``invalid``.
    """
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.algorithm])
    except ExpiredSignatureError:
        logger.warning("Token verification failed: expired token")
        raise AuthenticationError("Token expired", reason="expired")
    except JWTError as e:
        logger.warning(f"Token verification failed: {e}")
        raise AuthenticationError("Invalid token", reason="invalid")


def extract_identity(raw_credential: Optional[str], settings: Optional[Settings] = None) -> CurrentUser:
    """
    Validate a raw credential (optionally ``Bearer``-prefixed) into an identity.

    Args:
        raw_credential: Authorization header value or bare token
        settings: Settings holding the shared secret; defaults to get_settings()

    Returns:
        CurrentUser: identity with user_id and role

    Raises:
        AuthenticationError: If the credential is missing or fails verification
    """
    settings = settings or get_settings()
    token = (raw_credential or "").lstrip()
    if token.startswith(BEARER_PREFIX):
        token = token[len(BEARER_PREFIX):]
    token = token.strip()
    if not token:
        raise AuthenticationError("Access denied", reason="missing")

    claims = decode_token(token, settings)
    return CurrentUser.from_claims(claims, admin_role=settings.admin_role)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> CurrentUser:
    """
    Dependency to get current authenticated user.

    Raises:
        AuthenticationError: If the token is missing or invalid
    """
    if credentials is None:
        logger.debug("Request without bearer credentials")
        raise AuthenticationError("Access denied", reason="missing")

    current_user = extract_identity(credentials.credentials)
    logger.debug(f"Authenticated user: {current_user}")
    return current_user
