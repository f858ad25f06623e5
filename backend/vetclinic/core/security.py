import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

ROLE_PET_OWNER = "petOwner"
ROLE_CLINIC_OWNER = "clinicOwner"
VALID_ROLES = (ROLE_PET_OWNER, ROLE_CLINIC_OWNER)


def get_jwt_secret_key():
    """Get JWT secret key with production validation.

    In production (FLASK_ENV=production) the secret must be set and at least
    32 characters long.

    Raises:
        ValueError: If production deployment uses weak or missing JWT secret
    """
    secret = os.getenv("JWT_SECRET_KEY", "dev-jwt-secret-change-me")
    is_production = os.getenv("FLASK_ENV") == "production"

    if is_production:
        weak_secrets = ["dev-jwt-secret-change-me", "dev-secret-change-me", "secret123"]
        if secret in weak_secrets or len(secret) < 32:
            raise ValueError(
                "Production deployment requires strong JWT_SECRET_KEY (min 32 chars). "
                "Set JWT_SECRET_KEY environment variable."
            )

    return secret


JWT_ALGORITHM = "HS256"
JWT_EXPIRATION_HOURS = 24


def create_access_token(
    data: Dict[str, Any], expires_delta: Optional[timedelta] = None
) -> str:
    """Create a JWT access token.

    Args:
        data: Payload data to encode in the token
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(hours=JWT_EXPIRATION_HOURS)

    to_encode.update({"exp": expire})

    return jwt.encode(to_encode, get_jwt_secret_key(), algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode and validate a JWT access token.

    Returns:
        Decoded payload if valid, None if invalid or expired
    """
    try:
        return jwt.decode(token, get_jwt_secret_key(), algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError:
        return None


def create_user_token(user_id: str, role: str, email: str = "") -> str:
    """Create a JWT token for a pet owner or clinic owner."""
    if role not in VALID_ROLES:
        raise ValueError(f"Unknown role '{role}'")
    token_data = {"sub": str(user_id), "role": role, "email": email, "type": "access"}
    return create_access_token(token_data)


def get_user_from_token(token: str) -> Optional[Dict[str, Any]]:
    """Extract the caller identity from a JWT token.

    Returns:
        ``{"user_id", "role", "email"}`` if valid, None if invalid
    """
    payload = decode_access_token(token)
    if payload is None:
        return None

    user_id = payload.get("sub")
    role = payload.get("role")

    if user_id is None or role not in VALID_ROLES:
        return None

    return {"user_id": str(user_id), "role": role, "email": payload.get("email", "")}
