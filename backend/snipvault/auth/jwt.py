"""JWT decoding (and issuing, for local development and tests).

SnipVault does not own user accounts: the identity provider signs the
access token and SnipVault only trusts its claims.

Token claims:
  - sub:   stable user ID (becomes ``owner_id`` on every query)
  - type:  "access"
  - exp:   expiry timestamp
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from snipvault.config import settings

ALGORITHM = settings.jwt_algorithm


def create_access_token(
    user_id: str,
    expires_delta: timedelta | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload = {
        "sub": user_id,
        "type": "access",
        "exp": expire,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT. Returns empty dict on failure."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return {}
