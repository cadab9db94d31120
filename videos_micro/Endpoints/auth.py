from datetime import timedelta, datetime, timezone
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt, JWTError
from dotenv import load_dotenv
from typing import Annotated, Optional
import logging
import os
import uuid

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

# Environment variables
SECRET_KEY = os.getenv("JWT_SECRET")
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
TOKEN_ISSUER = "videos-access"

if not SECRET_KEY:
    logger.warning("⚠️ JWT_SECRET is not set, every bearer token will be rejected")

# Missing or non-bearer headers come back as None so callers pick the error
bearer_scheme = HTTPBearer(auto_error=False)


def get_bearer_token(credentials: Optional[HTTPAuthorizationCredentials]) -> str:
    """Return the token from parsed ``Authorization: Bearer <token>`` credentials."""
    token = credentials.credentials.strip() if credentials else ""
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Couldn't find JWT",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token


def validate_jwt(token: str, secret: Optional[str]) -> uuid.UUID:
    """Verify signature, expiry and issuer; return the user id from ``sub``."""
    try:
        if not secret:
            raise JWTError("No signing secret configured")
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM], issuer=TOKEN_ISSUER)
        return uuid.UUID(str(payload.get("sub")))
    except (JWTError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Couldn't validate JWT",
            headers={"WWW-Authenticate": "Bearer"},
        )


# Token creation
def create_access_token(
    user_id: uuid.UUID, expires_delta: timedelta = timedelta(minutes=60 * 24), secret: Optional[str] = None
) -> str:
    now = datetime.now(timezone.utc)
    encode = {
        "sub": str(user_id),
        "iss": TOKEN_ISSUER,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(encode, secret or SECRET_KEY, algorithm=ALGORITHM)


# Current user dependency
async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)]
) -> uuid.UUID:
    return validate_jwt(get_bearer_token(credentials), SECRET_KEY)
