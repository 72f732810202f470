from datetime import datetime, timedelta
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from lawconnect.core.config import settings
from lawconnect.core.errors import AuthError

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.PASSWORD_HASH_ROUNDS,
)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class TokenExpiredError(AuthError):
    default_message = "Token has expired"


class InvalidTokenError(AuthError):
    default_message = "Invalid token"


class TokenPayload(BaseModel):
    user_id: str
    role: str


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """
    False for accounts without a stored hash and for unreadable hashes.
    """
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def _encode(claims: dict, expires_delta: timedelta, issued_at: Optional[datetime]) -> str:
    issued_at = issued_at or datetime.utcnow()
    to_encode = claims.copy()
    to_encode.update({"iat": issued_at, "exp": issued_at + expires_delta})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(
    user_id: str,
    role: str,
    expires_delta: Optional[timedelta] = None,
    issued_at: Optional[datetime] = None,
) -> str:
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _encode(
        {"sub": str(user_id), "role": role, "type": ACCESS_TOKEN_TYPE},
        expires_delta,
        issued_at,
    )


def create_refresh_token(user_id: str, issued_at: Optional[datetime] = None) -> str:
    return _encode(
        {"sub": str(user_id), "type": REFRESH_TOKEN_TYPE},
        timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        issued_at,
    )


def decode_access_token(token: str) -> TokenPayload:
    """
    Verify signature and expiry of an access token.

    Raises TokenExpiredError when the embedded expiry has passed and
    InvalidTokenError for anything else (bad signature, garbage input,
    refresh tokens, missing claims).
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTError:
        raise InvalidTokenError()

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise InvalidTokenError()
    user_id = payload.get("sub")
    role = payload.get("role")
    if not user_id or not role:
        raise InvalidTokenError()
    return TokenPayload(user_id=user_id, role=role)
