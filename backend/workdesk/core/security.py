from datetime import datetime, timedelta, timezone
from functools import lru_cache
import uuid

from jose import jwt, JWTError
from passlib.context import CryptContext

from workdesk.config import Settings


@lru_cache
def _pwd_context(rounds: int) -> CryptContext:
    return CryptContext(
        schemes=["bcrypt"],
        deprecated="auto",
        bcrypt__rounds=rounds,
    )


def _password_context(settings: Settings) -> CryptContext:
    return _pwd_context(settings.BCRYPT_ROUNDS)


def hash_password(password: str, settings: Settings) -> str:
    return _password_context(settings).hash(password)


def verify_password(plain_password: str, hashed_password: str | None, settings: Settings) -> bool:
    # externally authenticated users carry no local hash
    if not hashed_password:
        return False
    try:
        return _password_context(settings).verify(plain_password, hashed_password)
    except ValueError:
        return False


def create_access_token(data: dict, settings: Settings, expires_minutes: int | None = None) -> str:
    now = datetime.now(timezone.utc)
    minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    to_encode = data.copy()
    to_encode["iat"] = int(now.timestamp())
    to_encode["exp"] = int((now + timedelta(minutes=minutes)).timestamp())
    if "jti" not in to_encode:
        to_encode["jti"] = uuid.uuid4().hex

    return jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )


def decode_token(token: str, settings: Settings):
    try:
        return jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
    except JWTError:
        return None
