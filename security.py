from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from config import Settings
from errors import InvalidToken
from schemas import TokenClaims

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password, hashed_password):
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Not a hash passlib recognises.
        return False


def get_password_hash(password):
    return pwd_context.hash(password)


def create_access_token(claims: TokenClaims, settings: Settings, expires_delta: Optional[timedelta] = None):
    to_encode = claims.model_dump(by_alias=True)
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.token_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.signing_secret, algorithm=settings.token_algorithm)


def decode_access_token(token: str, settings: Settings) -> TokenClaims:
    try:
        payload = jwt.decode(token, settings.signing_secret, algorithms=[settings.token_algorithm])
    except JWTError:
        raise InvalidToken()
    user_id = payload.get("userId")
    email = payload.get("email")
    if not user_id or not email:
        raise InvalidToken()
    return TokenClaims(user_id=user_id, email=email)
