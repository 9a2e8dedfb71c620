from datetime import datetime, timedelta
from typing import Optional

from passlib.context import CryptContext
from jose import jwt, JWTError

from rishta.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: timedelta = None) -> str:
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return encoded_jwt


def create_account_token(account_id: int, role: str, expires_delta: timedelta = None) -> str:
    """Bearer token carrying the account id (``sub``) and role."""
    return create_access_token({"sub": str(account_id), "role": role}, expires_delta)


def verify_token(token: str) -> Optional[dict]:
    """
    Verify JWT token using the application's own JWT secret.
    Returns the decoded payload, or None if the token is invalid or expired.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        return payload
    except JWTError:
        return None


def get_account_id_from_token(token: str) -> Optional[int]:
    """Extract the account id from a verified token, None if it can't be trusted."""
    payload = verify_token(token)
    if not payload:
        return None
    account_id = payload.get("sub")
    if account_id is None:
        return None
    try:
        return int(account_id)
    except (ValueError, TypeError):
        return None
