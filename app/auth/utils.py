from passlib.context import CryptContext
from jose import ExpiredSignatureError, JWTError, jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
from app.config.settings import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

def hash_password(password: str) -> str:
    """Hash a password using bcrypt"""
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash"""
    return pwd_context.verify(plain_password, hashed_password)

def create_token(
    data: dict,
    expires_delta: Optional[timedelta] = None,
    token_type: str = "access"
) -> str:
    """Create JWT token (access or refresh)"""
    to_encode = data.copy()
    now = datetime.now(timezone.utc)

    if expires_delta:
        expire = now + expires_delta
    elif token_type == "access":
        expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    else:
        expire = now + timedelta(minutes=settings.REFRESH_TOKEN_EXPIRE_MINUTES)

    to_encode.update({
        "exp": expire,
        "type": token_type
    })

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create access token"""
    return create_token(data, expires_delta, "access")

def create_refresh_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create refresh token"""
    return create_token(data, expires_delta, "refresh")

def tokens_for_user(user) -> tuple[str, str]:
    """Access and refresh token pair; the subject is the user id"""
    claims = {"sub": str(user.id)}
    return create_access_token(claims), create_refresh_token(claims)

def verify_token(token: str, expected_type: str = "access") -> dict:
    """Verify JWT token and check its type"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise ValueError("Token has expired")
    except JWTError as e:
        raise ValueError(f"Invalid token: {str(e)}")
    if payload.get("type") != expected_type:
        raise ValueError(f"Expected token type {expected_type}, got {payload.get('type')}")
    return payload
