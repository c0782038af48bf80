from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.database.connection import get_db
from app.models.user import User, UserStatus
from app.auth.utils import verify_token

security = HTTPBearer()

def _credentials_exception(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )

def get_user_from_token(token: str, db: Session, token_type: str = "access") -> User:
    """Resolve the user a token was issued to"""
    try:
        payload = verify_token(token, token_type)
    except ValueError as e:
        raise _credentials_exception(str(e))

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise _credentials_exception()

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise _credentials_exception()
    return user

def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Get current authenticated user from the bearer access token.

    The account status is not checked here: a disabled user keeps access to
    their todos until the token expires. Disabled accounts are refused at
    login and refresh.
    """
    return get_user_from_token(credentials.credentials, db, "access")

def get_refresh_token_user_from_cookie(refresh_token: str, db: Session) -> User:
    """Get user from the refresh token cookie; disabled accounts cannot refresh"""
    user = get_user_from_token(refresh_token, db, "refresh")
    if user.status == UserStatus.DISABLED:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is disabled"
        )
    return user
