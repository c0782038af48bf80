from fastapi import Depends, HTTPException, status
from app.models.user import User
from app.auth.dependencies import get_current_user

def get_admin_user(current_user: User = Depends(get_current_user)) -> User:
    """Dependency to ensure current user has the admin role"""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required"
        )
    return current_user
