from fastapi import APIRouter, Depends, HTTPException, status, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from app.database.connection import get_db
from app.models.user import User, UserStatus
from app.schemas.user import UserCreate, UserLogin, UserResponse
from app.schemas.token import AccessTokenResponse, LoginResponse
from app.auth.utils import tokens_for_user
from app.config.settings import settings
from app.auth.dependencies import get_current_user, get_refresh_token_user_from_cookie
from app.services import users as user_service

router = APIRouter(prefix="/auth", tags=["Authentication"])

def set_refresh_token_cookie(response: Response, refresh_token: str):
    """Set refresh token as HTTP-only cookie"""
    response.set_cookie(
        key="refresh_token",
        value=refresh_token,
        max_age=settings.REFRESH_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        path="/auth/refresh"
    )

def clear_refresh_token_cookie(response: Response):
    """Clear refresh token cookie"""
    response.delete_cookie(
        key="refresh_token",
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        path="/auth/refresh"
    )

@router.post("/register", response_model=dict, status_code=status.HTTP_201_CREATED)
def register(user: UserCreate, db: Session = Depends(get_db)):
    """
    Register a new user

    - **full_name**: User's full name (required, cannot be empty)
    - **email**: User's email address (required, must be valid email)
    - **password**: User's password (must pass the strength rules)
    """
    new_user = user_service.register_user(db, user.full_name, user.email, user.password)
    return {
        "message": "User registered successfully",
        "user_id": new_user.id,
        "role": new_user.role.value,
        "status": new_user.status.value
    }

@router.post("/login", response_model=LoginResponse)
def login(user_credentials: UserLogin, db: Session = Depends(get_db)):
    user = user_service.authenticate(db, user_credentials.email, user_credentials.password)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if user.status == UserStatus.DISABLED:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is disabled. Contact an administrator for assistance.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token, refresh_token = tokens_for_user(user)

    response = JSONResponse(
        content={
            "access_token": access_token,
            "token_type": "bearer",
            "user": UserResponse.model_validate(user).model_dump(mode="json")
        }
    )
    set_refresh_token_cookie(response, refresh_token)
    return response

@router.post("/refresh", response_model=AccessTokenResponse)
def refresh_access_token(
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Refresh access token using refresh token from HTTP-only cookie

    - Requires valid refresh token in HTTP-only cookie
    - Returns new access token only
    - Refresh token is rotated in the cookie
    """
    refresh_token = request.cookies.get("refresh_token")

    if not refresh_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    current_user = get_refresh_token_user_from_cookie(refresh_token, db)
    access_token, new_refresh_token = tokens_for_user(current_user)

    response = JSONResponse(
        content={
            "access_token": access_token,
            "token_type": "bearer"
        }
    )
    set_refresh_token_cookie(response, new_refresh_token)
    return response

@router.post("/logout")
def logout():
    """
    Logout user by clearing refresh token cookie
    """
    response = JSONResponse(
        content={"message": "Successfully logged out"}
    )
    clear_refresh_token_cookie(response)
    return response

@router.get("/me", response_model=UserResponse)
def get_profile(current_user: User = Depends(get_current_user)):
    """
    Get current user's profile
    """
    return current_user
