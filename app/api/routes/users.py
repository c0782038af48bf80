from fastapi import APIRouter, Depends, File as FastAPIFile, UploadFile
from sqlalchemy.orm import Session
from app.database.connection import get_db
from app.models.user import User
from app.schemas.user import PasswordChange, UserResponse, UserUpdate
from app.auth.dependencies import get_current_user
from app.config.helpers import ensure_self_or_admin, get_user_or_404, read_upload
from app.config.storage import LocalFileStorage, get_profile_storage
from app.services import users as user_service

router = APIRouter(prefix="/users", tags=["Users"])

@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Get user details (own profile, or any profile for admins)
    """
    ensure_self_or_admin(current_user, user_id)
    return get_user_or_404(db, user_id)

@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    user_update: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Update user information
    Allows updating:
    - Full name
    - Email (must not belong to another account)
    """
    ensure_self_or_admin(current_user, user_id)
    user = get_user_or_404(db, user_id)
    return user_service.update_profile(db, user, user_update.model_dump(exclude_unset=True))

@router.put("/{user_id}/password", response_model=UserResponse)
def change_password(
    user_id: int,
    password_change: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    ensure_self_or_admin(current_user, user_id)
    user = get_user_or_404(db, user_id)
    return user_service.change_password(
        db, user, password_change.current_password, password_change.new_password
    )

@router.post("/{user_id}/profile-picture", response_model=UserResponse)
def upload_profile_picture(
    user_id: int,
    profile_picture: UploadFile = FastAPIFile(...),
    db: Session = Depends(get_db),
    storage: LocalFileStorage = Depends(get_profile_storage),
    current_user: User = Depends(get_current_user)
):
    """
    Upload a profile picture (jpeg, jpg, png or gif)
    """
    ensure_self_or_admin(current_user, user_id)
    user = get_user_or_404(db, user_id)
    return user_service.set_profile_picture(db, storage, user, read_upload(profile_picture))
