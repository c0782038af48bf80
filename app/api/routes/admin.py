from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.auth.admin import get_admin_user
from app.config.storage import LocalFileStorage, get_file_storage, get_profile_storage
from app.database.connection import get_db
from app.models.user import User
from app.schemas.user import AdminUserResponse, UserResponse, UserStatusUpdate
from app.services import users as user_service

router = APIRouter(prefix="/admin", tags=["Admin"])

@router.get("/users", response_model=List[AdminUserResponse])
def list_users(
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user)
):
    """
    List all users with the number of todos they created and are assigned
    """
    return [
        AdminUserResponse(
            **UserResponse.model_validate(entry["user"]).model_dump(),
            created_todo_count=entry["created_todo_count"],
            assigned_todo_count=entry["assigned_todo_count"],
        )
        for entry in user_service.list_users(db)
    ]

@router.patch("/users/{user_id}/status", response_model=UserResponse)
def update_user_status(
    user_id: int,
    status_update: UserStatusUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user)
):
    """
    Enable or disable an account (ACTIVE / DISABLED)
    """
    return user_service.set_status(db, admin, user_id, status_update.status)

@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    storage: LocalFileStorage = Depends(get_file_storage),
    profile_storage: LocalFileStorage = Depends(get_profile_storage),
    admin: User = Depends(get_admin_user)
):
    """
    Permanently delete a user, their created and assigned todos, those todos' files
    and the user's profile picture
    """
    user_service.delete_user(db, storage, profile_storage, admin, user_id)
    return None
