"""
Identity store operations: profile changes, avatars and admin account management.
"""
import logging
from typing import List, Optional
from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload
from app.auth.utils import hash_password, verify_password
from app.config.helpers import get_user_or_404
from app.config.storage import LocalFileStorage, StorageObjectMissing
from app.config.validators import is_allowed_image
from app.models.todo import Todo
from app.models.user import User, UserRole, UserStatus
from app.services.errors import FileTooLarge, UnsupportedFileType
from app.services.files import IncomingFile, remove_blobs
from app.config.settings import settings

logger = logging.getLogger(__name__)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(func.lower(User.email) == email.lower()).first()


def register_user(db: Session, full_name: str, email: str, password: str) -> User:
    if get_user_by_email(db, email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    user = User(
        full_name=full_name,
        email=email,
        hashed_password=hash_password(password),
        role=UserRole.ADMIN if settings.is_admin_email(email) else UserRole.USER,
        status=UserStatus.ACTIVE,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Registered user {user.id} with role {user.role.value}")
    return user


def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user


def update_profile(db: Session, user: User, changes: dict) -> User:
    if changes.get("email") and changes["email"].lower() != user.email.lower():
        if get_user_by_email(db, changes["email"]):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered"
            )
        user.email = changes["email"]
    if changes.get("full_name"):
        user.full_name = changes["full_name"]

    db.commit()
    db.refresh(user)
    return user


def change_password(db: Session, user: User, current_password: str, new_password: str) -> User:
    if not verify_password(current_password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect"
        )
    user.hashed_password = hash_password(new_password)
    db.commit()
    db.refresh(user)
    return user


def _remove_profile_picture(storage: LocalFileStorage, picture: Optional[str]) -> None:
    """Best-effort removal of a stored avatar given its public path"""
    if not picture:
        return
    try:
        storage.delete(picture.rsplit("/", 1)[-1])
    except StorageObjectMissing:
        logger.warning(f"Profile picture already missing: {picture}")
    except (OSError, ValueError) as e:
        logger.warning(f"Could not remove profile picture {picture}: {e}")


def set_profile_picture(db: Session, storage: LocalFileStorage, user: User, upload: IncomingFile) -> User:
    if upload.size > settings.MAX_FILE_SIZE:
        raise FileTooLarge(f"{upload.original_name} exceeds the {settings.MAX_FILE_SIZE} byte limit")
    if not is_allowed_image(upload.original_name, upload.content_type):
        raise UnsupportedFileType("Only image files are allowed")

    previous = user.profile_picture
    name = storage.generate_name(upload.original_name)
    storage.save(name, upload.data)
    user.profile_picture = f"/uploads/{storage.relative_path(name)}"
    try:
        db.commit()
    except Exception:
        db.rollback()
        try:
            storage.delete(name)
        except OSError as e:
            logger.warning(f"Could not clean up stored profile picture {name}: {e}")
        raise

    _remove_profile_picture(storage, previous)

    db.refresh(user)
    return user


def list_users(db: Session) -> List[dict]:
    """All users, newest first, with how many todos each created and is assigned"""
    created = (
        db.query(Todo.created_by_id, func.count(Todo.id))
        .group_by(Todo.created_by_id)
        .all()
    )
    assigned = (
        db.query(Todo.assigned_to_id, func.count(Todo.id))
        .group_by(Todo.assigned_to_id)
        .all()
    )
    created_counts = dict(created)
    assigned_counts = dict(assigned)

    users = db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()
    return [
        {
            "user": user,
            "created_todo_count": created_counts.get(user.id, 0),
            "assigned_todo_count": assigned_counts.get(user.id, 0),
        }
        for user in users
    ]


def set_status(db: Session, admin: User, user_id: int, new_status: UserStatus) -> User:
    user = get_user_or_404(db, user_id)
    old_status = user.status
    user.status = new_status
    db.commit()
    db.refresh(user)
    logger.info(f"Admin {admin.id} changed status of user {user.id} from {old_status.value} to {new_status.value}")
    return user


def delete_user(
    db: Session,
    storage: LocalFileStorage,
    profile_storage: LocalFileStorage,
    admin: User,
    user_id: int,
) -> None:
    """
    Hard delete a user along with every todo they created or are assigned,
    those todos' files and the user's profile picture.
    """
    if admin.id == user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete your own account"
        )
    user = get_user_or_404(db, user_id)

    todos = (
        db.query(Todo)
        .options(selectinload(Todo.files))
        .filter((Todo.created_by_id == user.id) | (Todo.assigned_to_id == user.id))
        .all()
    )
    for todo in todos:
        remove_blobs(storage, todo.files)
    for todo in todos:
        db.delete(todo)
    picture = user.profile_picture
    db.delete(user)
    db.commit()
    _remove_profile_picture(profile_storage, picture)
    logger.info(f"Admin {admin.id} deleted user {user_id} and {len(todos)} todo(s)")
