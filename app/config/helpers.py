from typing import List
from fastapi import HTTPException, UploadFile, status
from sqlalchemy.orm import Session
from app.config.settings import settings
from app.models.user import User
from app.services.files import IncomingFile

def get_user_or_404(db: Session, user_id: int) -> User:
    """
    Get user by ID or raise 404 if not found.

    Args:
        db: Database session
        user_id: ID of the user to retrieve

    Returns:
        User: User object if found

    Raises:
        HTTPException: 404 if user not found
    """
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User with ID {user_id} not found"
        )
    return user

def ensure_self_or_admin(current_user: User, user_id: int) -> None:
    """Raise 403 unless the caller is the user in question or an admin"""
    if not current_user.is_admin and current_user.id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied"
        )

def read_upload(upload: UploadFile) -> IncomingFile:
    """
    Read an uploaded file into memory.

    At most MAX_FILE_SIZE + 1 bytes are read: enough for the file service to
    tell that a file is over the limit without buffering all of it.
    """
    data = upload.file.read(settings.MAX_FILE_SIZE + 1)
    return IncomingFile(
        original_name=upload.filename or "file",
        content_type=upload.content_type,
        data=data,
    )

def read_uploads(uploads) -> List[IncomingFile]:
    return [read_upload(upload) for upload in (uploads or [])]
