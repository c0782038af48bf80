import re
from pathlib import PurePath
from typing import List, Optional
from app.config.settings import settings

ATTACHMENT_EXTENSIONS = {
    "jpeg", "jpg", "png", "gif", "pdf", "doc", "docx", "txt",
    "zip", "rar", "xlsx", "xls", "ppt", "pptx",
}
ATTACHMENT_MEDIA_PREFIXES = ("image/", "application/", "text/")

IMAGE_EXTENSIONS = {"jpeg", "jpg", "png", "gif"}
IMAGE_MEDIA_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif"}

def validate_password(password: str) -> tuple[bool, Optional[List[str]]]:
    """
    Validate password against defined rules

    Password Rules:
    - At least PASSWORD_MIN_LENGTH characters long (default 8)
    - Contains at least one uppercase letter
    - Contains at least one lowercase letter
    - Contains at least one digit
    - Contains at least one special character (!@#$%^&*()_+-=[]{}|;:,.<>?)

    Returns:
        tuple: (is_valid, list_of_error_messages)
    """
    errors = []
    min_length = settings.PASSWORD_MIN_LENGTH

    if len(password) < min_length:
        errors.append(f"Password must be at least {min_length} characters long")

    if not re.search(r'[A-Z]', password):
        errors.append("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        errors.append("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        errors.append("Password must contain at least one number")

    if not re.search(r'[!@#$%^&*()_+\-=\[\]{}|;:,.<>?]', password):
        errors.append("Password must contain at least one special character (!@#$%^&*()_+-=[]{}|;:,.<>?)")

    is_valid = len(errors) == 0
    return is_valid, errors if not is_valid else None

def sanitize_filename(name: str) -> str:
    """Strip any directory part and replace unsafe characters with underscores"""
    base = PurePath((name or "").replace("\\", "/")).name
    cleaned = re.sub(r'[^a-zA-Z0-9.-]', '_', base).lstrip('.')
    return cleaned or "file"

def file_extension(name: str) -> str:
    return PurePath(name or "").suffix.lower().lstrip('.')

def is_allowed_attachment(name: str, content_type: Optional[str]) -> bool:
    """Attachments need an allow-listed extension and an image/, application/ or text/ media type"""
    media_type = (content_type or "").lower()
    return (
        file_extension(name) in ATTACHMENT_EXTENSIONS
        and media_type.startswith(ATTACHMENT_MEDIA_PREFIXES)
    )

def is_allowed_image(name: str, content_type: Optional[str]) -> bool:
    return (
        file_extension(name) in IMAGE_EXTENSIONS
        and (content_type or "").lower() in IMAGE_MEDIA_TYPES
    )
