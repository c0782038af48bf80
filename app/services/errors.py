"""
Domain errors for the todo and file services.

Each error is an HTTPException so it travels from a service straight to the
client with its status code; routes do not translate them.
"""
from typing import List, Optional
from fastapi import HTTPException, status


class TodoAppError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request could not be processed"

    def __init__(self, detail=None, headers: Optional[dict] = None):
        super().__init__(
            status_code=type(self).status_code,
            detail=detail if detail is not None else self.default_detail,
            headers=headers,
        )


class ValidationError(TodoAppError):
    """A required field is missing or malformed"""
    status_code = 422

    def __init__(self, field: Optional[str] = None, message: str = "", errors: Optional[List[dict]] = None):
        self.errors = list(errors or [])
        if field is not None or message:
            self.errors.append({"field": field, "message": message})
        super().__init__(detail={"message": "Validation failed", "errors": self.errors})


class InvalidAssignee(TodoAppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Assigned user not found or disabled"


class NotFoundOrForbidden(TodoAppError):
    """Raised both for missing records and for records the caller may not see"""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found or access denied"


class AccessDenied(TodoAppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Access denied"


class UnsupportedFileType(TodoAppError):
    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    default_detail = "File type not allowed"


class FileTooLarge(TodoAppError):
    status_code = 413
    default_detail = "File too large"


class StorageInconsistency(TodoAppError):
    """File metadata exists but the stored bytes are gone"""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "File not found"
