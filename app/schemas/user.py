from pydantic import BaseModel, EmailStr, field_validator
from app.config.validators import validate_password
from app.models.user import UserRole, UserStatus
from typing import Optional
from datetime import datetime

class UserCreate(BaseModel):
    """Schema for creating a new user"""
    full_name: str
    email: EmailStr
    password: str

    @field_validator('full_name')
    @classmethod
    def validate_full_name(cls, v):
        if not v or not v.strip():
            raise ValueError('Full name cannot be empty')
        return v.strip()

    @field_validator('password')
    @classmethod
    def validate_password_strength(cls, v):
        is_valid, errors = validate_password(v)
        if not is_valid:
            error_message = "Password validation failed: " + ", ".join(errors)
            raise ValueError(error_message)
        return v

class UserLogin(BaseModel):
    """Schema for user login"""
    email: EmailStr
    password: str

class UserUpdate(BaseModel):
    """Schema for updating profile information"""
    full_name: Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator('full_name')
    @classmethod
    def validate_full_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Full name cannot be empty')
        return v.strip() if v else None

class PasswordChange(BaseModel):
    """Schema for changing a password"""
    current_password: str
    new_password: str

    @field_validator('new_password')
    @classmethod
    def validate_password_strength(cls, v):
        is_valid, errors = validate_password(v)
        if not is_valid:
            raise ValueError("Password validation failed: " + ", ".join(errors))
        return v

class UserStatusUpdate(BaseModel):
    """Schema for enabling or disabling an account"""
    status: UserStatus

class UserSummary(BaseModel):
    """Identity shown next to todos"""
    id: int
    full_name: str
    email: str
    profile_picture: Optional[str] = None

    class Config:
        from_attributes = True

class UserResponse(BaseModel):
    """Schema for user response"""
    id: int
    full_name: str
    email: str
    role: UserRole
    status: UserStatus
    profile_picture: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class AdminUserResponse(UserResponse):
    created_todo_count: int = 0
    assigned_todo_count: int = 0
