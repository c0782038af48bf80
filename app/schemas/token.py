from pydantic import BaseModel
from app.schemas.user import UserResponse

class AccessTokenResponse(BaseModel):
    """Schema for access token"""
    access_token: str
    token_type: str

class LoginResponse(AccessTokenResponse):
    """Access token together with the logged-in user"""
    user: UserResponse
