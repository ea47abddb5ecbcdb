from pydantic import BaseModel, EmailStr, Field
from typing import Optional

class SignupRequest(BaseModel):
    """Schema for signup request; missing fields are reported as a 400"""
    username: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, max_length=100)

class SigninRequest(BaseModel):
    """Schema for signin request"""
    username: str = Field(..., description="Username or email address")
    password: str = Field(..., description="Password")

class TokenData(BaseModel):
    """Payload carried by a session token"""
    user_id: int
    sid: str

class GoogleProfile(BaseModel):
    """Subset of the Google userinfo response used for sign-in"""
    email: EmailStr
    name: Optional[str] = None
    picture: Optional[str] = None
