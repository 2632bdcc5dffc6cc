"""
NoteNest Backend - Auth Schemas
=================================

Request and response bodies for /api/auth/register and /api/auth/login.
The user object returned to clients never includes the password hash.
"""

from pydantic import BaseModel, EmailStr, Field

from notenest.models.user import User


class RegisterRequest(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=1)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserResponse(BaseModel):
    id: int
    username: str
    email: str

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    message: str
    token: str = Field(description="Bearer token, valid for one day")
    user: UserResponse

    @classmethod
    def build(cls, message: str, token: str, user: User) -> "AuthResponse":
        return cls(message=message, token=token, user=UserResponse.model_validate(user))
