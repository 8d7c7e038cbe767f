from pydantic import BaseModel, EmailStr

from app.schemas.directory import UserResponse


class LoginRequest(BaseModel):
    """Email-only login; unknown institutional emails are registered as developers."""
    email: EmailStr


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
