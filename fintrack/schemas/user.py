# fintrack/schemas/user.py
import uuid
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from .common import OptionalText

class UserRegister(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    # No "@", so a login identifier is never both a username and an email
    username: str = Field(..., min_length=3, max_length=30, pattern=r"^[^\s@]+$")
    email: EmailStr
    password: str = Field(..., min_length=8)

class UserLogin(BaseModel):
    username_or_email: str = Field(..., min_length=1, description="Username or email")
    password: str = Field(..., min_length=1)

# Public fields returned on GET /users/me
class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: EmailStr
    username: str
    name: str
    created_at: datetime

# Fields accepted on PATCH /users/me; name and password are the only mutable ones
class UserUpdate(BaseModel):
    name: OptionalText = Field(None, min_length=2, max_length=100)
    current_password: Optional[str] = None
    new_password: Optional[str] = Field(None, min_length=8)

class AuthResponse(BaseModel):
    success: bool = True
    message: str
    token: str
    user: UserRead
