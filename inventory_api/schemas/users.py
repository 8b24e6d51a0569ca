from pydantic import Field
from typing import Optional
from datetime import datetime
from inventory_api.models.users import UserRole
from inventory_api.schemas.base import CamelModel

# Required-field and length rules are enforced by AuthService so that callers
# get its literal messages instead of generic schema errors.

class UserCreate(CamelModel):
    username: Optional[str] = Field(None, description="Unique username")
    email: Optional[str] = Field(None, description="Unique email address")
    password: Optional[str] = Field(None, description="Plaintext password, at least 6 characters")
    role: Optional[str] = Field(None, description='Either "admin" or "user"; defaults to "user"')

class UserLogin(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None

class UserResponse(CamelModel):
    id: str
    username: str
    email: str
    role: UserRole
    created_at: datetime
    updated_at: datetime

class MessageResponse(CamelModel):
    message: str
