from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from workdesk.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)
    role: str = Field(min_length=1)
    name: Optional[str] = None
    role_title: Optional[str] = None
    department: Optional[str] = None


class RegisterResponse(BaseModel):
    id: int
    email: str
    role: str

    model_config = {"from_attributes": True}


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class LoginResponse(CamelModel):
    token: str
    user_id: int
    role: str
    email: str


class MeOut(BaseModel):
    id: int
    email: str
    role: str

    model_config = {"from_attributes": True}


class ChangePasswordRequest(CamelModel):
    new_password: str


class UserOut(CamelModel):
    id: int
    email: str
    role: str
    enabled: bool = True
    created_at: Optional[datetime] = None


class RoleUpdate(BaseModel):
    role: str = Field(min_length=1)
