from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, model_validator

from campus_eats.schemas.base import CamelModel


class UserSignup(CamelModel):
    name: str
    email: EmailStr
    phone: Optional[str] = None
    password: str = Field(min_length=8)
    confirm_password: str

    @model_validator(mode="after")
    def validate_passwords(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class UserLogin(CamelModel):
    email: EmailStr
    password: str


class UserUpdate(CamelModel):
    name: Optional[str] = None
    phone: Optional[str] = None


class PasswordChange(CamelModel):
    current_password: str
    new_password: str = Field(min_length=8)


class UserRead(CamelModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    role: str
    email_verified: bool
    preferences: Optional[dict] = None


class Token(BaseModel):
    access_token: str
    token_type: str


class SessionRead(CamelModel):
    id: str
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    created_at: datetime
    expires_at: datetime
    current: bool = False


class CurrentSessionResponse(CamelModel):
    authenticated: bool = True
    user: UserRead
    session: SessionRead


class SessionListResponse(CamelModel):
    success: bool = True
    sessions: List[SessionRead]
    total: int


class PreferencesResponse(CamelModel):
    success: bool = True
    preferences: dict
    message: Optional[str] = None
