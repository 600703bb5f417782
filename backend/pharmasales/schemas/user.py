from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from pharmasales.core.config import settings
from pharmasales.models.user import UserRole
from pharmasales.schemas.common import APIModel


class UserAddress(APIModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipCode: Optional[str] = None
    country: str = "Egypt"


class UserCreate(APIModel):
    username: str = Field(min_length=1)
    email: EmailStr
    password: str
    first_name: str = Field(alias="firstName", min_length=1)
    last_name: str = Field(alias="lastName", min_length=1)
    role: UserRole = UserRole.USER.value
    phone: str = Field(min_length=1)
    whatsapp: Optional[str] = None
    address: Optional[UserAddress] = None
    is_active: bool = Field(True, alias="isActive")
    profile_picture: Optional[str] = Field(None, alias="profilePicture")
    allowed_pages: List[str] = Field(default_factory=list, alias="allowedPages")

    @field_validator("username", "email")
    @classmethod
    def normalize_identity(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("password")
    @classmethod
    def password_min_length(cls, v: str) -> str:
        if len(v) < settings.MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters")
        return v


class UserUpdate(APIModel):
    username: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    role: Optional[UserRole] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    address: Optional[UserAddress] = None
    is_active: Optional[bool] = Field(None, alias="isActive")
    profile_picture: Optional[str] = Field(None, alias="profilePicture")
    allowed_pages: Optional[List[str]] = Field(None, alias="allowedPages")

    @field_validator("username", "email")
    @classmethod
    def normalize_identity(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().lower() if v is not None else v

    @field_validator("password")
    @classmethod
    def password_min_length(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v) < settings.MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters")
        return v


class UserSummary(APIModel):
    id: int
    username: str
    email: str
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    phone: Optional[str] = None
    role: str


class UserResponse(UserSummary):
    whatsapp: Optional[str] = None
    address: Optional[dict] = None
    is_active: bool = Field(alias="isActive")
    profile_picture: Optional[str] = Field(None, alias="profilePicture")
    allowed_pages: List[str] = Field(default_factory=list, alias="allowedPages")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")


class LoginUser(APIModel):
    username: str
    email: str
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    role: str


class LoginRequest(APIModel):
    username: Optional[str] = None
    password: Optional[str] = None
