from datetime import datetime
from typing import List, Literal, Optional

from pydantic import EmailStr, Field, field_validator

from pharmasales.schemas.common import APIModel
from pharmasales.schemas.user import UserSummary

Weekday = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


class PharmacyAddress(APIModel):
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: Optional[str] = None
    zipCode: Optional[str] = None
    country: str = "Egypt"


class PharmacyContact(APIModel):
    phone: str = Field(min_length=1)
    email: Optional[EmailStr] = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v else v


class WorkingHours(APIModel):
    open: str = "09:00"
    close: str = "22:00"
    days: List[Weekday] = Field(default_factory=list)


class GeoLocation(APIModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class PharmacyCreate(APIModel):
    branch_code: int = Field(alias="branchCode")
    name: str = Field(min_length=1)
    address: PharmacyAddress
    contact: PharmacyContact
    working_hours: WorkingHours = Field(default_factory=WorkingHours, alias="workingHours")
    location: Optional[GeoLocation] = None
    is_active: bool = Field(True, alias="isActive")
    description: Optional[str] = None
    pharmacists: List[int] = Field(default_factory=list)
    supervisor: Optional[int] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()

    @field_validator("pharmacists")
    @classmethod
    def unique_pharmacists(cls, v: List[int]) -> List[int]:
        return list(dict.fromkeys(v))


class PharmacyResponse(APIModel):
    id: int
    branch_code: int = Field(alias="branchCode")
    name: str
    address: dict
    contact: dict
    working_hours: Optional[dict] = Field(None, alias="workingHours")
    location: Optional[dict] = None
    is_active: bool = Field(alias="isActive")
    description: Optional[str] = None
    pharmacists: List[UserSummary] = Field(default_factory=list)
    supervisor: Optional[UserSummary] = None
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")


class PharmacistAssignment(APIModel):
    pharmacist_id: int = Field(alias="pharmacistId")
