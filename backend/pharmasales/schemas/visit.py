from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from pharmasales.schemas.common import APIModel
from pharmasales.schemas.user import UserSummary


class VisitCreate(APIModel):
    path: str = Field(min_length=1)
    method: Literal["GET", "POST", "PUT", "DELETE", "PATCH"] = "GET"
    ip_address: Optional[str] = Field(None, alias="ipAddress")
    user_agent: Optional[str] = Field(None, alias="userAgent")
    referer: Optional[str] = None


class VisitResponse(APIModel):
    id: int
    user: Optional[UserSummary] = None
    path: str
    method: str
    ip_address: Optional[str] = Field(None, alias="ipAddress")
    user_agent: Optional[str] = Field(None, alias="userAgent")
    referer: Optional[str] = None
    created_at: Optional[datetime] = Field(None, alias="createdAt")
