import datetime as dt
from typing import Any, Literal, Optional

from pydantic import Field, field_validator

from pharmasales.models.sales import InvoiceType
from pharmasales.schemas.common import APIModel

MonthName = Literal["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


class DetailedSaleCreate(APIModel):
    branch_code: int = Field(alias="BranchCode")
    invoice_number: str = Field(alias="InvoiceNumber", min_length=1)
    invoice_date: dt.datetime = Field(alias="InvoiceDate")
    invoice_time: str = Field(alias="InvoiceTime", min_length=1)
    invoice_type: InvoiceType = Field(InvoiceType.NORMAL.value, alias="InvoiceType")
    sales_name: str = Field(alias="SalesName", min_length=1)
    material_number: int = Field(alias="MaterialNumber")
    name: str = Field(alias="Name", min_length=1)
    unit_of_measurement: str = Field(alias="UnitOfMeasurement", min_length=1)
    quantity: float = Field(alias="Quantity")
    item_unit_price: float = Field(alias="ItemUnitPrice", ge=0)
    total_discount: float = Field(0, alias="TotalDiscount", ge=0)
    items_net_price: float = Field(alias="ItemsNetPrice")
    total_vat: float = Field(0, alias="TotalVAT", ge=0)
    net_total: float = Field(alias="NetTotal", ge=0)
    delivery_fees: float = Field(0, alias="DeliveryFees", ge=0)
    customer_name: Optional[str] = Field(None, alias="CustomerName")

    @field_validator("invoice_number", "invoice_time", "sales_name", "name", "unit_of_measurement", "customer_name")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if isinstance(v, str) else v

    @field_validator("invoice_date")
    @classmethod
    def naive_utc(cls, v: dt.datetime) -> dt.datetime:
        # Stored as naive UTC, the same form date filters compare against
        if v.tzinfo is not None:
            return v.astimezone(dt.timezone.utc).replace(tzinfo=None)
        return v


class DetailedSaleResponse(DetailedSaleCreate):
    id: int
    invoice_type: str = Field(alias="InvoiceType")
    created_at: Optional[dt.datetime] = Field(None, alias="createdAt")
    updated_at: Optional[dt.datetime] = Field(None, alias="updatedAt")


class HeaderSaleCreate(APIModel):
    store_code: int = Field(alias="StoreCode")
    invoice_number: str = Field(alias="InvoiceNumber", min_length=1)
    year: int = Field(alias="Year", ge=2000, le=2100)
    month: MonthName = Field(alias="Month")
    date: dt.date = Field(alias="Date")
    time: str = Field(alias="Time", pattern=r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")
    invoice_type: str = Field(alias="InvoiceType", min_length=1)
    customer_name: str = Field("", alias="CustomerName")
    consumer_name: str = Field("", alias="ConsumerName")
    user_name: str = Field("", alias="UserName")
    total_amount_after_discount: float = Field(alias="TotalAmountAfterDiscount", ge=0)

    @field_validator("invoice_number", "invoice_type", "customer_name", "consumer_name", "user_name")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v

    @field_validator("date", mode="before")
    @classmethod
    def date_from_timestamp(cls, v: Any) -> Any:
        # Imports send full ISO timestamps for Date
        if isinstance(v, str) and "T" in v:
            return v.split("T", 1)[0]
        if isinstance(v, dt.datetime):
            return v.date()
        return v


class HeaderSaleResponse(HeaderSaleCreate):
    id: int
    created_at: Optional[dt.datetime] = Field(None, alias="createdAt")
    updated_at: Optional[dt.datetime] = Field(None, alias="updatedAt")
