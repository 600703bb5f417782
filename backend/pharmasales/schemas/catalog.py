from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator, model_validator

from pharmasales.schemas.common import APIModel


class IncentiveItemCreate(APIModel):
    item_class: Optional[str] = Field(None, alias="Class")
    sap_code: int = Field(alias="SAP_Code")
    description: Optional[str] = Field(None, alias="Description")
    division: Optional[str] = Field(None, alias="Division")
    category: Optional[str] = Field(None, alias="Category")
    sub_category: Optional[str] = Field(
        None, validation_alias=AliasChoices("Sub_category", "Sub category", "sub_category"),
        serialization_alias="Sub_category",
    )
    price: float = Field(alias="Price", ge=0)
    incentive_percentage: Optional[float] = Field(None, alias="IncentivePercentage", ge=0, le=1)
    incentive_value: Optional[float] = Field(
        None, validation_alias=AliasChoices("incentive_value", "incentive value"),
        serialization_alias="incentive_value", ge=0,
    )
    active_ingredients: List[str] = Field(default_factory=list, alias="activeIngredients")

    @model_validator(mode="after")
    def derive_incentive_value(self):
        """Default incentive_value to Price x IncentivePercentage when not supplied."""
        if self.incentive_value is None and self.price and self.incentive_percentage:
            self.incentive_value = self.price * self.incentive_percentage
        return self


class IncentiveItemResponse(IncentiveItemCreate):
    id: int
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")


class InsuranceItemCreate(APIModel):
    category: Optional[str] = Field(None, alias="Category")
    sap_code: int = Field(alias="SAP_Code")
    description: Optional[str] = None


class InsuranceItemResponse(InsuranceItemCreate):
    id: int
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")


class ContestCreate(APIModel):
    company: str = Field(alias="Company", min_length=1)
    sap_code: int = Field(alias="SAP_Code")
    wh_description: Optional[str] = Field(None, alias="WH Description")
    total_incentive: float = Field(0, alias="Total Incentive", ge=0)
    category: Optional[str] = Field(None, alias="Category")
    price: Optional[float] = Field(None, alias="Price", ge=0)
    incentive: Optional[float] = Field(None, alias="Incentive", ge=0)

    @field_validator("company")
    @classmethod
    def strip_company(cls, v: str) -> str:
        return v.strip()


class ContestResponse(ContestCreate):
    id: int
    total_incentive: Optional[float] = Field(0, alias="Total Incentive")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")


class BabyJoyCreate(APIModel):
    material: int = Field(alias="Material")
    sap_description: str = Field(alias="SapDescription", min_length=1)
    brand: str = Field("Baby Joy", alias="Brand")
    price: float = Field(alias="Price", ge=0)
    material_detail: Optional[str] = Field(None, alias="MaterialDetail")
    units_in_cartoon: Optional[float] = Field(None, alias="UnitsInCartoon", ge=0)
    number_of_backet: Optional[float] = Field(None, alias="NumberOfBacket", ge=0)
    form: Optional[str] = Field(None, alias="Form")


class BabyJoyResponse(BabyJoyCreate):
    id: int
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")
