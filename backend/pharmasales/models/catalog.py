"""Reference catalogs: incentive items, insurance items, contests, Baby Joy products."""
from sqlalchemy import Column, DateTime, Float, Integer, String, Text
from sqlalchemy.sql import func
from sqlalchemy.types import JSON

from pharmasales.db.base import Base


class IncentiveItem(Base):
    __tablename__ = "incentive_items"

    id = Column(Integer, primary_key=True, index=True)
    item_class = Column(String(64), nullable=True)
    sap_code = Column(Integer, unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    division = Column(String(255), nullable=True)
    category = Column(String(255), nullable=True, index=True)
    sub_category = Column(String(255), nullable=True)
    price = Column(Float, nullable=False)
    incentive_percentage = Column(Float, nullable=True)  # fraction, 0..1
    incentive_value = Column(Float, nullable=True)  # price * incentive_percentage unless given
    active_ingredients = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class InsuranceItem(Base):
    __tablename__ = "insurance_items"

    id = Column(Integer, primary_key=True, index=True)
    category = Column(String(255), nullable=True, index=True)
    sap_code = Column(Integer, unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Contest(Base):
    __tablename__ = "contests"

    id = Column(Integer, primary_key=True, index=True)
    company = Column(String(255), nullable=False)
    sap_code = Column(Integer, nullable=False, index=True)
    wh_description = Column(Text, nullable=True)
    total_incentive = Column(Float, default=0)
    category = Column(String(255), nullable=True, index=True)
    price = Column(Float, nullable=True)
    incentive = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class BabyJoyItem(Base):
    __tablename__ = "baby_joy_items"

    id = Column(Integer, primary_key=True, index=True)
    material = Column(Integer, unique=True, nullable=False, index=True)
    sap_description = Column(Text, nullable=False)
    brand = Column(String(255), default="Baby Joy", index=True)
    price = Column(Float, nullable=False)
    material_detail = Column(Text, nullable=True)
    units_in_cartoon = Column(Float, nullable=True)
    number_of_backet = Column(Float, nullable=True)
    form = Column(String(255), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
