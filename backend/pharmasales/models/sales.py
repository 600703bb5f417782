"""
Sales facts imported from the point-of-sale system.

DetailedSale: one row per invoice line. HeaderSale: one row per invoice.
Rows are reconciled imports; NetTotal >= 0 is checked on write only and
never recomputed from the line fields.
"""
import enum

from sqlalchemy import Column, Date, DateTime, Float, Index, Integer, String
from sqlalchemy.sql import func

from pharmasales.db.base import Base


class InvoiceType(str, enum.Enum):
    NORMAL = "Normal"
    RETURN = "Return"
    EXCHANGE = "Exchange"
    OTHER = "Other"
    INSURANCE = "Insurance"
    RETURN_INSURANCE = "ReturnInsurance"
    ONLINE = "Online"
    RETURN_ONLINE = "ReturnOnline"
    CASH_CUSTOMER = "CashCustomer"
    RETURN_CASH_CUSTOMER = "ReturnCashCustomer"
    CREDIT_CUSTOMER = "CreditCustomer"
    RETURN_CREDIT_CUSTOMER = "ReturnCreditCustomer"
    WASFATY = "Wasfaty"
    RETURN_WASFATY = "ReturnWasfaty"


MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


class DetailedSale(Base):
    __tablename__ = "detailed_sales"

    id = Column(Integer, primary_key=True, index=True)
    branch_code = Column(Integer, nullable=False, index=True)
    invoice_number = Column(String(64), nullable=False, index=True)
    invoice_date = Column(DateTime, nullable=False, index=True)
    invoice_time = Column(String(16), nullable=False)
    invoice_type = Column(String(32), nullable=False, default=InvoiceType.NORMAL.value)
    sales_name = Column(String(255), nullable=False)
    material_number = Column(Integer, nullable=False, index=True)
    name = Column(String(255), nullable=False)  # product name
    unit_of_measurement = Column(String(32), nullable=False)
    quantity = Column(Float, nullable=False)  # negative on return lines
    item_unit_price = Column(Float, nullable=False)
    total_discount = Column(Float, default=0)
    items_net_price = Column(Float, nullable=False)  # negative on return lines
    total_vat = Column(Float, default=0)
    net_total = Column(Float, nullable=False)
    delivery_fees = Column(Float, default=0)
    customer_name = Column(String(255), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (Index("ix_detailed_sales_branch_date", "branch_code", "invoice_date"),)


class HeaderSale(Base):
    __tablename__ = "header_sales"

    id = Column(Integer, primary_key=True, index=True)
    store_code = Column(Integer, nullable=False, index=True)
    invoice_number = Column(String(64), nullable=False, index=True)  # not unique
    year = Column(Integer, nullable=False)
    month = Column(String(3), nullable=False)  # Jan..Dec
    date = Column(Date, nullable=False, index=True)
    time = Column(String(5), nullable=False)  # HH:MM
    invoice_type = Column(String(64), nullable=False)
    customer_name = Column(String(255), default="")
    consumer_name = Column(String(255), default="")
    user_name = Column(String(255), default="")
    total_amount_after_discount = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (Index("ix_header_sales_year_month", "year", "month"),)
