from pharmasales.models.user import User, UserRole
from pharmasales.models.pharmacy import Pharmacy, pharmacy_pharmacists
from pharmasales.models.sales import DetailedSale, HeaderSale, InvoiceType
from pharmasales.models.catalog import BabyJoyItem, Contest, IncentiveItem, InsuranceItem
from pharmasales.models.visit import Visit

__all__ = [
    "User", "UserRole", "Pharmacy", "pharmacy_pharmacists", "DetailedSale", "HeaderSale",
    "InvoiceType", "IncentiveItem", "InsuranceItem", "Contest", "BabyJoyItem", "Visit",
]
