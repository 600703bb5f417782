"""
Named customer sets that select cash and insurance sales.

The lists are configuration data (CUSTOMER_SETS_FILE). Cash customers match
CustomerName exactly; insurance companies match as case-insensitive literal
substrings of CustomerName.
"""
import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

from sqlalchemy import false, or_

from pharmasales.core.config import settings
from pharmasales.core.filters import contains_ci

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CustomerSets:
    cash_customers: Tuple[str, ...]
    insurance_companies: Tuple[str, ...]


def load_customer_sets(path: str) -> CustomerSets:
    with open(path, encoding="utf-8") as fh:
        raw = json.load(fh)
    sets = CustomerSets(
        cash_customers=tuple(raw.get("cash_customers", [])),
        insurance_companies=tuple(raw.get("insurance_companies", [])),
    )
    logger.info(
        f"Loaded customer sets from {path}: {len(sets.cash_customers)} cash, "
        f"{len(sets.insurance_companies)} insurance"
    )
    return sets


@lru_cache(maxsize=1)
def get_customer_sets() -> CustomerSets:
    return load_customer_sets(settings.CUSTOMER_SETS_FILE)


def cash_condition(column, sets: CustomerSets):
    if not sets.cash_customers:
        return false()
    return column.in_(sets.cash_customers)


def insurance_condition(column, sets: CustomerSets):
    if not sets.insurance_companies:
        return false()
    return or_(*[contains_ci(column, company) for company in sets.insurance_companies])
