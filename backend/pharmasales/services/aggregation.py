"""
Sales aggregation: per-group totals, invoice-type roll-ups and monthly
folding.

Everything here works on already-grouped rows (the database does the
GROUP BY in sales_stats.py) so it can be tested without a session.

Roll-ups: each normal/return invoice-type pair is collapsed into one
"Total X" group once either member is present. Matching is
case-insensitive; types outside the pairs pass through untouched.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from pharmasales.models.sales import MONTHS as MONTH_NAMES

# (member types lower-cased, synthetic group name)
ROLLUP_PAIRS: Tuple[Tuple[Tuple[str, str], str], ...] = (
    (("insurance", "returninsurance"), "Total Insurance"),
    (("online", "returnonline"), "Total Online"),
    (("cashcustomer", "returncashcustomer"), "Total CashCustomer"),
    (("creditcustomer", "returncreditcustomer"), "Total CreditCustomer"),
    (("wasfaty", "returnwasfaty"), "Total Wasfaty"),
    (("normal", "return"), "Total Normal"),
)


def _num(value) -> float:
    return float(value) if value is not None else 0.0


def money(value: float) -> float:
    return round(value, 2)


def percentage(part: float, whole: float) -> float:
    if not whole:
        return 0
    return round(part / whole * 100, 2)


@dataclass
class GroupTotals:
    key: Any
    total_sales: float = 0.0
    total_transactions: int = 0
    total_quantity: float = 0.0
    total_net_total: float = 0.0

    @classmethod
    def from_row(cls, key, total_sales, total_transactions, total_quantity=None, total_net_total=None):
        return cls(
            key=key,
            total_sales=_num(total_sales),
            total_transactions=int(total_transactions or 0),
            total_quantity=_num(total_quantity),
            total_net_total=_num(total_net_total),
        )

    def add(self, other: "GroupTotals") -> None:
        self.total_sales += other.total_sales
        self.total_transactions += other.total_transactions
        self.total_quantity += other.total_quantity
        self.total_net_total += other.total_net_total

    def metrics(self) -> Dict[str, Any]:
        return {
            "totalSales": money(self.total_sales),
            "totalTransactions": self.total_transactions,
            "totalQuantity": money(self.total_quantity),
            "totalNetTotal": money(self.total_net_total),
        }


def rank_groups(groups: Iterable[GroupTotals]) -> List[GroupTotals]:
    """Largest totalSales first; ties keep their incoming order."""
    return sorted(groups, key=lambda g: g.total_sales, reverse=True)


def rollup_invoice_types(groups: Sequence[GroupTotals]) -> List[GroupTotals]:
    """
    Replace every present normal/return pair with one "Total X" group.

    >>> out = rollup_invoice_types([GroupTotals("Normal", 100, 3), GroupTotals("Return", -20, 1)])
    >>> [(g.key, g.total_sales) for g in out]
    [('Total Normal', 80.0)]
    """
    remaining = list(groups)
    merged: List[GroupTotals] = []
    for members, total_name in ROLLUP_PAIRS:
        matched = [g for g in remaining if str(g.key or "").lower() in members]
        if not matched:
            continue
        total = GroupTotals(key=total_name)
        for group in matched:
            total.add(group)
        remaining = [g for g in remaining if g not in matched]
        merged.append(total)
    return remaining + merged


def grand_totals(groups: Iterable[GroupTotals]) -> GroupTotals:
    total = GroupTotals(key=None)
    for group in groups:
        total.add(group)
    return total


def summary_block(groups: Sequence[GroupTotals]) -> Dict[str, Any]:
    grand = grand_totals(groups)
    return {**grand.metrics(), "groupCount": len(groups)}


def group_statistics(
    groups: Sequence[GroupTotals],
    key_name: str,
    extra: Optional[Dict[Any, Dict[str, Any]]] = None,
) -> List[Dict[str, Any]]:
    """Shape ranked groups as response rows with a percentage of the grand totalSales."""
    grand = grand_totals(groups).total_sales
    rows = []
    for group in groups:
        row = {key_name: group.key, **group.metrics(), "percentage": percentage(group.total_sales, grand)}
        if extra and group.key in extra:
            row.update(extra[group.key])
        rows.append(row)
    return rows


def statistics_response(statistics: List[Dict[str, Any]], groups: Sequence[GroupTotals], **extra) -> Dict[str, Any]:
    return {
        "success": True,
        "count": len(statistics),
        "statistics": statistics,
        "summary": {**summary_block(groups), "groupCount": len(statistics)},
        **extra,
    }


def empty_statistics_response(**extra) -> Dict[str, Any]:
    return statistics_response([], [], **extra)


@dataclass
class MonthBucket:
    year: int
    month: int
    totals: GroupTotals
    days: set = field(default_factory=set)

    @property
    def days_with_invoices(self) -> int:
        return len(self.days)

    @property
    def average_sales_per_day(self) -> float:
        if not self.days:
            return 0
        return money(self.totals.total_sales / len(self.days))


def fold_days_into_months(day_groups: Iterable[Tuple[int, int, Any, GroupTotals]]) -> List[MonthBucket]:
    """
    Fold (year, month, day, totals) rows into chronologically ordered
    month buckets that remember which days had invoices.
    """
    buckets: Dict[Tuple[int, int], MonthBucket] = {}
    for year, month, day, totals in day_groups:
        key = (int(year), int(month))
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = MonthBucket(year=key[0], month=key[1], totals=GroupTotals(key=key))
        bucket.totals.add(totals)
        if day is not None:
            bucket.days.add(day)
    return [buckets[key] for key in sorted(buckets)]


def month_statistics(buckets: Sequence[MonthBucket]) -> List[Dict[str, Any]]:
    grand = sum(b.totals.total_sales for b in buckets)
    return [
        {
            "year": b.year,
            "month": b.month,
            "monthName": MONTH_NAMES[b.month - 1],
            **b.totals.metrics(),
            "daysWithInvoices": b.days_with_invoices,
            "averageSalesPerDay": b.average_sales_per_day,
            "percentage": percentage(b.totals.total_sales, grand),
        }
        for b in buckets
    ]


def day_statistics(day_groups: Sequence[Tuple[int, int, int, GroupTotals]]) -> List[Dict[str, Any]]:
    ordered = sorted(day_groups, key=lambda d: (int(d[0]), int(d[1]), int(d[2])))
    grand = sum(totals.total_sales for _, _, _, totals in ordered)
    return [
        {
            "year": int(year),
            "month": int(month),
            "day": int(day),
            "date": f"{int(year):04d}-{int(month):02d}-{int(day):02d}",
            **totals.metrics(),
            "percentage": percentage(totals.total_sales, grand),
        }
        for year, month, day, totals in ordered
    ]


def header_month_statistics(buckets: Sequence[MonthBucket]) -> List[Dict[str, Any]]:
    """Monthly header-sales rows: invoice totals rather than line metrics."""
    grand = sum(b.totals.total_sales for b in buckets)
    return [
        {
            "year": b.year,
            "month": MONTH_NAMES[b.month - 1],
            "totalSales": money(b.totals.total_sales),
            "totalInvoices": b.totals.total_transactions,
            "daysWithInvoices": b.days_with_invoices,
            "averageSalesPerDay": b.average_sales_per_day,
            "percentage": percentage(b.totals.total_sales, grand),
        }
        for b in buckets
    ]
