"""
Sales queries and statistics over detailed (line-item) and header
(invoice) sales.

Every entry point takes a resolved BranchScope; an empty scope (supervisor
without pharmacies) short-circuits to a zero-valued response without
touching the sales tables.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import extract, func
from sqlalchemy.orm import Session

from pharmasales.core.exceptions import BusinessError
from pharmasales.core.filters import (
    FilterSpec,
    Page,
    SortSpec,
    build_conditions,
    contains_ci,
    page_envelope,
    page_from_params,
    paginate,
    parse_date,
    resolve_order,
)
from pharmasales.models.pharmacy import Pharmacy
from pharmasales.models.sales import MONTHS, DetailedSale, HeaderSale
from pharmasales.schemas.common import dump
from pharmasales.schemas.sales import DetailedSaleResponse, HeaderSaleResponse
from pharmasales.services.access_scope import BranchScope
from pharmasales.services.aggregation import (
    GroupTotals,
    day_statistics,
    empty_statistics_response,
    fold_days_into_months,
    group_statistics,
    header_month_statistics,
    money,
    month_statistics,
    rank_groups,
    rollup_invoice_types,
    statistics_response,
)

logger = logging.getLogger(__name__)

# Filters shared by every statistics endpoint; branchCode goes through the scope.
STATS_FILTERS = [
    FilterSpec("startDate", DetailedSale.invoice_date, "date_from"),
    FilterSpec("endDate", DetailedSale.invoice_date, "date_to"),
    FilterSpec("invoiceType", DetailedSale.invoice_type),
    FilterSpec("salesName", DetailedSale.sales_name, "icontains"),
]

LIST_FILTERS = STATS_FILTERS + [
    FilterSpec("invoiceNumber", DetailedSale.invoice_number, "icontains"),
    FilterSpec("invoiceDate", DetailedSale.invoice_date, "date_on"),
    FilterSpec("materialNumber", DetailedSale.material_number, "eq", int),
    FilterSpec("name", DetailedSale.name, "icontains"),
    FilterSpec("customerName", DetailedSale.customer_name, "icontains"),
    FilterSpec("minNetTotal", DetailedSale.net_total, "gte", float),
    FilterSpec("maxNetTotal", DetailedSale.net_total, "lte", float),
]

LIST_SORTS = [
    SortSpec("sortByDate", DetailedSale.invoice_date),
    SortSpec("sortByNetTotal", DetailedSale.net_total),
    SortSpec("sortByQuantity", DetailedSale.quantity),
]
LIST_DEFAULT_ORDER = [DetailedSale.invoice_date.desc(), DetailedSale.id.desc()]

DIMENSIONS = {
    "branch": (DetailedSale.branch_code, "branchCode"),
    "salesName": (DetailedSale.sales_name, "salesName"),
    "invoiceType": (DetailedSale.invoice_type, "invoiceType"),
    "customer": (DetailedSale.customer_name, "customerName"),
}
GROUP_BY_CHOICES = ("branch", "salesName", "invoiceType", "month", "day")

HEADER_FILTERS = [
    FilterSpec("InvoiceNumber", HeaderSale.invoice_number, "icontains"),
    FilterSpec("Year", HeaderSale.year, "eq", int),
    FilterSpec("Month", HeaderSale.month),
    FilterSpec("Date", HeaderSale.date, "eq", parse_date),
    FilterSpec("InvoiceType", HeaderSale.invoice_type, "icontains"),
    FilterSpec("UserName", HeaderSale.user_name, "icontains"),
    FilterSpec("CustomerName", HeaderSale.customer_name, "icontains"),
    FilterSpec("ConsumerName", HeaderSale.consumer_name, "icontains"),
    FilterSpec("minAmount", HeaderSale.total_amount_after_discount, "gte", float),
    FilterSpec("maxAmount", HeaderSale.total_amount_after_discount, "lte", float),
    FilterSpec("startDate", HeaderSale.date, "gte", parse_date),
    FilterSpec("endDate", HeaderSale.date, "lte", parse_date),
]
HEADER_SORTS = [
    SortSpec("sortByDate", HeaderSale.date),
    SortSpec("sortByAmount", HeaderSale.total_amount_after_discount),
]
HEADER_DEFAULT_ORDER = [HeaderSale.date.desc(), HeaderSale.id.desc()]

MONTH_NUMBERS = {name.lower(): index + 1 for index, name in enumerate(MONTHS)}


def _metric_columns():
    return (
        func.coalesce(func.sum(DetailedSale.items_net_price), 0).label("total_sales"),
        func.count(DetailedSale.id).label("total_transactions"),
        func.coalesce(func.sum(DetailedSale.quantity), 0).label("total_quantity"),
        func.coalesce(func.sum(DetailedSale.net_total), 0).label("total_net_total"),
    )


def sales_conditions(
    scope: BranchScope,
    params: Mapping[str, str],
    specs: Sequence[FilterSpec] = STATS_FILTERS,
    extra: Sequence = (),
) -> list:
    conditions = build_conditions(specs, params)
    scope_condition = scope.condition(DetailedSale.branch_code)
    if scope_condition is not None:
        conditions.append(scope_condition)
    conditions.extend(extra)
    return conditions


def grouped_totals(db: Session, conditions: Sequence, column) -> List[GroupTotals]:
    rows = (
        db.query(column.label("key"), *_metric_columns())
        .filter(*conditions)
        .group_by(column)
        .all()
    )
    return [
        GroupTotals.from_row(r.key, r.total_sales, r.total_transactions, r.total_quantity, r.total_net_total)
        for r in rows
    ]


def day_totals(db: Session, conditions: Sequence) -> list:
    year = extract("year", DetailedSale.invoice_date)
    month = extract("month", DetailedSale.invoice_date)
    day = extract("day", DetailedSale.invoice_date)
    rows = (
        db.query(year.label("year"), month.label("month"), day.label("day"), *_metric_columns())
        .filter(*conditions)
        .group_by(year, month, day)
        .all()
    )
    return [
        (
            int(r.year),
            int(r.month),
            int(r.day),
            GroupTotals.from_row((r.year, r.month, r.day), r.total_sales, r.total_transactions,
                                 r.total_quantity, r.total_net_total),
        )
        for r in rows
    ]


def pharmacy_counts(db: Session, scope: BranchScope, branch_codes: Sequence[int]) -> Dict[int, int]:
    """Pharmacies per branch code; a supervisor only counts their own."""
    if not branch_codes:
        return {}
    query = db.query(Pharmacy.branch_code, func.count(Pharmacy.id)).filter(Pharmacy.branch_code.in_(branch_codes))
    if scope.supervisor_id is not None:
        query = query.filter(Pharmacy.supervisor_id == scope.supervisor_id)
    return {code: count for code, count in query.group_by(Pharmacy.branch_code).all()}


def build_statistics(
    db: Session,
    scope: BranchScope,
    params: Mapping[str, str],
    group_by: str,
    extra_conditions: Sequence = (),
) -> Dict[str, Any]:
    """
    Grouped statistics for one dimension.

    group_by is one of branch, salesName, invoiceType, customer, month, day.
    Invoice types are rolled up into "Total X" groups before ranking.
    """
    if scope.is_empty:
        return empty_statistics_response(groupBy=group_by)

    conditions = sales_conditions(scope, params, extra=extra_conditions)

    if group_by in ("month", "day"):
        days = day_totals(db, conditions)
        groups = [totals for _, _, _, totals in days]
        if group_by == "month":
            statistics = month_statistics(fold_days_into_months(days))
        else:
            statistics = day_statistics(days)
        return statistics_response(statistics, groups, groupBy=group_by)

    if group_by not in DIMENSIONS:
        raise BusinessError.bad_request(
            f"Invalid groupBy: {group_by}", error=f"Expected one of {', '.join(GROUP_BY_CHOICES)}"
        )
    column, key_name = DIMENSIONS[group_by]
    groups = grouped_totals(db, conditions, column)
    if group_by == "invoiceType":
        groups = rollup_invoice_types(groups)
    groups = rank_groups(groups)

    extra = None
    if group_by == "branch":
        counts = pharmacy_counts(db, scope, [g.key for g in groups])
        extra = {g.key: {"pharmacyCount": counts.get(g.key, 0)} for g in groups}

    return statistics_response(group_statistics(groups, key_name, extra), groups, groupBy=group_by)


def _zero_sales_summary() -> Dict[str, Any]:
    return {
        "totalSales": 0,
        "totalNetTotal": 0,
        "totalQuantity": 0,
        "totalDiscount": 0,
        "totalVAT": 0,
        "totalDeliveryFees": 0,
        "count": 0,
        "averageSale": 0,
    }


def sales_summary(db: Session, conditions: Sequence) -> Dict[str, Any]:
    row = db.query(
        func.coalesce(func.sum(DetailedSale.items_net_price), 0),
        func.coalesce(func.sum(DetailedSale.net_total), 0),
        func.coalesce(func.sum(DetailedSale.quantity), 0),
        func.coalesce(func.sum(DetailedSale.total_discount), 0),
        func.coalesce(func.sum(DetailedSale.total_vat), 0),
        func.coalesce(func.sum(DetailedSale.delivery_fees), 0),
        func.count(DetailedSale.id),
    ).filter(*conditions).one()
    total_sales, net_total, quantity, discount, vat, delivery, count = row
    return {
        "totalSales": money(float(total_sales)),
        "totalNetTotal": money(float(net_total)),
        "totalQuantity": money(float(quantity)),
        "totalDiscount": money(float(discount)),
        "totalVAT": money(float(vat)),
        "totalDeliveryFees": money(float(delivery)),
        "count": count,
        "averageSale": money(float(net_total) / count) if count else 0,
    }


def summary_response(db: Session, scope: BranchScope, params: Mapping[str, str]) -> Dict[str, Any]:
    if scope.is_empty:
        return {"success": True, "data": _zero_sales_summary()}
    return {"success": True, "data": sales_summary(db, sales_conditions(scope, params))}


def _empty_page(page: Page, **extra) -> Dict[str, Any]:
    return {**page_envelope([], 0, page), **extra}


def list_detailed_sales(
    db: Session,
    scope: BranchScope,
    params: Mapping[str, str],
    extra_conditions: Sequence = (),
    with_summary: bool = False,
) -> Dict[str, Any]:
    """Paginated line items; cash and insurance listings add a summary block."""
    page = page_from_params(params)
    if scope.is_empty:
        extra = {"summary": _zero_sales_summary()} if with_summary else {}
        return _empty_page(page, **extra)

    conditions = sales_conditions(scope, params, specs=LIST_FILTERS, extra=extra_conditions)
    order = resolve_order(LIST_SORTS, params, LIST_DEFAULT_ORDER, tiebreak=[DetailedSale.id.desc()])
    rows, total = paginate(db.query(DetailedSale).filter(*conditions), page, order)
    body = page_envelope([dump(DetailedSaleResponse, r) for r in rows], total, page)
    if with_summary:
        body["summary"] = sales_summary(db, conditions)
    return body


# Header sales


def header_conditions(scope: BranchScope, params: Mapping[str, str], extra: Sequence = ()) -> list:
    conditions = build_conditions(HEADER_FILTERS, params)
    scope_condition = scope.condition(HeaderSale.store_code)
    if scope_condition is not None:
        conditions.append(scope_condition)
    conditions.extend(extra)
    return conditions


def list_header_sales(db: Session, scope: BranchScope, params: Mapping[str, str]) -> Dict[str, Any]:
    page = page_from_params(params)
    if scope.is_empty:
        return _empty_page(page)
    conditions = header_conditions(scope, params)
    order = resolve_order(HEADER_SORTS, params, HEADER_DEFAULT_ORDER, tiebreak=[HeaderSale.id.desc()])
    rows, total = paginate(db.query(HeaderSale).filter(*conditions), page, order)
    return page_envelope([dump(HeaderSaleResponse, r) for r in rows], total, page)


def _header_summary(buckets) -> Dict[str, Any]:
    total_sales = sum(b.totals.total_sales for b in buckets)
    total_days = sum(b.days_with_invoices for b in buckets)
    return {
        "totalSales": money(total_sales),
        "totalInvoices": sum(b.totals.total_transactions for b in buckets),
        "daysWithInvoices": total_days,
        "averageSalesPerDay": money(total_sales / total_days) if total_days else 0,
        "monthCount": len(buckets),
    }


def header_sales_by_month(
    db: Session,
    scope: BranchScope,
    params: Mapping[str, str],
    extra_conditions: Sequence = (),
    report: Optional[str] = None,
) -> Dict[str, Any]:
    """Invoice totals per (Year, Month), oldest month first."""
    meta = {"report": report} if report else {}
    if scope.is_empty:
        return {"success": True, "count": 0, "statistics": [], "summary": _header_summary([]), **meta}

    conditions = header_conditions(scope, params, extra_conditions)
    rows = (
        db.query(
            HeaderSale.year,
            HeaderSale.month,
            HeaderSale.date,
            func.coalesce(func.sum(HeaderSale.total_amount_after_discount), 0).label("total"),
            func.count(HeaderSale.id).label("invoices"),
        )
        .filter(*conditions)
        .group_by(HeaderSale.year, HeaderSale.month, HeaderSale.date)
        .all()
    )

    days = []
    for year, month_name, day, total, invoices in rows:
        month = MONTH_NUMBERS.get((month_name or "").lower())
        if month is None:
            logger.warning(f"Skipping header sales with unknown month {month_name!r}")
            continue
        days.append((year, month, day, GroupTotals.from_row(day, total, invoices)))

    buckets = fold_days_into_months(days)
    statistics = header_month_statistics(buckets)
    return {
        "success": True,
        "count": len(statistics),
        "statistics": statistics,
        "summary": _header_summary(buckets),
        **meta,
    }


def invoice_type_contains(fragment: str):
    return contains_ci(HeaderSale.invoice_type, fragment)
