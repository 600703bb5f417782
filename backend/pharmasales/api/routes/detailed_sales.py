"""
Detailed (line-item) sales: listing, statistics, cash and insurance views.

Reads are open to admins and pharmacy supervisors; every read resolves the
caller's branch scope first. Writes are admin only.
"""
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from pharmasales.api.deps import get_db, require_admin, require_admin_or_supervisor
from pharmasales.core.exceptions import BusinessError
from pharmasales.core.filters import parse_int
from pharmasales.models.sales import DetailedSale
from pharmasales.models.user import User
from pharmasales.schemas.sales import DetailedSaleCreate, DetailedSaleResponse
from pharmasales.services import crud, sales_stats
from pharmasales.services.access_scope import BranchScope, resolve_branch_scope
from pharmasales.services.customer_sets import cash_condition, get_customer_sets, insurance_condition

router = APIRouter()

DETAILED_SALES = crud.Resource(
    label="Detailed sale",
    audit_name="detailed_sale",
    model=DetailedSale,
    create_schema=DetailedSaleCreate,
    response_schema=DetailedSaleResponse,
    bulk_key="sales",
)


def _scope(db: Session, user: User, request: Request) -> BranchScope:
    branch_code = parse_int(request.query_params.get("branchCode"), "branchCode")
    return resolve_branch_scope(db, user, branch_code)


def _cash():
    return cash_condition(DetailedSale.customer_name, get_customer_sets())


def _insurance():
    return insurance_condition(DetailedSale.customer_name, get_customer_sets())


# Statistics


@router.get("/stats/summary")
def sales_summary(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_supervisor),
):
    """Totals, discount, VAT, delivery fees and mean NetTotal over the filtered rows."""
    scope = _scope(db, current_user, request)
    return sales_stats.summary_response(db, scope, request.query_params)


@router.get("/stats/pharmacies-by-branch")
def pharmacies_by_branch(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_supervisor),
):
    scope = _scope(db, current_user, request)
    return sales_stats.build_statistics(db, scope, request.query_params, "branch")


@router.get("/stats/sales-by-name")
def sales_by_name(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_supervisor),
):
    scope = _scope(db, current_user, request)
    return sales_stats.build_statistics(db, scope, request.query_params, "salesName")


@router.get("/stats/sales-by-invoice-type")
def sales_by_invoice_type(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_supervisor),
):
    """Normal/return pairs are reported as single "Total X" rows."""
    scope = _scope(db, current_user, request)
    return sales_stats.build_statistics(db, scope, request.query_params, "invoiceType")


@router.get("/stats/sales-by-month")
def sales_by_month(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_supervisor),
):
    scope = _scope(db, current_user, request)
    return sales_stats.build_statistics(db, scope, request.query_params, "month")


@router.get("/stats/sales-by-day")
def sales_by_day(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_supervisor),
):
    scope = _scope(db, current_user, request)
    return sales_stats.build_statistics(db, scope, request.query_params, "day")


# Insurance and cash customers


@router.get("/insurance")
def insurance_sales(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_supervisor),
):
    scope = _scope(db, current_user, request)
    return sales_stats.list_detailed_sales(db, scope, request.query_params, [_insurance()], with_summary=True)


@router.get("/insurance/by-customer")
def insurance_by_customer(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_supervisor),
):
    scope = _scope(db, current_user, request)
    return sales_stats.build_statistics(db, scope, request.query_params, "customer", [_insurance()])


@router.get("/cash-detailed")
def cash_sales(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_supervisor),
):
    scope = _scope(db, current_user, request)
    return sales_stats.list_detailed_sales(db, scope, request.query_params, [_cash()], with_summary=True)


@router.get("/cash-detailed/statistics")
def cash_statistics(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_supervisor),
):
    group_by = request.query_params.get("groupBy") or "branch"
    if group_by not in sales_stats.GROUP_BY_CHOICES:
        raise BusinessError.bad_request(
            f"Invalid groupBy: {group_by}",
            error=f"Expected one of {', '.join(sales_stats.GROUP_BY_CHOICES)}",
        )
    scope = _scope(db, current_user, request)
    return sales_stats.build_statistics(db, scope, request.query_params, group_by, [_cash()])


@router.get("/cash-detailed/by-customer")
def cash_by_customer(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_supervisor),
):
    scope = _scope(db, current_user, request)
    return sales_stats.build_statistics(db, scope, request.query_params, "customer", [_cash()])


# CRUD


@router.post("/bulk")
def bulk_create(
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    sales = payload.get("sales")
    if not isinstance(sales, list) or not sales:
        raise BusinessError.bad_request("Sales array is required and must not be empty")
    status_code, body = crud.bulk_create(db, DETAILED_SALES, sales, current_user)
    return JSONResponse(status_code=status_code, content=body)


@router.get("")
def list_sales(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_supervisor),
):
    scope = _scope(db, current_user, request)
    return sales_stats.list_detailed_sales(db, scope, request.query_params)


@router.post("", status_code=201)
def create_sale(
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    row = crud.create_row(db, DETAILED_SALES, payload, current_user)
    return {"success": True, "data": DETAILED_SALES.serialize(row)}


@router.get("/{sale_id}")
def get_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_supervisor),
):
    row = crud.get_or_404(db, DETAILED_SALES, sale_id)
    # Supervisors may only open rows of their own branches
    resolve_branch_scope(db, current_user, row.branch_code)
    return {"success": True, "data": DETAILED_SALES.serialize(row)}


@router.put("/{sale_id}")
def update_sale(
    sale_id: int,
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    row = crud.get_or_404(db, DETAILED_SALES, sale_id)
    row = crud.update_row(db, DETAILED_SALES, row, payload, current_user)
    return {"success": True, "data": DETAILED_SALES.serialize(row)}


@router.delete("/{sale_id}")
def delete_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    row = crud.get_or_404(db, DETAILED_SALES, sale_id)
    crud.delete_row(db, DETAILED_SALES, row, current_user)
    return {"success": True, "message": "Detailed sale deleted successfully", "data": {}}
