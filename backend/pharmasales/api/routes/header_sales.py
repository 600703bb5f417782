"""
Header (per-invoice) sales and monthly reports.

Scoped like detailed sales, on StoreCode. Writes are admin only.
"""
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from pharmasales.api.deps import get_db, require_admin, require_admin_or_supervisor
from pharmasales.core.exceptions import BusinessError
from pharmasales.core.filters import parse_int
from pharmasales.models.sales import HeaderSale
from pharmasales.models.user import User
from pharmasales.schemas.sales import HeaderSaleCreate, HeaderSaleResponse
from pharmasales.services import crud, sales_stats
from pharmasales.services.access_scope import BranchScope, resolve_branch_scope
from pharmasales.services.customer_sets import cash_condition, get_customer_sets, insurance_condition

router = APIRouter()

HEADER_SALES = crud.Resource(
    label="Header sale",
    audit_name="header_sale",
    model=HeaderSale,
    create_schema=HeaderSaleCreate,
    response_schema=HeaderSaleResponse,
)


def _scope(db: Session, user: User, request: Request) -> BranchScope:
    params = request.query_params
    name = "StoreCode" if params.get("StoreCode") else "branchCode"
    return resolve_branch_scope(db, user, parse_int(params.get(name), name))


def _monthly(request: Request, db: Session, user: User, report: str, *conditions):
    scope = _scope(db, user, request)
    return sales_stats.header_sales_by_month(db, scope, request.query_params, conditions, report=report)


@router.get("/by-month")
def sales_by_month(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_supervisor),
):
    return _monthly(request, db, current_user, "all")


@router.get("/cash-by-month")
def cash_by_month(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_supervisor),
):
    return _monthly(
        request, db, current_user, "cash", cash_condition(HeaderSale.customer_name, get_customer_sets())
    )


@router.get("/insurance-by-month")
def insurance_by_month(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_supervisor),
):
    return _monthly(
        request, db, current_user, "insurance", insurance_condition(HeaderSale.customer_name, get_customer_sets())
    )


@router.get("/wasfaty-by-month")
def wasfaty_by_month(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_supervisor),
):
    return _monthly(request, db, current_user, "wasfaty", sales_stats.invoice_type_contains("wasfaty"))


@router.get("/online-by-month")
def online_by_month(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_supervisor),
):
    return _monthly(request, db, current_user, "online", sales_stats.invoice_type_contains("online"))


@router.post("/bulk")
def bulk_create(
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    items = payload.get("items")
    if not isinstance(items, list) or not items:
        raise BusinessError.bad_request("Please provide an array of items")
    status_code, body = crud.bulk_create(db, HEADER_SALES, items, current_user)
    return JSONResponse(status_code=status_code, content=body)


@router.get("")
def list_sales(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_supervisor),
):
    scope = _scope(db, current_user, request)
    return sales_stats.list_header_sales(db, scope, request.query_params)


@router.post("", status_code=201)
def create_sale(
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    row = crud.create_row(db, HEADER_SALES, payload, current_user)
    return {"success": True, "data": HEADER_SALES.serialize(row)}


@router.get("/{sale_id}")
def get_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_supervisor),
):
    row = crud.get_or_404(db, HEADER_SALES, sale_id)
    resolve_branch_scope(db, current_user, row.store_code)
    return {"success": True, "data": HEADER_SALES.serialize(row)}


@router.put("/{sale_id}")
def update_sale(
    sale_id: int,
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    row = crud.get_or_404(db, HEADER_SALES, sale_id)
    row = crud.update_row(db, HEADER_SALES, row, payload, current_user)
    return {"success": True, "data": HEADER_SALES.serialize(row)}


@router.delete("/{sale_id}")
def delete_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    row = crud.get_or_404(db, HEADER_SALES, sale_id)
    crud.delete_row(db, HEADER_SALES, row, current_user)
    return {"success": True, "message": "Header sale deleted successfully", "data": {}}
