"""Page visits: any signed-in user records visits; only admins read them."""
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request, status
from sqlalchemy.orm import Session

from pharmasales.api.deps import get_current_user, get_db, require_admin
from pharmasales.models.user import User
from pharmasales.schemas.common import dump
from pharmasales.schemas.visit import VisitResponse
from pharmasales.services import visit_service

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_visit(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    client_ip = request.client.host if request.client else None
    visit = visit_service.record_visit(db, current_user, payload, client_ip, request.headers)
    return {"success": True, "data": dump(VisitResponse, visit)}


@router.get("/stats")
def visit_stats(request: Request, db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
    return {"success": True, "data": visit_service.visit_stats(db, request.query_params)}


@router.get("")
def list_visits(request: Request, db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
    return visit_service.list_visits(db, request.query_params)
