"""Pharmacies: any signed-in user can read; admins and supervisors write (supervisors only their own)."""
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request, status
from sqlalchemy.orm import Session

from pharmasales.api.deps import get_current_user, get_db, require_admin_or_supervisor
from pharmasales.models.user import User
from pharmasales.services import pharmacy_service
from pharmasales.services.pharmacy_service import serialize

router = APIRouter()


@router.get("")
def list_pharmacies(request: Request, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Supervisors see only the pharmacies they supervise."""
    pharmacies = pharmacy_service.list_pharmacies(db, current_user, request.query_params)
    return {"success": True, "count": len(pharmacies), "data": [serialize(p) for p in pharmacies]}


@router.get("/{pharmacy_id}")
def get_pharmacy(pharmacy_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    pharmacy = pharmacy_service.get_visible_pharmacy(db, pharmacy_id, current_user)
    return {"success": True, "data": serialize(pharmacy)}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_pharmacy(
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_supervisor),
):
    """A supervisor creating a pharmacy becomes its supervisor."""
    pharmacy = pharmacy_service.create_pharmacy(db, current_user, payload)
    return {"success": True, "data": serialize(pharmacy)}


@router.put("/{pharmacy_id}")
def update_pharmacy(
    pharmacy_id: int,
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_supervisor),
):
    pharmacy = pharmacy_service.update_pharmacy(db, current_user, pharmacy_id, payload)
    return {"success": True, "data": serialize(pharmacy)}


@router.delete("/{pharmacy_id}")
def delete_pharmacy(
    pharmacy_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_supervisor),
):
    pharmacy_service.delete_pharmacy(db, current_user, pharmacy_id)
    return {"success": True, "message": "Pharmacy deleted successfully", "data": {}}


@router.post("/{pharmacy_id}/pharmacists")
def add_pharmacist(
    pharmacy_id: int,
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_supervisor),
):
    pharmacy = pharmacy_service.add_pharmacist(db, current_user, pharmacy_id, payload.get("pharmacistId"))
    return {"success": True, "message": "Pharmacist added successfully", "data": serialize(pharmacy)}


@router.delete("/{pharmacy_id}/pharmacists/{pharmacist_id}")
def remove_pharmacist(
    pharmacy_id: int,
    pharmacist_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_supervisor),
):
    pharmacy = pharmacy_service.remove_pharmacist(db, current_user, pharmacy_id, pharmacist_id)
    return {"success": True, "message": "Pharmacist removed successfully", "data": serialize(pharmacy)}
