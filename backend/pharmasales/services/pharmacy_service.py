"""
Pharmacies and their staff assignments.

A supervisor only sees and edits pharmacies they supervise, becomes the
supervisor of any pharmacy they create, and cannot hand a pharmacy to
someone else.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload

from pharmasales.core.audit import AuditLog
from pharmasales.core.exceptions import BusinessError, duplicate_field_from_integrity_error
from pharmasales.core.filters import FilterSpec, build_conditions, contains_ci, search_condition
from pharmasales.core.permissions import ensure_supervises
from pharmasales.models.pharmacy import Pharmacy
from pharmasales.models.user import User
from pharmasales.schemas.common import canonical_payload, dump, public_key, validate_payload
from pharmasales.schemas.pharmacy import PharmacistAssignment, PharmacyCreate, PharmacyResponse

logger = logging.getLogger(__name__)

PHARMACY_FILTERS = [
    FilterSpec("isActive", Pharmacy.is_active, "bool"),
    FilterSpec("branchCode", Pharmacy.branch_code, "eq", int),
    FilterSpec("name", Pharmacy.name, "icontains"),
]


def serialize(pharmacy: Pharmacy) -> dict:
    return dump(PharmacyResponse, pharmacy)


def _query(db: Session):
    return db.query(Pharmacy).options(joinedload(Pharmacy.supervisor), selectinload(Pharmacy.pharmacists))


def list_pharmacies(db: Session, user: User, params: Mapping[str, str]) -> List[Pharmacy]:
    query = _query(db).filter(*build_conditions(PHARMACY_FILTERS, params))
    if user.is_supervisor:
        query = query.filter(Pharmacy.supervisor_id == user.id)
    city = params.get("city")
    if city:
        query = query.filter(contains_ci(Pharmacy.address["city"].as_string(), city))
    search = search_condition(params.get("search"), Pharmacy.branch_code, [Pharmacy.name, Pharmacy.description])
    if search is not None:
        query = query.filter(search)
    return query.order_by(Pharmacy.created_at.desc(), Pharmacy.id.desc()).all()


def get_pharmacy(db: Session, pharmacy_id: int) -> Pharmacy:
    pharmacy = _query(db).filter(Pharmacy.id == pharmacy_id).first()
    if not pharmacy:
        raise BusinessError.not_found("Pharmacy")
    return pharmacy


def get_visible_pharmacy(db: Session, pharmacy_id: int, user: User) -> Pharmacy:
    pharmacy = get_pharmacy(db, pharmacy_id)
    if user.is_supervisor:
        ensure_supervises(pharmacy, user, "view")
    return pharmacy


def _load_users(db: Session, user_ids: List[int], label: str) -> List[User]:
    if not user_ids:
        return []
    users = db.query(User).filter(User.id.in_(user_ids)).all()
    found = {u.id for u in users}
    missing = [i for i in user_ids if i not in found]
    if missing:
        raise BusinessError.bad_request(f"{label} not found: {', '.join(str(i) for i in missing)}")
    by_id = {u.id: u for u in users}
    return [by_id[i] for i in user_ids]


def _apply(db: Session, pharmacy: Pharmacy, data: PharmacyCreate) -> None:
    pharmacy.branch_code = data.branch_code
    pharmacy.name = data.name
    pharmacy.address = data.address.model_dump()
    pharmacy.contact = data.contact.model_dump()
    pharmacy.working_hours = data.working_hours.model_dump()
    pharmacy.location = data.location.model_dump() if data.location else None
    pharmacy.is_active = data.is_active
    pharmacy.description = data.description
    pharmacy.pharmacists = _load_users(db, data.pharmacists, "Pharmacist")
    if data.supervisor is not None:
        pharmacy.supervisor = _load_users(db, [data.supervisor], "Supervisor")[0]
    else:
        pharmacy.supervisor = None


def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        column = duplicate_field_from_integrity_error(exc)
        raise BusinessError.duplicate_key(public_key(PharmacyCreate, column) if column else None)


def _normalize(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Older clients send a single `pharmacist` instead of `pharmacists`."""
    payload = dict(payload)
    if "pharmacist" in payload:
        single = payload.pop("pharmacist")
        if "pharmacists" not in payload:
            payload["pharmacists"] = [single] if single else []
    return payload


def create_pharmacy(db: Session, user: User, payload: Dict[str, Any]) -> Pharmacy:
    payload = _normalize(payload)
    if user.is_supervisor:
        payload["supervisor"] = user.id
    data = validate_payload(PharmacyCreate, payload)

    pharmacy = Pharmacy()
    _apply(db, pharmacy, data)
    db.add(pharmacy)
    _commit(db)
    AuditLog.log_action("create", "pharmacy", pharmacy.id, user, changes={"branchCode": pharmacy.branch_code})
    return get_pharmacy(db, pharmacy.id)


def update_pharmacy(db: Session, user: User, pharmacy_id: int, payload: Dict[str, Any]) -> Pharmacy:
    pharmacy = get_pharmacy(db, pharmacy_id)
    ensure_supervises(pharmacy, user, "update")

    incoming = canonical_payload(PharmacyCreate, _normalize(payload))
    if user.is_supervisor:
        incoming.pop("supervisor", None)

    current = {
        "branchCode": pharmacy.branch_code,
        "name": pharmacy.name,
        "address": pharmacy.address,
        "contact": pharmacy.contact,
        "workingHours": pharmacy.working_hours or {},
        "location": pharmacy.location,
        "isActive": pharmacy.is_active,
        "description": pharmacy.description,
        "pharmacists": [u.id for u in pharmacy.pharmacists],
        "supervisor": pharmacy.supervisor_id,
    }
    data = validate_payload(PharmacyCreate, {**current, **incoming})
    _apply(db, pharmacy, data)
    _commit(db)
    AuditLog.log_action("update", "pharmacy", pharmacy.id, user, changes={"fields": sorted(incoming)})
    return get_pharmacy(db, pharmacy.id)


def delete_pharmacy(db: Session, user: User, pharmacy_id: int) -> None:
    pharmacy = get_pharmacy(db, pharmacy_id)
    ensure_supervises(pharmacy, user, "delete")
    db.delete(pharmacy)
    db.commit()
    AuditLog.log_action("delete", "pharmacy", pharmacy_id, user)


def add_pharmacist(db: Session, user: User, pharmacy_id: int, pharmacist_id: Optional[int]) -> Pharmacy:
    if not pharmacist_id:
        raise BusinessError.bad_request("Pharmacist ID is required")
    pharmacist_id = validate_payload(PharmacistAssignment, {"pharmacistId": pharmacist_id}).pharmacist_id
    pharmacy = get_pharmacy(db, pharmacy_id)
    ensure_supervises(pharmacy, user, "modify")

    if any(p.id == pharmacist_id for p in pharmacy.pharmacists):
        raise BusinessError.bad_request("Pharmacist is already assigned to this pharmacy")
    pharmacist = _load_users(db, [pharmacist_id], "Pharmacist")[0]
    pharmacy.pharmacists.append(pharmacist)
    db.commit()
    AuditLog.log_action("add_pharmacist", "pharmacy", pharmacy.id, user, changes={"pharmacistId": pharmacist.id})
    return get_pharmacy(db, pharmacy.id)


def remove_pharmacist(db: Session, user: User, pharmacy_id: int, pharmacist_id: int) -> Pharmacy:
    pharmacy = get_pharmacy(db, pharmacy_id)
    ensure_supervises(pharmacy, user, "modify")
    pharmacy.pharmacists = [p for p in pharmacy.pharmacists if str(p.id) != str(pharmacist_id)]
    db.commit()
    AuditLog.log_action("remove_pharmacist", "pharmacy", pharmacy.id, user, changes={"pharmacistId": pharmacist_id})
    return get_pharmacy(db, pharmacy.id)
