"""
Generic create/read/update/delete and bulk insert for flat resources
(catalogs and sales rows).

A Resource bundles the model, its create and response schemas and its
declarative list filters. Routes stay thin: they check access, then hand
the request to these functions.

Bulk insert semantics: every item is validated and inserted in its own
SAVEPOINT. A failing item is reported in writeErrors by index and the
remaining items are still persisted.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Type

from fastapi import status
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pharmasales.core.audit import AuditLog
from pharmasales.core.exceptions import APIError, BusinessError, duplicate_field_from_integrity_error
from pharmasales.core.filters import (
    FilterSpec,
    SortSpec,
    build_conditions,
    page_envelope,
    page_from_params,
    paginate,
    resolve_order,
)
from pharmasales.schemas.common import canonical_payload, dump, public_key, validate_payload

logger = logging.getLogger(__name__)

# (merged payload, canonical incoming payload) -> payload to validate
UpdateHook = Callable[[Dict[str, Any], Dict[str, Any]], Dict[str, Any]]

READ_ONLY_KEYS = ("id", "createdAt", "updatedAt")


@dataclass
class Resource:
    label: str  # used in messages, e.g. "Incentive item"
    audit_name: str  # e.g. "incentive_item"
    model: Any
    create_schema: Type[BaseModel]
    response_schema: Type[BaseModel]
    filters: Sequence[FilterSpec] = ()
    sorts: Sequence[SortSpec] = ()
    default_order: Sequence = ()
    search: Optional[Callable[[str], Any]] = None
    prepare_update: Optional[UpdateHook] = None
    bulk_key: str = "items"

    def serialize(self, row) -> dict:
        return dump(self.response_schema, row)


def integrity_error(resource: Resource, exc: IntegrityError) -> APIError:
    column = duplicate_field_from_integrity_error(exc)
    if column is None:
        logger.warning(f"{resource.label} constraint violation: {exc.orig}")
        return BusinessError.bad_request("Database constraint violated", error=str(exc.orig))
    return BusinessError.duplicate_key(public_key(resource.create_schema, column))


def list_rows(
    db: Session,
    resource: Resource,
    params: Mapping[str, str],
    conditions: Sequence = (),
) -> Dict[str, Any]:
    page = page_from_params(params)
    query = db.query(resource.model).filter(*build_conditions(resource.filters, params), *conditions)
    if resource.search is not None:
        search = resource.search(params.get("search"))
        if search is not None:
            query = query.filter(search)
    order = resolve_order(
        resource.sorts, params, resource.default_order or [resource.model.id.desc()], tiebreak=[resource.model.id]
    )
    rows, total = paginate(query, page, order)
    return page_envelope([resource.serialize(r) for r in rows], total, page)


def get_or_404(db: Session, resource: Resource, row_id: int):
    row = db.query(resource.model).filter(resource.model.id == row_id).first()
    if not row:
        raise BusinessError.not_found(resource.label)
    return row


def create_row(db: Session, resource: Resource, payload: Any, user) -> Any:
    data = validate_payload(resource.create_schema, payload)
    row = resource.model(**data.model_dump())
    db.add(row)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise integrity_error(resource, exc)
    db.refresh(row)
    AuditLog.log_action("create", resource.audit_name, row.id, user)
    return row


def update_row(db: Session, resource: Resource, row, payload: Mapping[str, Any], user) -> Any:
    """
    Lay the payload over the stored row and re-validate the whole record,
    so constraints and derived defaults apply to updates as well.
    """
    incoming = canonical_payload(resource.create_schema, dict(payload))
    current = {k: v for k, v in resource.serialize(row).items() if k not in READ_ONLY_KEYS}
    merged = {**current, **incoming}
    if resource.prepare_update is not None:
        merged = resource.prepare_update(merged, incoming)

    data = validate_payload(resource.create_schema, merged)
    values = data.model_dump()
    changed = sorted(k for k, v in values.items() if getattr(row, k) != v)
    for key, value in values.items():
        setattr(row, key, value)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise integrity_error(resource, exc)
    db.refresh(row)
    AuditLog.log_action("update", resource.audit_name, row.id, user, changes={"fields": changed})
    return row


def delete_row(db: Session, resource: Resource, row, user) -> None:
    row_id = row.id
    db.delete(row)
    db.commit()
    AuditLog.log_action("delete", resource.audit_name, row_id, user)


def bulk_create(db: Session, resource: Resource, items: Sequence[Any], user) -> Tuple[int, Dict[str, Any]]:
    """
    Insert items independently.

    Returns (status_code, body). 201 when every item was inserted; 400 with
    the inserted rows and writeErrors otherwise.
    """
    if not isinstance(items, list) or not items:
        raise BusinessError.bad_request(f"Please provide an array of {resource.bulk_key}")

    inserted = []
    write_errors: List[Dict[str, Any]] = []
    for index, item in enumerate(items):
        try:
            data = validate_payload(resource.create_schema, item)
        except APIError as exc:
            write_errors.append({"index": index, "error": "; ".join(exc.errors or [exc.detail])})
            continue

        row = resource.model(**data.model_dump())
        try:
            with db.begin_nested():
                db.add(row)
        except IntegrityError as exc:
            column = duplicate_field_from_integrity_error(exc)
            reason = f"Duplicate {public_key(resource.create_schema, column)}" if column else str(exc.orig)
            write_errors.append({"index": index, "error": reason})
            continue
        inserted.append(row)

    db.commit()
    for row in inserted:
        db.refresh(row)

    AuditLog.log_action(
        "bulk_create",
        resource.audit_name,
        None,
        user,
        changes={"inserted": len(inserted), "failed": len(write_errors)},
    )

    body = {
        "insertedCount": len(inserted),
        "count": len(inserted),
        "data": [resource.serialize(r) for r in inserted],
    }
    if write_errors:
        logger.info(f"Bulk {resource.audit_name}: {len(inserted)} inserted, {len(write_errors)} failed")
        return status.HTTP_400_BAD_REQUEST, {
            "success": False,
            "message": "Some items failed to create",
            **body,
            "writeErrors": write_errors,
        }
    return status.HTTP_201_CREATED, {"success": True, **body}
