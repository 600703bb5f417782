"""
Router factory for flat catalog resources.

Each catalog gets the same six endpoints: list, bulk insert, get, create,
update and delete. Resource-specific routes (e.g. /baby-joy/filters) are
registered on the module router before it is passed in so they are not
shadowed by /{item_id}.
"""
from typing import Any, Callable, Dict, Optional

from fastapi import APIRouter, Body, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from pharmasales.api.deps import get_db, require_admin
from pharmasales.core.exceptions import BusinessError
from pharmasales.models.user import User
from pharmasales.services import crud


def crud_router(
    resource: crud.Resource,
    read_access: Callable = require_admin,
    router: Optional[APIRouter] = None,
) -> APIRouter:
    """Add the standard endpoints to `router` (a new one when omitted); writes are admin only."""
    router = router if router is not None else APIRouter()

    @router.get("")
    def list_items(request: Request, db: Session = Depends(get_db), current_user: User = Depends(read_access)):
        return crud.list_rows(db, resource, request.query_params)

    @router.post("/bulk")
    def bulk_create(
        payload: Dict[str, Any] = Body(...),
        db: Session = Depends(get_db),
        current_user: User = Depends(require_admin),
    ):
        items = payload.get(resource.bulk_key)
        if not isinstance(items, list) or not items:
            raise BusinessError.bad_request(f"{resource.bulk_key.capitalize()} array is required and must not be empty")
        status_code, body = crud.bulk_create(db, resource, items, current_user)
        return JSONResponse(status_code=status_code, content=body)

    @router.get("/{item_id}")
    def get_item(item_id: int, db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
        return {"success": True, "data": resource.serialize(crud.get_or_404(db, resource, item_id))}

    @router.post("", status_code=status.HTTP_201_CREATED)
    def create_item(
        payload: Dict[str, Any] = Body(...),
        db: Session = Depends(get_db),
        current_user: User = Depends(require_admin),
    ):
        row = crud.create_row(db, resource, payload, current_user)
        return {"success": True, "data": resource.serialize(row)}

    @router.put("/{item_id}")
    def update_item(
        item_id: int,
        payload: Dict[str, Any] = Body(...),
        db: Session = Depends(get_db),
        current_user: User = Depends(require_admin),
    ):
        row = crud.get_or_404(db, resource, item_id)
        row = crud.update_row(db, resource, row, payload, current_user)
        return {"success": True, "data": resource.serialize(row)}

    @router.delete("/{item_id}")
    def delete_item(item_id: int, db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
        row = crud.get_or_404(db, resource, item_id)
        crud.delete_row(db, resource, row, current_user)
        return {"success": True, "message": f"{resource.label} deleted successfully", "data": {}}

    return router
