"""Baby Joy products. Listing and filter values are also open to users granted the /baby-joy page."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pharmasales.api.crud_router import crud_router
from pharmasales.api.deps import get_db, require_page_access
from pharmasales.core.filters import FilterSpec, SortSpec, search_condition
from pharmasales.models.catalog import BabyJoyItem
from pharmasales.models.user import User
from pharmasales.schemas.catalog import BabyJoyCreate, BabyJoyResponse
from pharmasales.services import crud

BABY_JOY = crud.Resource(
    label="Baby joy item",
    audit_name="baby_joy_item",
    model=BabyJoyItem,
    create_schema=BabyJoyCreate,
    response_schema=BabyJoyResponse,
    filters=[
        FilterSpec("Material", BabyJoyItem.material, "eq", int),
        FilterSpec("Brand", BabyJoyItem.brand, "icontains"),
        FilterSpec("Form", BabyJoyItem.form, "icontains"),
        FilterSpec("description", BabyJoyItem.material_detail, "icontains"),
        FilterSpec("minPrice", BabyJoyItem.price, "gte", float),
        FilterSpec("maxPrice", BabyJoyItem.price, "lte", float),
    ],
    sorts=[SortSpec("sortByPrice", BabyJoyItem.price)],
    default_order=[BabyJoyItem.created_at.desc(), BabyJoyItem.id.desc()],
    search=lambda value: search_condition(
        value, BabyJoyItem.material, [BabyJoyItem.brand, BabyJoyItem.form, BabyJoyItem.sap_description]
    ),
)

baby_joy_reader = require_page_access("/baby-joy")

router = APIRouter()


@router.get("/filters")
def filter_values(db: Session = Depends(get_db), current_user: User = Depends(baby_joy_reader)):
    """Distinct brands and forms for the filter dropdowns, sorted."""
    brands = [b for (b,) in db.query(BabyJoyItem.brand).distinct().all() if b]
    forms = [f for (f,) in db.query(BabyJoyItem.form).distinct().all() if f]
    return {"success": True, "data": {"brands": sorted(brands), "forms": sorted(forms)}}


crud_router(BABY_JOY, read_access=baby_joy_reader, router=router)
