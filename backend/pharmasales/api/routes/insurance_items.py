"""Insurance items catalog. Listing is also open to users granted the /insurance-items page."""
from pharmasales.api.crud_router import crud_router
from pharmasales.api.deps import require_page_access
from pharmasales.core.filters import FilterSpec, SortSpec, search_condition
from pharmasales.models.catalog import InsuranceItem
from pharmasales.schemas.catalog import InsuranceItemCreate, InsuranceItemResponse
from pharmasales.services import crud

INSURANCE_ITEMS = crud.Resource(
    label="Insurance item",
    audit_name="insurance_item",
    model=InsuranceItem,
    create_schema=InsuranceItemCreate,
    response_schema=InsuranceItemResponse,
    filters=[
        FilterSpec("Category", InsuranceItem.category, "icontains"),
        FilterSpec("description", InsuranceItem.description, "icontains"),
        FilterSpec("minSapCode", InsuranceItem.sap_code, "gte", int),
        FilterSpec("maxSapCode", InsuranceItem.sap_code, "lte", int),
    ],
    sorts=[SortSpec("sortBySapCode", InsuranceItem.sap_code)],
    default_order=[InsuranceItem.created_at.desc(), InsuranceItem.id.desc()],
    search=lambda value: search_condition(
        value, InsuranceItem.sap_code, [InsuranceItem.category, InsuranceItem.description]
    ),
)

router = crud_router(INSURANCE_ITEMS, read_access=require_page_access("/insurance-items"))
