"""Supplier contests (admin only)."""
from pharmasales.api.crud_router import crud_router
from pharmasales.core.filters import FilterSpec, SortSpec, search_condition
from pharmasales.models.catalog import Contest
from pharmasales.schemas.catalog import ContestCreate, ContestResponse
from pharmasales.services import crud

CONTESTS = crud.Resource(
    label="Contest",
    audit_name="contest",
    model=Contest,
    create_schema=ContestCreate,
    response_schema=ContestResponse,
    filters=[
        FilterSpec("Company", Contest.company, "icontains"),
        FilterSpec("Category", Contest.category, "icontains"),
        FilterSpec("minPrice", Contest.price, "gte", float),
        FilterSpec("maxPrice", Contest.price, "lte", float),
        FilterSpec("minIncentive", Contest.incentive, "gte", float),
        FilterSpec("maxIncentive", Contest.incentive, "lte", float),
    ],
    sorts=[
        SortSpec("sortByPrice", Contest.price),
        SortSpec("sortByIncentive", Contest.incentive),
    ],
    default_order=[Contest.created_at.desc(), Contest.id.desc()],
    search=lambda value: search_condition(
        value, Contest.sap_code, [Contest.company, Contest.wh_description, Contest.category]
    ),
)

router = crud_router(CONTESTS)
