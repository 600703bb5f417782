"""Incentive items catalog (admin only)."""
from typing import Any, Dict

from pharmasales.api.crud_router import crud_router
from pharmasales.core.filters import FilterSpec, SortSpec, search_condition
from pharmasales.models.catalog import IncentiveItem
from pharmasales.schemas.catalog import IncentiveItemCreate, IncentiveItemResponse
from pharmasales.services import crud


def rederive_incentive_value(merged: Dict[str, Any], incoming: Dict[str, Any]) -> Dict[str, Any]:
    """A new Price or IncentivePercentage recomputes incentive_value unless one is sent."""
    if ("Price" in incoming or "IncentivePercentage" in incoming) and "incentive_value" not in incoming:
        merged["incentive_value"] = None
    return merged


INCENTIVE_ITEMS = crud.Resource(
    label="Incentive item",
    audit_name="incentive_item",
    model=IncentiveItem,
    create_schema=IncentiveItemCreate,
    response_schema=IncentiveItemResponse,
    filters=[
        FilterSpec("Class", IncentiveItem.item_class),
        FilterSpec("Category", IncentiveItem.category, "icontains"),
        FilterSpec("Sub category", IncentiveItem.sub_category, "icontains"),
        FilterSpec("Sub_category", IncentiveItem.sub_category, "icontains"),
        FilterSpec("Division", IncentiveItem.division, "icontains"),
        FilterSpec("description", IncentiveItem.description, "icontains"),
        FilterSpec("minPrice", IncentiveItem.price, "gte", float),
        FilterSpec("maxPrice", IncentiveItem.price, "lte", float),
    ],
    sorts=[
        SortSpec("sortByPrice", IncentiveItem.price),
        SortSpec("sortByIncentiveValue", IncentiveItem.incentive_value),
    ],
    default_order=[IncentiveItem.created_at.desc(), IncentiveItem.id.desc()],
    search=lambda value: search_condition(
        value, IncentiveItem.sap_code, [IncentiveItem.category, IncentiveItem.division, IncentiveItem.description]
    ),
    prepare_update=rederive_incentive_value,
)

router = crud_router(INCENTIVE_ITEMS)
