"""
Declarative query-parameter filters.

Each list endpoint declares its filters as data:

    FILTERS = [
        FilterSpec("Category", IncentiveItem.category, "icontains"),
        FilterSpec("minPrice", IncentiveItem.price, "gte", float),
    ]

and `build_conditions` turns the request's query parameters into SQLAlchemy
conditions the same way for every endpoint. Substring filters are literal
(LIKE wildcards in user input are escaped) and case-insensitive.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import and_, or_
from sqlalchemy.orm import Query

from pharmasales.core.config import settings
from pharmasales.core.exceptions import BusinessError

OPERATORS = ("eq", "icontains", "gte", "lte", "bool", "date_on", "date_from", "date_to")


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains_ci(column, value: str):
    """Case-insensitive literal substring match."""
    return column.ilike(f"%{escape_like(value)}%", escape="\\")


def parse_datetime(value: str) -> datetime:
    """ISO date or datetime; aware values are normalised to naive UTC."""
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_date(value: str) -> date:
    return parse_datetime(value).date()


def _is_date_only(value: str) -> bool:
    return len(value.strip()) == 10


def parse_bool(value: str) -> bool:
    return value.strip().lower() == "true"


@dataclass(frozen=True)
class FilterSpec:
    param: str
    column: Any
    op: str = "eq"
    cast: Callable[[str], Any] = str

    def __post_init__(self):
        if self.op not in OPERATORS:
            raise ValueError(f"Unknown filter operator: {self.op}")

    def condition(self, raw: str):
        if self.op == "icontains":
            return contains_ci(self.column, raw)
        if self.op == "bool":
            return self.column == parse_bool(raw)
        if self.op in ("date_on", "date_from", "date_to"):
            return self._date_condition(raw)

        value = self.cast(raw)
        if self.op == "gte":
            return self.column >= value
        if self.op == "lte":
            return self.column <= value
        return self.column == value

    def _date_condition(self, raw: str):
        start = parse_datetime(raw)
        if self.op == "date_from":
            return self.column >= start
        if self.op == "date_to":
            # A bare date includes the whole day
            if _is_date_only(raw):
                return self.column < start + timedelta(days=1)
            return self.column <= start
        day = datetime.combine(start.date(), time.min)
        return and_(self.column >= day, self.column < day + timedelta(days=1))


def build_conditions(specs: Iterable[FilterSpec], params: Mapping[str, str]) -> list:
    conditions = []
    for spec in specs:
        raw = params.get(spec.param)
        if raw is None or str(raw).strip() == "":
            continue
        try:
            conditions.append(spec.condition(str(raw)))
        except ValueError:
            raise BusinessError.bad_request(f"Invalid value for {spec.param}: {raw}")
    return conditions


def search_condition(value: Optional[str], key_column, text_columns: Sequence):
    """
    Catalog `search`: an all-digit value matches the numeric key exactly,
    anything else is a substring match over the descriptive columns.
    """
    if value is None or not value.strip():
        return None
    value = value.strip()
    if value.isdigit():
        return key_column == int(value)
    return or_(*[contains_ci(column, value) for column in text_columns])


@dataclass(frozen=True)
class SortSpec:
    """`?sortByPrice=asc|desc|true` style sort parameter."""

    param: str
    column: Any


def resolve_order(
    sorts: Sequence[SortSpec], params: Mapping[str, str], default: Sequence, tiebreak: Sequence = ()
) -> list:
    """First sort parameter present wins; `true` means descending."""
    for spec in sorts:
        direction = (params.get(spec.param) or "").lower()
        if direction in ("desc", "true"):
            return [spec.column.desc(), *tiebreak]
        if direction == "asc":
            return [spec.column.asc(), *tiebreak]
    return list(default)


@dataclass(frozen=True)
class Page:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def pages(self, total: int) -> int:
        return -(-total // self.limit) if self.limit else 0


def page_from_params(params: Mapping[str, str]) -> Page:
    try:
        page = int(params.get("page") or 1)
        limit = int(params.get("limit") or settings.DEFAULT_PAGE_SIZE)
    except ValueError:
        raise BusinessError.bad_request("page and limit must be integers")
    if page < 1 or limit < 1:
        raise BusinessError.bad_request("page and limit must be positive")
    return Page(page=page, limit=min(limit, settings.MAX_PAGE_SIZE))


def paginate(query: Query, page: Page, order_by: Sequence) -> Tuple[List[Any], int]:
    total = query.order_by(None).count()
    rows = query.order_by(*order_by).offset(page.offset).limit(page.limit).all()
    return rows, total


def page_envelope(rows: list, total: int, page: Page) -> dict:
    return {
        "success": True,
        "count": len(rows),
        "total": total,
        "page": page.page,
        "pages": page.pages(total),
        "data": rows,
    }


def parse_int(value: Optional[str], name: str) -> Optional[int]:
    if value is None or str(value).strip() == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise BusinessError.bad_request(f"Invalid value for {name}: {value}")
