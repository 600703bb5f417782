"""Page-visit tracking. Visits are append-only; nothing here updates or deletes them."""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Mapping, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from pharmasales.core.filters import (
    FilterSpec,
    SortSpec,
    build_conditions,
    page_envelope,
    page_from_params,
    paginate,
    resolve_order,
)
from pharmasales.models.user import User
from pharmasales.models.visit import Visit
from pharmasales.schemas.common import dump, validate_payload
from pharmasales.schemas.user import UserSummary
from pharmasales.schemas.visit import VisitCreate, VisitResponse

logger = logging.getLogger(__name__)

VISIT_FILTERS = [
    FilterSpec("userId", Visit.user_id, "eq", int),
    FilterSpec("path", Visit.path, "icontains"),
    FilterSpec("method", Visit.method),
    FilterSpec("startDate", Visit.created_at, "date_from"),
    FilterSpec("endDate", Visit.created_at, "date_to"),
]
DATE_FILTERS = VISIT_FILTERS[3:]
VISIT_SORTS = [SortSpec("sortOrder", Visit.created_at)]

TOP_N = 10
RECENT_DAYS = 30


def record_visit(db: Session, user: User, payload: Any, client_ip: Optional[str], headers: Mapping[str, str]) -> Visit:
    """Store a visit; request metadata fills in whatever the client left out."""
    data = validate_payload(VisitCreate, payload)
    visit = Visit(
        user_id=user.id,
        path=data.path,
        method=data.method,
        ip_address=data.ip_address or client_ip,
        user_agent=data.user_agent or headers.get("user-agent"),
        referer=data.referer or headers.get("referer"),
    )
    db.add(visit)
    db.commit()
    db.refresh(visit)
    return visit


def list_visits(db: Session, params: Mapping[str, str]) -> Dict[str, Any]:
    page = page_from_params(params)
    query = db.query(Visit).options(joinedload(Visit.user)).filter(*build_conditions(VISIT_FILTERS, params))
    order = resolve_order(VISIT_SORTS, params, [Visit.created_at.desc()], tiebreak=[Visit.id.desc()])
    rows, total = paginate(query, page, order)
    return page_envelope([dump(VisitResponse, v) for v in rows], total, page)


def visit_stats(db: Session, params: Mapping[str, str], now: Optional[datetime] = None) -> Dict[str, Any]:
    conditions = build_conditions(DATE_FILTERS, params)

    total_visits = db.query(func.count(Visit.id)).filter(*conditions).scalar() or 0
    unique_users = db.query(func.count(func.distinct(Visit.user_id))).filter(*conditions).scalar() or 0

    count = func.count(Visit.id).label("count")
    pages = (
        db.query(Visit.path, count)
        .filter(*conditions)
        .group_by(Visit.path)
        .order_by(count.desc(), Visit.path)
        .limit(TOP_N)
        .all()
    )

    by_user = (
        db.query(Visit.user_id, count, func.max(Visit.created_at).label("last_visit"))
        .filter(*conditions)
        .group_by(Visit.user_id)
        .order_by(count.desc(), Visit.user_id)
        .limit(TOP_N)
        .all()
    )
    users = {
        u.id: u for u in db.query(User).filter(User.id.in_([row.user_id for row in by_user])).all()
    } if by_user else {}

    since = (now or datetime.utcnow()) - timedelta(days=RECENT_DAYS)
    day = func.date(Visit.created_at)
    by_day = (
        db.query(day.label("day"), count)
        .filter(*conditions, Visit.created_at >= since)
        .group_by(day)
        .order_by(day)
        .all()
    )

    return {
        "totalVisits": total_visits,
        "uniqueUsers": unique_users,
        "mostVisitedPages": [{"path": path, "count": n} for path, n in pages],
        "visitsByUser": [
            {
                "user": dump(UserSummary, users[row.user_id]) if row.user_id in users else None,
                "count": row.count,
                "lastVisit": row.last_visit.isoformat() if row.last_visit else None,
            }
            for row in by_user
        ],
        "visitsByDay": [{"date": str(d), "count": n} for d, n in by_day],
    }
