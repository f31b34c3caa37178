"""
DevCamper API — Advanced Results (list filtering & pagination)
===============================================================

What:  Turns a list endpoint's query string into a filtered, sorted,
       paginated SELECT and the pagination metadata that goes with it.

Query string grammar:
    select=name,description      only these response fields (+ id)
    sort=-average_cost,name      order; "-" = descending; default -created_at
    page=2&limit=10              1-based page, limit defaults to 25
    average_cost[lte]=10000      comparison filter (gt, gte, lt, lte)
    minimum_skill[in]=a,b        membership filter (comma list)
    housing=true                 equality filter

    Only fields declared filterable for the resource are honoured; other keys
    are ignored. When a key repeats, the last value wins.
    Values are coerced to the column's Python type; failure → 400.

Pagination metadata:
    next = {page + 1, limit}  when page * limit < total
    prev = {page - 1, limit}  when (page - 1) * limit > 0
"""

import logging
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import Boolean, JSON, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from devcamper.exceptions import BadRequestError
from devcamper.schemas.common import PageRef, Pagination

logger = logging.getLogger(__name__)

RESERVED_PARAMS = {"select", "sort", "page", "limit"}
_FILTER_KEY = re.compile(r"^(?P<field>[A-Za-z_][A-Za-z0-9_]*)(?:\[(?P<op>gt|gte|lt|lte|in)\])?$")
_TRUE = {"true", "1", "yes"}
_FALSE = {"false", "0", "no"}


@dataclass
class ListQuery:
    page: int = 1
    limit: int = 25
    select: Optional[List[str]] = None
    sort: List[Tuple[str, bool]] = field(default_factory=lambda: [("created_at", True)])
    filters: List[Tuple[str, str, Any]] = field(default_factory=list)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def filterable_columns(model: Any, exclude: Iterable[str] = ()) -> Dict[str, InstrumentedAttribute]:
    """Every scalar column of `model` except those in `exclude` (and JSON columns)."""
    skip = set(exclude)
    columns = {}
    for column in model.__table__.columns:
        if column.key in skip or isinstance(column.type, JSON):
            continue
        columns[column.key] = getattr(model, column.key)
    return columns


def _coerce(attr: InstrumentedAttribute, name: str, raw: str) -> Any:
    column_type = attr.property.columns[0].type
    try:
        if isinstance(column_type, Boolean):
            lowered = raw.lower()
            if lowered in _TRUE:
                return True
            if lowered in _FALSE:
                return False
            raise ValueError(raw)
        python_type = column_type.python_type
        if python_type is uuid.UUID:
            return uuid.UUID(raw)
        if python_type is datetime:
            return datetime.fromisoformat(raw)
        if python_type in (int, float):
            return python_type(raw)
        return raw
    except (ValueError, TypeError, NotImplementedError):
        raise BadRequestError(
            message=f"Invalid value '{raw}' for field {name}",
            field=name,
        )


def _positive_int(raw: Optional[str], name: str, default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise BadRequestError(message=f"Invalid {name} '{raw}'", field=name)
    if value < 1:
        raise BadRequestError(message=f"{name} must be at least 1", field=name)
    return value


def parse_list_query(
    params: Iterable[Tuple[str, str]],
    columns: Mapping[str, InstrumentedAttribute],
    default_limit: int = 25,
    max_limit: int = 100,
) -> ListQuery:
    """
    Parses raw (key, value) query pairs into a ListQuery.

    `params` is usually `request.query_params.multi_items()`; collapsing it
    into a dict makes the last occurrence of a key win.
    """
    raw = dict(params)

    query = ListQuery(
        page=_positive_int(raw.get("page"), "page", 1),
        limit=min(_positive_int(raw.get("limit"), "limit", default_limit), max_limit),
    )

    if raw.get("select"):
        query.select = [f.strip() for f in raw["select"].split(",") if f.strip()]

    if raw.get("sort"):
        sort = []
        for item in raw["sort"].split(","):
            item = item.strip()
            descending = item.startswith("-")
            name = item.lstrip("-")
            if name in columns:
                sort.append((name, descending))
        if sort:
            query.sort = sort

    for key, value in raw.items():
        if key in RESERVED_PARAMS:
            continue
        match = _FILTER_KEY.match(key)
        if not match or match.group("field") not in columns:
            continue
        name, op = match.group("field"), match.group("op") or "eq"
        attr = columns[name]
        if op == "in":
            coerced = [_coerce(attr, name, v.strip()) for v in value.split(",") if v.strip()]
        else:
            coerced = _coerce(attr, name, value)
        query.filters.append((name, op, coerced))

    return query


def _condition(attr: InstrumentedAttribute, op: str, value: Any):
    if op == "gt":
        return attr > value
    if op == "gte":
        return attr >= value
    if op == "lt":
        return attr < value
    if op == "lte":
        return attr <= value
    if op == "in":
        return attr.in_(value)
    return attr == value


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    pagination = Pagination()
    if page * limit < total:
        pagination.next = PageRef(page=page + 1, limit=limit)
    if (page - 1) * limit > 0:
        pagination.prev = PageRef(page=page - 1, limit=limit)
    return pagination


@dataclass
class PageResult:
    rows: List[Any]
    total: int
    pagination: Pagination


async def fetch_page(
    db: AsyncSession,
    model: Any,
    query: ListQuery,
    columns: Mapping[str, InstrumentedAttribute],
    where: Sequence[Any] = (),
    options: Sequence[Any] = (),
) -> PageResult:
    """Runs the count and the page SELECT for `query` against `model`."""
    conditions = list(where)
    conditions.extend(_condition(columns[name], op, value) for name, op, value in query.filters)

    count_stmt = select(func.count()).select_from(model).where(*conditions)
    total = (await db.execute(count_stmt)).scalar() or 0

    stmt = select(model).where(*conditions)
    for name, descending in query.sort:
        attr = columns[name]
        stmt = stmt.order_by(attr.desc() if descending else attr.asc())
    stmt = stmt.offset(query.offset).limit(query.limit)
    if options:
        stmt = stmt.options(*options)

    rows = list((await db.execute(stmt)).scalars().all())
    logger.debug(
        "Listed %s: page=%d limit=%d filters=%d → %d/%d",
        model.__tablename__, query.page, query.limit, len(query.filters), len(rows), total,
    )
    return PageResult(rows=rows, total=total, pagination=build_pagination(query.page, query.limit, total))


def select_fields(item: Dict[str, Any], fields: Optional[List[str]]) -> Dict[str, Any]:
    """Projects a serialized item onto `fields`; `id` is always kept."""
    if not fields:
        return item
    wanted = set(fields) | {"id"}
    return {k: v for k, v in item.items() if k in wanted}
