"""
DevCamper API — Route Helpers
==============================

Glue between list endpoints and the Advanced Results layer:
parse the query string, run the page query, serialize, project `select`
fields and set `X-Total-Count`.
"""

from typing import Mapping, Type

from fastapi import Request, Response
from pydantic import BaseModel
from sqlalchemy.orm import InstrumentedAttribute

from devcamper.schemas.common import PaginatedResponse
from devcamper.services.query_service import ListQuery, PageResult, parse_list_query, select_fields


def list_query(request: Request, columns: Mapping[str, InstrumentedAttribute]) -> ListQuery:
    settings = request.app.state.context.settings
    return parse_list_query(
        request.query_params.multi_items(),
        columns,
        default_limit=settings.default_page_limit,
        max_limit=settings.max_page_limit,
    )


def paginated(
    result: PageResult,
    query: ListQuery,
    schema: Type[BaseModel],
    response: Response,
) -> PaginatedResponse:
    data = [
        select_fields(schema.model_validate(row).model_dump(mode="json"), query.select)
        for row in result.rows
    ]
    response.headers["X-Total-Count"] = str(result.total)
    return PaginatedResponse(count=len(data), pagination=result.pagination, data=data)


def empty_data() -> dict:
    return {"success": True, "data": {}}
