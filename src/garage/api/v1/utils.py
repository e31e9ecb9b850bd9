"""Shared query parameters and utility endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query

from garage.schemas.common import ListFilter, Pagination, SortOrder

router = APIRouter()


def pagination_params(
    page: Annotated[int, Query(ge=1, description="Page number (1-indexed)")] = 1,
    per_page: Annotated[
        int, Query(alias="perPage", ge=1, description="Items per page")
    ] = 1000,
    field: Annotated[str, Query(description="Column to sort by")] = "id",
    order: Annotated[SortOrder, Query(description="Sort direction")] = SortOrder.ASC,
) -> Pagination:
    """Read paging and sorting from the query string."""
    return Pagination(page=page, per_page=per_page, sort_field=field, sort_order=order)


def name_filter_params(
    name: Annotated[str | None, Query(description="Substring of the name")] = None,
    ids: Annotated[list[int] | None, Query(description="Restrict to these ids")] = None,
) -> ListFilter:
    """Read the name/ids filter of a car or part listing."""
    return ListFilter(term=name, ids=ids or [])


def username_filter_params(
    username: Annotated[
        str | None, Query(description="Substring of the username")
    ] = None,
    ids: Annotated[list[int] | None, Query(description="Restrict to these ids")] = None,
) -> ListFilter:
    """Read the username/ids filter of a user listing."""
    return ListFilter(term=username, ids=ids or [])


@router.get(
    "/healthcheck",
    summary="Healthcheck",
    description="Plain liveness check for orchestrators",
)
async def healthcheck() -> str:
    return "ok"
