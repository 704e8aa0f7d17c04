"""
Monitoring server endpoints.

Read-only HTTP API over the result store.
No endpoint creates, modifies, or deletes results.

Endpoints are plain (sync) functions: SQLite access blocks, so FastAPI
runs them in its thread pool instead of on the event loop.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import RedirectResponse

from cronlog.config import Settings
from cronlog.errors import CronlogError, InvalidArgumentError, NotFoundError
from cronlog.pagination import (
    end_of_day,
    format_date,
    pagination_info,
    parse_date,
    start_of_day,
)
from cronlog.storage import ResultStore
from .models import (
    ApplicationListResponse,
    ApplicationView,
    HealthResponse,
    OperationResultView,
    ResultPageResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["results"])


def _store(request: Request) -> ResultStore:
    return request.app.state.store


def _settings(request: Request) -> Settings:
    return request.app.state.settings


def _http_error(e: CronlogError, what: str) -> HTTPException:
    """Map a store error to an HTTP error response."""
    if isinstance(e, NotFoundError):
        logger.warning(f"{what}: {e}")
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, InvalidArgumentError):
        logger.warning(f"{what}: {e}")
        return HTTPException(status_code=400, detail=str(e))
    logger.error(f"{what}: {e}")
    return HTTPException(status_code=500, detail=f"{what}: {e}")


def _parse_skip(value: Optional[str]) -> int:
    """Lenient skip parsing: missing, invalid or negative values mean 0."""
    if not value:
        return 0
    try:
        skip = int(value)
    except ValueError:
        logger.warning(f"Could not parse skip param: '{value}'")
        return 0
    return max(skip, 0)


@router.get("/", include_in_schema=False)
def redirect_start():
    return RedirectResponse(url="/results", status_code=302)


@router.get("/health", response_model=HealthResponse)
def health_check(request: Request):
    return HealthResponse(status="ok", version=request.app.state.version)


@router.get("/results", response_model=ResultPageResponse)
def list_results(
    request: Request,
    skip: Optional[str] = Query(None, description="Number of matching results to skip"),
    from_date: Optional[str] = Query(None, alias="from", description="First day (YYYY-MM-DD)"),
    until_date: Optional[str] = Query(None, alias="until", description="Last day (YYYY-MM-DD)"),
    application: str = Query("", description="Exact application name"),
):
    """
    List one page of results, newest first.

    Dates are widened to whole days before querying. Unparseable dates
    are ignored rather than rejected.
    """
    settings = _settings(request)
    page_size = settings.page_size
    skip_value = _parse_skip(skip)
    from_day = parse_date(from_date)
    until_day = parse_date(until_date)

    try:
        page = _store(request).get_paged_items(
            page_size,
            skip_value,
            start_of_day(from_day),
            end_of_day(until_day),
            application,
        )
    except CronlogError as e:
        raise _http_error(e, "Could not get items from store")

    next_skip = skip_value + page_size
    total_pages, current_page = pagination_info(page.total_count, page_size, next_skip)
    app_config = settings.app_config

    return ResultPageResponse(
        total_count=page.total_count,
        items=[
            OperationResultView.from_result(item, app_config.color_for(item.application))
            for item in page.items
        ],
        page_size=page_size,
        skip=skip_value,
        next_skip=next_skip,
        total_pages=total_pages,
        current_page=current_page,
        from_date=format_date(from_day),
        until_date=format_date(until_day),
        application=application,
    )


@router.get("/results/{result_id}", response_model=OperationResultView)
def get_result(result_id: str, request: Request):
    """
    Retrieve a single result including its full output.

    Raises:
        404: If the result id does not exist
    """
    try:
        result = _store(request).get_by_id(result_id)
    except CronlogError as e:
        raise _http_error(e, f"Could not get item by id '{result_id}'")

    color = _settings(request).app_config.color_for(result.application)
    return OperationResultView.from_result(result, color)


@router.get("/applications", response_model=ApplicationListResponse)
def list_applications(request: Request):
    try:
        names = _store(request).get_avail_apps()
    except CronlogError as e:
        raise _http_error(e, "Could not get available apps from store")

    app_config = _settings(request).app_config
    return ApplicationListResponse(
        applications=[ApplicationView(name=name, color=app_config.color_for(name)) for name in names],
        total_count=len(names),
    )
