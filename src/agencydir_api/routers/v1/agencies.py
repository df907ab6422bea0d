"""Agency directory listing endpoint."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Header, Request, Response

from agencydir_shared.constants import AGENCIES_ROUTE

from agencydir_api.dependencies import StoreOrError, get_directory_store, get_retry_policy
from agencydir_api.errors import ApiError, DataStoreUnavailableError, InternalError
from agencydir_api.responses import ApiErrorBody, api_error_response
from agencydir_api.services import agency_service
from agencydir_api.utils.cache import negotiate
from agencydir_api.utils.monitoring import PerformanceMonitor, error_rate_tracker
from agencydir_api.utils.retry import RetryingFetcher, RetryPolicy
from agencydir_api.utils.validation import parse_agency_query

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/agencies", tags=["agencies"])


def _fail(monitor: PerformanceMonitor, exc: ApiError) -> Response:
    monitor.complete(exc.status_code, exc.message)
    error_rate_tracker.record_request(AGENCIES_ROUTE, True)
    return api_error_response(exc)


@router.get(
    "",
    responses={
        304: {"description": "Client copy is current"},
        400: {"model": ApiErrorBody},
        500: {"model": ApiErrorBody},
    },
)
async def list_agencies(
    request: Request,
    store: StoreOrError = Depends(get_directory_store),
    retry_policy: RetryPolicy = Depends(get_retry_policy),
    if_none_match: str | None = Header(None),
) -> Response:
    """List active agencies, filtered by search, trades and states.

    Query: `search`, `trades` / `trades[]`, `states` / `states[]`,
    `limit` (1-100, default 20), `offset` (default 0).
    """
    monitor = PerformanceMonitor(AGENCIES_ROUTE, "GET")
    try:
        query = parse_agency_query(request.query_params)
        if isinstance(store, DataStoreUnavailableError):
            raise store
        fetcher = RetryingFetcher(retry_policy, monitor=monitor)
        body = await agency_service.list_agencies(store, query, fetcher)
    except ApiError as exc:
        return _fail(monitor, exc)
    except Exception:
        log.exception("agencies_unexpected_error")
        return _fail(monitor, InternalError())

    response = negotiate(body, if_none_match)
    monitor.complete(
        response.status_code,
        metadata={
            "result_count": len(body["data"]),
            "total_count": body["pagination"]["total"],
            "has_filters": query.has_filters,
        },
    )
    error_rate_tracker.record_request(AGENCIES_ROUTE, False)
    return response
