from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable

from fastapi import Request, Response

from backend.user_service.telemetry.metrics import observe_api_request


logger = logging.getLogger(__name__)

UNMATCHED_ROUTE = "unmatched"


def _route_template(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_ROUTE


async def record_request_metrics(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Time every request and label it with the matched route template."""
    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        observe_api_request(
            _route_template(request), request.method, 500, time.perf_counter() - start
        )
        raise

    observe_api_request(
        _route_template(request),
        request.method,
        response.status_code,
        time.perf_counter() - start,
    )
    return response
