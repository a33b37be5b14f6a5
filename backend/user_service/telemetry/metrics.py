from __future__ import annotations

import logging
import os
import threading
from typing import Dict, Optional, Tuple

from prometheus_client import CollectorRegistry, Counter, Histogram


_logger = logging.getLogger(__name__)


# Single process-wide registry for all Prometheus metrics in this service.
_REGISTRY: CollectorRegistry = CollectorRegistry()

_BASE_LABELS_LOCK = threading.Lock()
_BASE_LABELS: Optional[Dict[str, str]] = None


def _detect_service_and_env() -> Tuple[str, str]:
    """
    Determine the base `service` and `env` labels.

    Preference order:
    1. backend.user_service.config.get_settings() if it can be built.
    2. Environment variables (SERVICE_NAME / APP_ENV, ENV).
    3. Safe defaults: service="user-service", env="local".
    """
    service = os.getenv("SERVICE_NAME") or "user-service"
    env = os.getenv("APP_ENV") or os.getenv("ENV") or "local"

    from backend.user_service.config import get_settings

    try:
        settings = get_settings()
    except RuntimeError:
        # Missing upstream settings should not break metric recording.
        return service, env

    return settings.service, settings.env


def get_base_labels() -> Dict[str, str]:
    """
    Return the mandatory base labels for all metrics.

    Always includes:
    - service
    - env
    """
    global _BASE_LABELS
    if _BASE_LABELS is None:
        with _BASE_LABELS_LOCK:
            if _BASE_LABELS is None:
                service, env = _detect_service_and_env()
                _BASE_LABELS = {"service": service, "env": env}
                _logger.info(
                    "Initialized Prometheus base labels",
                    extra={"service": service, "env": env},
                )
    # Return a shallow copy to prevent accidental mutation.
    return dict(_BASE_LABELS)


def set_base_labels(service: str, env: str) -> None:
    """Pin the base labels, e.g. from the Settings an app was built with."""
    global _BASE_LABELS
    with _BASE_LABELS_LOCK:
        _BASE_LABELS = {"service": service, "env": env}


def get_registry() -> CollectorRegistry:
    """
    Access the shared CollectorRegistry for this process.
    """
    return _REGISTRY


# ---------------------------------------------------------------------------
# Metric definitions
# ---------------------------------------------------------------------------

# 1) API HTTP metrics
API_REQUEST_LATENCY_SECONDS = Histogram(
    "http_server_request_duration_seconds",
    "HTTP server request latency in seconds.",
    labelnames=["service", "env", "route", "method", "status_code"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0],
    registry=_REGISTRY,
)

API_REQUESTS_TOTAL = Counter(
    "http_server_requests_total",
    "Total HTTP server requests processed.",
    labelnames=["service", "env", "route", "method", "status_code"],
    registry=_REGISTRY,
)


# 2) Upstream (Supabase) call metrics

UPSTREAM_REQUEST_DURATION_SECONDS = Histogram(
    "upstream_request_duration_seconds",
    "Latency of calls to the upstream Supabase project in seconds.",
    labelnames=["service", "env", "resource", "method", "outcome"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0],
    registry=_REGISTRY,
)


# 3) Account provisioning metrics

SIGNUPS_TOTAL = Counter(
    "user_signups_total",
    "Account provisioning attempts by outcome and the step that decided it.",
    labelnames=["service", "env", "outcome", "step"],
    registry=_REGISTRY,
)


# ---------------------------------------------------------------------------
# Helper APIs
# ---------------------------------------------------------------------------


def _coerce_non_negative_duration(duration_seconds: float) -> float:
    if duration_seconds < 0:
        _logger.warning(
            "Received negative duration_seconds; coercing to 0.0",
            extra={"duration_seconds": duration_seconds},
        )
        return 0.0
    return duration_seconds


def observe_api_request(
    route: str,
    method: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """
    Record latency and count for a single HTTP API request.

    route: normalized path template, e.g. "/users/{user_id}"
    method: HTTP method, e.g. "GET"
    status_code: HTTP status code as integer
    duration_seconds: duration of the request in seconds
    """
    duration = _coerce_non_negative_duration(float(duration_seconds))
    base_labels = get_base_labels()
    labels = {
        **base_labels,
        "route": route,
        "method": method.upper(),
        "status_code": str(int(status_code)),
    }
    API_REQUEST_LATENCY_SECONDS.labels(**labels).observe(duration)
    API_REQUESTS_TOTAL.labels(**labels).inc()


def observe_upstream_request(
    resource: str,
    method: str,
    outcome: str,
    duration_seconds: float,
) -> None:
    """
    Record latency for one upstream call.

    resource: "auth" or "database"
    outcome: "success", "http_error" or "transport_error"
    """
    duration = _coerce_non_negative_duration(float(duration_seconds))
    labels = {
        **get_base_labels(),
        "resource": resource,
        "method": method.upper(),
        "outcome": outcome,
    }
    UPSTREAM_REQUEST_DURATION_SECONDS.labels(**labels).observe(duration)


def record_signup_outcome(outcome: str, step: str) -> None:
    """
    Count one finished provisioning attempt.

    outcome: "success" or "failed"
    step: the last step reached ("validation", "identity", "record")
    """
    labels = {
        **get_base_labels(),
        "outcome": outcome,
        "step": step,
    }
    SIGNUPS_TOTAL.labels(**labels).inc()


__all__ = [
    "get_registry",
    "get_base_labels",
    "set_base_labels",
    "observe_api_request",
    "observe_upstream_request",
    "record_signup_outcome",
]
