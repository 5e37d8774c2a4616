"""Prometheus metrics for the HTTP surface, generation runs, providers and the ledger."""

from __future__ import annotations

from time import perf_counter
from typing import TYPE_CHECKING, Optional

from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

if TYPE_CHECKING:  # pragma: no cover
    from blogforge_providers.base import ProviderResponse

_NAMESPACE = "blogforge"

# HTTP
_REQUESTS = Counter(
    "http_requests_total",
    "HTTP requests handled, by route template and status code",
    ("service", "method", "route", "status"),
    namespace=_NAMESPACE,
)
_REQUEST_SECONDS = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ("service", "method", "route"),
    namespace=_NAMESPACE,
)

# Generation runs
_STEP_SECONDS = Histogram(
    "generation_step_duration_seconds",
    "Wall time of one generation step",
    ("service", "step"),
    namespace=_NAMESPACE,
    buckets=(0.5, 1, 2.5, 5, 10, 20, 40, 80, 160, 320),
)
_STEP_RUNS = Counter(
    "generation_steps_total",
    "Generation steps by outcome",
    ("service", "step", "status"),
    namespace=_NAMESPACE,
)
_JOBS = Counter(
    "generation_jobs_total",
    "Generation runs by final outcome (completed, failed, rejected)",
    ("service", "status"),
    namespace=_NAMESPACE,
)
_RUNNING_JOBS = Gauge(
    "generation_jobs_running",
    "Generation runs currently in flight",
    ("service",),
    namespace=_NAMESPACE,
)

# Providers
_PROVIDER_CALLS = Counter(
    "provider_calls_total",
    "Provider calls by candidate and outcome (success, rate_limited, error, empty)",
    ("service", "stage", "provider", "outcome"),
    namespace=_NAMESPACE,
)
_PROVIDER_TOKENS = Counter(
    "provider_tokens_total",
    "Tokens billed by providers",
    ("service", "stage", "provider", "kind"),
    namespace=_NAMESPACE,
)
_PROVIDER_COST = Counter(
    "provider_cost_usd_total",
    "Estimated provider spend in USD",
    ("service", "stage", "provider"),
    namespace=_NAMESPACE,
)
_PROVIDER_SECONDS = Histogram(
    "provider_latency_seconds",
    "Provider call latency",
    ("service", "stage", "provider"),
    namespace=_NAMESPACE,
)

# Credits
_LEDGER_CALLS = Counter(
    "ledger_operations_total",
    "Credit ledger operations by outcome (success, insufficient, error)",
    ("service", "operation", "outcome"),
    namespace=_NAMESPACE,
)
_LEDGER_CREDITS = Counter(
    "ledger_credits_total",
    "Credits moved by successful ledger operations",
    ("service", "operation"),
    namespace=_NAMESPACE,
)


class PrometheusMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: FastAPI, service_name: str) -> None:
        super().__init__(app)
        self.service_name = service_name

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        started = perf_counter()
        response = await call_next(request)
        # Label by template ("/content/{job_id}") so job ids do not explode cardinality.
        route = getattr(request.scope.get("route"), "path", None) or request.url.path
        _REQUESTS.labels(self.service_name, request.method, route, str(response.status_code)).inc()
        _REQUEST_SECONDS.labels(self.service_name, request.method, route).observe(perf_counter() - started)
        return response


def setup_fastapi_metrics(app: FastAPI, service_name: str, endpoint: str = "/metrics") -> None:
    """Install the request middleware and expose ``endpoint`` once per app."""

    if getattr(app.state, "metrics_configured", False):
        return

    app.add_middleware(PrometheusMiddleware, service_name=service_name)

    @app.get(endpoint, include_in_schema=False)
    async def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.state.metrics_configured = True


def observe_stage_duration(
    step: str,
    duration_seconds: float,
    *,
    service_name: str,
    status: str = "success",
) -> None:
    _STEP_SECONDS.labels(service_name, step).observe(max(duration_seconds, 0.0))
    _STEP_RUNS.labels(service_name, step, status).inc()


def observe_job_outcome(status: str, *, service_name: str) -> None:
    _JOBS.labels(service_name, status).inc()


def set_running_jobs(count: int, *, service_name: str) -> None:
    _RUNNING_JOBS.labels(service_name).set(count)


def observe_provider_attempt(*, provider: str, stage: str, outcome: str, service_name: str) -> None:
    _PROVIDER_CALLS.labels(service_name, stage, provider, outcome).inc()


def observe_provider_response(
    *,
    stage: str,
    provider: str,
    service_name: str,
    response: Optional["ProviderResponse"],
) -> None:
    """Record tokens, latency and estimated cost of a successful call.

    Fields the provider did not report are skipped.
    """

    if response is None:
        return
    for kind, tokens in (("prompt", response.prompt_tokens), ("completion", response.completion_tokens)):
        if tokens is not None and tokens >= 0:
            _PROVIDER_TOKENS.labels(service_name, stage, provider, kind).inc(tokens)
    if response.latency_ms is not None and response.latency_ms >= 0:
        _PROVIDER_SECONDS.labels(service_name, stage, provider).observe(response.latency_ms / 1000)
    if response.cost_usd is not None and response.cost_usd >= 0:
        _PROVIDER_COST.labels(service_name, stage, provider).inc(response.cost_usd)


def observe_ledger_operation(operation: str, *, outcome: str, service_name: str, credits: int = 0) -> None:
    """Count a lock, finalize, refund, adjust or reset call.

    ``credits`` is the amount the operation moved; only successful
    operations move credits.
    """

    _LEDGER_CALLS.labels(service_name, operation, outcome).inc()
    if outcome == "success" and credits > 0:
        _LEDGER_CREDITS.labels(service_name, operation).inc(credits)
