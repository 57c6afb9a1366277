import time
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

# HTTP metrics
REQ_COUNT = Counter("http_requests_total", "Total HTTP requests", ["path","method","code"])
REQ_LATENCY = Histogram("http_request_duration_seconds", "Request latency", ["path","method"])

# Valuation metrics: which provider produced the answer, and why the remote one was skipped
VALUATIONS = Counter("valuations_total", "Valuations served", ["provider"])
REMOTE_FAILURES = Counter(
    "remote_valuation_failures_total",
    "Remote valuations replaced by the local engine",
    ["reason"],
)

class PromMiddleware(BaseHTTPMiddleware):
    """
    Measures latency and counts requests per route.
    """
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed = time.perf_counter() - start

        # Share-link GETs carry their inputs in the query string, so the path alone is a safe label
        path = request.url.path
        method = request.method
        code = str(response.status_code)

        REQ_COUNT.labels(path=path, method=method, code=code).inc()
        REQ_LATENCY.labels(path=path, method=method).observe(elapsed)
        return response

async def metrics_endpoint(request: Request):
    """
    GET /v1/metrics, scraped by Prometheus.
    """
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
