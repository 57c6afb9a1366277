import time
from cachetools import TTLCache
from fastapi import Header, HTTPException, Request
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_429_TOO_MANY_REQUESTS
from .config import settings

# Per-minute hit counters; entries expire shortly after their minute ends
_hits: TTLCache = TTLCache(maxsize=16384, ttl=120)

def require_api_key(x_api_key: str | None = Header(default=None, alias="x-api-key")):
    """
    Header-based API key check for embedding partners.
    With no API_KEY configured the service is open (dev convenience).
    """
    if not settings.API_KEY:
        return
    if x_api_key != settings.API_KEY:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid API key")

def rate_limit(request: Request):
    """
    Requests-per-minute limiter keyed by API key (if present) and client IP.
    Remote valuations are billed per call, so this also caps upstream spend.
    """
    rpm = max(1, settings.RATE_LIMIT_RPM)
    client_ip = request.client.host if request.client else "unknown"
    api_key = request.headers.get("x-api-key") or "anon"
    minute_bucket = int(time.time() // 60)
    key = f"rate:{api_key}:{client_ip}:{minute_bucket}"

    count = _hits.get(key, 0) + 1
    if count > rpm:
        raise HTTPException(status_code=HTTP_429_TOO_MANY_REQUESTS, detail="Rate limit exceeded")
    _hits[key] = count

def reset_rate_limits() -> None:
    """Forget all counters."""
    _hits.clear()
