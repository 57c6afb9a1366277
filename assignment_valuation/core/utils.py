import hashlib
import json
from decimal import Decimal, ROUND_HALF_UP

def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves away from zero (2.5 -> 3, -2.5 -> -3).
    Python's round() uses banker's rounding, which would shift trend values.
    """
    # to_integral_value ignores context precision, so values past 28 digits still round
    return int(Decimal(value).to_integral_value(rounding=ROUND_HALF_UP))

def share_number(value: float) -> str:
    """Render a number for a share link: 600000.0 -> '600000', 712.5 -> '712.5'."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))

def canonical_json(payload: dict) -> bytes:
    """Stable byte encoding used for ETags."""
    return json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8")

def weak_etag(payload_bytes: bytes) -> str:
    """Weak ETag for client-side conditional requests."""
    h = hashlib.sha256(payload_bytes).hexdigest()[:24]
    return f'W/"{h}"'
