"""Error taxonomy for the valuation service."""

from __future__ import annotations


class ValuationError(Exception):
    """Base exception for all valuation errors."""


class ConfigurationError(ValuationError):
    """A required credential or setting is missing. Never masked by fallback."""


class InsufficientDataError(ValuationError):
    """The PSF reference data produced an empty record for the request."""


class UpstreamError(ValuationError):
    """The remote valuation provider could not produce a usable result."""


class UpstreamParseError(UpstreamError):
    """The remote provider answered, but not with a valid valuation payload."""


class UpstreamTransportError(UpstreamError):
    """Network or runtime failure while calling the remote provider."""
