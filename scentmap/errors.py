from __future__ import annotations


class ScentMapError(Exception):
    """Base class for engine errors."""


class OracleUnavailable(ScentMapError):
    """A similarity oracle timed out, failed, or returned something unusable."""


class CacheCorrupt(ScentMapError):
    """The persisted similarity cache could not be read or validated."""


class DegenerateInputError(ScentMapError, ValueError):
    """Input too small or empty for the requested computation."""
