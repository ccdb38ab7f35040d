"""Error taxonomy for stable module boundaries."""


class FeedlineError(Exception):
    """Base exception for feedline."""


class ConfigError(FeedlineError):
    """Raised when configuration is invalid or missing."""


class IngestError(FeedlineError):
    """Raised when a raw payload batch cannot be read at all."""


class InvariantError(FeedlineError):
    """Raised when the engine detects a broken internal invariant."""


class NotifierError(FeedlineError):
    """Raised for channel subscription misuse."""


class StoreError(FeedlineError):
    """Raised when a live store operation targets an unknown record."""
