"""
Exception hierarchy for fieldforms.

The interpretation pipeline is fail-soft: the normalizer and the
submission transformer never raise. Exceptions only leave the package
at the edges (configuration, ranking misuse, transport).
"""

from __future__ import annotations


class FieldFormsError(Exception):
    """Base class for all fieldforms errors."""
    pass


class RankingError(FieldFormsError, ValueError):
    """Raised when a rank label is not part of the field's ranking vocabulary."""
    pass


class SubmissionError(FieldFormsError):
    """
    Raised when a payload could not be delivered.

    Answers are never discarded when this is raised, so the caller can
    resubmit as-is when `retryable` is True.
    """

    def __init__(self, message: str, status_code: int | None = None, retryable: bool = True):
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable


class ConfigError(FieldFormsError):
    """Raised when a configuration file or override cannot be applied."""
    pass


class LocationError(FieldFormsError):
    """
    Raised by a location provider when no position could be obtained.

    `code` follows the geolocation convention: 1 permission denied,
    2 position unavailable, 3 timeout. 0 means unsupported.
    """

    UNSUPPORTED = 0
    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3

    def __init__(self, code: int, message: str = ""):
        super().__init__(message or f"location error {code}")
        self.code = code
