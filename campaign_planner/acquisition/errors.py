# This file defines the failure taxonomy of the acquisition pipeline.
# It exists so callers can tell a missing identifier from a network outage from an exhausted fallback.
# Timeout-class and other network failures both trigger the local fallback; the split is for diagnostics.

from __future__ import annotations


class FetchError(RuntimeError):
    """Base class for every error a fetch can surface to its caller."""


class PreconditionError(FetchError):
    """Raised before any I/O when a request cannot be built, e.g. a channel without an external id."""


class NetworkFailure(FetchError):
    def __init__(self, message: str, *, url: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class TimeoutClassFailure(NetworkFailure):
    """The request timed out, the connection dropped, or there is no network."""


class OtherNetworkFailure(NetworkFailure):
    """A definite negative answer: bad status, refused connection, unreadable body."""


class FallbackUnavailable(FetchError):
    """Both the remote attempt and the local snapshot failed."""

    def __init__(self, resource_key: str, *, cause: BaseException, fallback_reason: str) -> None:
        super().__init__(
            f"Remote fetch for '{resource_key}' failed ({type(cause).__name__}: {cause}) "
            f"and local fallback failed: {fallback_reason}"
        )
        self.resource_key = resource_key
        self.cause = cause
        self.fallback_reason = fallback_reason
