"""
Errors — Failures a host or resolver can report

Only host-facing failures are exceptions. Invalid filter patterns and
stale selections are recovered where they happen and surfaced as flags;
cancelled resolutions are dropped silently.
"""


class BrowserError(Exception):
    """Base for failures surfaced on a resolution slot."""

    kind = "BrowserError"

    def __init__(self, message: str = "", target: str = ""):
        super().__init__(message or self.kind)
        self.target = target


class HostUnavailable(BrowserError):
    """The host environment could not be reached or failed unexpectedly."""
    kind = "HostUnavailable"


class LoadError(BrowserError):
    """The host could not load (require) a namespace."""
    kind = "LoadError"


class NotFound(BrowserError):
    """The host has no documentation for the requested member and facet."""
    kind = "NotFound"


TIMEOUT = "Timeout"


def error_kind(exc: BaseException) -> str:
    """
    Classify an exception raised by a host call.

    Known browser errors keep their kind; anything else the host raises
    counts as the host being unavailable.
    """
    if isinstance(exc, BrowserError):
        return exc.kind
    return HostUnavailable.kind
