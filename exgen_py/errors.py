"""Exception types raised by exgen_py."""

from typing import Optional

import requests


class ExgenError(Exception):
    """Base class for all exgen_py errors."""


class ValidationError(ExgenError):
    """A local check failed; nothing was sent over the network."""


class TransportError(ExgenError):
    """Network failure or non-2xx response from a remote endpoint."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @classmethod
    def from_request_error(
        cls, error: requests.RequestException, fallback: str
    ) -> "TransportError":
        """
        Build a TransportError from a requests exception.
        Uses the server's `message` field when the body carries one.
        """
        response = getattr(error, "response", None)
        if response is None:
            return cls(fallback)

        message = None
        try:
            body = response.json()
            if isinstance(body, dict):
                message = body.get("message")
        except ValueError:
            pass

        return cls(message or fallback, status_code=response.status_code)


class RunError(ExgenError):
    """A judge run failed as a whole; no partial results are available."""


class BusyError(ExgenError):
    """The same action is already in flight."""


class RunInProgressError(BusyError):
    """A judge run is already in flight for the active draft."""
