"""
Exception hierarchy for the ELC client.

Validation errors (InvalidArgumentError, InvalidFieldError) are raised
synchronously before a request is made. Service and transport errors are
delivered through LocatorResult and the caller's error handler.
"""

from typing import Any, Optional


class ELCException(Exception):
    """Base exception for ELC client errors."""

    pass


class InvalidArgumentError(ELCException, ValueError):
    """Exception for malformed caller input to a locator operation."""

    pass


class InvalidFieldError(ELCException, ValueError):
    """Exception for a RouteLocation field that fails its wire format."""

    def __init__(self, message: str, field_name: Optional[str] = None):
        super().__init__(message)
        self.field_name = field_name


class InvalidRouteFormatError(InvalidFieldError):
    """Exception for a route name that does not match the route grammar."""

    pass


class ServiceError(ELCException):
    """
    Exception for an error reported by the ELC service.

    Raised for non-200 responses and for 200 responses whose body carries
    an "error" member.
    """

    def __init__(
        self,
        message: str,
        payload: Any = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.payload = payload
        self.status_code = status_code

    @classmethod
    def from_payload(cls, payload: Any, status_code: Optional[int] = None) -> "ServiceError":
        """Build a ServiceError from an ArcGIS style error body."""
        message = None
        if isinstance(payload, dict):
            error = payload.get("error")
            if isinstance(error, dict):
                message = error.get("message")
                if status_code is None and isinstance(error.get("code"), int):
                    status_code = error["code"]
            elif error:
                message = str(error)
        if not message:
            message = (
                f"Service returned status {status_code}"
                if status_code is not None
                else "Service returned an error"
            )
        return cls(message, payload=payload, status_code=status_code)


class TransportError(ELCException):
    """Exception for requests that could not be made or read."""

    pass
