"""
ELC service integration.

This module handles communication with the ELC REST SOE, including request
shaping, transport and response parsing.
"""

from .http_client import AioHttpClient, ELCAPIResponse, HTTPClient
from .request_shaper import ShapedRequest, shape_request, to_query_string
from .route_locator import (
    LocatorResult,
    RequestState,
    RouteLocator,
    RouteLocatorFactory,
)

__all__ = [
    "AioHttpClient",
    "ELCAPIResponse",
    "HTTPClient",
    "ShapedRequest",
    "shape_request",
    "to_query_string",
    "LocatorResult",
    "RequestState",
    "RouteLocator",
    "RouteLocatorFactory",
]
