"""
Data models for the ELC client.

This module contains the route identifier, route location and route list
models exchanged with the ELC service.
"""

from .route_identifier import RouteIdentifier, is_valid_route
from .route_list import Route, RouteKind, RouteList
from .route_location import RouteLocation, RouteLocationValidator

__all__ = [
    "RouteIdentifier",
    "is_valid_route",
    "Route",
    "RouteKind",
    "RouteList",
    "RouteLocation",
    "RouteLocationValidator",
]
