"""
Route catalog models for the ELC client.

The ELC "routes" resource returns, for each LRS year, a mapping of route
name to an integer describing which LRS directions the route has.
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Iterator, List, Mapping, Optional

from ..exceptions import InvalidFieldError

logger = logging.getLogger(__name__)


class RouteKind(IntEnum):
    """LRS direction types of a route."""

    INCREASE = 1
    DECREASE = 2
    BOTH = 3
    RAMP = 4


@dataclass(frozen=True)
class Route:
    """A state route and the LRS directions it has."""

    name: str
    kind: RouteKind

    def is_increase(self) -> bool:
        """Check if the route has an increase LRS."""
        return self.kind in (RouteKind.INCREASE, RouteKind.BOTH)

    def is_decrease(self) -> bool:
        """Check if the route has a decrease LRS."""
        return self.kind in (RouteKind.DECREASE, RouteKind.BOTH)

    def is_both(self) -> bool:
        """Check if the route has both increase and decrease LRS."""
        return self.kind == RouteKind.BOTH

    def is_ramp(self) -> bool:
        """Check if the route is a ramp."""
        return self.kind == RouteKind.RAMP


def _to_route_kind(code: Any, year: str, name: str) -> RouteKind:
    if isinstance(code, bool) or not isinstance(code, int):
        raise InvalidFieldError(
            f"Invalid route type {code!r} for route {name} ({year})", name
        )
    try:
        return RouteKind(code)
    except ValueError:
        raise InvalidFieldError(
            f"Invalid route type {code!r} for route {name} ({year})", name
        )


@dataclass
class RouteList:
    """
    Routes available in each LRS year of the ELC map service.

    Year labels are strings such as "Current", "2008" or "2005B".
    """

    routes_by_year: Dict[str, List[Route]] = field(default_factory=dict)

    @classmethod
    def from_wire(cls, obj: Mapping[str, Any]) -> "RouteList":
        """
        Create a RouteList from the response of the routes resource.

        Raises:
            InvalidFieldError: If the response is not a mapping of years to
                mappings of route names to route type codes 1-4
        """
        if not isinstance(obj, Mapping):
            raise InvalidFieldError("Route list response must be an object.")

        routes_by_year: Dict[str, List[Route]] = {}
        for year, routes in obj.items():
            if not isinstance(routes, Mapping):
                raise InvalidFieldError(
                    f"Routes for LRS year {year} must be an object.", str(year)
                )
            routes_by_year[str(year)] = [
                Route(name, _to_route_kind(code, year, name))
                for name, code in routes.items()
            ]

        logger.debug(f"Parsed route list with {len(routes_by_year)} LRS years")
        return cls(routes_by_year)

    def years(self) -> List[str]:
        """Get the LRS year labels in lexical order."""
        return sorted(self.routes_by_year)

    def routes(self, year: str) -> List[Route]:
        """Get the routes of an LRS year, or an empty list for unknown years."""
        return list(self.routes_by_year.get(year, []))

    def get_route(self, year: str, name: str) -> Optional[Route]:
        """Find a route by name within an LRS year."""
        for route in self.routes_by_year.get(year, []):
            if route.name == name:
                return route
        return None

    def to_wire(self) -> Dict[str, Dict[str, int]]:
        """Convert back into the routes resource format."""
        return {
            year: {route.name: int(route.kind) for route in routes}
            for year, routes in self.routes_by_year.items()
        }

    def __contains__(self, year: object) -> bool:
        return year in self.routes_by_year

    def __getitem__(self, year: str) -> List[Route]:
        return self.routes_by_year[year]

    def __iter__(self) -> Iterator[str]:
        return iter(self.years())

    def __len__(self) -> int:
        return len(self.routes_by_year)
