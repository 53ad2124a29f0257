"""
State route identifier model for the ELC client.

A route identifier is a three digit mainline number, optionally followed
by a two character related roadway type (RRT) and a qualifier of up to
six letters or digits (e.g. "005", "005COABERDN", "090P1").
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..exceptions import InvalidRouteFormatError

logger = logging.getLogger(__name__)


ROUTE_RE = re.compile(
    r"(\d{3})"
    r"(?:"
    r"(AR|C[DIO]|F[DI]|LX|[PQRS][\dU]|RL|SP|TB|TR|PR|F[ST]|ML)"
    r"([A-Z0-9]{0,6})"
    r")?",
    re.IGNORECASE,
)

RELATED_ROADWAY_TYPES: Dict[str, str] = {
    "AR": "Alternate Route",
    "CD": "Collector Distributor (Dec)",
    "CI": "Collector Distributor (Inc)",
    "CO": "Couplet",
    "FI": "Frontage Road (Inc)",
    "FD": "Frontage Road (Dec)",
    "LX": "Crossroad within Interchange",
    "RL": "Reversible Lane",
    "SP": "Spur",
    "TB": "Transitional Turnback",
    "TR": "Temporary Route",
    "PR": "Proposed Route",
    "FS": "Ferry Ship (Boat)",
    "FT": "Ferry Terminal",
    "ML": "Mainline",
    "P": "Off Ramp (Inc)",
    "Q": "On Ramp (Inc)",
    "R": "Off Ramp (Dec)",
    "S": "On Ramp (Dec)",
}

_RAMP_PREFIXES = ("P", "Q", "R", "S")


@dataclass(frozen=True)
class RouteIdentifier:
    """
    Immutable, validated state route identifier.

    name keeps the matched text exactly as given; the component fields
    keep the case of the input as well.
    """

    name: str
    mainline: str
    related_roadway_type: Optional[str] = None
    qualifier: Optional[str] = None

    @classmethod
    def parse(cls, text: Any) -> "RouteIdentifier":
        """
        Parse a route name.

        Args:
            text: Route name such as "005" or "005COABERDN"

        Returns:
            RouteIdentifier: The decomposed route name

        Raises:
            InvalidRouteFormatError: If text is not a string matching the
                whole route grammar
        """
        if not isinstance(text, str):
            raise InvalidRouteFormatError("Route must be a string.", "route")

        match = ROUTE_RE.fullmatch(text)
        if not match:
            raise InvalidRouteFormatError(
                f"Route is invalidly formatted: {text!r}", "route"
            )

        mainline, rrt, rrq = match.groups()
        return cls(
            name=match.group(0),
            mainline=mainline,
            related_roadway_type=rrt or None,
            qualifier=rrq or None,
        )

    @classmethod
    def try_parse(cls, text: Any) -> Optional["RouteIdentifier"]:
        """Parse a route name, returning None instead of raising."""
        try:
            return cls.parse(text)
        except InvalidRouteFormatError:
            return None

    @property
    def is_mainline(self) -> bool:
        """Check if the identifier has no related roadway type."""
        return self.related_roadway_type is None

    @property
    def is_ramp(self) -> bool:
        """Check if the related roadway type is an on or off ramp."""
        rrt = self.related_roadway_type
        return rrt is not None and rrt[0].upper() in _RAMP_PREFIXES

    @property
    def related_roadway_type_description(self) -> Optional[str]:
        """Get a human readable description of the related roadway type."""
        if self.related_roadway_type is None:
            return None
        rrt = self.related_roadway_type.upper()
        if self.is_ramp:
            description = RELATED_ROADWAY_TYPES[rrt[0]]
            return f"{description} extension" if rrt[1] == "U" else description
        return RELATED_ROADWAY_TYPES.get(rrt)

    def __str__(self) -> str:
        return self.name


def is_valid_route(text: Any) -> bool:
    """Check if text is a valid state route identifier."""
    return RouteIdentifier.try_parse(text) is not None
