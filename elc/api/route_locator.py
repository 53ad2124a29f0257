"""
Route locator for the WSDOT ELC REST service.

This module is the entry point of the client: it validates and serializes
route locations, shapes the requests, and hydrates RouteLocation objects
from the responses. Caller mistakes raise immediately; service and network
failures are returned as failed LocatorResults and passed to the caller's
error handler.
"""

import json
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import (
    Any,
    Callable,
    Coroutine,
    Dict,
    Generic,
    List,
    Mapping,
    Optional,
    Sequence,
    TypeVar,
    Union,
)

from ..exceptions import (
    ELCException,
    InvalidArgumentError,
    InvalidFieldError,
    ServiceError,
    TransportError,
)
from ..managers.elc_config import ELCConfig
from ..models.route_list import RouteList
from ..models.route_location import RouteLocation
from ..utils.helpers import flatten_array, format_route_locator_date, is_number
from .http_client import AioHttpClient, ELCAPIResponse, HTTPClient
from .request_shaper import ShapedRequest, shape_request

logger = logging.getLogger(__name__)

T = TypeVar("T")

SpatialReference = Union[int, str]
DateArgument = Union[date, datetime, str]
SuccessHandler = Callable[[Any], None]
ErrorHandler = Callable[[ELCException], None]


class RequestState(Enum):
    """Terminal state of a single locator operation."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class LocatorResult(Generic[T]):
    """Outcome of a locator operation: a value or an error, never both."""

    value: Optional[T] = None
    error: Optional[ELCException] = None

    @property
    def succeeded(self) -> bool:
        """Check if the operation completed without error."""
        return self.error is None

    @property
    def failed(self) -> bool:
        """Check if the operation completed with an error."""
        return self.error is not None

    @property
    def state(self) -> RequestState:
        """Get the terminal state of the operation."""
        return RequestState.FAILED if self.failed else RequestState.SUCCEEDED

    def unwrap(self) -> T:
        """Get the value, raising the error of a failed operation."""
        if self.error is not None:
            raise self.error
        return self.value


def _is_spatial_reference(value: Any) -> bool:
    return isinstance(value, str) or (
        isinstance(value, int) and not isinstance(value, bool)
    )


def _to_request_date(value: Any, required: bool = False) -> Optional[str]:
    """Convert a reference date argument into the ELC date string."""
    if value is None or value == "":
        if required:
            raise InvalidArgumentError("referenceDate not provided.")
        return None
    if isinstance(value, (date, datetime)):
        return format_route_locator_date(value)
    if isinstance(value, str):
        return value
    raise InvalidArgumentError(
        "Unexpected referenceDate type. Expected a date or a string."
    )


def _check_out_sr(out_sr: Any) -> None:
    if out_sr is not None and not _is_spatial_reference(out_sr):
        raise InvalidArgumentError(
            "Unexpected outSR type. Must be a WKID (int), WKT (string), or omitted."
        )


def _check_lrs_year(lrs_year: Any) -> None:
    if lrs_year is not None and not isinstance(lrs_year, str):
        raise InvalidArgumentError(
            "Invalid lrsYear. Must be either a string or omitted altogether."
        )


class RouteLocator:
    """
    Client for the ELC REST SOE endpoints.

    Holds the service URL, the operation names and the cached route list.
    The route list is fetched at most once per successful call sequence;
    concurrent first calls are not coalesced and the last one to finish
    populates the cache.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        find_route_locations_operation_name: Optional[str] = None,
        find_nearest_route_locations_operation_name: Optional[str] = None,
        routes_resource_name: Optional[str] = None,
        http_client: Optional[HTTPClient] = None,
        config: Optional[ELCConfig] = None,
    ):
        """
        Initialize the route locator.

        Args:
            url: ELC REST SOE URL (config url if None)
            find_route_locations_operation_name: Operation name override
            find_nearest_route_locations_operation_name: Operation name override
            routes_resource_name: Routes resource name override
            http_client: HTTP client implementation (aiohttp if None)
            config: ELC configuration (defaults if None)
        """
        self._config = config or ELCConfig()
        self.url = (url or self._config.url).rstrip("/")
        self.find_route_locations_operation_name = (
            find_route_locations_operation_name
            or self._config.find_route_locations_operation_name
        )
        self.find_nearest_route_locations_operation_name = (
            find_nearest_route_locations_operation_name
            or self._config.find_nearest_route_locations_operation_name
        )
        self.routes_resource_name = (
            routes_resource_name or self._config.routes_resource_name
        )
        self._http_client = http_client or AioHttpClient(
            timeout_seconds=self._config.timeout_seconds
        )
        self._route_list: Optional[RouteList] = None
        logger.debug(f"RouteLocator initialized for {self.url}")

    async def __aenter__(self) -> "RouteLocator":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    @property
    def map_service_url(self) -> str:
        """
        Get the map service portion of the ELC URL.

        Raises:
            ValueError: If the URL does not contain "/MapServer"
        """
        match = re.match(r".+/MapServer", self.url, re.IGNORECASE)
        if not match:
            raise ValueError(f"URL does not contain a map service: {self.url}")
        return match.group(0)

    @property
    def routes_url(self) -> str:
        return f"{self.url}/{self.routes_resource_name}"

    @property
    def find_route_locations_url(self) -> str:
        return f"{self.url}/{self.find_route_locations_operation_name}"

    @property
    def find_nearest_route_locations_url(self) -> str:
        return f"{self.url}/{self.find_nearest_route_locations_operation_name}"

    def _resolve_cors(self, use_cors: Optional[bool]) -> bool:
        return self._config.use_cors if use_cors is None else use_cors

    def _shape(self, base_url: str, params: Mapping[str, Any], use_cors: Optional[bool]) -> ShapedRequest:
        request = shape_request(
            base_url,
            params,
            self._resolve_cors(use_cors),
            self._config.max_url_length,
        )
        logger.debug(f"Shaped {request.method} request to {base_url}")
        return request

    async def get_route_list(
        self,
        use_cors: Optional[bool] = None,
        success_handler: Optional[SuccessHandler] = None,
        error_handler: Optional[ErrorHandler] = None,
    ) -> LocatorResult[RouteList]:
        """
        Get the routes available in each LRS year.

        Returns the cached list without a network call once it has been
        fetched.

        Returns:
            LocatorResult[RouteList]
        """
        if self._route_list is not None:
            logger.debug("Returning cached route list")
            return self._complete(self._route_list, success_handler)

        request = self._shape(self.routes_url, {"f": "json"}, use_cors)
        result = await self._execute(
            request,
            self._parse_route_list,
            "get route list",
            success_handler=None,
            error_handler=error_handler,
        )
        if result.failed:
            return result

        self._route_list = result.value
        return self._complete(result.value, success_handler)

    def find_by_location(
        self,
        locations: Sequence[Union[RouteLocation, Mapping[str, Any]]],
        reference_date: Optional[DateArgument] = None,
        out_sr: Optional[SpatialReference] = None,
        lrs_year: Optional[str] = None,
        use_cors: Optional[bool] = None,
        success_handler: Optional[SuccessHandler] = None,
        error_handler: Optional[ErrorHandler] = None,
    ) -> Coroutine[Any, Any, LocatorResult[List[RouteLocation]]]:
        """
        Find the geometry of route locations given by route and measure.

        Arguments are validated when this method is called, so invalid
        input raises before any request exists. Await the returned
        coroutine to send the request.

        Args:
            locations: RouteLocation objects (or wire mappings), at least one
            reference_date: Date the measures were collected
            out_sr: WKID or WKT of the output geometry
            lrs_year: LRS year, e.g. "Current", "2008", "2005B"
            use_cors: False requests a JSONP response (config default if None)
            success_handler: Called with the list of RouteLocations
            error_handler: Called with the ServiceError or TransportError

        Returns:
            Coroutine resolving to LocatorResult[List[RouteLocation]]

        Raises:
            InvalidArgumentError: For malformed arguments
            InvalidFieldError: If any location fails serialization
        """
        params = self._build_find_by_location_params(
            locations, reference_date, out_sr, lrs_year
        )
        request = self._shape(self.find_route_locations_url, params, use_cors)
        return self._execute(
            request,
            self._parse_route_locations,
            "find route locations",
            success_handler,
            error_handler,
        )

    def find_nearest(
        self,
        coordinates: Sequence[Any],
        reference_date: DateArgument,
        search_radius: float,
        in_sr: SpatialReference,
        out_sr: Optional[SpatialReference] = None,
        lrs_year: Optional[str] = None,
        route_filter: Optional[str] = None,
        use_cors: Optional[bool] = None,
        success_handler: Optional[SuccessHandler] = None,
        error_handler: Optional[ErrorHandler] = None,
    ) -> Coroutine[Any, Any, LocatorResult[List[RouteLocation]]]:
        """
        Find the route locations nearest to a set of points.

        Arguments are validated when this method is called. An empty
        result list means no route was found within the search radius.

        Args:
            coordinates: x, y, x, y, ... values; nested lists are flattened
            reference_date: Date the points were collected
            search_radius: Search distance in feet around each point
            in_sr: WKID or WKT of the coordinates
            out_sr: WKID or WKT of the output geometry
            lrs_year: LRS year, e.g. "Current", "2008", "2005B"
            route_filter: Partial SQL limiting the routes searched,
                e.g. "LIKE '005%'"
            use_cors: False requests a JSONP response (config default if None)
            success_handler: Called with the list of RouteLocations
            error_handler: Called with the ServiceError or TransportError

        Returns:
            Coroutine resolving to LocatorResult[List[RouteLocation]]

        Raises:
            InvalidArgumentError: For malformed arguments
        """
        params = self._build_find_nearest_params(
            coordinates,
            reference_date,
            search_radius,
            in_sr,
            out_sr,
            lrs_year,
            route_filter,
        )
        request = self._shape(self.find_nearest_route_locations_url, params, use_cors)
        return self._execute(
            request,
            self._parse_route_locations,
            "find nearest route locations",
            success_handler,
            error_handler,
        )

    def _build_find_by_location_params(
        self,
        locations: Any,
        reference_date: Any,
        out_sr: Any,
        lrs_year: Any,
    ) -> Dict[str, Any]:
        """Validate find_by_location arguments and build the parameters."""
        if not isinstance(locations, (list, tuple)):
            raise InvalidArgumentError(
                "The locations parameter must be a list of RouteLocations "
                "with at least one element."
            )
        if not locations:
            raise InvalidArgumentError("locations does not have enough elements.")

        request_date = _to_request_date(reference_date)
        _check_out_sr(out_sr)
        _check_lrs_year(lrs_year)

        wire_locations = []
        for location in locations:
            if isinstance(location, Mapping):
                location = RouteLocation.from_wire(location)
            elif not isinstance(location, RouteLocation):
                raise InvalidArgumentError(
                    f"Unexpected location type: {type(location).__name__}"
                )
            wire_locations.append(location.to_wire())

        return {
            "f": "json",
            "locations": json.dumps(wire_locations, separators=(",", ":")),
            "outSR": out_sr,
            "referenceDate": request_date,
            "lrsYear": lrs_year,
        }

    def _build_find_nearest_params(
        self,
        coordinates: Any,
        reference_date: Any,
        search_radius: Any,
        in_sr: Any,
        out_sr: Any,
        lrs_year: Any,
        route_filter: Any,
    ) -> Dict[str, Any]:
        """Validate find_nearest arguments and build the parameters."""
        request_date = _to_request_date(reference_date, required=True)

        if not isinstance(coordinates, (list, tuple)):
            raise InvalidArgumentError(
                "The coordinates parameter must be a list of numbers."
            )
        flat = flatten_array(coordinates)
        if not all(is_number(c) for c in flat):
            raise InvalidArgumentError("The coordinates must all be numbers.")
        if len(flat) < 2 or len(flat) % 2 != 0:
            raise InvalidArgumentError(
                "The coordinates array must contain at least two elements "
                "and consist of an even number of elements."
            )

        if not is_number(search_radius) or not search_radius > 0:
            raise InvalidArgumentError(
                "searchRadius must be a number that is greater than zero."
            )

        if not _is_spatial_reference(in_sr):
            raise InvalidArgumentError(
                "Unexpected inSR type. The inSR value must be either a WKID "
                "(int) or a WKT (string)."
            )
        _check_out_sr(out_sr)
        _check_lrs_year(lrs_year)

        if route_filter is not None and not isinstance(route_filter, str):
            raise InvalidArgumentError(
                "Invalid route filter type. The routeFilter parameter should "
                "be either a string or omitted altogether."
            )

        return {
            "f": "json",
            "referenceDate": request_date,
            "coordinates": json.dumps(flat, separators=(",", ":")),
            "searchRadius": search_radius,
            "inSR": in_sr,
            "outSR": out_sr,
            "lrsYear": lrs_year or None,
            "routeFilter": route_filter or None,
        }

    async def _execute(
        self,
        request: ShapedRequest,
        parse: Callable[[Any], T],
        operation: str,
        success_handler: Optional[SuccessHandler],
        error_handler: Optional[ErrorHandler],
    ) -> LocatorResult[T]:
        """Send a request and turn the response into a LocatorResult."""
        logger.info(f"Requesting {operation} ({request.method})")

        try:
            response = await self._http_client.send(request)
            value = self._read_response(response, parse)
        except (ServiceError, TransportError) as e:
            logger.error(f"Failed to {operation}: {e}")
            if error_handler is not None:
                error_handler(e)
            else:
                logger.warning(f"No error handler for {operation}, error only returned")
            return LocatorResult(error=e)

        return self._complete(value, success_handler)

    def _read_response(self, response: ELCAPIResponse, parse: Callable[[Any], T]) -> T:
        """
        Check a response for errors and parse its body.

        Raises:
            ServiceError: For non-200 responses, error bodies and bodies
                of an unexpected shape
        """
        data = response.data
        if response.status_code != 200:
            raise ServiceError.from_payload(data, response.status_code)
        if isinstance(data, Mapping) and data.get("error"):
            raise ServiceError.from_payload(data, response.status_code)

        try:
            return parse(data)
        except (InvalidArgumentError, InvalidFieldError) as e:
            raise ServiceError(
                f"Unexpected response format: {e}",
                payload=data,
                status_code=response.status_code,
            )

    def _complete(self, value: T, success_handler: Optional[SuccessHandler]) -> LocatorResult[T]:
        if success_handler is not None:
            success_handler(value)
        return LocatorResult(value=value)

    @staticmethod
    def _parse_route_list(data: Any) -> RouteList:
        return RouteList.from_wire(data)

    @staticmethod
    def _parse_route_locations(data: Any) -> List[RouteLocation]:
        if not isinstance(data, list):
            raise InvalidArgumentError(
                f"Expected an array of route locations, got {type(data).__name__}"
            )
        locations = RouteLocation.from_wire_list(data)
        logger.info(f"Received {len(locations)} route locations")
        return locations

    def clear_cache(self) -> None:
        """Clear the cached route list."""
        self._route_list = None
        logger.debug("Route list cache cleared")

    def get_cache_info(self) -> Dict:
        """Get information about current cache state."""
        return {
            "has_route_list": self._route_list is not None,
            "lrs_years": self._route_list.years() if self._route_list else [],
        }

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._http_client.close()
        logger.debug("RouteLocator closed")


class RouteLocatorFactory:
    """Factory for creating route locators."""

    @staticmethod
    def create_default_locator() -> RouteLocator:
        """Create a route locator for the public WSDOT ELC service."""
        return RouteLocator(config=ELCConfig())

    @staticmethod
    def create_from_config(
        config: ELCConfig, http_client: Optional[HTTPClient] = None
    ) -> RouteLocator:
        """Create a route locator from configuration."""
        return RouteLocator(config=config, http_client=http_client)
