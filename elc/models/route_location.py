"""
Route location model for the ELC client.

A RouteLocation is either a point (a single measure) or a line (start and
end measures) on a state route. Outbound serialization is driven by an
explicit field table: each field has a wire name and a policy, and each
policy has one serializer.
"""

import json
import logging
import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ..exceptions import InvalidArgumentError, InvalidFieldError
from ..utils.helpers import (
    format_route_locator_date,
    is_number,
    parse_wire_date,
    to_number,
)
from .route_identifier import RouteIdentifier

logger = logging.getLogger(__name__)

SRMP_RE = re.compile(r"(\d+(?:\.\d+)?)(B)?", re.IGNORECASE)

DateValue = Union[date, datetime, str]
Measure = Union[int, float, str]


class FieldPolicy(Enum):
    """Serialization policy of a RouteLocation field."""

    NUMBER = "number"
    SRMP = "srmp"
    ROUTE = "route"
    BOOLEAN = "boolean"
    DATE = "date"
    PASSTHROUGH = "passthrough"


@dataclass(frozen=True)
class WireField:
    """A RouteLocation attribute, its ELC wire name and its policy."""

    attribute: str
    wire_name: str
    policy: FieldPolicy
    back_flag: Optional[str] = None


WIRE_FIELDS: Tuple[WireField, ...] = (
    WireField("id", "Id", FieldPolicy.NUMBER),
    WireField("route", "Route", FieldPolicy.ROUTE),
    WireField("is_decrease", "Decrease", FieldPolicy.BOOLEAN),
    WireField("arm", "Arm", FieldPolicy.NUMBER),
    WireField("srmp", "Srmp", FieldPolicy.SRMP, back_flag="Back"),
    WireField("is_back", "Back", FieldPolicy.BOOLEAN),
    WireField("reference_date", "ReferenceDate", FieldPolicy.DATE),
    WireField("response_date", "ResponseDate", FieldPolicy.DATE),
    WireField("realignment_date", "RealignmentDate", FieldPolicy.DATE),
    WireField("end_arm", "EndArm", FieldPolicy.NUMBER),
    WireField("end_srmp", "EndSrmp", FieldPolicy.SRMP, back_flag="EndBack"),
    WireField("end_is_back", "EndBack", FieldPolicy.BOOLEAN),
    WireField("end_reference_date", "EndReferenceDate", FieldPolicy.DATE),
    WireField("end_response_date", "EndResponseDate", FieldPolicy.DATE),
    WireField("end_realignment_date", "EndRealignDate", FieldPolicy.DATE),
    WireField("return_code", "ArmCalcReturnCode", FieldPolicy.NUMBER),
    WireField("end_return_code", "ArmCalcEndReturnCode", FieldPolicy.NUMBER),
    WireField("return_message", "ArmCalcReturnMessage", FieldPolicy.PASSTHROUGH),
    WireField("end_return_message", "ArmCalcEndReturnMessage", FieldPolicy.PASSTHROUGH),
    WireField("locating_error", "LocatingError", FieldPolicy.PASSTHROUGH),
    WireField("geometry", "RouteGeometry", FieldPolicy.PASSTHROUGH),
    WireField("event_point", "EventPoint", FieldPolicy.PASSTHROUGH),
    WireField("distance", "Distance", FieldPolicy.NUMBER),
    WireField("angle", "Angle", FieldPolicy.NUMBER),
)

_FIELDS_BY_WIRE_NAME: Dict[str, WireField] = {f.wire_name: f for f in WIRE_FIELDS}

# Returned by a serializer when the field is left out of the wire object.
_OMIT = object()

Serialized = Tuple[Any, Dict[str, bool]]


def _serialize_number(value: Any, wire_field: WireField) -> Serialized:
    if value is None:
        return _OMIT, {}
    return to_number(value, wire_field.wire_name), {}


def parse_srmp(value: Any, field_name: str = "Srmp") -> Tuple[Union[int, float], bool]:
    """
    Parse an SRMP value into its number and back mileage flag.

    Args:
        value: A number, or a string such as "12.5" or "12.5B"
        field_name: Name used in the error message

    Returns:
        Tuple of (number, is_back)

    Raises:
        InvalidFieldError: If value is neither a number nor a valid SRMP string
    """
    if is_number(value):
        if isinstance(value, float) and math.isnan(value):
            raise InvalidFieldError(f"Invalid {field_name} value: nan", field_name)
        return value, False

    if isinstance(value, str):
        match = SRMP_RE.fullmatch(value.strip())
        if match:
            number_text, back = match.groups()
            number = float(number_text) if "." in number_text else int(number_text)
            return number, back is not None

    raise InvalidFieldError(f"Invalid {field_name} value: {value}", field_name)


def _serialize_srmp(value: Any, wire_field: WireField) -> Serialized:
    if value is None:
        return _OMIT, {}
    number, is_back = parse_srmp(value, wire_field.wire_name)
    flags = {wire_field.back_flag: True} if is_back and wire_field.back_flag else {}
    return number, flags


def _serialize_route(value: Any, wire_field: WireField) -> Serialized:
    if value is None:
        return _OMIT, {}
    if isinstance(value, RouteIdentifier):
        return value.name, {}
    return RouteIdentifier.parse(value).name, {}


def _serialize_boolean(value: Any, wire_field: WireField) -> Serialized:
    if value is None:
        return _OMIT, {}
    return bool(value), {}


def _serialize_date(value: Any, wire_field: WireField) -> Serialized:
    if value is None or value == "":
        return _OMIT, {}
    if isinstance(value, (date, datetime)):
        return format_route_locator_date(value), {}
    if isinstance(value, str):
        return value, {}
    raise InvalidFieldError(
        f"{wire_field.wire_name} must be a date or a string.", wire_field.wire_name
    )


def _serialize_passthrough(value: Any, wire_field: WireField) -> Serialized:
    if value is None:
        return _OMIT, {}
    return value, {}


_SERIALIZERS: Dict[FieldPolicy, Callable[[Any, WireField], Serialized]] = {
    FieldPolicy.NUMBER: _serialize_number,
    FieldPolicy.SRMP: _serialize_srmp,
    FieldPolicy.ROUTE: _serialize_route,
    FieldPolicy.BOOLEAN: _serialize_boolean,
    FieldPolicy.DATE: _serialize_date,
    FieldPolicy.PASSTHROUGH: _serialize_passthrough,
}


@dataclass
class RouteLocation:
    """
    A point or a line segment on a WSDOT state route.

    Every field defaults to None, which means "not specified" and is left
    out of the wire object. The result fields (return codes and messages,
    locating_error, geometry, event_point, distance, angle) are populated
    by the service and are not normally set by callers.

    Attributes:
        id: Caller supplied token used to correlate results with inputs
        route: State route identifier, e.g. "005" or "005COABERDN"
        is_decrease: True for the decrease LRS, None to let the service decide
        arm: Start ARM (absolute reference measure)
        srmp: Start SRMP; a trailing "B" marks back mileage
        is_back: Start SRMP is back mileage
        end_arm: End ARM, lines only
        end_srmp: End SRMP, lines only
        end_is_back: End SRMP is back mileage
        return_code: ArmCalc return code for the start point
        end_return_code: ArmCalc return code for the end point
        geometry: ArcGIS JSON point or polyline
        event_point: The input point of a nearest route location search
        distance: Offset from event_point to the located point
        angle: Offset angle from event_point to the located point
    """

    id: Optional[Union[int, float, str]] = None
    route: Optional[Union[str, RouteIdentifier]] = None
    is_decrease: Optional[bool] = None

    arm: Optional[Union[int, float, str]] = None
    srmp: Optional[Measure] = None
    is_back: Optional[bool] = None
    reference_date: Optional[DateValue] = None
    response_date: Optional[DateValue] = None
    realignment_date: Optional[DateValue] = None

    end_arm: Optional[Union[int, float, str]] = None
    end_srmp: Optional[Measure] = None
    end_is_back: Optional[bool] = None
    end_reference_date: Optional[DateValue] = None
    end_response_date: Optional[DateValue] = None
    end_realignment_date: Optional[DateValue] = None

    return_code: Optional[int] = None
    end_return_code: Optional[int] = None
    return_message: Optional[str] = None
    end_return_message: Optional[str] = None
    locating_error: Optional[str] = None
    geometry: Optional[Dict[str, Any]] = None
    event_point: Optional[Dict[str, Any]] = None
    distance: Optional[float] = None
    angle: Optional[float] = None

    @classmethod
    def from_wire(cls, obj: Mapping[str, Any]) -> "RouteLocation":
        """
        Create a RouteLocation from an ELC wire object.

        Unrecognized keys are ignored. String or numeric values of keys
        ending in "Date" are parsed into date values.

        Raises:
            InvalidArgumentError: If obj is not a mapping
        """
        if not isinstance(obj, Mapping):
            raise InvalidArgumentError(
                f"Expected a route location object, got {type(obj).__name__}"
            )

        values: Dict[str, Any] = {}
        for key, value in obj.items():
            wire_field = _FIELDS_BY_WIRE_NAME.get(key)
            if wire_field is None:
                continue
            if key.endswith("Date") and (isinstance(value, str) or is_number(value)):
                value = parse_wire_date(value)
            values[wire_field.attribute] = value
        return cls(**values)

    @classmethod
    def from_wire_list(cls, items: Iterable[Mapping[str, Any]]) -> List["RouteLocation"]:
        """Create RouteLocations from an array of wire objects, keeping order."""
        return [cls.from_wire(item) for item in items]

    def is_line(self) -> bool:
        """Check if the location is a line segment rather than a point."""
        return self.end_arm is not None or self.end_srmp is not None

    def to_wire(self) -> Dict[str, Any]:
        """
        Convert the location into the object the ELC service accepts.

        None fields are omitted. A trailing "B" on srmp or end_srmp sets
        Back or EndBack to True.

        Raises:
            InvalidFieldError: If a field does not satisfy its wire format
        """
        self._check_measure_kinds()

        output: Dict[str, Any] = {}
        back_flags: Dict[str, bool] = {}
        for wire_field in WIRE_FIELDS:
            value = getattr(self, wire_field.attribute)
            serialized, flags = _SERIALIZERS[wire_field.policy](value, wire_field)
            if serialized is not _OMIT:
                output[wire_field.wire_name] = serialized
            back_flags.update(flags)

        output.update(back_flags)
        return output

    def to_json(self) -> str:
        """Get the compact JSON text of the wire object."""
        return json.dumps(self.to_wire(), separators=(",", ":"))

    def to_dict(self) -> Dict[str, Any]:
        """
        Get the non-None fields keyed by wire name, without validation.

        Used for displaying service results, whose values are kept as
        returned. Dates are formatted as month/day/year.
        """
        output: Dict[str, Any] = {}
        for wire_field in WIRE_FIELDS:
            value = getattr(self, wire_field.attribute)
            if value is None:
                continue
            if isinstance(value, (date, datetime)):
                value = format_route_locator_date(value)
            elif isinstance(value, RouteIdentifier):
                value = value.name
            output[wire_field.wire_name] = value
        return output

    def _check_measure_kinds(self) -> None:
        """A line must use the same measure kind at both ends."""
        if not self.is_line():
            return
        start = {
            kind
            for kind, value in (("arm", self.arm), ("srmp", self.srmp))
            if value is not None
        }
        end = {
            kind
            for kind, value in (("arm", self.end_arm), ("srmp", self.end_srmp))
            if value is not None
        }
        if start and not start & end:
            raise InvalidFieldError(
                "Start and end measures of a line must both be ARM or both be SRMP.",
                "EndArm" if "arm" in end else "EndSrmp",
            )


class RouteLocationValidator:
    """Non-raising validation of RouteLocation objects."""

    @staticmethod
    def validate(location: RouteLocation) -> Tuple[bool, List[str]]:
        """
        Validate every field of a location against its wire format.

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors = []

        for wire_field in WIRE_FIELDS:
            value = getattr(location, wire_field.attribute)
            try:
                _SERIALIZERS[wire_field.policy](value, wire_field)
            except InvalidFieldError as e:
                errors.append(str(e))

        try:
            location._check_measure_kinds()
        except InvalidFieldError as e:
            errors.append(str(e))

        return len(errors) == 0, errors
