"""
Helper utility functions for the ELC client.

This module contains conversions shared by the models and the route
locator: ELC date formatting and parsing, number coercion, and
flattening of jagged coordinate arrays.
"""

import logging
import math
import re
from datetime import date, datetime, timezone
from typing import Any, List, Optional, Union

from ..exceptions import InvalidArgumentError, InvalidFieldError

logger = logging.getLogger(__name__)

Number = Union[int, float]

_MS_DATE_RE = re.compile(r"^/Date\((-?\d+)(?:[+-]\d{4})?\)/$")
_US_DATE_RE = re.compile(
    r"^(\d{1,2})/(\d{1,2})/(\d{4})"
    r"(?:\s+(\d{1,2}):(\d{2})(?::(\d{2}))?\s*([AaPp][Mm])?)?$"
)


def is_number(value: Any) -> bool:
    """Check if a value is a real number (booleans excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def format_route_locator_date(value: Union[date, datetime]) -> str:
    """
    Format a date the way the ELC service expects it.

    Args:
        value: Date or datetime to format

    Returns:
        str: month/day/year with a 1-based month and no zero padding
    """
    return f"{value.month}/{value.day}/{value.year}"


def to_number(value: Any, field_name: str = "this") -> Optional[Number]:
    """
    Convert a value into a number.

    Args:
        value: Number or numeric string
        field_name: Name used in the error message

    Returns:
        The numeric equivalent of value, or None if value is None

    Raises:
        InvalidFieldError: If value cannot be converted to a number
    """
    if value is None:
        return None

    if isinstance(value, bool):
        return int(value)

    if is_number(value):
        if isinstance(value, float) and math.isnan(value):
            raise InvalidFieldError(
                f"If {field_name} property is provided, it must be a number.",
                field_name,
            )
        return value

    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            number = math.nan
        if not math.isnan(number):
            return number

    raise InvalidFieldError(
        f"If {field_name} property is provided, it must be a number.", field_name
    )


def flatten_array(array: Any) -> Any:
    """
    Flatten a jagged array into a single flat list.

    Args:
        array: List or tuple, possibly containing nested lists or tuples

    Returns:
        A flat list, or None if array is None

    Raises:
        InvalidArgumentError: If array is not a list or tuple
    """
    if array is None:
        return None
    if not isinstance(array, (list, tuple)):
        raise InvalidArgumentError("array must be a list.")

    output: List[Any] = []
    for element in array:
        if isinstance(element, (list, tuple)):
            output.extend(flatten_array(element))
        else:
            output.append(element)
    return output


def _from_epoch_milliseconds(milliseconds: Number, raw: Any) -> Union[datetime, Any]:
    """Convert epoch milliseconds to a UTC datetime, or return raw if out of range."""
    try:
        return datetime.fromtimestamp(milliseconds / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        logger.warning(f"Date value {raw!r} is out of range: {e}")
        return raw


def parse_wire_date(value: Union[str, int, float]) -> Union[date, datetime, str]:
    """
    Parse a date value returned by the ELC service.

    Numbers and "/Date(ms)/" strings are epoch milliseconds. "m/d/yyyy"
    strings become dates, with a time portion they become datetimes.
    ISO-8601 strings are also accepted. Unparseable strings are returned
    unchanged.
    """
    if is_number(value):
        return _from_epoch_milliseconds(value, value)

    text = value.strip()

    match = _MS_DATE_RE.match(text)
    if match:
        return _from_epoch_milliseconds(int(match.group(1)), value)

    match = _US_DATE_RE.match(text)
    if match:
        month, day, year, hour, minute, second, meridiem = match.groups()
        try:
            if hour is None:
                return date(int(year), int(month), int(day))
            hour_value = int(hour)
            if meridiem:
                hour_value = hour_value % 12 + (12 if meridiem.lower() == "pm" else 0)
            return datetime(
                int(year),
                int(month),
                int(day),
                hour_value,
                int(minute),
                int(second or 0),
            )
        except ValueError as e:
            logger.warning(f"Invalid date value {value!r}: {e}")
            return value

    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Could not parse date value {value!r}, keeping raw string")
        return value
