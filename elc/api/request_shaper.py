"""
Request shaping for ELC service calls.

Decides between GET and POST from the length of the full request URL and
adds the JSONP callback parameter when CORS is not available.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional
from urllib.parse import quote

logger = logging.getLogger(__name__)

DEFAULT_MAX_URL_LENGTH = 2000
JSONP_CALLBACK = "jsonp"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# Characters encodeURIComponent leaves unescaped, besides letters and digits
_UNRESERVED = "-_.!~*'()"


@dataclass(frozen=True)
class ShapedRequest:
    """HTTP method, URL and optional form body of a service request."""

    method: str
    url: str
    body: Optional[str] = None

    @property
    def is_post(self) -> bool:
        """Check if the request is sent as a POST."""
        return self.method == "POST"


def _format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_query_string(params: Mapping[str, Any]) -> str:
    """
    Serialize parameters into a key=value&... query string.

    None becomes an empty string. Values are percent-encoded, keys are not.
    """
    return "&".join(
        f"{name}={quote(_format_value(value), safe=_UNRESERVED)}"
        for name, value in params.items()
    )


def shape_request(
    base_url: str,
    query_params: Mapping[str, Any],
    use_cors: bool = True,
    max_url_length: int = DEFAULT_MAX_URL_LENGTH,
) -> ShapedRequest:
    """
    Decide how a request should be sent.

    Args:
        base_url: Operation URL without a query string
        query_params: Request parameters
        use_cors: False adds callback=jsonp to the parameters
        max_url_length: Longest URL sent as a GET request

    Returns:
        ShapedRequest: GET with the full URL, or POST to base_url with the
        query string as a form body
    """
    params = dict(query_params)
    if not use_cors:
        params["callback"] = JSONP_CALLBACK

    query = to_query_string(params)
    url = f"{base_url}?{query}"

    if len(url) > max_url_length:
        logger.debug(f"URL length {len(url)} exceeds {max_url_length}, using POST")
        return ShapedRequest("POST", base_url, query)
    return ShapedRequest("GET", url)
