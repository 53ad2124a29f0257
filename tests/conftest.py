"""
Global pytest configuration and fixtures.
"""

import pytest
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

from elc.api.http_client import ELCAPIResponse, HTTPClient
from elc.api.route_locator import RouteLocator
from elc.managers.elc_config import ELCConfig


TEST_URL = (
    "https://example.test/arcgis/rest/services/Shared/ElcRestSOE/"
    "MapServer/exts/ElcRestSoe"
)


def make_response(data, status_code=200) -> ELCAPIResponse:
    """Build a decoded service response."""
    return ELCAPIResponse(
        status_code=status_code,
        data=data,
        timestamp=datetime.now(),
        source="test",
    )


@pytest.fixture
def test_config():
    """Provide a test configuration pointing at a fake ELC service."""
    return ELCConfig(url=TEST_URL, timeout_seconds=10)


@pytest.fixture
def mock_http_client():
    """Provide an HTTP client whose send() returns an empty result list."""
    client = MagicMock(spec=HTTPClient)
    client.send = AsyncMock(return_value=make_response([]))
    client.close = AsyncMock()
    return client


@pytest.fixture
def locator(test_config, mock_http_client):
    """Provide a RouteLocator wired to the mock HTTP client."""
    return RouteLocator(config=test_config, http_client=mock_http_client)


@pytest.fixture
def route_location_wire():
    """Provide a route location as returned by Find Route Locations."""
    return {
        "Id": 1,
        "Route": "005",
        "Decrease": False,
        "Arm": 12.43,
        "Srmp": 12.5,
        "Back": False,
        "ReferenceDate": "1/3/2012",
        "ResponseDate": "1/3/2012",
        "RealignmentDate": None,
        "ArmCalcReturnCode": 0,
        "ArmCalcReturnMessage": "",
        "LocatingError": None,
        "RouteGeometry": {
            "x": 1083893.6,
            "y": 93030.2,
            "spatialReference": {"wkid": 2927},
        },
        "EventPoint": None,
        "Distance": None,
        "Angle": None,
    }


@pytest.fixture
def route_list_wire():
    """Provide a response of the routes resource."""
    return {
        "Current": {"005": 3, "090P1": 4, "002": 1},
        "2005B": {"005": 3},
        "2005": {"005": 3, "002": 2},
    }
