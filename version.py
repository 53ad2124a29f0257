"""
Version information for the ELC client.

Centralized version management and default service metadata for the
linear referencing client.
"""

# Core application information
__version__ = "2.0.0"
__version_info__ = (2, 0, 0)
__app_name__ = "elc-client"
__app_display_name__ = "ELC Client - WSDOT Linear Referencing"
__description__ = "Client for the WSDOT Enterprise Location Control (ELC) REST service"

# Feature information
__features__ = [
    "Route and milepost location lookup",
    "Nearest route location search",
    "Per-year LRS route catalog",
    "Back mileage aware SRMP parsing",
    "Automatic GET/POST selection for long requests",
    "JSONP fallback for services without CORS",
]

# Service information
__elc_version__ = "1.0.0"
__elc_api_provider__ = "WSDOT ELC REST SOE"
__elc_default_url__ = (
    "https://www.wsdot.wa.gov/geoservices/arcgis/rest/services/"
    "Shared/ElcRestSOE/MapServer/exts/ElcRestSoe"
)
__elc_find_route_locations_operation__ = "Find Route Locations"
__elc_find_nearest_route_locations_operation__ = "Find Nearest Route Locations"
__elc_routes_resource__ = "routes"

__python_version_required__ = "3.9+"
__license__ = "MIT"


def get_version_string() -> str:
    """Get formatted version string."""
    return f"{__app_name__} v{__version__}"


def get_full_version_info() -> str:
    """Get comprehensive version information."""
    return f"""
{__app_display_name__}
Version: {__version__}
ELC Integration: v{__elc_version__}
Service Provider: {__elc_api_provider__}
Default Endpoint: {__elc_default_url__}
"""


def get_elc_info() -> dict:
    """Get ELC service integration information."""
    return {
        "version": __elc_version__,
        "provider": __elc_api_provider__,
        "url": __elc_default_url__,
        "find_route_locations": __elc_find_route_locations_operation__,
        "find_nearest_route_locations": __elc_find_nearest_route_locations_operation__,
        "routes_resource": __elc_routes_resource__,
        "features": __features__,
    }
