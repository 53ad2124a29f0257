"""
Unit tests for ELC configuration.
"""

import json
import pytest
from pydantic import ValidationError

from elc.api.route_locator import RouteLocator
from elc.managers.elc_config import (
    ConfigurationError,
    ELCConfig,
    ELCConfigFactory,
    ELCConfigValidator,
)
from version import __elc_default_url__


class TestELCConfig:
    """Test ELCConfig model."""

    def test_defaults(self):
        """Test default configuration values."""
        config = ELCConfig()

        assert config.url == __elc_default_url__
        assert config.find_route_locations_operation_name == "Find Route Locations"
        assert config.find_nearest_route_locations_operation_name == (
            "Find Nearest Route Locations"
        )
        assert config.routes_resource_name == "routes"
        assert config.use_cors is True
        assert config.timeout_seconds == 30
        assert config.max_url_length == 2000
        assert config.default_search_radius == 200.0
        assert config.default_in_sr is None
        assert config.default_out_sr is None

    def test_url_trailing_slash_removed(self):
        """Test the URL is normalized."""
        config = ELCConfig(url="  https://h/MapServer/exts/Elc/ ")
        assert config.url == "https://h/MapServer/exts/Elc"

    def test_url_must_be_http(self):
        """Test non-HTTP URLs are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            ELCConfig(url="ftp://h/elc")

        assert "URL must start with http:// or https://" in str(exc_info.value)

    def test_empty_operation_name(self):
        """Test operation names cannot be blank."""
        with pytest.raises(ValidationError):
            ELCConfig(find_route_locations_operation_name="   ")

    def test_operation_name_stripped(self):
        """Test operation names are stripped."""
        assert ELCConfig(routes_resource_name=" routes ").routes_resource_name == "routes"

    @pytest.mark.parametrize("timeout", [4, 121])
    def test_timeout_bounds(self, timeout):
        """Test timeout validation."""
        with pytest.raises(ValidationError):
            ELCConfig(timeout_seconds=timeout)

    def test_max_url_length_minimum(self):
        """Test the maximum URL length lower bound."""
        with pytest.raises(ValidationError):
            ELCConfig(max_url_length=100)

    def test_search_radius_positive(self):
        """Test the default search radius must be positive."""
        with pytest.raises(ValidationError):
            ELCConfig(default_search_radius=0)

    def test_locator_urls_from_config(self, mock_http_client):
        """Test a locator builds its operation URLs from the configuration."""
        config = ELCConfig(url="https://h/MapServer/exts/Elc", routes_resource_name="lrs")
        locator = RouteLocator(config=config, http_client=mock_http_client)

        assert locator.find_route_locations_url == (
            "https://h/MapServer/exts/Elc/Find Route Locations"
        )
        assert locator.find_nearest_route_locations_url == (
            "https://h/MapServer/exts/Elc/Find Nearest Route Locations"
        )
        assert locator.routes_url == "https://h/MapServer/exts/Elc/lrs"

    def test_to_summary_dict(self):
        """Test configuration summary."""
        summary = ELCConfig(timeout_seconds=15).to_summary_dict()

        assert summary["timeout"] == "15 seconds"
        assert summary["use_cors"] is True
        assert summary["max_url_length"] == 2000


class TestELCConfigValidator:
    """Test ELCConfigValidator."""

    def test_validate_timeout(self):
        """Test timeout validation."""
        assert ELCConfigValidator.validate_timeout(5)
        assert ELCConfigValidator.validate_timeout(120)
        assert not ELCConfigValidator.validate_timeout(4)

    def test_validate_spatial_reference(self):
        """Test WKID validation."""
        assert ELCConfigValidator.validate_spatial_reference(None)
        assert ELCConfigValidator.validate_spatial_reference(2927)
        assert not ELCConfigValidator.validate_spatial_reference(0)

    def test_valid_config(self):
        """Test validation of a default configuration."""
        is_valid, errors = ELCConfigValidator.validate_config(ELCConfig())

        assert is_valid
        assert errors == []

    def test_invalid_spatial_references(self):
        """Test non-positive WKIDs are reported."""
        config = ELCConfig(default_in_sr=-1, default_out_sr=0)

        is_valid, errors = ELCConfigValidator.validate_config(config)

        assert not is_valid
        assert errors == [
            "default_in_sr must be a positive WKID",
            "default_out_sr must be a positive WKID",
        ]


class TestELCConfigFactory:
    """Test ELCConfigFactory."""

    def test_create_default_config(self):
        """Test default configuration creation."""
        assert ELCConfigFactory.create_default_config() == ELCConfig()

    def test_create_from_dict(self):
        """Test configuration from a dictionary."""
        config = ELCConfigFactory.create_from_dict(
            {"url": "http://h/MapServer/exts/Elc", "use_cors": False, "default_in_sr": 2927}
        )

        assert config.url == "http://h/MapServer/exts/Elc"
        assert config.use_cors is False
        assert config.default_in_sr == 2927

    def test_create_from_dict_invalid(self):
        """Test validation errors become ConfigurationError."""
        with pytest.raises(ConfigurationError):
            ELCConfigFactory.create_from_dict({"timeout_seconds": 1})

    def test_create_from_dict_validator_errors(self):
        """Test validator errors become ConfigurationError."""
        with pytest.raises(ConfigurationError) as exc_info:
            ELCConfigFactory.create_from_dict({"default_out_sr": -5})

        assert "default_out_sr" in str(exc_info.value)

    def test_load_from_file(self, tmp_path):
        """Test loading a JSON configuration file."""
        path = tmp_path / "elc.json"
        path.write_text(json.dumps({"url": "https://h/MapServer/exts/Elc", "timeout_seconds": 60}))

        config = ELCConfigFactory.load_from_file(path)

        assert config.url == "https://h/MapServer/exts/Elc"
        assert config.timeout_seconds == 60

    def test_load_missing_file(self, tmp_path):
        """Test a missing file."""
        with pytest.raises(ConfigurationError) as exc_info:
            ELCConfigFactory.load_from_file(tmp_path / "missing.json")

        assert "not found" in str(exc_info.value)

    def test_load_invalid_json(self, tmp_path):
        """Test a file that is not JSON."""
        path = tmp_path / "elc.json"
        path.write_text("url = nope")

        with pytest.raises(ConfigurationError):
            ELCConfigFactory.load_from_file(path)

    def test_load_non_object(self, tmp_path):
        """Test a file holding a JSON array."""
        path = tmp_path / "elc.json"
        path.write_text("[]")

        with pytest.raises(ConfigurationError):
            ELCConfigFactory.load_from_file(str(path))
