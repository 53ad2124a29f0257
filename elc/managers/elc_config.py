"""
Configuration management for the ELC client.

This module holds the service endpoint and request settings of a route
locator, using Pydantic models for type safety and validation.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from version import (
    __elc_default_url__,
    __elc_find_nearest_route_locations_operation__,
    __elc_find_route_locations_operation__,
    __elc_routes_resource__,
    __elc_version__,
)

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Exception raised for configuration-related errors."""

    pass


class ELCConfig(BaseModel):
    """Configuration of the ELC service endpoint and request behaviour."""

    # Endpoint settings
    url: str = Field(default=__elc_default_url__, description="ELC REST SOE URL")
    find_route_locations_operation_name: str = Field(
        default=__elc_find_route_locations_operation__,
        description="Name of the find route locations operation",
    )
    find_nearest_route_locations_operation_name: str = Field(
        default=__elc_find_nearest_route_locations_operation__,
        description="Name of the find nearest route locations operation",
    )
    routes_resource_name: str = Field(
        default=__elc_routes_resource__, description="Name of the routes resource"
    )

    # Request settings
    use_cors: bool = Field(
        default=True, description="Use CORS; False requests JSONP responses"
    )
    timeout_seconds: int = Field(
        default=30, ge=5, le=120, description="HTTP request timeout"
    )
    max_url_length: int = Field(
        default=2000, ge=256, description="Longest URL sent as a GET request"
    )

    # Search defaults
    default_search_radius: float = Field(
        default=200.0, gt=0, description="Nearest route search radius in feet"
    )
    default_in_sr: Optional[int] = Field(
        default=None, description="Default WKID of input coordinates"
    )
    default_out_sr: Optional[int] = Field(
        default=None, description="Default WKID of output geometry"
    )

    config_version: str = Field(
        default=__elc_version__, description="ELC configuration version"
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v):
        """Validate the service URL."""
        v = v.strip().rstrip("/")
        if not v.lower().startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v

    @field_validator(
        "find_route_locations_operation_name",
        "find_nearest_route_locations_operation_name",
        "routes_resource_name",
    )
    @classmethod
    def validate_name(cls, v):
        """Validate operation and resource names are not empty."""
        if not v.strip():
            raise ValueError("Operation and resource names cannot be empty")
        return v.strip()

    def to_summary_dict(self) -> dict:
        """Get configuration summary for display."""
        return {
            "url": self.url,
            "use_cors": self.use_cors,
            "timeout": f"{self.timeout_seconds} seconds",
            "max_url_length": self.max_url_length,
            "default_search_radius": self.default_search_radius,
            "config_version": self.config_version,
        }


class ELCConfigValidator:
    """Validator for ELC configuration."""

    @staticmethod
    def validate_timeout(seconds: int) -> bool:
        """Validate timeout is reasonable."""
        return 5 <= seconds <= 120

    @staticmethod
    def validate_spatial_reference(wkid: Optional[int]) -> bool:
        """Validate an optional WKID."""
        return wkid is None or wkid > 0

    @classmethod
    def validate_config(cls, config: ELCConfig) -> tuple[bool, list[str]]:
        """
        Validate complete ELC configuration.

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors = []

        if not config.url.lower().startswith(("http://", "https://")):
            errors.append("URL must start with http:// or https://")

        if not cls.validate_timeout(config.timeout_seconds):
            errors.append("Timeout must be between 5 and 120 seconds")

        if config.max_url_length < 256:
            errors.append("Maximum URL length must be at least 256")

        if config.default_search_radius <= 0:
            errors.append("Default search radius must be greater than zero")

        for name in ("default_in_sr", "default_out_sr"):
            if not cls.validate_spatial_reference(getattr(config, name)):
                errors.append(f"{name} must be a positive WKID")

        return len(errors) == 0, errors


class ELCConfigFactory:
    """Factory for creating ELC configurations."""

    @staticmethod
    def create_default_config() -> ELCConfig:
        """Create default ELC configuration."""
        logger.info("Creating default ELC configuration")
        return ELCConfig()

    @staticmethod
    def create_from_dict(config_dict: dict) -> ELCConfig:
        """Create configuration from dictionary."""
        try:
            config = ELCConfig(**config_dict)
        except ValidationError as e:
            logger.error(f"Failed to create ELC config from dict: {e}")
            raise ConfigurationError(f"Invalid configuration: {e}")

        is_valid, errors = ELCConfigValidator.validate_config(config)
        if not is_valid:
            raise ConfigurationError(f"Invalid configuration: {', '.join(errors)}")

        logger.info("ELC configuration created from dictionary")
        return config

    @staticmethod
    def load_from_file(path: Union[str, Path]) -> ELCConfig:
        """
        Load configuration from a JSON file.

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid
        """
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_dict = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Failed to read configuration: {e}")

        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration file must contain a JSON object")

        logger.debug(f"Loaded ELC configuration from {config_path}")
        return ELCConfigFactory.create_from_dict(config_dict)
