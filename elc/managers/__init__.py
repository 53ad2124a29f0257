"""Configuration management for the ELC client."""

from .elc_config import ConfigurationError, ELCConfig, ELCConfigFactory, ELCConfigValidator

__all__ = ["ConfigurationError", "ELCConfig", "ELCConfigFactory", "ELCConfigValidator"]
