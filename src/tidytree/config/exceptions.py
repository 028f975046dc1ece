"""Custom exceptions for configuration management."""


class ConfigError(Exception):
    """Raised when configuration data or engine paths cannot be processed."""
