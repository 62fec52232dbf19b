"""Configuration errors."""


class ConfigError(Exception):
    """Raised when configuration files or overrides are invalid."""
