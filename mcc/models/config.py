"""Configuration error types."""


class ConfigValidationError(Exception):
    """Raised when the server configuration file is missing data or invalid."""
    pass
