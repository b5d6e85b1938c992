__all__ = ["MissingConfigurationError"]


class MissingConfigurationError(Exception):
    """Raised when a required environment variable is missing or invalid."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Missing required configuration: {name}")
