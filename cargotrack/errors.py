"""
CargoTrack exceptions.

Provider-side failures (not found, timeouts, HTTP errors) are never raised;
adapters return a failed TrackingResult instead. The exceptions below cover
bad input and deployment misconfiguration only.
"""


class CargoTrackError(Exception):
    """Base class for CargoTrack errors."""


class InvalidTrackingQuery(CargoTrackError, ValueError):
    """Raised when a tracking query is missing or malformed."""


class ProviderConfigurationError(CargoTrackError):
    """Raised when a provider is used without its required configuration."""

    def __init__(self, provider: str, missing: str):
        self.provider = provider
        self.missing = missing
        super().__init__(f"Provider '{provider}' is not configured: missing {missing}")


class ProviderAuthenticationError(CargoTrackError):
    """Raised when exchanging credentials for a provider token fails."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider} authentication failed: {message}")
