"""Error taxonomy shared by the broker service and its provider adapter."""
from __future__ import annotations


class BrokerError(RuntimeError):
    """Base class for failures raised by the session broker."""


class ConfigurationMissingError(BrokerError):
    """Raised at startup when required configuration is absent or unusable."""


class InvalidInputError(BrokerError):
    """Raised when a client field fails validation. Never reaches the provider."""


class UpstreamRejectedError(BrokerError):
    """Raised when the provider refuses an operation, e.g. an unknown session id."""


class UpstreamUnavailableError(BrokerError):
    """Raised when a provider call fails unexpectedly or times out."""


class ChatNotFoundError(BrokerError):
    """Raised by chat joins for both a missing and an unknown session id."""
