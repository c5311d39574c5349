"""Domain errors — save service exception hierarchy."""


class SaveServiceError(Exception):
    """Base error for all save service operations.

    Use ``raise SaveServiceError("msg") from cause`` for exception chaining.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(SaveServiceError):
    """Invalid settings, missing trigger variable name, or bad variable definitions."""


class RegistryError(SaveServiceError):
    """Variable registry connection failure or use of a closed connection."""


class StartupError(SaveServiceError):
    """Fatal condition that prevents the trigger loop from starting."""


class RegistryUnavailableError(StartupError):
    """The variable registry could not be opened."""


class TriggerResolutionError(StartupError):
    """The trigger variable name does not resolve to a registry handle."""


class SubscriptionError(StartupError):
    """The registry rejected the modification-notification request."""


class CommitError(SaveServiceError):
    """A save cycle could not stage, write, or publish the configuration file."""


class ValueConversionError(SaveServiceError):
    """A registry value could not be rendered as text."""


class ConfigFormatError(SaveServiceError):
    """A persisted configuration file line could not be parsed."""

    def __init__(self, message: str, line_number: int = 0) -> None:
        super().__init__(message)
        self.line_number = line_number
