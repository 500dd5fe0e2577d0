"""CaptureBot exceptions."""


class CaptureBotError(Exception):
    """Base class for every error raised by capturebot."""

    def __init__(self, message: str = "", *args, **kwargs):
        self.message = message
        self.payload = kwargs
        super().__init__(message, *args)

    def __str__(self) -> str:
        return self.message or self.__class__.__name__


class ConfigError(CaptureBotError):
    """Malformed configuration (catalog entries, action lists)."""


class CatalogError(ConfigError):
    """Unknown provider/source or unreadable catalog document."""


class ActionError(CaptureBotError):
    """An action could not be executed inside a tab."""


class InvalidStepError(CaptureBotError):
    """The run reached a (phase, step) with no defined successor."""
