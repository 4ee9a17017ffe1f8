"""
Error taxonomy for the greeting pipeline.

Provider and transport failures are converted into these types at the
component that issued the call, so the controller only ever handles
typed failures.
"""


class GreetingError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(GreetingError):
    """Required environment credential is missing."""


class GenerationError(GreetingError):
    """Image generation call failed or returned no usable image."""


class NoImageReturnedError(GenerationError):
    """Provider responded, but without any inline image part."""

    def __init__(self, message: str, diagnostic_text: str = ""):
        super().__init__(message)
        self.diagnostic_text = diagnostic_text


class VideoError(GreetingError):
    """Video submission, polling, or download failed."""


class MissingCredentialError(VideoError):
    """No video API key was supplied."""


class VideoCancelledError(VideoError):
    """Polling was abandoned through a cancellation token."""


class OperationInProgressError(GreetingError):
    """A generation or animation is already running for this session."""


class InvalidStateError(GreetingError):
    """Action not allowed in the controller's current state."""
