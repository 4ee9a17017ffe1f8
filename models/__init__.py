"""
Data models for Greeting Studio.

- Turns and conversations (the multi-turn image context)
- Generated images and call outcomes
- Video jobs and results
- Error taxonomy
"""

from .turn import Conversation, MediaPart, Part, TextPart, Turn, extend_conversation
from .greeting import (
    CallOutcome,
    Empty,
    GenerationResult,
    GreetingImage,
    Success,
    VideoJob,
    VideoJobState,
    VideoResult,
)
from .errors import (
    ConfigurationError,
    GenerationError,
    GreetingError,
    InvalidStateError,
    MissingCredentialError,
    NoImageReturnedError,
    OperationInProgressError,
    VideoCancelledError,
    VideoError,
)

__all__ = [
    "Conversation",
    "MediaPart",
    "Part",
    "TextPart",
    "Turn",
    "extend_conversation",
    "CallOutcome",
    "Empty",
    "GenerationResult",
    "GreetingImage",
    "Success",
    "VideoJob",
    "VideoJobState",
    "VideoResult",
    "ConfigurationError",
    "GenerationError",
    "GreetingError",
    "InvalidStateError",
    "MissingCredentialError",
    "NoImageReturnedError",
    "OperationInProgressError",
    "VideoCancelledError",
    "VideoError",
]
