"""
Greeting models - generated images, parse outcomes, and video jobs.
"""

import base64
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from .turn import Turn

DEFAULT_IMAGE_MIME_TYPE = "image/png"
GENERIC_BINARY_MIME_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class GreetingImage:
    """A decoded image payload."""

    data: bytes
    mime_type: str = DEFAULT_IMAGE_MIME_TYPE

    def to_data_url(self) -> str:
        """Render as a data: URL for direct display in the browser."""
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"

    def __repr__(self) -> str:
        return f"GreetingImage(mime_type={self.mime_type!r}, size={len(self.data)})"


@dataclass(frozen=True)
class GenerationResult:
    """Output of one successful image-model call."""

    image: GreetingImage
    model_turn: Turn
    text: str = ""


# =============================================================================
# Call outcomes
# =============================================================================


@dataclass(frozen=True)
class Success:
    """Response contained at least one inline image."""
    result: GenerationResult


@dataclass(frozen=True)
class Empty:
    """Response contained no image; text is whatever the model said instead."""
    text: str = ""


CallOutcome = Union[Success, Empty]


# =============================================================================
# Video
# =============================================================================


class VideoJobState(str, Enum):
    SUBMITTED = "submitted"
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


TERMINAL_STATES = {VideoJobState.COMPLETED, VideoJobState.FAILED, VideoJobState.CANCELLED}


@dataclass
class VideoJob:
    """
    One submitted animation request.

    Lives only for the duration of a single animate() call.
    """

    image: GreetingImage
    prompt: str
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    operation: Optional[Any] = None  # provider operation handle
    state: VideoJobState = VideoJobState.SUBMITTED
    polls: int = 0
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def transition(self, state: VideoJobState) -> None:
        """Move to a new state; terminal states are final."""
        if self.is_terminal:
            raise RuntimeError(f"Video job {self.id} already {self.state.value}")
        self.state = state


@dataclass(frozen=True)
class VideoResult:
    """A fetched video, held in memory."""

    data: bytes
    mime_type: str = "video/mp4"
    uri: str = ""

    def __repr__(self) -> str:
        return f"VideoResult(mime_type={self.mime_type!r}, size={len(self.data)})"
