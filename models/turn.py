"""
Conversation model - the multi-turn context resent to the image model.

There is no server-side session: every edit replays the whole
conversation, so turns are immutable and the list only ever grows.
"""

from dataclasses import dataclass, field
from typing import Any, Literal, Optional, Union


@dataclass(frozen=True)
class TextPart:
    """Inline text."""
    text: str


@dataclass(frozen=True)
class MediaPart:
    """Inline binary media (image bytes + media type)."""
    data: bytes
    mime_type: str

    def __repr__(self) -> str:
        return f"MediaPart(mime_type={self.mime_type!r}, size={len(self.data)})"


Part = Union[TextPart, MediaPart]


@dataclass(frozen=True)
class Turn:
    """
    One request or response unit in the conversation.

    Model turns keep the provider content they were parsed from in `raw`,
    so they can be replayed exactly (thought signatures included).
    """

    role: Literal["user", "model"]
    parts: tuple[Part, ...]
    raw: Optional[Any] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        if self.role not in ("user", "model"):
            raise ValueError(f"Invalid turn role: {self.role}")
        # Accept lists from callers, store as tuple
        if not isinstance(self.parts, tuple):
            object.__setattr__(self, "parts", tuple(self.parts))

    @classmethod
    def user(cls, *parts: Part) -> "Turn":
        return cls(role="user", parts=parts)

    @property
    def text(self) -> str:
        """All text parts joined together."""
        return "".join(p.text for p in self.parts if isinstance(p, TextPart))

    @property
    def media(self) -> list[MediaPart]:
        return [p for p in self.parts if isinstance(p, MediaPart)]

    def has_media(self) -> bool:
        return any(isinstance(p, MediaPart) for p in self.parts)


Conversation = list[Turn]


def extend_conversation(conversation: Conversation, *turns: Turn) -> Conversation:
    """Return a new conversation with turns appended; the input is left untouched."""
    return [*conversation, *turns]
