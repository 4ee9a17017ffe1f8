"""
Response Parsing Skill - turn a Gemini response into an image or an error.

Image models answer with interleaved text + inline image parts. This skill:
- Reads the first candidate's parts in order
- Keeps the FIRST inline image (extras are ignored)
- Collects all text as a diagnostic, surfaced only when no image came back
- Converts between SDK Content objects and our Turn model
"""

import base64
import logging
from typing import Optional

from google.genai import types

from models.errors import NoImageReturnedError
from models.greeting import (
    DEFAULT_IMAGE_MIME_TYPE,
    GENERIC_BINARY_MIME_TYPE,
    CallOutcome,
    Empty,
    GenerationResult,
    GreetingImage,
    Success,
)
from models.turn import MediaPart, Part, TextPart, Turn

logger = logging.getLogger(__name__)

NO_IMAGE_MESSAGE = "Generation Error: API did not return image data."


def _first_content(response) -> Optional[types.Content]:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    return candidates[0].content


def _blob_bytes(blob: types.Blob) -> bytes:
    data = blob.data
    # Decode if base64
    if isinstance(data, str):
        return base64.b64decode(data)
    return data


def _resolve_mime_type(declared: Optional[str]) -> str:
    if not declared or declared == GENERIC_BINARY_MIME_TYPE:
        return DEFAULT_IMAGE_MIME_TYPE
    return declared


def turn_from_content(content: types.Content) -> Turn:
    """Convert an SDK Content into a Turn, keeping the original for replay."""
    parts: list[Part] = []
    for part in content.parts or []:
        if part.text:
            parts.append(TextPart(part.text))
        elif part.inline_data is not None and part.inline_data.data:
            parts.append(MediaPart(
                data=_blob_bytes(part.inline_data),
                mime_type=part.inline_data.mime_type or GENERIC_BINARY_MIME_TYPE,
            ))
    return Turn(role=content.role or "model", parts=tuple(parts), raw=content)


def content_from_turn(turn: Turn) -> types.Content:
    """Convert a Turn into SDK Content. Model turns replay their raw content."""
    if turn.raw is not None:
        return turn.raw

    parts = []
    for part in turn.parts:
        if isinstance(part, TextPart):
            parts.append(types.Part.from_text(text=part.text))
        else:
            parts.append(types.Part.from_bytes(data=part.data, mime_type=part.mime_type))
    return types.Content(role=turn.role, parts=parts)


def classify_response(response) -> CallOutcome:
    """
    Classify a generate_content response.

    Returns Success with the first image found, or Empty carrying the
    concatenated text parts (possibly empty).
    """
    content = _first_content(response)
    if content is None or not content.parts:
        logger.debug("Response has no content parts")
        return Empty()

    text = ""
    image: Optional[GreetingImage] = None

    for part in content.parts:
        if part.text:
            text += part.text
        elif part.inline_data is not None and part.inline_data.data:
            if image is not None:
                logger.debug("Ignoring extra image part")
                continue
            image = GreetingImage(
                data=_blob_bytes(part.inline_data),
                mime_type=_resolve_mime_type(part.inline_data.mime_type),
            )

    if image is None:
        return Empty(text=text)

    if text.strip():
        logger.debug(f"Model commentary: {text.strip()[:200]}")

    model_turn = turn_from_content(content)
    return Success(GenerationResult(image=image, model_turn=model_turn, text=text))


def parse_response(response) -> GenerationResult:
    """
    Extract the generated image from a response.

    Raises:
        NoImageReturnedError: if the response holds no inline image. The
            message embeds the model's text when there was any.
    """
    outcome = classify_response(response)
    if isinstance(outcome, Success):
        return outcome.result

    diagnostic = outcome.text.strip()
    if diagnostic:
        message = f'Generation Error: "{diagnostic}"'
    else:
        message = NO_IMAGE_MESSAGE
    logger.warning(f"No image in response: {message}")
    raise NoImageReturnedError(message, diagnostic_text=diagnostic)
