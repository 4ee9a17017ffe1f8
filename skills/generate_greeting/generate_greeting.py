"""
Greeting Generation Skill - multi-turn image generation with Gemini.

Turns a user photo into a New Year greeting portrait, then refines it
through follow-up edit requests. The model has no server-side memory:
every call sends the full conversation, and a successful call adds
exactly two turns (our request + the model's reply).
"""

import asyncio
import logging
from typing import Optional

from google import genai
from google.genai import types

from config import IMAGE_MODEL, get_gemini_client
from agent.prompts import Prompts
from models.errors import GenerationError
from models.greeting import GreetingImage
from models.turn import Conversation, MediaPart, TextPart, Turn, extend_conversation
from skills.parse_response.parse_response import content_from_turn, parse_response

logger = logging.getLogger(__name__)


class GreetingSession:
    """
    Generate and edit greeting images.

    Stateless between calls: the caller owns the conversation and passes
    it back in for every edit.
    """

    def __init__(
        self,
        client: genai.Client = None,
        api_key: Optional[str] = None,
        model: str = None,
    ):
        """Initialize with a Gemini client, or an API key to build one lazily."""
        self._client = client
        self._api_key = api_key
        self.model = model or IMAGE_MODEL

    @property
    def client(self) -> genai.Client:
        # Deferred so a missing key surfaces as ConfigurationError on first use
        if self._client is None:
            self._client = get_gemini_client(self._api_key)
        return self._client

    async def start_session(
        self,
        image_bytes: bytes,
        mime_type: str,
        caption: str,
    ) -> tuple[GreetingImage, Conversation]:
        """
        Generate the first greeting image from a captured photo.

        Args:
            image_bytes: Raw photo bytes (camera snapshot or upload)
            mime_type: Media type of the photo
            caption: Greeting theme text embedded in the prompt

        Returns:
            (image, conversation) where conversation == [user_turn, model_turn]

        Raises:
            ConfigurationError: no API key available
            GenerationError: provider call failed or returned no image
        """
        user_turn = Turn.user(
            TextPart(Prompts.greeting_portrait(caption)),
            MediaPart(data=image_bytes, mime_type=mime_type),
        )

        logger.info(f"[GreetingSession] Starting session ({mime_type}, {len(image_bytes)} bytes), caption: {caption[:50]}")

        result = await self._generate([user_turn])
        conversation = [user_turn, result.model_turn]

        logger.info(f"[GreetingSession] Session started, image {result.image.mime_type}")
        return result.image, conversation

    async def continue_session(
        self,
        conversation: Conversation,
        edit_prompt: str,
    ) -> tuple[GreetingImage, Conversation]:
        """
        Apply an edit request on top of an existing conversation.

        The input conversation is never modified; on failure the caller
        still holds its pre-edit history.

        Returns:
            (image, new_conversation) with len(new_conversation) == len(conversation) + 2
        """
        if not conversation:
            raise ValueError("continue_session requires an existing conversation")

        user_turn = Turn.user(TextPart(Prompts.edit_greeting(edit_prompt)))
        history = extend_conversation(conversation, user_turn)

        logger.info(f"[GreetingSession] Edit on {len(conversation)} turns: {edit_prompt[:50]}")

        result = await self._generate(history)
        new_conversation = extend_conversation(history, result.model_turn)

        logger.info(f"[GreetingSession] Edit applied, conversation now {len(new_conversation)} turns")
        return result.image, new_conversation

    async def _generate(self, history: Conversation):
        """Send the full history and parse the reply."""
        client = self.client
        contents = [content_from_turn(turn) for turn in history]
        config = types.GenerateContentConfig(
            response_modalities=["IMAGE", "TEXT"],
        )

        try:
            response = await asyncio.to_thread(
                client.models.generate_content,
                model=self.model,
                contents=contents,
                config=config,
            )
        except Exception as e:
            logger.error(f"[GreetingSession] Generation error: {e}")
            raise GenerationError(f"Generation Error: {e}") from e

        return parse_response(response)
