"""
Greeting controller - the view-model behind the browser UI.

Sequences one greeting at a time:
    IDLE -> PROCESSING -> RESULT (edits, animation) -> reset -> IDLE
                       -> ERROR                     -> reset -> IDLE

Owns the conversation and the video credential. Every async step captures
a generation token; results that land after a reset (or a newer capture)
are dropped instead of being written into fresh state.
"""

import logging
from enum import Enum
from typing import Optional

from config import DEFAULT_CAPTION
from models.errors import (
    ConfigurationError,
    GenerationError,
    InvalidStateError,
    OperationInProgressError,
    VideoError,
)
from models.greeting import GreetingImage, VideoResult
from models.turn import Conversation
from skills.animate_greeting.animate_greeting import CancellationToken, GreetingAnimator
from skills.generate_greeting.generate_greeting import GreetingSession

logger = logging.getLogger(__name__)


class AppState(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    RESULT = "result"
    ERROR = "error"


class GreetingController:
    """Single-session state machine for capture, edit, animate and reset."""

    def __init__(
        self,
        session: GreetingSession = None,
        animator: GreetingAnimator = None,
        credential: Optional[str] = None,
    ):
        self.session = session or GreetingSession()
        self.animator = animator or GreetingAnimator()
        self._credential = credential or None
        self._generation = 0
        self._cancel_token: Optional[CancellationToken] = None
        self._clear()

    def _clear(self) -> None:
        self.state = AppState.IDLE
        self.image: Optional[GreetingImage] = None
        self.conversation: Conversation = []
        self.caption = ""
        self.video: Optional[VideoResult] = None
        self.error: Optional[str] = None
        self.edit_error: Optional[str] = None
        self.video_error: Optional[str] = None
        self.is_regenerating = False
        self.is_animating = False

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def is_busy(self) -> bool:
        return self.state == AppState.PROCESSING or self.is_regenerating or self.is_animating

    @property
    def has_credential(self) -> bool:
        return self._credential is not None

    @property
    def needs_credential(self) -> bool:
        return not self.has_credential

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _ensure_idle(self) -> None:
        if self.is_busy:
            raise OperationInProgressError("Another operation is already in progress.")

    def _ensure_result(self, action: str) -> None:
        if self.state != AppState.RESULT or self.image is None:
            raise InvalidStateError(f"Cannot {action} in state '{self.state.value}'.")

    def _bump_generation(self) -> int:
        self._generation += 1
        if self._cancel_token is not None:
            self._cancel_token.cancel()
            self._cancel_token = None
        return self._generation

    # =========================================================================
    # Actions
    # =========================================================================

    async def submit_capture(
        self,
        image_bytes: bytes,
        mime_type: str,
        caption: Optional[str] = None,
    ) -> None:
        """Start a new greeting from a captured photo."""
        self._ensure_idle()
        if self.state != AppState.IDLE:
            raise InvalidStateError(f"Cannot capture in state '{self.state.value}'; reset first.")

        caption = (caption or "").strip() or DEFAULT_CAPTION
        generation = self._bump_generation()
        self._clear()
        self.state = AppState.PROCESSING
        self.caption = caption

        try:
            image, conversation = await self.session.start_session(image_bytes, mime_type, caption)
        except (GenerationError, ConfigurationError) as e:
            if not self._is_current(generation):
                logger.info("Discarding stale generation failure")
                return
            logger.error(f"Greeting generation failed: {e}")
            self.error = f"SYSTEM ERROR: {e}"
            self.state = AppState.ERROR
            return

        if not self._is_current(generation):
            logger.info("Discarding stale generation result")
            return

        self.image = image
        self.conversation = conversation
        self.state = AppState.RESULT

    async def submit_edit(self, prompt: str) -> None:
        """Refine the current greeting; failures are reported inline."""
        self._ensure_result("edit")
        self._ensure_idle()
        prompt = (prompt or "").strip()
        if not prompt:
            raise ValueError("Edit prompt must not be empty.")

        generation = self._generation
        self.is_regenerating = True
        self.edit_error = None

        try:
            image, conversation = await self.session.continue_session(self.conversation, prompt)
        except GenerationError as e:
            if self._is_current(generation):
                logger.error(f"Edit failed: {e}")
                self.edit_error = f"MODIFICATION FAILED: {e}"
            return
        finally:
            if self._is_current(generation):
                self.is_regenerating = False

        if not self._is_current(generation):
            logger.info("Discarding stale edit result")
            return

        self.image = image
        self.conversation = conversation

    def set_credential(self, api_key: str) -> bool:
        """
        Store the video API key.

        Accepted once per application lifetime; later keys are ignored.
        Returns True if the key was stored.
        """
        api_key = (api_key or "").strip()
        if not api_key or self.has_credential:
            return False
        self._credential = api_key
        logger.info("Video credential stored")
        return True

    async def animate(self, motion_prompt: str, credential: Optional[str] = None) -> None:
        """Animate the current greeting; failures are reported inline."""
        self._ensure_result("animate")
        self._ensure_idle()

        if credential:
            self.set_credential(credential)

        generation = self._generation
        cancel_token = CancellationToken()
        self._cancel_token = cancel_token
        self.is_animating = True
        self.video_error = None

        try:
            video = await self.animator.animate(
                self.image,
                motion_prompt,
                self._credential or "",
                cancel_token=cancel_token,
            )
        except VideoError as e:
            if self._is_current(generation):
                logger.error(f"Animation failed: {e}")
                self.video_error = f"ANIMATION FAILED: {e}"
            return
        finally:
            if self._is_current(generation):
                self.is_animating = False
                self._cancel_token = None

        if not self._is_current(generation):
            logger.info("Discarding stale animation result")
            return

        self.video = video

    def reset(self) -> None:
        """Back to IDLE; drops conversation, results and errors. Keeps the credential."""
        self._bump_generation()
        self._clear()
        logger.info("Controller reset")

    # =========================================================================
    # Presentation
    # =========================================================================

    def snapshot(self) -> dict:
        """Plain view of everything the presentation layer renders."""
        return {
            "state": self.state.value,
            "caption": self.caption,
            "image_url": self.image.to_data_url() if self.image else None,
            "has_video": self.video is not None,
            "error": self.error,
            "edit_error": self.edit_error,
            "video_error": self.video_error,
            "is_regenerating": self.is_regenerating,
            "is_animating": self.is_animating,
            "needs_credential": self.needs_credential,
            "turns": len(self.conversation),
        }
