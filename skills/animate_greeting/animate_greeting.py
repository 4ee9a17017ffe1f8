"""
Greeting Animation Skill - Veo image-to-video for finished greetings.

The greeting image becomes the first frame; Veo adds firework motion.

NOTE: Veo uses async operations pattern (generate_videos + polling), not generate_content.
The job runs Submitted -> Polling -> Completed/Failed/Cancelled. Polling has no
upper bound; callers stop it through a CancellationToken.
"""

import asyncio
import logging
from typing import Callable, Optional

import requests
from google import genai
from google.genai import types

from config import (
    VEO_MODEL,
    VIDEO_ASPECT_RATIO,
    VIDEO_COUNT,
    VIDEO_POLL_INTERVAL_SECONDS,
    VIDEO_RESOLUTION,
)
from agent.prompts import Prompts
from models.errors import MissingCredentialError, VideoCancelledError, VideoError
from models.greeting import GreetingImage, VideoJob, VideoJobState, VideoResult

logger = logging.getLogger(__name__)

VIDEO_DOWNLOAD_TIMEOUT_SECONDS = 120


class CancellationToken:
    """
    Cooperative cancellation for long-running polls.

    Every sleep in the poll loop goes through `sleep()`, which wakes
    early and raises once `cancel()` has been called.
    """

    def __init__(self):
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise VideoCancelledError("Animation cancelled.")

    async def sleep(self, seconds: float) -> None:
        """Sleep for `seconds`, or until cancelled."""
        self.raise_if_cancelled()
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass
        self.raise_if_cancelled()


def _redact(text: str, credential: str) -> str:
    """Strip the video key out of text headed for logs or UI state."""
    if credential:
        return text.replace(credential, "***")
    return text


def _describe_download_error(error: requests.RequestException) -> str:
    """Status code or exception type only; never the request URL."""
    response = getattr(error, "response", None)
    if response is not None and getattr(response, "status_code", None):
        return f"HTTP {response.status_code}"
    return type(error).__name__


def _default_client_factory(api_key: str) -> genai.Client:
    return genai.Client(api_key=api_key)


class GreetingAnimator:
    """
    Animate greeting images using Veo.

    Holds no per-call state: the credential arrives with every call and
    a fresh client is built for it.
    """

    def __init__(
        self,
        client_factory: Callable[[str], genai.Client] = None,
        http: requests.Session = None,
        model: str = None,
        poll_interval: float = None,
    ):
        self.client_factory = client_factory or _default_client_factory
        self.http = http or requests.Session()
        self.model = model or VEO_MODEL
        self.poll_interval = VIDEO_POLL_INTERVAL_SECONDS if poll_interval is None else poll_interval

    async def animate(
        self,
        image: GreetingImage,
        motion_prompt: str,
        credential: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> VideoResult:
        """
        Turn a greeting image into a short video.

        Args:
            image: Finished greeting image (first frame)
            motion_prompt: User's motion description, appended to the base instruction
            credential: Video API key
            cancel_token: Optional token checked at every poll sleep

        Returns:
            VideoResult with the downloaded video bytes

        Raises:
            MissingCredentialError: blank credential (nothing is submitted)
            VideoCancelledError: token cancelled while polling
            VideoError: submission, polling, job or download failure
        """
        if not credential or not credential.strip():
            raise MissingCredentialError("API Key required.")

        cancel_token = cancel_token or CancellationToken()
        cancel_token.raise_if_cancelled()

        job = VideoJob(image=image, prompt=Prompts.animate_greeting(motion_prompt))

        logger.info(f"[GreetingAnimator] Submitting job {job.id} to {self.model}")
        try:
            client = self.client_factory(credential)
            job.operation = await asyncio.to_thread(self._submit, client, job)
        except Exception as e:
            job.transition(VideoJobState.FAILED)
            message = _redact(str(e), credential)
            logger.error(f"[GreetingAnimator] Veo submission error: {message}")
            raise VideoError(f"Video submission failed: {message}") from e

        await self._poll(client, job, cancel_token, credential)
        uri = self._extract_video_uri(job)

        video = await self._download(uri, credential)
        logger.info(f"[GreetingAnimator] Job {job.id} complete after {job.polls} polls ({len(video.data)} bytes)")
        return video

    def _submit(self, client: genai.Client, job: VideoJob):
        """Start Veo video generation (returns operation for polling)."""
        return client.models.generate_videos(
            model=self.model,
            prompt=job.prompt,
            image=types.Image(image_bytes=job.image.data, mime_type=job.image.mime_type),
            config=types.GenerateVideosConfig(
                number_of_videos=VIDEO_COUNT,
                resolution=VIDEO_RESOLUTION,
                aspect_ratio=VIDEO_ASPECT_RATIO,
            ),
        )

    async def _poll(
        self,
        client: genai.Client,
        job: VideoJob,
        cancel_token: CancellationToken,
        credential: str = "",
    ) -> None:
        """Poll until the operation reports done."""
        job.transition(VideoJobState.POLLING)

        while not job.operation.done:
            try:
                await cancel_token.sleep(self.poll_interval)
            except VideoCancelledError:
                job.transition(VideoJobState.CANCELLED)
                logger.info(f"[GreetingAnimator] Job {job.id} cancelled after {job.polls} polls")
                raise

            try:
                job.operation = await asyncio.to_thread(client.operations.get, job.operation)
            except Exception as e:
                job.transition(VideoJobState.FAILED)
                message = _redact(str(e), credential)
                logger.error(f"[GreetingAnimator] Poll error: {message}")
                raise VideoError(f"Polling video job failed: {message}") from e

            job.polls += 1
            logger.info(f"[GreetingAnimator] Waiting for job {job.id}... (poll {job.polls})")

    def _extract_video_uri(self, job: VideoJob) -> str:
        """Read the first generated video's locator from a finished operation."""
        operation = job.operation

        error = getattr(operation, "error", None)
        if error:
            job.transition(VideoJobState.FAILED)
            message = error.get("message", error) if isinstance(error, dict) else error
            raise VideoError(f"Video generation failed: {message}")

        response = getattr(operation, "response", None)
        videos = getattr(response, "generated_videos", None) or []
        video = videos[0].video if videos else None
        uri = getattr(video, "uri", None)

        if not uri:
            job.transition(VideoJobState.FAILED)
            raise VideoError("Video generation failed - no video in response.")

        job.transition(VideoJobState.COMPLETED)
        return uri

    async def _download(self, uri: str, credential: str) -> VideoResult:
        """Fetch the video bytes; the locator needs the key as a query parameter."""
        def fetch():
            response = self.http.get(
                uri,
                params={"key": credential},
                timeout=VIDEO_DOWNLOAD_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
            return response

        try:
            response = await asyncio.to_thread(fetch)
        except requests.RequestException as e:
            # requests error text repeats the full URL, key included
            message = _describe_download_error(e)
            logger.error(f"[GreetingAnimator] Video download failed: {message}")
            raise VideoError(f"Video download failed: {message}") from None

        mime_type = response.headers.get("Content-Type", "video/mp4").split(";")[0].strip()
        return VideoResult(data=response.content, mime_type=mime_type or "video/mp4", uri=uri)
