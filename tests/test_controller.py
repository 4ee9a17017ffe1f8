"""
Test: Greeting Controller (view-model state machine)

Verifies that:
1. Capture moves IDLE -> PROCESSING -> RESULT, or ERROR with a formatted message
2. Edit and animation failures stay inline; RESULT is kept and busy flags are released
3. Only one operation runs at a time
4. Results arriving after reset are discarded
5. The video credential is accepted once and survives reset

Run: pytest tests/test_controller.py
"""

import asyncio
import sys
from pathlib import Path
from unittest.mock import Mock

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
import requests
from requests.adapters import HTTPAdapter

from fakes import JPEG_BYTES, PNG_BYTES, VIDEO_BYTES, FakeAnimator, FakeSession, done_operation
from config import DEFAULT_CAPTION
from models.errors import (
    ConfigurationError,
    InvalidStateError,
    MissingCredentialError,
    NoImageReturnedError,
    OperationInProgressError,
    VideoError,
)
from skills.animate_greeting.animate_greeting import GreetingAnimator
from ui.controller import AppState, GreetingController


def _controller(session=None, animator=None, credential=None):
    return GreetingController(
        session=session or FakeSession(),
        animator=animator or FakeAnimator(),
        credential=credential,
    )


def _with_result(**kwargs) -> GreetingController:
    ctrl = _controller(**kwargs)
    asyncio.run(ctrl.submit_capture(JPEG_BYTES, "image/jpeg", "Happy New Year"))
    assert ctrl.state == AppState.RESULT
    return ctrl


# =============================================================================
# Capture
# =============================================================================


def test_capture_success():
    session = FakeSession()
    ctrl = _controller(session=session)

    asyncio.run(ctrl.submit_capture(JPEG_BYTES, "image/jpeg", "Happy New Year"))

    assert ctrl.state == AppState.RESULT
    assert ctrl.image.data == PNG_BYTES
    assert len(ctrl.conversation) == 2
    assert ctrl.caption == "Happy New Year"
    assert session.start_calls == [(JPEG_BYTES, "image/jpeg", "Happy New Year")]


@pytest.mark.parametrize("caption", [None, "", "   "])
def test_blank_caption_uses_default(caption):
    session = FakeSession()
    ctrl = _controller(session=session)

    asyncio.run(ctrl.submit_capture(JPEG_BYTES, "image/jpeg", caption))

    assert session.start_calls[0][2] == DEFAULT_CAPTION


def test_capture_failure_moves_to_error():
    session = FakeSession(start_error=NoImageReturnedError('Generation Error: "no faces"'))
    ctrl = _controller(session=session)

    asyncio.run(ctrl.submit_capture(JPEG_BYTES, "image/jpeg", "hi"))

    assert ctrl.state == AppState.ERROR
    assert ctrl.error == 'SYSTEM ERROR: Generation Error: "no faces"'
    assert ctrl.image is None
    assert ctrl.conversation == []


def test_configuration_error_moves_to_error():
    session = FakeSession(start_error=ConfigurationError("API_KEY is not configured."))
    ctrl = _controller(session=session)

    asyncio.run(ctrl.submit_capture(JPEG_BYTES, "image/jpeg", "hi"))

    assert ctrl.state == AppState.ERROR
    assert "API_KEY is not configured." in ctrl.error


def test_capture_requires_idle():
    ctrl = _with_result()

    with pytest.raises(InvalidStateError):
        asyncio.run(ctrl.submit_capture(JPEG_BYTES, "image/jpeg", "again"))


# =============================================================================
# Edit
# =============================================================================


def test_edit_success_updates_image_and_conversation():
    ctrl = _with_result()

    asyncio.run(ctrl.submit_edit("เพิ่มแสงส้ม"))

    assert ctrl.state == AppState.RESULT
    assert ctrl.image.data == PNG_BYTES + "เพิ่มแสงส้ม".encode()
    assert len(ctrl.conversation) == 4
    assert ctrl.is_regenerating is False
    assert ctrl.edit_error is None


def test_edit_failure_is_inline():
    session = FakeSession(edit_error=NoImageReturnedError('Generation Error: "blocked by safety filter"'))
    ctrl = _with_result(session=session)
    image_before = ctrl.image

    asyncio.run(ctrl.submit_edit("เพิ่มแสงส้ม"))

    assert ctrl.state == AppState.RESULT
    assert ctrl.image is image_before
    assert len(ctrl.conversation) == 2
    assert ctrl.edit_error.startswith("MODIFICATION FAILED: ")
    assert "blocked by safety filter" in ctrl.edit_error
    assert ctrl.is_regenerating is False


def test_edit_error_cleared_on_next_edit():
    session = FakeSession(edit_error=NoImageReturnedError("nope"))
    ctrl = _with_result(session=session)
    asyncio.run(ctrl.submit_edit("first"))
    assert ctrl.edit_error

    session.edit_error = None
    asyncio.run(ctrl.submit_edit("second"))

    assert ctrl.edit_error is None


def test_edit_requires_result():
    ctrl = _controller()

    with pytest.raises(InvalidStateError):
        asyncio.run(ctrl.submit_edit("anything"))


def test_blank_edit_rejected():
    ctrl = _with_result()

    with pytest.raises(ValueError):
        asyncio.run(ctrl.submit_edit("  "))


def test_regenerating_flag_set_while_in_flight():
    async def scenario():
        gate = asyncio.Event()
        session = FakeSession()
        ctrl = _controller(session=session)
        await ctrl.submit_capture(JPEG_BYTES, "image/jpeg", "hi")

        session.gate = gate
        task = asyncio.create_task(ctrl.submit_edit("brighter"))
        await asyncio.sleep(0)
        assert ctrl.is_regenerating is True
        assert ctrl.snapshot()["is_regenerating"] is True

        with pytest.raises(OperationInProgressError):
            await ctrl.submit_edit("second edit")
        with pytest.raises(OperationInProgressError):
            await ctrl.animate("sparkle", "key")

        gate.set()
        await task
        assert ctrl.is_regenerating is False
        assert len(session.edit_calls) == 1

    asyncio.run(scenario())


# =============================================================================
# Animation
# =============================================================================


def test_animate_success_attaches_video():
    animator = FakeAnimator()
    ctrl = _with_result(animator=animator)

    asyncio.run(ctrl.animate("The fireworks explode and glow brightly", "video-key"))

    assert ctrl.state == AppState.RESULT
    assert ctrl.video.data == VIDEO_BYTES
    assert ctrl.is_animating is False
    assert animator.calls == [(ctrl.image, "The fireworks explode and glow brightly", "video-key")]
    assert ctrl.snapshot()["has_video"] is True


def test_animate_failure_is_inline():
    animator = FakeAnimator(error=VideoError("Video generation failed - no video in response."))
    ctrl = _with_result(animator=animator, credential="video-key")

    asyncio.run(ctrl.animate("sparkle"))

    assert ctrl.state == AppState.RESULT
    assert ctrl.image is not None
    assert ctrl.video is None
    assert ctrl.video_error == "ANIMATION FAILED: Video generation failed - no video in response."


def test_client_setup_failure_releases_animating_flag():
    animator = GreetingAnimator(
        client_factory=Mock(side_effect=ValueError("client init failed")),
        http=Mock(),
        poll_interval=0,
    )
    ctrl = _with_result(animator=animator, credential="video-key")

    asyncio.run(ctrl.animate("sparkle"))

    assert ctrl.is_animating is False
    assert ctrl.video_error == "ANIMATION FAILED: Video submission failed: client init failed"

    asyncio.run(ctrl.submit_edit("Add lanterns"))
    assert ctrl.edit_error is None
    assert len(ctrl.conversation) == 4


def test_unexpected_edit_failure_releases_regenerating_flag():
    ctrl = _with_result(session=FakeSession(edit_error=RuntimeError("socket closed")))

    with pytest.raises(RuntimeError):
        asyncio.run(ctrl.submit_edit("Add lanterns"))

    assert ctrl.is_regenerating is False
    assert not ctrl.is_busy


def test_download_403_never_exposes_key_in_video_error():
    class ForbiddenAdapter(HTTPAdapter):
        def send(self, request, **kwargs):
            response = requests.Response()
            response.status_code = 403
            response.reason = "Forbidden"
            response.url = request.url
            response.request = request
            response._content = b""
            return response

    client = Mock()
    client.models.generate_videos.return_value = done_operation()
    session = requests.Session()
    session.mount("https://", ForbiddenAdapter())
    animator = GreetingAnimator(client_factory=Mock(return_value=client), http=session, poll_interval=0)
    ctrl = _with_result(animator=animator, credential="SECRET-VIDEO-KEY")

    asyncio.run(ctrl.animate("sparkle"))

    assert ctrl.video_error == "ANIMATION FAILED: Video download failed: HTTP 403"
    assert "SECRET-VIDEO-KEY" not in str(ctrl.snapshot())


def test_animate_without_credential():
    animator = FakeAnimator(error=MissingCredentialError("API Key required."))
    ctrl = _with_result(animator=animator)
    assert ctrl.needs_credential

    asyncio.run(ctrl.animate("sparkle"))

    assert animator.calls[0][2] == ""
    assert ctrl.video_error == "ANIMATION FAILED: API Key required."


def test_credential_accepted_once_and_survives_reset():
    animator = FakeAnimator()
    ctrl = _with_result(animator=animator)

    assert ctrl.set_credential("first-key") is True
    assert ctrl.set_credential("second-key") is False
    ctrl.reset()

    assert ctrl.has_credential
    asyncio.run(ctrl.submit_capture(JPEG_BYTES, "image/jpeg", "again"))
    asyncio.run(ctrl.animate("sparkle", "third-key"))
    assert animator.calls[0][2] == "first-key"


# =============================================================================
# Reset and stale results
# =============================================================================


def test_reset_clears_everything():
    ctrl = _with_result(animator=FakeAnimator(error=VideoError("boom")), credential="k")
    asyncio.run(ctrl.animate("sparkle"))

    ctrl.reset()

    assert ctrl.state == AppState.IDLE
    assert ctrl.image is None
    assert ctrl.conversation == []
    assert ctrl.video is None
    assert ctrl.error is None
    assert ctrl.edit_error is None
    assert ctrl.video_error is None
    assert ctrl.snapshot()["turns"] == 0


def test_reset_from_error():
    ctrl = _controller(session=FakeSession(start_error=NoImageReturnedError("nope")))
    asyncio.run(ctrl.submit_capture(JPEG_BYTES, "image/jpeg", "hi"))
    assert ctrl.state == AppState.ERROR

    ctrl.reset()

    assert ctrl.state == AppState.IDLE
    assert ctrl.error is None


def test_late_capture_result_discarded_after_reset():
    async def scenario():
        gate = asyncio.Event()
        ctrl = _controller(session=FakeSession(gate=gate))
        task = asyncio.create_task(ctrl.submit_capture(JPEG_BYTES, "image/jpeg", "hi"))
        await asyncio.sleep(0)
        assert ctrl.state == AppState.PROCESSING

        with pytest.raises(OperationInProgressError):
            await ctrl.submit_capture(JPEG_BYTES, "image/jpeg", "double submit")

        ctrl.reset()
        gate.set()
        await task

        assert ctrl.state == AppState.IDLE
        assert ctrl.image is None
        assert ctrl.conversation == []

    asyncio.run(scenario())


def test_late_edit_failure_discarded_after_reset():
    async def scenario():
        gate = asyncio.Event()
        session = FakeSession()
        ctrl = _controller(session=session)
        await ctrl.submit_capture(JPEG_BYTES, "image/jpeg", "hi")

        session.gate = gate
        session.edit_error = NoImageReturnedError("late failure")
        task = asyncio.create_task(ctrl.submit_edit("brighter"))
        await asyncio.sleep(0)
        ctrl.reset()
        gate.set()
        await task

        assert ctrl.state == AppState.IDLE
        assert ctrl.edit_error is None
        assert ctrl.is_regenerating is False

    asyncio.run(scenario())


def test_reset_cancels_animation():
    async def scenario():
        ctrl = _controller(animator=FakeAnimator(block=True), credential="k")
        await ctrl.submit_capture(JPEG_BYTES, "image/jpeg", "hi")

        task = asyncio.create_task(ctrl.animate("sparkle"))
        await asyncio.sleep(0)
        assert ctrl.is_animating is True

        ctrl.reset()
        await asyncio.wait_for(task, timeout=1)

        assert ctrl.state == AppState.IDLE
        assert ctrl.video_error is None
        assert ctrl.is_animating is False

    asyncio.run(scenario())


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
