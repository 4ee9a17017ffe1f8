"""
API Server for Greeting Studio.

This FastAPI server provides:
1. Capture / edit / animate / reset endpoints driving a single GreetingController
2. Raw image and video downloads for the current greeting

Run with: uvicorn ui.api_server:app --reload --port 8000
"""

import logging
import sys
import time
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import ALLOWED_IMAGE_TYPES, IMAGE_MODEL, LOGS_DIR, MAX_UPLOAD_BYTES, VEO_MODEL
from models.errors import InvalidStateError, OperationInProgressError
from ui.controller import GreetingController

# =============================================================================
# Setup Logging - File + Console
# =============================================================================

LOGS_DIR.mkdir(exist_ok=True)

# Generate session log filename with timestamp
_session_start = time.strftime("%Y%m%d_%H%M%S")
_log_file = LOGS_DIR / f"server_{_session_start}.log"

# Use force=True to override any existing handlers (uvicorn issue)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.FileHandler(_log_file, mode='a'),
        logging.StreamHandler()
    ],
    force=True
)
logger = logging.getLogger("api_server")
logger.setLevel(logging.INFO)
logger.info(f"Server session started. Log file: {_log_file}")

# Initialize FastAPI app
app = FastAPI(
    title="Greeting Studio API",
    description="New Year greeting portraits powered by Gemini and Veo",
    version="0.1.0",
)

# CORS middleware for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# One greeting session per server process (no multi-user support)
controller = GreetingController()


def get_controller() -> GreetingController:
    return controller


# =============================================================================
# Request/Response Models
# =============================================================================

class EditRequest(BaseModel):
    """Follow-up edit for the current greeting."""
    prompt: str


class CredentialRequest(BaseModel):
    """Video API key supplied by the user."""
    api_key: str


class AnimateRequest(BaseModel):
    """Animate the current greeting."""
    prompt: str
    api_key: Optional[str] = None  # Only needed if no key is held yet


class StateResponse(BaseModel):
    """Everything the UI needs to render the current screen."""
    state: str
    caption: str = ""
    image_url: Optional[str] = None  # data: URL
    has_video: bool = False
    error: Optional[str] = None
    edit_error: Optional[str] = None
    video_error: Optional[str] = None
    is_regenerating: bool = False
    is_animating: bool = False
    needs_credential: bool = True
    turns: int = 0


def _state(ctrl: GreetingController) -> StateResponse:
    return StateResponse(**ctrl.snapshot())


def _conflict(e: Exception) -> HTTPException:
    return HTTPException(status_code=409, detail=str(e))


# =============================================================================
# API Endpoints
# =============================================================================

@app.get("/")
async def root():
    """Service banner."""
    return {"message": "Greeting Studio API", "status": "running"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "image_model": IMAGE_MODEL, "video_model": VEO_MODEL}


@app.get("/api/state", response_model=StateResponse)
async def get_state(ctrl: GreetingController = Depends(get_controller)):
    return _state(ctrl)


@app.post("/api/capture", response_model=StateResponse)
async def capture(
    file: UploadFile = File(...),
    caption: str = Form(default=""),
    ctrl: GreetingController = Depends(get_controller),
):
    """Upload a camera snapshot or photo and generate the first greeting."""
    mime_type = (file.content_type or "").lower()
    if mime_type not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(status_code=400, detail=f"Unsupported file type: {mime_type or 'unknown'}")

    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Empty upload")
    if len(content) > MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"File too large: {len(content)} bytes (max: {MAX_UPLOAD_BYTES})"
        )

    logger.info(f"Capture received: {mime_type} ({len(content)} bytes)")

    try:
        await ctrl.submit_capture(content, mime_type, caption)
    except (OperationInProgressError, InvalidStateError) as e:
        raise _conflict(e)

    return _state(ctrl)


@app.post("/api/edit", response_model=StateResponse)
async def edit(request: EditRequest, ctrl: GreetingController = Depends(get_controller)):
    """Apply a text edit to the current greeting."""
    if not request.prompt.strip():
        raise HTTPException(status_code=400, detail="prompt is required")

    try:
        await ctrl.submit_edit(request.prompt)
    except (OperationInProgressError, InvalidStateError) as e:
        raise _conflict(e)

    return _state(ctrl)


@app.post("/api/credential", response_model=StateResponse)
async def set_credential(request: CredentialRequest, ctrl: GreetingController = Depends(get_controller)):
    """Store the video API key (kept in memory only)."""
    if not request.api_key.strip():
        raise HTTPException(status_code=400, detail="api_key is required")
    ctrl.set_credential(request.api_key)
    return _state(ctrl)


@app.post("/api/animate", response_model=StateResponse)
async def animate(request: AnimateRequest, ctrl: GreetingController = Depends(get_controller)):
    """Bring the current greeting to life with Veo."""
    if not request.prompt.strip():
        raise HTTPException(status_code=400, detail="prompt is required")

    try:
        await ctrl.animate(request.prompt.strip(), request.api_key)
    except (OperationInProgressError, InvalidStateError) as e:
        raise _conflict(e)

    return _state(ctrl)


@app.post("/api/reset", response_model=StateResponse)
async def reset(ctrl: GreetingController = Depends(get_controller)):
    ctrl.reset()
    return _state(ctrl)


@app.get("/api/image")
async def get_image(ctrl: GreetingController = Depends(get_controller)):
    """Current greeting image bytes."""
    if ctrl.image is None:
        raise HTTPException(status_code=404, detail="No image yet")
    return Response(content=ctrl.image.data, media_type=ctrl.image.mime_type)


@app.get("/api/video")
async def get_video(ctrl: GreetingController = Depends(get_controller)):
    """Current greeting video bytes."""
    if ctrl.video is None:
        raise HTTPException(status_code=404, detail="No video yet")
    return Response(content=ctrl.video.data, media_type=ctrl.video.mime_type)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
