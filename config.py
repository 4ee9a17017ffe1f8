"""
Configuration for Greeting Studio.

Model Selection:
- Image: gemini-2.5-flash-image (multi-turn image editing)
- Video: veo-3.1-fast-generate-preview (image-to-video)

API Access:
- Image generation uses GOOGLE_API_KEY from the environment
- Video generation uses a key supplied by the user at runtime (never stored here)
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# =============================================================================
# Model Configuration
# =============================================================================

IMAGE_MODEL = os.getenv("IMAGE_MODEL", "gemini-2.5-flash-image")
VEO_MODEL = os.getenv("VEO_MODEL", "veo-3.1-fast-generate-preview")

# =============================================================================
# API Configuration
# =============================================================================

GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")


def get_gemini_client(api_key: str = None):
    """
    Get a Gemini client for image generation.

    Falls back to GOOGLE_API_KEY when no key is passed explicitly.
    """
    from google import genai

    from models.errors import ConfigurationError

    key = api_key or GOOGLE_API_KEY
    if not key:
        raise ConfigurationError("API_KEY is not configured. Set GOOGLE_API_KEY.")
    return genai.Client(api_key=key)


# =============================================================================
# Paths
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.resolve()  # Always absolute
SKILLS_DIR = PROJECT_ROOT / "skills"
LOGS_DIR = PROJECT_ROOT / "logs"

# =============================================================================
# Generation Settings
# =============================================================================

# Caption used when the user leaves the text box empty
DEFAULT_CAPTION = os.getenv("DEFAULT_CAPTION", "สวัสดีปีใหม่ 2026")

# Video generation
VIDEO_POLL_INTERVAL_SECONDS = float(os.getenv("VIDEO_POLL_INTERVAL_SECONDS", "5"))
VIDEO_RESOLUTION = "720p"
VIDEO_ASPECT_RATIO = "16:9"
VIDEO_COUNT = 1

# Uploads
MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10MB
ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}

# =============================================================================
# Logging
# =============================================================================

import logging

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# =============================================================================
# Print Configuration (for debugging)
# =============================================================================


def print_config():
    """Print current configuration for debugging."""
    print(f"""
Greeting Studio Configuration
=============================
Image Model: {IMAGE_MODEL}
Video Model: {VEO_MODEL} ({VIDEO_RESOLUTION}, {VIDEO_ASPECT_RATIO})
API Key: {"set" if GOOGLE_API_KEY else "NOT SET"}
Poll Interval: {VIDEO_POLL_INTERVAL_SECONDS}s
Project Root: {PROJECT_ROOT}
Log Level: {LOG_LEVEL}
""")


if __name__ == "__main__":
    print_config()
