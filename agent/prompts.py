"""
Prompt templates for the greeting pipeline.

These prompts are a fixed contract with the image and video models:
- The greeting must look like a clean photograph
- No text, logos, watermarks or symbols may appear, on any turn
- Animation only adds motion, never graphics

The pipeline does not verify the model honored them.
"""


class Prompts:
    """Collection of prompt templates for greeting generation."""

    # =========================================================================
    # IMAGE PROMPTS
    # =========================================================================

    GREETING_PORTRAIT = """Create a professional, high-end celebratory New Year greeting portrait of this person.
The setting is a spectacular night scene featuring breathtaking, vibrant orange and gold fireworks lighting up the sky.
The person should have warm, cinematic lighting on their face that matches the orange glow of the fireworks.
The mood of the photo should be inspired by the theme: "{caption}".

CRITICAL INSTRUCTION:
1. DO NOT include any text, words, letters, or numbers in the image.
2. DO NOT include any logos, watermarks, symbols, or branding elements.
3. The image must be a clean, artistic photograph only.
4. No graphic design overlays or written characters of any kind should be visible.

Never respond with text. Just generate the photo."""

    EDIT_GREETING = """Adjust the photo based on this request: {request}.
STRICT NEGATIVE CONSTRAINT: Ensure there is absolutely NO text, NO logos, NO writing, and NO symbols added to the image.
Keep the night setting and the vibrant orange firework theme as a clean photograph."""

    # =========================================================================
    # VIDEO PROMPTS
    # =========================================================================

    ANIMATE_GREETING = (
        "Animate the fireworks in the background to sparkle and bloom elegantly. "
        "The person remains mostly still but with a subtle lighting shimmer from the explosions. "
        "Ensure NO text or graphics are added during the animation."
    )

    @classmethod
    def greeting_portrait(cls, caption: str) -> str:
        return cls.GREETING_PORTRAIT.format(caption=caption)

    @classmethod
    def edit_greeting(cls, request: str) -> str:
        return cls.EDIT_GREETING.format(request=request)

    @classmethod
    def animate_greeting(cls, motion_prompt: str = "") -> str:
        """Base motion instruction followed by the user's own description."""
        motion_prompt = (motion_prompt or "").strip()
        if not motion_prompt:
            return cls.ANIMATE_GREETING
        return f"{cls.ANIMATE_GREETING} {motion_prompt}"
