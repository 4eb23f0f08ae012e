import logging
from pathlib import Path
from typing import Any, Optional

import google.auth.exceptions
import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from errors import UpstreamError
from models import MIME_TYPES
from settings import Settings

logger = logging.getLogger(__name__)

ANALYSIS_PROMPT = """Perform a comprehensive analysis of this image. Examine:

1. **Visual Elements**: What objects, people, animals, or subjects are present? What is the environment or setting?
2. **Emotional Indicators**: Analyze facial expressions, body language, postures, and gestures. What emotions are being conveyed?
3. **Visual Atmosphere**: Consider lighting (bright/dark/harsh/soft), color palette (warm/cool/vibrant/muted), and overall composition.
4. **Action & Movement**: Is the scene static or dynamic? Is there movement, action, or tension? What is the speed and intensity of any action?
5. **Context & Narrative**: What story or situation is being depicted? What is happening in the scene?
6. **Energy Level**: Assess the overall energy and intensity - is it calm, energetic, aggressive, peaceful, chaotic, or dramatic?

Based on this analysis, write an instrumental music description that matches the scene's true emotional character, energy level, and atmosphere. Reflect the actual intensity and mood rather than defaulting to pleasant or neutral descriptions.

Specify each on a new line: Mood: (emotional tone), Tempo: (very slow/slow/moderate/fast/very fast), Dynamics: (very soft/soft/moderate/loud/very loud), and Main instruments: (list instruments).

Keep the description concise and focused on the musical elements that capture the scene.

Output only the music description text."""


def mime_type_for(filename: str) -> str:
    return MIME_TYPES.get(Path(filename).suffix.lower(), "image/png")


class ImageAnalyzer:
    """Turns an image into a text prompt for music generation using Gemini on Vertex AI."""

    def __init__(self, settings: Settings, client: Optional[Any] = None):
        self.model = settings.analysis_model
        self.client = client or genai.Client(
            vertexai=True,
            project=settings.project_id,
            location=settings.location,
        )

    async def analyze(self, image_bytes: bytes, mime_type: str) -> str:
        contents = [
            types.Content(
                role="user",
                parts=[
                    types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
                    types.Part.from_text(text=ANALYSIS_PROMPT),
                ],
            )
        ]

        try:
            response = await self.client.aio.models.generate_content(model=self.model, contents=contents)
        except (genai_errors.APIError, httpx.HTTPError, google.auth.exceptions.GoogleAuthError) as e:
            raise UpstreamError(f"Gemini request failed: {e}") from e

        candidates = getattr(response, "candidates", None)
        if not candidates:
            raise UpstreamError("No candidates in Gemini response")

        content = getattr(candidates[0], "content", None)
        parts = getattr(content, "parts", None)
        if not parts:
            raise UpstreamError("Invalid candidate structure")

        prompt = (getattr(parts[0], "text", None) or "").strip()
        if not prompt:
            raise UpstreamError("Analysis failed: Gemini could not generate a music prompt")

        logger.info(f"Gemini produced a {len(prompt)} character music prompt")
        return prompt
