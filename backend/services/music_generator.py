import base64
import asyncio
import binascii
import logging
from typing import Callable, Optional

import google.auth
import google.auth.exceptions
import google.auth.transport.requests
import httpx

from errors import UpstreamError
from settings import Settings

logger = logging.getLogger(__name__)

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"
NEGATIVE_PROMPT = "vocals"

TokenProvider = Callable[[], str]


def default_access_token() -> str:
    """Fetch an OAuth access token from application default credentials."""
    credentials, _ = google.auth.default(scopes=[CLOUD_PLATFORM_SCOPE])
    credentials.refresh(google.auth.transport.requests.Request())
    return credentials.token


class MusicGenerator:
    """Generates instrumental audio from a text prompt with Lyria on Vertex AI."""

    def __init__(
        self,
        settings: Settings,
        token_provider: Optional[TokenProvider] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = (
            f"https://{settings.location}-aiplatform.googleapis.com/v1/projects/{settings.project_id}"
            f"/locations/{settings.location}/publishers/google/models/{settings.synthesis_model}:predict"
        )
        self.timeout = settings.synthesis_timeout
        self.token_provider = token_provider or default_access_token
        self.transport = transport

    async def synthesize(self, prompt: str) -> bytes:
        try:
            token = await asyncio.to_thread(self.token_provider)
        except google.auth.exceptions.GoogleAuthError as e:
            raise UpstreamError(f"Could not obtain Vertex AI access token: {e}") from e

        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        payload = {
            "instances": [{"prompt": prompt, "negative_prompt": NEGATIVE_PROMPT}],
            "parameters": {"sample_count": 1},
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.endpoint, headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise UpstreamError(f"Lyria request failed: {e}") from e

        if not response.is_success:
            raise UpstreamError(
                f"Lyria API error: {response.status_code} {response.reason_phrase}. {response.text}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError("Lyria returned a non-JSON response") from e

        predictions = data.get("predictions") if isinstance(data, dict) else None
        if not predictions:
            raise UpstreamError("Lyria returned no audio prediction")

        prediction = predictions[0] if isinstance(predictions[0], dict) else {}
        encoded = prediction.get("bytesBase64Encoded") or prediction.get("audioContent")
        if not encoded:
            raise UpstreamError("No audio data in prediction")

        try:
            audio = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise UpstreamError("Lyria returned undecodable audio data") from e

        logger.info(f"Lyria returned {len(audio)} bytes of audio")
        return audio
