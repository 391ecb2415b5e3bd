# glowback/services/gemini.py
from __future__ import annotations
import base64
import binascii
import logging
from typing import Optional, Protocol

from google import genai
from google.genai import types
from google.genai.types import Modality

from glowback.config import DEFAULT_MODEL
from glowback.errors import EncodingError, RemoteServiceError

logger = logging.getLogger(__name__)

RESTORE_PROMPT = (
    "Restore this old, damaged, and faded photo. Your task is to perform a high-quality restoration. "
    "Fix any scratches, tears, dust, and creases. Enhance the details, improve clarity, and correct "
    "any color fading to bring the photo back to life. If the original photo is black and white or "
    "sepia, please colorize it realistically. Do not add any elements that were not in the original photo."
)


class RestorationService(Protocol):
    def restore(self, base64_data: str, mime_type: str) -> Optional[bytes]:
        ...


class GeminiRestorationService:
    """Один запрос generate_content на восстановление; без повторов и своих таймаутов."""

    def __init__(self, api_key: str | None = None, model: str = DEFAULT_MODEL, *, client=None):
        if client is None:
            client = genai.Client(api_key=api_key)
        self._client = client
        self.model = model

    def _build_contents(self, base64_data: str, mime_type: str) -> list:
        try:
            raw = base64.b64decode(base64_data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise EncodingError(f"Invalid base64 payload: {e}") from e
        return [types.Part.from_bytes(data=raw, mime_type=mime_type), RESTORE_PROMPT]

    def restore(self, base64_data: str, mime_type: str) -> Optional[bytes]:
        contents = self._build_contents(base64_data, mime_type)
        config = types.GenerateContentConfig(response_modalities=[Modality.IMAGE])
        try:
            response = self._client.models.generate_content(
                model=self.model, contents=contents, config=config,
            )
        except Exception as e:
            logger.error("Error calling Gemini API: %s", e, exc_info=True)
            raise RemoteServiceError(f"Gemini API Error: {e}") from e
        return first_image(response)


def first_image(response) -> Optional[bytes]:
    """Байты первой inline-картинки ответа или None."""
    for cand in (getattr(response, "candidates", None) or [])[:1]:
        content = getattr(cand, "content", None)
        for part in (getattr(content, "parts", None) or []):
            inline = getattr(part, "inline_data", None)
            if inline is not None and inline.data:
                return inline.data
    return None
