"""Gemini API vision backend for item detection."""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path

from ..models import InventoryItem
from . import PROMPT, VisionBackend, parse_response

logger = logging.getLogger(__name__)


class GeminiVisionBackend(VisionBackend):
    """Detect room items using Google Gemini's vision capability."""

    def __init__(self, api_key: str = "", model: str = "gemini-2.0-flash") -> None:
        self._api_key = api_key
        self._model = model

    async def analyze_image(self, image_path: str) -> list[InventoryItem]:
        if not self._api_key:
            raise ValueError(
                "Gemini API key is not set. "
                "Check the config file or the GEMINI_API_KEY environment variable."
            )

        try:
            import google.generativeai as genai
        except ImportError:
            raise ImportError(
                "google-generativeai SDK is required: pip install google-generativeai"
            ) from None

        data = Path(image_path).read_bytes()
        mime_type = mimetypes.guess_type(image_path)[0] or "image/jpeg"

        genai.configure(api_key=self._api_key)
        model = genai.GenerativeModel(self._model)
        response = await model.generate_content_async(
            [PROMPT, {"mime_type": mime_type, "data": data}]
        )

        try:
            text = response.text
        except ValueError as e:
            # raised by the SDK when the reply was blocked or has no parts
            logger.warning("Gemini returned no usable text for %s: %s", image_path, e)
            return []
        logger.debug("Gemini raw response: %s", text)
        return parse_response(text)
