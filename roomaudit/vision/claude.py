"""Claude API vision backend for item detection."""

from __future__ import annotations

import base64
import logging
import mimetypes
from pathlib import Path

from ..models import InventoryItem
from . import PROMPT, VisionBackend, parse_response

logger = logging.getLogger(__name__)


class ClaudeVisionBackend(VisionBackend):
    """Detect room items using Claude's vision capability."""

    def __init__(self, api_key: str = "", model: str = "claude-sonnet-4-5-20250929") -> None:
        self._api_key = api_key
        self._model = model

    async def analyze_image(self, image_path: str) -> list[InventoryItem]:
        if not self._api_key:
            raise ValueError(
                "Anthropic API key is not set. "
                "Check the config file or the ANTHROPIC_API_KEY environment variable."
            )

        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "anthropic SDK is required: pip install anthropic"
            ) from None

        data = Path(image_path).read_bytes()
        media_type = mimetypes.guess_type(image_path)[0] or "image/jpeg"
        content = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": media_type,
                    "data": base64.standard_b64encode(data).decode(),
                },
            },
            {"type": "text", "text": PROMPT},
        ]

        client = anthropic.AsyncAnthropic(api_key=self._api_key)
        response = await client.messages.create(
            model=self._model,
            max_tokens=4096,
            messages=[{"role": "user", "content": content}],
        )

        text = response.content[0].text
        logger.debug("Claude raw response: %s", text)
        return parse_response(text)
