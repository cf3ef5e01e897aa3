"""Vision backend base class, prompt, and factory."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from ..models import AuditOutcome, InventoryItem
from ..normalize import normalize
from ..reconcile import reconcile

if TYPE_CHECKING:
    from ..config import AuditConfig

PROMPT = (
    "Analyze this inventory photo. Count the distinct items. "
    "Return ONLY a raw JSON object with a key 'items' which is an array of "
    "objects: { name: string, count: number, condition: string }."
)


def parse_response(text: str) -> list[InventoryItem]:
    """Parse the model's reply. Unparsable text yields no items."""
    return normalize(text).items


class VisionBackend(ABC):
    """Abstract base for item detection from a room photo."""

    @abstractmethod
    async def analyze_image(self, image_path: str) -> list[InventoryItem]:
        """Detect items in one photo.

        Duplicate names are returned as separate entries.
        """
        ...


async def verify_inventory(
    backend: VisionBackend, image_path: str, expected: list[InventoryItem]
) -> list[AuditOutcome]:
    """Analyze a re-photograph and reconcile it against the expected items."""
    found = await backend.analyze_image(image_path)
    return reconcile(expected, found)


def create_backend(config: AuditConfig) -> VisionBackend:
    """Create a vision backend based on configuration."""
    backend_name = config.vision.backend

    match backend_name:
        case "gemini":
            from .gemini import GeminiVisionBackend

            return GeminiVisionBackend(
                api_key=config.vision.gemini.api_key,
                model=config.vision.gemini.model,
            )
        case "claude":
            from .claude import ClaudeVisionBackend

            return ClaudeVisionBackend(
                api_key=config.vision.claude.api_key,
                model=config.vision.claude.model,
            )
        case _:
            raise ValueError(
                f"Unknown vision backend: {backend_name!r} "
                f"(choose one of: gemini, claude)"
            )
