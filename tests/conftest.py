"""Shared fixtures and fakes."""

from __future__ import annotations

import pytest

from roomaudit.models import Analysis, InventoryItem, Snapshot
from roomaudit.vision import VisionBackend


class FakeBackend(VisionBackend):
    """Returns canned items per image path, or raises a given error."""

    def __init__(self, items_by_image=None, default=None, error=None):
        self.items_by_image = items_by_image or {}
        self.default = default or []
        self.error = error
        self.calls: list[str] = []

    async def analyze_image(self, image_path):
        self.calls.append(image_path)
        if self.error is not None:
            raise self.error
        return list(self.items_by_image.get(image_path, self.default))


def make_snapshot(
    id=1,
    room_name="Kitchen",
    location="",
    items=None,
    image_path="photo.jpg",
    created_at="2025-01-10 12:00:00",
):
    items = items or []
    return Snapshot(
        id=id,
        created_at=created_at,
        room_name=room_name,
        status="complete" if items else "uploaded",
        image_path=image_path,
        analysis=Analysis(items=list(items), location=location),
    )


@pytest.fixture
def chairs():
    return [
        InventoryItem(name="Chair", count=4, condition="Good"),
        InventoryItem(name="Table", count=1, condition="Good"),
    ]
