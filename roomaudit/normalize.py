"""Normalization of analysis payloads into the canonical item list.

Analysis payloads reach us in several shapes: a bare list of items (legacy
rows), an ``{"items": [...], "location": "..."}`` object, or either of those
encoded as JSON text, possibly wrapped in markdown fences by the AI service.
Everything is collapsed into an :class:`~roomaudit.models.Analysis` here so
that nothing downstream has to inspect raw shapes.
"""

from __future__ import annotations

import json
import logging
import re
import reprlib
from collections.abc import Mapping

from .models import Analysis, AuditOutcome, InventoryItem
from .reconcile import classify

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)
_preview_repr = reprlib.Repr()
_preview_repr.maxstring = 80
_preview_repr.maxother = 80


def _preview(value: object) -> str:
    # depth and length bounded, safe on deeply nested payloads
    return _preview_repr.repr(value)


def strip_fences(text: str) -> str:
    """Remove markdown code fences (```json ... ```) around a JSON payload."""
    return _FENCE_RE.sub("", text).strip()


def _decode(text: str | bytes) -> object | None:
    """Decode JSON text once. Returns None when the text is not JSON."""
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("Analysis payload is not valid UTF-8: %s", _preview(text))
            return None

    cleaned = strip_fences(text)
    if not cleaned:
        logger.warning("Analysis payload is an empty string")
        return None
    try:
        return json.loads(cleaned)
    except (ValueError, RecursionError) as e:
        # ValueError covers JSONDecodeError and over-long integer literals
        logger.warning("Failed to decode analysis payload (%s): %s", e, _preview(text))
        return None


def _coerce_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    logger.warning("Expected text, got %s: %s", type(value).__name__, _preview(value))
    return ""


def _coerce_count(value: object) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        logger.warning("Item count is a boolean, treating as 0: %r", value)
        return 0
    if isinstance(value, int):
        count = value
    else:
        try:
            count = int(float(value))  # type: ignore[arg-type]
        except (TypeError, ValueError, OverflowError):
            logger.warning("Item count is not numeric, treating as 0: %s", _preview(value))
            return 0
    if count < 0:
        logger.warning("Item count is negative, clamping to 0")
        return 0
    return count


def normalize_item(raw: object) -> InventoryItem:
    """Coerce one raw item. Missing fields get defaults.

    A non-object entry becomes an empty item so the row count is kept.
    """
    if isinstance(raw, InventoryItem):
        return raw
    if not isinstance(raw, Mapping):
        logger.warning("Non-object item entry, keeping an empty row: %s", _preview(raw))
        return InventoryItem()
    return InventoryItem(
        name=_coerce_text(raw.get("name")),
        count=_coerce_count(raw.get("count")),
        condition=_coerce_text(raw.get("condition")),
    )


def normalize_items(raw_items: list | tuple) -> list[InventoryItem]:
    return [normalize_item(raw) for raw in raw_items]


def normalize(raw: object) -> Analysis:
    """Normalize any accepted analysis payload to the canonical shape.

    Never raises. Unrecognized payloads give an empty :class:`Analysis`
    and a logged warning.
    """
    if isinstance(raw, Analysis):
        return Analysis(items=list(raw.items), location=raw.location)

    if isinstance(raw, (str, bytes)):
        raw = _decode(raw)
        if raw is None:
            return Analysis()
        if isinstance(raw, str):
            # Decoded exactly once; a JSON string inside JSON is not unwrapped.
            logger.warning("Analysis payload decoded to a string: %s", _preview(raw))
            return Analysis()

    if isinstance(raw, (list, tuple)):
        return Analysis(items=normalize_items(raw))

    if isinstance(raw, Mapping):
        raw_items = raw.get("items")
        if not isinstance(raw_items, (list, tuple)):
            logger.warning("Analysis object has no items list: %s", _preview(raw))
            return Analysis()
        location = raw.get("location")
        return Analysis(
            items=normalize_items(raw_items),
            location=location if isinstance(location, str) else "",
        )

    logger.warning("Unrecognized analysis payload: %s", _preview(raw))
    return Analysis()


def dumps_analysis(analysis: Analysis) -> str:
    """Serialize the canonical shape for storage."""
    return json.dumps(analysis.to_dict(), ensure_ascii=False)


def normalize_outcome(raw: object) -> AuditOutcome | None:
    if isinstance(raw, AuditOutcome):
        return raw
    if not isinstance(raw, Mapping):
        logger.warning("Skipping non-object comparison entry: %s", _preview(raw))
        return None
    expected = _coerce_count(raw.get("expected_count"))
    found = _coerce_count(raw.get("found_count"))
    return AuditOutcome(
        item=_coerce_text(raw.get("item")),
        expected_count=expected,
        found_count=found,
        status=classify(expected, found),
    )


def normalize_outcomes(raw: object) -> list[AuditOutcome]:
    """Read a stored comparison list (native JSON or JSON text).

    Status is always derived again from the counts.
    """
    if isinstance(raw, (str, bytes)):
        raw = _decode(raw)
    if raw is None:
        return []
    if not isinstance(raw, (list, tuple)):
        logger.warning("Comparison payload is not a list: %s", _preview(raw))
        return []
    outcomes: list[AuditOutcome] = []
    for entry in raw:
        outcome = normalize_outcome(entry)
        if outcome is not None:
            outcomes.append(outcome)
    return outcomes


def dumps_outcomes(outcomes: list[AuditOutcome]) -> str:
    return json.dumps([o.to_dict() for o in outcomes], ensure_ascii=False)
