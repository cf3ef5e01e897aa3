"""Reconciliation of expected items against items found in a re-photograph.

Items are paired by exact, case-sensitive name. When a name appears more
than once in the found list only its first occurrence is used. Items found
but not expected are not reported.

Every operation here returns a new list and leaves its inputs untouched.
List position is the only item identity, so edits never reorder.
"""

from __future__ import annotations

from dataclasses import replace

from .models import (
    SCAN_COMPLETE,
    SCAN_UPLOADED,
    AuditOutcome,
    AuditStatus,
    InventoryItem,
)

NEW_ITEM = InventoryItem(name="", count=1, condition="Good")


def classify(expected_count: int, found_count: int) -> AuditStatus:
    """Derive the status for a pair of counts."""
    if found_count == expected_count:
        return AuditStatus.MATCH
    if found_count == 0:
        return AuditStatus.MISSING
    return AuditStatus.MISMATCH


def reconcile(
    expected: list[InventoryItem], found: list[InventoryItem]
) -> list[AuditOutcome]:
    """Build one outcome per expected item, in expected order."""
    found_counts: dict[str, int] = {}
    for item in found:
        # first occurrence wins
        found_counts.setdefault(item.name, item.count)

    outcomes: list[AuditOutcome] = []
    for item in expected:
        found_count = found_counts.get(item.name, 0)
        outcomes.append(
            AuditOutcome(
                item=item.name,
                expected_count=item.count,
                found_count=found_count,
                status=classify(item.count, found_count),
            )
        )
    return outcomes


def _in_range(seq: list, index: int) -> bool:
    return 0 <= index < len(seq)


def adjust_found(
    outcomes: list[AuditOutcome], index: int, delta: int
) -> list[AuditOutcome]:
    """Manually correct the found count of one outcome.

    The count saturates at zero and the status is derived again. An
    out-of-range index leaves the outcomes unchanged.
    """
    if not _in_range(outcomes, index):
        return list(outcomes)
    current = outcomes[index]
    found_count = max(0, current.found_count + delta)
    updated = replace(
        current,
        found_count=found_count,
        status=classify(current.expected_count, found_count),
    )
    return [*outcomes[:index], updated, *outcomes[index + 1:]]


def summarize(outcomes: list[AuditOutcome]) -> dict[str, int]:
    """Count outcomes per status."""
    summary = {status.value: 0 for status in AuditStatus}
    for outcome in outcomes:
        summary[outcome.status.value] += 1
    return summary


# -- Item list editing --------------------------------------------------


def adjust_count(
    items: list[InventoryItem], index: int, delta: int
) -> list[InventoryItem]:
    if not _in_range(items, index):
        return list(items)
    current = items[index]
    updated = replace(current, count=max(0, current.count + delta))
    return [*items[:index], updated, *items[index + 1:]]


def rename_item(
    items: list[InventoryItem], index: int, name: str
) -> list[InventoryItem]:
    if not _in_range(items, index):
        return list(items)
    return [*items[:index], replace(items[index], name=name), *items[index + 1:]]


def set_item(
    items: list[InventoryItem], index: int, item: InventoryItem
) -> list[InventoryItem]:
    if not _in_range(items, index):
        return list(items)
    return [*items[:index], item, *items[index + 1:]]


def add_item(
    items: list[InventoryItem], item: InventoryItem = NEW_ITEM
) -> list[InventoryItem]:
    return [*items, item]


def remove_item(items: list[InventoryItem], index: int) -> list[InventoryItem]:
    if not _in_range(items, index):
        return list(items)
    return [*items[:index], *items[index + 1:]]


def total_count(items: list[InventoryItem]) -> int:
    return sum(item.count for item in items)


def scan_status(items: list[InventoryItem]) -> str:
    """A scan is complete once analysis produced at least one item."""
    return SCAN_COMPLETE if items else SCAN_UPLOADED
