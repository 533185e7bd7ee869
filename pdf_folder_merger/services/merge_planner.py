"""Positional merge template for one set of aligned sources.

Slot A is the anchor document of a set: its first page opens the set, the
whole of slot B follows, then A's second page, then the whole of slot C.
Without an anchor, B and C are simply appended in that order.
"""

from __future__ import annotations

from pdf_folder_merger.domain.models import DocumentSource, PageOperation, SlotId, SourceRegistry


def max_set_count(registry: SourceRegistry) -> int:
    return registry.max_set_count


def sources_for_set(registry: SourceRegistry, set_index: int) -> dict[SlotId, DocumentSource]:
    """Return the i-th source of every slot that has one, in slot order."""
    present: dict[SlotId, DocumentSource] = {}
    for slot_id in SlotId:
        source = registry.slot(slot_id).source_at(set_index)
        if source is not None:
            present[slot_id] = source
    return present


def _all_pages(slot: SlotId, page_count: int) -> list[PageOperation]:
    if page_count <= 0:
        return []
    return [PageOperation(slot=slot, page_indices=list(range(page_count)))]


def plan_set(
    a_pages: int | None, b_pages: int | None, c_pages: int | None
) -> list[PageOperation]:
    """Build the ordered page operations for one set.

    Each argument is the page count of that slot's document for the set, or
    ``None`` when the slot has no document at this index. Zero-page
    documents contribute nothing.
    """
    operations: list[PageOperation] = []

    if a_pages is None:
        if b_pages is not None:
            operations.extend(_all_pages(SlotId.B, b_pages))
        if c_pages is not None:
            operations.extend(_all_pages(SlotId.C, c_pages))
        return operations

    if a_pages > 0:
        operations.append(PageOperation(slot=SlotId.A, page_indices=[0]))
    if b_pages is not None:
        operations.extend(_all_pages(SlotId.B, b_pages))
    if a_pages > 1:
        operations.append(PageOperation(slot=SlotId.A, page_indices=[1]))
    if c_pages is not None:
        operations.extend(_all_pages(SlotId.C, c_pages))
    return operations


def planned_page_count(operations: list[PageOperation]) -> int:
    return sum(len(operation.page_indices) for operation in operations)
