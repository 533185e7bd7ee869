from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path


class SlotId(str, Enum):
    A = "A"
    B = "B"
    C = "C"


DEFAULT_SLOT_LABELS: dict[SlotId, str] = {
    SlotId.A: "File A (PMA Report, 2 pages)",
    SlotId.B: "File B (Quarter 1 or 3 log, 3 pages)",
    SlotId.C: "File C (Quarter 2 or 4 log, 3 pages)",
}

NO_FILES_SUMMARY = "No files selected"


class RunStatus(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class DeliveryMode(str, Enum):
    PERSISTED = "persisted"
    OFFERED = "offered"


@dataclass(frozen=True)
class DocumentSource:
    name: str
    content: bytes

    @property
    def size_bytes(self) -> int:
        return len(self.content)


def summarize_sources(sources: list[DocumentSource]) -> str:
    if not sources:
        return NO_FILES_SUMMARY
    if len(sources) == 1:
        return sources[0].name
    return f"{len(sources)} files selected"


@dataclass(frozen=True)
class SourceSlot:
    label: str
    sources: list[DocumentSource] = field(default_factory=list)
    display_summary: str = NO_FILES_SUMMARY

    def source_at(self, index: int) -> DocumentSource | None:
        if 0 <= index < len(self.sources):
            return self.sources[index]
        return None


@dataclass(frozen=True)
class SourceRegistry:
    slots: dict[SlotId, SourceSlot]

    @classmethod
    def empty(cls) -> SourceRegistry:
        return cls(
            slots={slot_id: SourceSlot(label=DEFAULT_SLOT_LABELS[slot_id]) for slot_id in SlotId}
        )

    def slot(self, slot_id: SlotId) -> SourceSlot:
        return self.slots[slot_id]

    def with_slot(self, slot_id: SlotId, sources: list[DocumentSource]) -> SourceRegistry:
        current = self.slots[slot_id]
        updated = replace(
            current, sources=list(sources), display_summary=summarize_sources(sources)
        )
        return SourceRegistry(slots={**self.slots, slot_id: updated})

    @property
    def max_set_count(self) -> int:
        return max((len(self.slots[slot_id].sources) for slot_id in SlotId), default=0)

    @property
    def first_source(self) -> DocumentSource | None:
        for slot_id in SlotId:
            source = self.slots[slot_id].source_at(0)
            if source is not None:
                return source
        return None

    @property
    def is_empty(self) -> bool:
        return self.max_set_count == 0


@dataclass(frozen=True)
class PageOperation:
    slot: SlotId
    page_indices: list[int]


@dataclass
class MergeRunState:
    status: RunStatus = RunStatus.IDLE
    progress: int = 0
    error_message: str | None = None


@dataclass(frozen=True)
class DeliveryOutcome:
    output_name: str
    mode: DeliveryMode
    media_type: str = "application/pdf"
    path: Path | None = None
    payload: bytes | None = None


@dataclass(frozen=True)
class MergeResult:
    output_name: str
    output_pdf: bytes
    merged_pages: int
    set_count: int


@dataclass(frozen=True)
class SetArtifact:
    set_index: int
    output_name: str
    output_pdf: bytes
    page_count: int


@dataclass(frozen=True)
class MergeOutcome:
    status: RunStatus
    output_name: str | None = None
    delivery: DeliveryOutcome | None = None
    error_message: str | None = None
    merged_pages: int = 0

    @property
    def succeeded(self) -> bool:
        return self.status == RunStatus.COMPLETED
