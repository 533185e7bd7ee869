from __future__ import annotations

import math
from typing import Any, Callable

from pdf_folder_merger.adapters.pymupdf_adapter import PyMuPdfAdapter
from pdf_folder_merger.domain.errors import DecodeError, NoInputError, ParsingError
from pdf_folder_merger.domain.models import (
    DocumentSource,
    MergeResult,
    SetArtifact,
    SlotId,
    SourceRegistry,
)
from pdf_folder_merger.infrastructure.logging_setup import get_logger
from pdf_folder_merger.services.merge_planner import (
    max_set_count,
    plan_set,
    planned_page_count,
    sources_for_set,
)
from pdf_folder_merger.services.output_naming import derive_output_name, derive_set_output_name

logger = get_logger(__name__)

ProgressCallback = Callable[[int], None]

SETUP_PROGRESS = 10
MERGE_PROGRESS_SPAN = 80


def progress_after_set(completed_sets: int, total_sets: int) -> int:
    # Half-up rounding; the first and last 10% belong to setup and delivery.
    fraction = completed_sets / total_sets
    return int(math.floor(SETUP_PROGRESS + fraction * MERGE_PROGRESS_SPAN + 0.5))


class MergeExecutor:
    def __init__(self, adapter: PyMuPdfAdapter) -> None:
        self.adapter = adapter

    def _open(self, slot_id: SlotId, set_index: int, source: DocumentSource) -> Any:
        try:
            return self.adapter.open_document(source)
        except ParsingError as exc:
            raise DecodeError(slot_id.value, set_index, source.name) from exc

    def _merge_set(self, output: Any, registry: SourceRegistry, set_index: int) -> int:
        sources = sources_for_set(registry, set_index)
        documents: dict[SlotId, Any] = {}
        try:
            for slot_id, source in sources.items():
                documents[slot_id] = self._open(slot_id, set_index, source)

            page_counts = [
                int(documents[slot_id].page_count) if slot_id in documents else None
                for slot_id in SlotId
            ]
            operations = plan_set(*page_counts)
            for operation in operations:
                try:
                    self.adapter.append_pages(
                        output, documents[operation.slot], operation.page_indices
                    )
                except ParsingError as exc:
                    source = sources[operation.slot]
                    raise DecodeError(operation.slot.value, set_index, source.name) from exc

            merged = planned_page_count(operations)
            logger.debug("Set %d merged %d page(s)", set_index + 1, merged)
            return merged
        finally:
            for document in documents.values():
                document.close()

    @staticmethod
    def _require_sets(registry: SourceRegistry) -> int:
        total_sets = max_set_count(registry)
        if total_sets == 0:
            raise NoInputError("No PDF files selected.")
        return total_sets

    def run(
        self, registry: SourceRegistry, on_progress: ProgressCallback | None = None
    ) -> MergeResult:
        """Merge every set, in ascending order, into one combined PDF."""
        total_sets = self._require_sets(registry)
        output = self.adapter.new_document()
        try:
            merged_pages = 0
            for set_index in range(total_sets):
                merged_pages += self._merge_set(output, registry, set_index)
                if on_progress is not None:
                    on_progress(progress_after_set(set_index + 1, total_sets))

            if merged_pages == 0:
                raise NoInputError("The selected PDFs contain no pages.")
            output_pdf = self.adapter.serialize(output)
        finally:
            output.close()

        return MergeResult(
            output_name=derive_output_name(registry),
            output_pdf=output_pdf,
            merged_pages=merged_pages,
            set_count=total_sets,
        )

    def run_per_set(
        self, registry: SourceRegistry, on_progress: ProgressCallback | None = None
    ) -> list[SetArtifact]:
        """Merge each set into its own PDF; sets that yield no pages are skipped."""
        total_sets = self._require_sets(registry)
        artifacts: list[SetArtifact] = []
        for set_index in range(total_sets):
            output = self.adapter.new_document()
            try:
                merged_pages = self._merge_set(output, registry, set_index)
                if merged_pages > 0:
                    artifacts.append(
                        SetArtifact(
                            set_index=set_index,
                            output_name=derive_set_output_name(
                                list(sources_for_set(registry, set_index).values()), set_index
                            ),
                            output_pdf=self.adapter.serialize(output),
                            page_count=merged_pages,
                        )
                    )
            finally:
                output.close()
            if on_progress is not None:
                on_progress(progress_after_set(set_index + 1, total_sets))

        if not artifacts:
            raise NoInputError("The selected PDFs contain no pages.")
        return artifacts
