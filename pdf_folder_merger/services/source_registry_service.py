from __future__ import annotations

from pathlib import Path

from pdf_folder_merger.domain.errors import ValidationError
from pdf_folder_merger.domain.models import DocumentSource, SlotId, SourceRegistry
from pdf_folder_merger.infrastructure.config import AppConfig
from pdf_folder_merger.infrastructure.logging_setup import get_logger

logger = get_logger(__name__)

ACCEPTED_SUFFIX = ".pdf"


def is_accepted(name: str) -> bool:
    return name.lower().endswith(ACCEPTED_SUFFIX)


class SourceRegistryService:
    def __init__(self, config: AppConfig) -> None:
        self.config = config

    def _check_limits(self, sources: list[DocumentSource]) -> None:
        total_size = sum(source.size_bytes for source in sources)
        if total_size > self.config.max_batch_size_bytes:
            raise ValidationError(
                f"Selection size exceeds limit of {self.config.max_batch_size_mb} MB"
            )
        for source in sources:
            if source.size_bytes > self.config.max_pdf_size_bytes:
                raise ValidationError(
                    f"{source.name} exceeds per-file limit of {self.config.max_pdf_size_mb} MB"
                )

    def select_sources(
        self,
        registry: SourceRegistry,
        slot_id: SlotId,
        raw_selection: list[tuple[str, bytes]],
    ) -> SourceRegistry:
        """Replace a slot's sources with the PDF items of ``raw_selection``.

        Non-PDF items are dropped. A selection with no PDFs at all leaves the
        slot as it was.
        """
        sources = [
            DocumentSource(name=name, content=content)
            for name, content in raw_selection
            if is_accepted(name)
        ]
        if not sources:
            logger.info("Ignoring selection for File %s: no PDF files", slot_id.value)
            return registry

        self._check_limits(sources)
        skipped = len(raw_selection) - len(sources)
        if skipped:
            logger.info("Skipped %d non-PDF item(s) for File %s", skipped, slot_id.value)
        logger.info("File %s: %d PDF(s) selected", slot_id.value, len(sources))
        return registry.with_slot(slot_id, sources)

    def clear_slot(self, registry: SourceRegistry, slot_id: SlotId) -> SourceRegistry:
        logger.info("File %s: selection cleared", slot_id.value)
        return registry.with_slot(slot_id, [])

    @staticmethod
    def collect_directory(directory: Path) -> list[tuple[str, bytes]]:
        if not directory.is_dir():
            raise ValidationError(f"Folder not found: {directory}")
        paths = sorted(
            (path for path in directory.iterdir() if path.is_file() and is_accepted(path.name)),
            key=lambda path: path.name,
        )
        return [(path.name, path.read_bytes()) for path in paths]
