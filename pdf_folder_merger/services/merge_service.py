from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from pdf_folder_merger.domain.errors import (
    CapabilityUnsupportedError,
    PdfMergerError,
    RunInProgressError,
    ValidationError,
)
from pdf_folder_merger.domain.models import (
    DeliveryOutcome,
    MergeOutcome,
    MergeRunState,
    RunStatus,
    SlotId,
    SourceRegistry,
)
from pdf_folder_merger.infrastructure.config import AppConfig
from pdf_folder_merger.infrastructure.logging_setup import get_logger
from pdf_folder_merger.services.archive_service import ZIP_MEDIA_TYPE, build_zip
from pdf_folder_merger.services.merge_executor import SETUP_PROGRESS, MergeExecutor
from pdf_folder_merger.services.output_naming import derive_output_name
from pdf_folder_merger.services.output_sink import (
    PDF_MEDIA_TYPE,
    OfferHook,
    OutputSink,
    probe_destination,
    select_sink,
)
from pdf_folder_merger.services.source_registry_service import SourceRegistryService

logger = get_logger(__name__)

ProgressObserver = Callable[[int, RunStatus], None]

COMPLETE_PROGRESS = 100
GENERIC_ERROR_MESSAGE = "An error occurred during merging."


@dataclass
class MergeSession:
    registry: SourceRegistry = field(default_factory=SourceRegistry.empty)
    destination: Path | None = None
    merge_all: bool = True
    run_state: MergeRunState = field(default_factory=MergeRunState)

    @property
    def is_processing(self) -> bool:
        return self.run_state.status == RunStatus.PROCESSING

    @property
    def can_run(self) -> bool:
        return not self.is_processing and not self.registry.is_empty


class MergeService:
    def __init__(
        self,
        executor: MergeExecutor,
        registry_service: SourceRegistryService,
        config: AppConfig,
    ) -> None:
        self.executor = executor
        self.registry_service = registry_service
        self.config = config

    def select_sources(
        self, session: MergeSession, slot_id: SlotId, raw_selection: list[tuple[str, bytes]]
    ) -> None:
        session.registry = self.registry_service.select_sources(
            session.registry, slot_id, raw_selection
        )

    def clear_slot(self, session: MergeSession, slot_id: SlotId) -> None:
        session.registry = self.registry_service.clear_slot(session.registry, slot_id)

    def select_destination(
        self, session: MergeSession, raw_path: str | Path | None
    ) -> Path | None:
        try:
            session.destination = probe_destination(self.config, raw_path)
        except (CapabilityUnsupportedError, ValidationError):
            session.destination = None
            raise
        return session.destination

    def _deliver(
        self, session: MergeSession, sink: OutputSink, report: Callable[[int], None]
    ) -> tuple[DeliveryOutcome, int]:
        if session.merge_all:
            result = self.executor.run(session.registry, on_progress=report)
            delivery = sink.deliver(result.output_name, result.output_pdf, PDF_MEDIA_TYPE)
            return delivery, result.merged_pages

        artifacts = self.executor.run_per_set(session.registry, on_progress=report)
        archive_name = derive_output_name(session.registry, extension=".zip")
        delivery = sink.deliver(archive_name, build_zip(artifacts), ZIP_MEDIA_TYPE)
        return delivery, sum(artifact.page_count for artifact in artifacts)

    def run(
        self,
        session: MergeSession,
        observer: ProgressObserver | None = None,
        offer: OfferHook | None = None,
    ) -> MergeOutcome:
        """Merge the session's sources and deliver the result.

        Always ends in ``completed`` or ``error``; a failed run keeps its last
        progress value and delivers nothing.
        """
        if session.is_processing:
            raise RunInProgressError("A merge is already running.")

        state = session.run_state

        def report(progress: int, status: RunStatus = RunStatus.PROCESSING) -> None:
            state.progress = progress
            state.status = status
            if observer is not None:
                observer(progress, status)

        state.error_message = None
        report(SETUP_PROGRESS)
        logger.info(
            "Merging %d set(s) (%s)",
            session.registry.max_set_count,
            "combined" if session.merge_all else "per set",
        )

        try:
            delivery, merged_pages = self._deliver(
                session, select_sink(session.destination, offer), report
            )
        except PdfMergerError as exc:
            logger.error("Merge failed: %s", exc)
            return self._fail(state, str(exc), report)
        except Exception as exc:
            logger.exception("Unexpected merge failure")
            return self._fail(state, str(exc), report)

        report(COMPLETE_PROGRESS, RunStatus.COMPLETED)
        logger.info("Merge complete: %s (%s)", delivery.output_name, delivery.mode.value)
        return MergeOutcome(
            status=RunStatus.COMPLETED,
            output_name=delivery.output_name,
            delivery=delivery,
            merged_pages=merged_pages,
        )

    @staticmethod
    def _fail(
        state: MergeRunState, message: str, report: Callable[[int, RunStatus], None]
    ) -> MergeOutcome:
        state.error_message = message or GENERIC_ERROR_MESSAGE
        report(state.progress, RunStatus.ERROR)
        return MergeOutcome(status=RunStatus.ERROR, error_message=state.error_message)

    def reset(self, session: MergeSession) -> None:
        if session.is_processing:
            raise RunInProgressError("Cannot reset while a merge is running.")
        session.registry = SourceRegistry.empty()
        session.destination = None
        session.merge_all = True
        session.run_state = MergeRunState()
