import io
import zipfile
from pathlib import Path

import pytest

from pdf_folder_merger.adapters.pymupdf_adapter import PyMuPdfAdapter
from pdf_folder_merger.domain.errors import CapabilityUnsupportedError, RunInProgressError
from pdf_folder_merger.domain.models import DeliveryMode, RunStatus, SlotId
from pdf_folder_merger.infrastructure.config import AppConfig
from pdf_folder_merger.services.merge_executor import MergeExecutor
from pdf_folder_merger.services.merge_service import MergeService, MergeSession
from pdf_folder_merger.services.source_registry_service import SourceRegistryService


def _service(config: AppConfig | None = None) -> MergeService:
    config = config or AppConfig(allow_directory_output=True)
    return MergeService(MergeExecutor(PyMuPdfAdapter()), SourceRegistryService(config), config)


def _loaded_session(service: MergeService, make_pdf) -> MergeSession:
    session = MergeSession()
    service.select_sources(
        session,
        SlotId.A,
        [("PMA Report_North.pdf", make_pdf(["A1", "A2"])), ("South.pdf", make_pdf(["A1", "A2"]))],
    )
    service.select_sources(session, SlotId.B, [("q1.pdf", make_pdf(["B1", "B2", "B3"]))])
    return session


@pytest.mark.unit
def test_run_reports_progress_and_completes(make_pdf) -> None:
    service = _service()
    session = _loaded_session(service, make_pdf)
    updates: list[tuple[int, RunStatus]] = []

    outcome = service.run(
        session, observer=lambda progress, status: updates.append((progress, status))
    )

    assert outcome.succeeded
    assert outcome.output_name == "North - Merged.pdf"
    assert outcome.merged_pages == 7
    assert updates == [
        (10, RunStatus.PROCESSING),
        (50, RunStatus.PROCESSING),
        (90, RunStatus.PROCESSING),
        (100, RunStatus.COMPLETED),
    ]
    assert session.run_state.status == RunStatus.COMPLETED
    assert session.run_state.progress == 100


@pytest.mark.unit
def test_run_without_sources_fails_before_merging() -> None:
    service = _service()
    session = MergeSession()
    updates: list[tuple[int, RunStatus]] = []

    outcome = service.run(
        session, observer=lambda progress, status: updates.append((progress, status))
    )

    assert outcome.status == RunStatus.ERROR
    assert outcome.error_message == "No PDF files selected."
    assert outcome.delivery is None
    assert updates == [(10, RunStatus.PROCESSING), (10, RunStatus.ERROR)]
    assert session.run_state.error_message == "No PDF files selected."


@pytest.mark.unit
def test_run_with_only_empty_documents_reports_error(zero_page_adapter) -> None:
    config = AppConfig(allow_directory_output=True)
    service = MergeService(MergeExecutor(zero_page_adapter), SourceRegistryService(config), config)
    session = MergeSession()
    service.select_sources(session, SlotId.A, [("blank.pdf", b"%PDF")])
    updates: list[tuple[int, RunStatus]] = []

    outcome = service.run(
        session, observer=lambda progress, status: updates.append((progress, status))
    )

    assert outcome.status == RunStatus.ERROR
    assert outcome.error_message == "The selected PDFs contain no pages."
    assert outcome.delivery is None
    assert updates[-1] == (90, RunStatus.ERROR)
    assert session.run_state.progress == 90


@pytest.mark.unit
def test_run_decode_error_keeps_last_progress_and_delivers_nothing(
    tmp_path: Path, make_pdf
) -> None:
    service = _service()
    session = _loaded_session(service, make_pdf)
    service.select_sources(
        session,
        SlotId.C,
        [("fine.pdf", make_pdf(["C1"])), ("broken.pdf", b"this is not a pdf document")],
    )
    session.destination = tmp_path
    offered: list[str] = []

    outcome = service.run(session, offer=lambda name, payload, media: offered.append(name))

    assert outcome.status == RunStatus.ERROR
    assert outcome.error_message is not None
    assert "broken.pdf" in outcome.error_message
    assert "File C" in outcome.error_message
    assert "set 2" in outcome.error_message
    assert session.run_state.status == RunStatus.ERROR
    assert session.run_state.progress == 50
    assert list(tmp_path.iterdir()) == []
    assert offered == []


@pytest.mark.unit
def test_run_persists_to_selected_folder(tmp_path: Path, make_pdf) -> None:
    service = _service()
    session = _loaded_session(service, make_pdf)
    service.select_destination(session, str(tmp_path))

    outcome = service.run(session)

    assert outcome.delivery is not None
    assert outcome.delivery.mode == DeliveryMode.PERSISTED
    assert (tmp_path / "North - Merged.pdf").exists()


@pytest.mark.unit
def test_run_falls_back_to_offer_when_folder_write_fails(tmp_path: Path, make_pdf) -> None:
    service = _service()
    session = _loaded_session(service, make_pdf)
    session.destination = tmp_path / "unplugged_drive"
    offered: list[str] = []

    outcome = service.run(session, offer=lambda name, payload, media: offered.append(name))

    assert outcome.status == RunStatus.COMPLETED
    assert outcome.delivery is not None
    assert outcome.delivery.mode == DeliveryMode.OFFERED
    assert outcome.delivery.payload
    assert offered == ["North - Merged.pdf"]


@pytest.mark.unit
def test_run_per_set_mode_delivers_zip(make_pdf) -> None:
    service = _service()
    session = _loaded_session(service, make_pdf)
    session.merge_all = False

    outcome = service.run(session)

    assert outcome.succeeded
    assert outcome.output_name == "North - Merged.zip"
    assert outcome.delivery is not None
    assert outcome.delivery.media_type == "application/zip"
    with zipfile.ZipFile(io.BytesIO(outcome.delivery.payload or b""), "r") as archive:
        assert archive.namelist() == ["North - Merged.pdf", "South - Merged.pdf"]


@pytest.mark.unit
def test_run_rejected_while_processing(make_pdf) -> None:
    service = _service()
    session = _loaded_session(service, make_pdf)
    session.run_state.status = RunStatus.PROCESSING

    with pytest.raises(RunInProgressError):
        service.run(session)
    with pytest.raises(RunInProgressError):
        service.reset(session)
    assert not session.can_run


@pytest.mark.unit
def test_reset_clears_sources_destination_and_state(tmp_path: Path, make_pdf) -> None:
    service = _service()
    session = _loaded_session(service, make_pdf)
    service.select_destination(session, str(tmp_path))
    session.merge_all = False
    service.run(session)

    service.reset(session)

    assert session.registry.is_empty
    assert session.destination is None
    assert session.merge_all is True
    assert session.run_state.status == RunStatus.IDLE
    assert session.run_state.progress == 0
    assert session.run_state.error_message is None


@pytest.mark.unit
def test_unsupported_destination_leaves_sources_untouched(tmp_path: Path, make_pdf) -> None:
    service = _service(AppConfig(allow_directory_output=False))
    session = _loaded_session(service, make_pdf)
    session.destination = tmp_path

    with pytest.raises(CapabilityUnsupportedError):
        service.select_destination(session, str(tmp_path))

    assert session.destination is None
    assert session.registry.max_set_count == 2
    assert session.can_run


@pytest.mark.unit
def test_clear_slot_drops_stale_sources_from_session(make_pdf) -> None:
    service = _service()
    session = _loaded_session(service, make_pdf)

    service.clear_slot(session, SlotId.A)

    assert session.registry.slot(SlotId.A).sources == []
    assert session.registry.max_set_count == 1
    assert session.can_run
    service.clear_slot(session, SlotId.B)
    assert not session.can_run
