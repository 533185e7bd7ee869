from datetime import date

import pytest

from pdf_folder_merger.domain.models import DocumentSource, SlotId, SourceRegistry
from pdf_folder_merger.services.output_naming import (
    derive_output_name,
    derive_set_output_name,
    strip_extension,
)


def _with(slot_id: SlotId, *names: str) -> SourceRegistry:
    sources = [DocumentSource(name=name, content=b"x") for name in names]
    return SourceRegistry.empty().with_slot(slot_id, sources)


@pytest.mark.unit
def test_output_name_strips_anchor_prefix() -> None:
    registry = _with(SlotId.A, "PMA Report_Bangkok Plant.pdf", "PMA Report_Other.pdf")
    assert derive_output_name(registry) == "Bangkok Plant - Merged.pdf"


@pytest.mark.unit
def test_output_name_strips_anchor_suffix() -> None:
    registry = _with(SlotId.A, "Bangkok Plant - PMA Report.PDF")
    assert derive_output_name(registry) == "Bangkok Plant - Merged.pdf"


@pytest.mark.unit
def test_output_name_plain_report() -> None:
    assert derive_output_name(_with(SlotId.A, "Report.pdf")) == "Report - Merged.pdf"


@pytest.mark.unit
def test_output_name_uses_first_available_slot() -> None:
    registry = _with(SlotId.C, "quarter two.pdf").with_slot(
        SlotId.B, [DocumentSource(name="quarter one.pdf", content=b"x")]
    )
    assert derive_output_name(registry) == "quarter one - Merged.pdf"


@pytest.mark.unit
def test_output_name_only_strips_last_extension() -> None:
    assert strip_extension("site.v2.pdf") == "site.v2"
    assert strip_extension("no_extension") == "no_extension"


@pytest.mark.unit
def test_output_name_fallback_uses_date() -> None:
    name = derive_output_name(SourceRegistry.empty(), today=date(2024, 3, 5))
    assert name == "Merged_PDF_2024-03-05 - Merged.pdf"


@pytest.mark.unit
def test_output_name_is_stable_for_unchanged_registry() -> None:
    registry = _with(SlotId.B, "Log Q3.pdf")
    assert derive_output_name(registry) == derive_output_name(registry)


@pytest.mark.unit
def test_output_name_archive_extension() -> None:
    registry = _with(SlotId.A, "PMA Report_North.pdf")
    assert derive_output_name(registry, extension=".zip") == "North - Merged.zip"


@pytest.mark.unit
def test_set_output_name_falls_back_to_set_number() -> None:
    source = DocumentSource(name="PMA Report_East.pdf", content=b"x")
    assert derive_set_output_name([source], 0) == "East - Merged.pdf"
    assert derive_set_output_name([], 2) == "Set 3 - Merged.pdf"
