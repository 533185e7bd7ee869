from __future__ import annotations

import re
from datetime import date

from pdf_folder_merger.domain.models import DocumentSource, SourceRegistry

ANCHOR_NAME_PREFIX = "PMA Report_"
ANCHOR_NAME_SUFFIX = " - PMA Report"
MERGED_SUFFIX = " - Merged"
FALLBACK_PREFIX = "Merged_PDF"

EXTENSION_PATTERN = re.compile(r"\.[^/.]+$")


def strip_extension(name: str) -> str:
    return EXTENSION_PATTERN.sub("", name)


def base_name_for(source: DocumentSource) -> str:
    base = strip_extension(source.name)
    base = base.replace(ANCHOR_NAME_PREFIX, "", 1)
    return base.replace(ANCHOR_NAME_SUFFIX, "", 1)


def fallback_base_name(today: date | None = None) -> str:
    current = today or date.today()
    return f"{FALLBACK_PREFIX}_{current.isoformat()}"


def merged_file_name(base: str, extension: str = ".pdf") -> str:
    return f"{base}{MERGED_SUFFIX}{extension}"


def derive_output_name(
    registry: SourceRegistry, today: date | None = None, extension: str = ".pdf"
) -> str:
    """Name the merged output after the first source in slot order A, B, C.

    ``"PMA Report_Acme Q1.pdf"`` becomes ``"Acme Q1 - Merged.pdf"``; with no
    sources at all the name falls back to ``Merged_PDF_<YYYY-MM-DD>``.
    """
    first = registry.first_source
    base = base_name_for(first) if first is not None else fallback_base_name(today)
    return merged_file_name(base, extension)


def derive_set_output_name(sources: list[DocumentSource], set_index: int) -> str:
    if sources:
        return merged_file_name(base_name_for(sources[0]))
    return merged_file_name(f"Set {set_index + 1}")
