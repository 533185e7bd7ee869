"""CLI command that merges three folders of PDFs without the Streamlit UI."""

from __future__ import annotations

import argparse
import json
import sys
import tempfile
from pathlib import Path

from pdf_folder_merger.adapters.pymupdf_adapter import PyMuPdfAdapter
from pdf_folder_merger.domain.errors import (
    CapabilityUnsupportedError,
    PdfMergerError,
    ValidationError,
)
from pdf_folder_merger.domain.models import RunStatus, SlotId
from pdf_folder_merger.infrastructure.config import AppConfig
from pdf_folder_merger.services.merge_executor import MergeExecutor
from pdf_folder_merger.services.merge_service import MergeService, MergeSession
from pdf_folder_merger.services.source_registry_service import SourceRegistryService


def _build_service(config: AppConfig) -> MergeService:
    registry_service = SourceRegistryService(config)
    return MergeService(MergeExecutor(PyMuPdfAdapter()), registry_service, config)


def _offer_to_temp_dir(output_name: str, payload: bytes, media_type: str) -> None:
    target = Path(tempfile.gettempdir()) / Path(output_name).name
    target.write_bytes(payload)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Interleave PDFs from folders A, B and C into one merged PDF"
    )
    parser.add_argument("--folder-a", help="Folder with the two-page anchor PDFs (File A)")
    parser.add_argument("--folder-b", help="Folder with the PDFs placed after A's first page")
    parser.add_argument("--folder-c", help="Folder with the PDFs placed after A's second page")
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Folder to save the merged file into (default: system temp folder)",
    )
    parser.add_argument(
        "--per-set",
        action="store_true",
        help="Write one PDF per set, packed into a ZIP, instead of one combined PDF",
    )
    args = parser.parse_args(argv)

    config = AppConfig()
    service = _build_service(config)
    session = MergeSession(merge_all=not args.per_set)

    folders = {SlotId.A: args.folder_a, SlotId.B: args.folder_b, SlotId.C: args.folder_c}
    try:
        for slot_id, folder in folders.items():
            if folder:
                selection = service.registry_service.collect_directory(Path(folder))
                service.select_sources(session, slot_id, selection)
    except PdfMergerError as exc:
        print(json.dumps({"status": RunStatus.ERROR.value, "error": str(exc)}, indent=2))
        return 1

    try:
        service.select_destination(session, args.output_dir or config.default_output_dir)
    except (CapabilityUnsupportedError, ValidationError) as exc:
        print(f"warning: {exc}", file=sys.stderr)

    outcome = service.run(session, offer=_offer_to_temp_dir)

    delivery = outcome.delivery
    path: str | None = None
    if delivery is not None:
        if delivery.path is not None:
            path = str(delivery.path)
        else:
            path = str(Path(tempfile.gettempdir()) / Path(delivery.output_name).name)

    payload = {
        "status": outcome.status.value,
        "output_name": outcome.output_name,
        "delivery": delivery.mode.value if delivery is not None else None,
        "path": path,
        "merged_pages": outcome.merged_pages,
        "error": outcome.error_message,
    }
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0 if outcome.succeeded else 1


if __name__ == "__main__":
    raise SystemExit(main())
