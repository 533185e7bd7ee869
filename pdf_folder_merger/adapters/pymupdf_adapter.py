from __future__ import annotations

from typing import cast

import fitz  # type: ignore[import-untyped]

from pdf_folder_merger.domain.errors import ParsingError
from pdf_folder_merger.domain.models import DocumentSource


def _page_runs(page_indices: list[int]) -> list[tuple[int, int]]:
    if not page_indices:
        return []
    runs: list[tuple[int, int]] = []
    run_start = page_indices[0]
    run_end = page_indices[0]
    for index in page_indices[1:]:
        if index == run_end + 1:
            run_end = index
            continue
        runs.append((run_start, run_end))
        run_start = index
        run_end = index
    runs.append((run_start, run_end))
    return runs


class PyMuPdfAdapter:
    @staticmethod
    def _optimized_bytes(document: fitz.Document) -> bytes:
        return cast(
            bytes,
            document.tobytes(
                garbage=4,
                clean=True,
                deflate=True,
                deflate_images=True,
                deflate_fonts=True,
            ),
        )

    def new_document(self) -> fitz.Document:
        return fitz.open()

    def open_document(self, source: DocumentSource) -> fitz.Document:
        try:
            return fitz.open(stream=source.content, filetype="pdf")
        except Exception as exc:
            raise ParsingError(f"Unable to open {source.name}") from exc

    def append_pages(
        self, output: fitz.Document, document: fitz.Document, page_indices: list[int]
    ) -> None:
        """Copy ``page_indices`` of ``document`` onto the end of ``output``, in order.

        Contiguous indices are copied as one run so shared resources are only
        embedded once.
        """
        try:
            for from_page, to_page in _page_runs(page_indices):
                output.insert_pdf(document, from_page=from_page, to_page=to_page)
        except Exception as exc:
            raise ParsingError("Unable to copy pages into the merged PDF") from exc

    def serialize(self, document: fitz.Document) -> bytes:
        try:
            return self._optimized_bytes(document)
        except Exception as exc:
            raise ParsingError("Unable to write the merged PDF") from exc
