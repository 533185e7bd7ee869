from __future__ import annotations

from pathlib import Path
from typing import Callable

import fitz
import pytest

from pdf_folder_merger.adapters.pymupdf_adapter import PyMuPdfAdapter
from pdf_folder_merger.domain.models import DocumentSource


class _EmptyDocument:
    page_count = 0

    def close(self) -> None:
        pass


class ZeroPageAdapter(PyMuPdfAdapter):
    def new_document(self) -> _EmptyDocument:
        return _EmptyDocument()

    def open_document(self, source: DocumentSource) -> _EmptyDocument:
        return _EmptyDocument()

    def append_pages(self, output, document, page_indices: list[int]) -> None:
        raise AssertionError("zero-page documents have nothing to copy")

    def serialize(self, document) -> bytes:
        raise AssertionError("nothing should be written for an empty merge")


@pytest.fixture
def zero_page_adapter() -> ZeroPageAdapter:
    return ZeroPageAdapter()


@pytest.fixture
def make_pdf() -> Callable[[list[str]], bytes]:
    def _make(labels: list[str]) -> bytes:
        document = fitz.open()
        try:
            for label in labels:
                page = document.new_page()
                page.insert_text((72, 72), label)
            return document.tobytes(deflate=True, garbage=3)
        finally:
            document.close()

    return _make


@pytest.fixture
def page_labels() -> Callable[[bytes], list[str]]:
    def _labels(pdf_bytes: bytes) -> list[str]:
        with fitz.open(stream=pdf_bytes, filetype="pdf") as document:
            return [page.get_text("text").strip() for page in document]

    return _labels


@pytest.fixture
def quarterly_folders(tmp_path: Path, make_pdf) -> dict[str, Path]:
    folders = {key: tmp_path / f"folder_{key}" for key in ("a", "b", "c")}
    for folder in folders.values():
        folder.mkdir()

    docs_content = {
        folders["a"] / "PMA Report_Site 01.pdf": ["S1-A1", "S1-A2"],
        folders["a"] / "PMA Report_Site 02.pdf": ["S2-A1", "S2-A2"],
        folders["b"] / "Q1 Site 01.pdf": ["S1-B1", "S1-B2", "S1-B3"],
        folders["b"] / "Q1 Site 02.pdf": ["S2-B1", "S2-B2", "S2-B3"],
        folders["c"] / "Q2 Site 01.pdf": ["S1-C1", "S1-C2", "S1-C3"],
        folders["c"] / "notes.txt": [],
    }
    for path, pages in docs_content.items():
        if path.suffix == ".pdf":
            path.write_bytes(make_pdf(pages))
        else:
            path.write_text("not a pdf", encoding="utf-8")

    folders["out"] = tmp_path / "out"
    folders["out"].mkdir()
    return folders
