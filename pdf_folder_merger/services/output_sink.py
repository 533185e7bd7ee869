from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Protocol

from pdf_folder_merger.domain.errors import (
    CapabilityUnsupportedError,
    DeliveryError,
    ValidationError,
)
from pdf_folder_merger.domain.models import DeliveryMode, DeliveryOutcome
from pdf_folder_merger.infrastructure.config import AppConfig
from pdf_folder_merger.infrastructure.logging_setup import get_logger

logger = get_logger(__name__)

PDF_MEDIA_TYPE = "application/pdf"

OfferHook = Callable[[str, bytes, str], None]


class OutputSink(Protocol):
    def deliver(
        self, output_name: str, payload: bytes, media_type: str = PDF_MEDIA_TYPE
    ) -> DeliveryOutcome: ...


class EphemeralSink:
    """Hands the bytes back to the caller for manual retrieval."""

    def __init__(self, offer: OfferHook | None = None) -> None:
        self.offer = offer

    def deliver(
        self, output_name: str, payload: bytes, media_type: str = PDF_MEDIA_TYPE
    ) -> DeliveryOutcome:
        if self.offer is not None:
            self.offer(output_name, payload, media_type)
        return DeliveryOutcome(
            output_name=output_name,
            mode=DeliveryMode.OFFERED,
            media_type=media_type,
            payload=payload,
        )


class DirectorySink:
    """Writes into a chosen folder, falling back to another sink if the write fails."""

    def __init__(self, directory: Path, fallback: OutputSink | None = None) -> None:
        self.directory = directory
        self.fallback: OutputSink = fallback or EphemeralSink()

    def _write(self, output_name: str, payload: bytes) -> Path:
        target = self.directory / Path(output_name).name
        try:
            target.write_bytes(payload)
        except Exception as exc:
            raise DeliveryError(f"Unable to save {target.name} to {self.directory}") from exc
        return target

    def deliver(
        self, output_name: str, payload: bytes, media_type: str = PDF_MEDIA_TYPE
    ) -> DeliveryOutcome:
        try:
            target = self._write(output_name, payload)
        except DeliveryError as exc:
            logger.warning("%s (%s); offering it for download instead", exc, exc.__cause__)
            return self.fallback.deliver(output_name, payload, media_type)

        logger.info("Saved %s", target)
        return DeliveryOutcome(
            output_name=target.name,
            mode=DeliveryMode.PERSISTED,
            media_type=media_type,
            path=target,
        )


def probe_destination(config: AppConfig, raw_path: str | Path | None) -> Path | None:
    if raw_path is None or not str(raw_path).strip():
        return None
    if not config.allow_directory_output:
        raise CapabilityUnsupportedError(
            "Saving to a folder is not supported here. "
            "The merged PDF will be offered for download instead."
        )

    path = Path(str(raw_path).strip()).expanduser()
    if not path.is_dir():
        raise ValidationError(f"Output folder not found: {path}")
    if not os.access(path, os.W_OK):
        raise CapabilityUnsupportedError(
            f"No permission to write into {path}. "
            "The merged PDF will be offered for download instead."
        )
    return path.resolve()


def select_sink(destination: Path | None, offer: OfferHook | None = None) -> OutputSink:
    ephemeral = EphemeralSink(offer)
    if destination is None:
        return ephemeral
    return DirectorySink(destination, fallback=ephemeral)
