from __future__ import annotations

import io
import re
import zipfile

from pdf_folder_merger.domain.models import SetArtifact

ZIP_MEDIA_TYPE = "application/zip"


def safe_artifact_name(name: str) -> str:
    clean = name.replace("\\", "/").split("/")[-1]
    clean = re.sub(r"[^A-Za-z0-9._() -]", "_", clean).strip()
    return clean or "artifact.pdf"


def build_zip(artifacts: list[SetArtifact]) -> bytes:
    """Pack per-set PDFs into one archive, in set order.

    Repeated names get a ``(2)``, ``(3)``... suffix before the extension.
    """
    buffer = io.BytesIO()
    used_names: dict[str, int] = {}
    with zipfile.ZipFile(buffer, mode="w", compression=zipfile.ZIP_DEFLATED) as archive:
        for artifact in artifacts:
            safe_name = safe_artifact_name(artifact.output_name)
            stem, dot, extension = safe_name.rpartition(".")
            if not stem:
                stem = safe_name
                dot = ""
                extension = ""
            sequence = used_names.get(safe_name, 0)
            used_names[safe_name] = sequence + 1
            unique_name = safe_name
            if sequence > 0:
                unique_name = f"{stem} ({sequence + 1}){dot}{extension}"
            archive.writestr(unique_name, artifact.output_pdf)
    return buffer.getvalue()
