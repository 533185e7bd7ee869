from __future__ import annotations

import streamlit as st

from pdf_folder_merger.adapters.pymupdf_adapter import PyMuPdfAdapter
from pdf_folder_merger.domain.models import DeliveryMode, MergeOutcome, RunStatus, SlotId
from pdf_folder_merger.infrastructure.config import AppConfig
from pdf_folder_merger.services.merge_executor import MergeExecutor
from pdf_folder_merger.services.merge_service import MergeService, MergeSession
from pdf_folder_merger.services.source_registry_service import SourceRegistryService


def _init_services() -> tuple[AppConfig, MergeService]:
    config = AppConfig()
    adapter = PyMuPdfAdapter()
    registry_service = SourceRegistryService(config)
    merge_service = MergeService(MergeExecutor(adapter), registry_service, config)
    return config, merge_service


def _init_state() -> None:
    st.session_state.setdefault("merge_session", MergeSession())
    st.session_state.setdefault("last_outcome", None)
    st.session_state.setdefault("slot_uploader_token", 0)


def _slot_section(config: AppConfig, merge_service: MergeService, session: MergeSession) -> None:
    for slot_id in SlotId:
        slot = session.registry.slot(slot_id)
        uploaded = st.file_uploader(
            f"{slot.label} (max {config.max_pdf_size_mb} MB each)",
            type=["pdf"],
            accept_multiple_files=True,
            key=f"slot_{slot_id.value}_{st.session_state.slot_uploader_token}",
            disabled=session.is_processing,
        )
        if uploaded:
            try:
                files = [(item.name, item.getvalue()) for item in uploaded]
                merge_service.select_sources(session, slot_id, files)
            except Exception as exc:
                st.error(str(exc))
        elif slot.sources:
            merge_service.clear_slot(session, slot_id)

        slot = session.registry.slot(slot_id)
        summary_col, count_col = st.columns([4, 1])
        summary_col.caption(slot.display_summary)
        if slot.sources:
            count_col.caption(f"{len(slot.sources)} PDFs")


def _destination_section(
    config: AppConfig, merge_service: MergeService, session: MergeSession
) -> None:
    st.subheader("Output", anchor=False)
    if not config.allow_directory_output:
        st.caption("The merged PDF will be offered for download.")
        return

    path_col, button_col = st.columns([3, 1])
    with path_col:
        raw_path = st.text_input(
            "Output folder (optional)",
            value=config.default_output_dir or "",
            key=f"output_dir_{st.session_state.slot_uploader_token}",
            placeholder="Leave empty to download the merged PDF",
        )
    with button_col:
        st.write("")
        if st.button("Use Output Folder", use_container_width=True):
            try:
                merge_service.select_destination(session, raw_path)
            except Exception as exc:
                st.error(str(exc))

    if session.destination is not None:
        st.caption(f"Saving to: {session.destination}")
    else:
        st.caption("No output folder selected; the merged PDF will be offered for download.")


def _render_outcome(outcome: MergeOutcome | None) -> None:
    if outcome is None:
        return
    if outcome.status == RunStatus.ERROR:
        st.error(outcome.error_message or "An error occurred during merging.")
        return

    delivery = outcome.delivery
    if delivery is None:
        return
    if delivery.mode == DeliveryMode.PERSISTED:
        st.success(
            f"Saved {delivery.output_name} ({outcome.merged_pages} pages) to {delivery.path}"
        )
        return

    st.success(f"Merged {outcome.merged_pages} pages into {delivery.output_name}")
    st.download_button(
        "Download Merged File",
        data=delivery.payload or b"",
        file_name=delivery.output_name,
        mime=delivery.media_type,
        type="primary",
        use_container_width=True,
    )


def main() -> None:
    st.set_page_config(page_title="PDF Folder Merger", layout="centered")
    st.title("PDF Folder Merger", anchor=False)
    st.caption(
        "Each set opens with page 1 of File A, then all of File B, "
        "then page 2 of File A, then all of File C."
    )

    config, merge_service = _init_services()
    _init_state()
    session: MergeSession = st.session_state.merge_session

    _slot_section(config, merge_service, session)
    _destination_section(config, merge_service, session)

    session.merge_all = st.checkbox(
        "Merge all sets into one PDF",
        value=True,
        key=f"merge_all_{st.session_state.slot_uploader_token}",
        help="When unchecked, each set is saved as its own PDF inside a ZIP archive.",
    )

    progress_bar = st.progress(session.run_state.progress)

    merge_col, reset_col = st.columns([3, 1])
    with merge_col:
        if st.button(
            "Merge PDFs",
            type="primary",
            disabled=not session.can_run,
            use_container_width=True,
        ):
            st.session_state.last_outcome = merge_service.run(
                session,
                observer=lambda progress, _status: progress_bar.progress(progress),
            )
    with reset_col:
        if st.button("Reset", disabled=session.is_processing, use_container_width=True):
            merge_service.reset(session)
            st.session_state.last_outcome = None
            st.session_state.slot_uploader_token += 1
            st.rerun()

    _render_outcome(st.session_state.last_outcome)


if __name__ == "__main__":
    main()
