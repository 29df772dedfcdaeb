from __future__ import annotations

from typing import Optional

import streamlit as st

st.set_page_config(page_title="Annotation - Ask-LLM Annotation Helper", layout="wide", initial_sidebar_state="expanded")

from src import export_utils, ui_utils
from src.annotation_utils import AnnotationSession
from src.state import ensure_state, get_session, get_session_rev, pop_scroll_target

ui_utils.load_app_style()


# Callbacks look the session up when they fire, never at render time.
def _on_key(key: str) -> None:
    session = get_session()
    if session is not None:
        session.handle_key(key)


def _on_focus(index: int) -> None:
    session = get_session()
    if session is not None:
        session.set_focus(index)


def _on_rate(index: int, value: Optional[int]) -> None:
    session = get_session()
    # a deselected control reports None; ratings are never cleared
    if session is None or value is None:
        return
    session.rate(index, int(value))


def _render_shortcuts(session: AnnotationSession) -> None:
    bindings = session.bindings
    nav = ui_utils.navigation_labels(bindings)
    rates = ui_utils.rating_labels(bindings)

    with st.sidebar:
        st.header("操作")
        if session.focus is not None:
            rec = session.records[session.focus]
            st.caption(f"選択中 Row: {export_utils.row_number(session.focus)}, ID: {rec.id}")
        c1, c2 = st.columns(2)
        c1.button(nav[bindings.prev], key="nav::prev", on_click=_on_key, args=(bindings.prev,), width="stretch")
        c2.button(nav[bindings.next], key="nav::next", on_click=_on_key, args=(bindings.next,), width="stretch")
        for key, label in rates.items():
            st.button(label, key=f"shortcut::{key}", on_click=_on_key, args=(key,), width="stretch")

    ui_utils.install_keyboard_shortcuts({**nav, **rates})


def _render_records(session: AnnotationSession) -> None:
    rev = get_session_rev()
    for i, rec in enumerate(session.records):
        ui_utils.render_record(
            index=i,
            row=export_utils.row_number(i),
            record_id=rec.id,
            text=rec.text,
            rating=session.rating_at(i),
            focused=session.focus == i,
            widget_rev=rev,
            on_focus=_on_focus,
            on_rate=_on_rate,
        )


def _render_export(session: AnnotationSession) -> None:
    export = export_utils.serialize(session.records, session.ratings)

    st.subheader("Export")
    st.progress(
        export.rated_count / max(1, export.total),
        text=f"採点済み {export.rated_count:,} / {export.total:,}",
    )
    if export.unrated:
        st.warning("未入力のデータがあります。\n\n" + export_utils.format_unrated(export.unrated))
    ui_utils.copy_button(export.text)
    with st.expander("コピーされる内容", expanded=False):
        st.code(export.text, language=None)


def main() -> None:
    ensure_state()
    st.title("Annotation")

    session = get_session()
    if session is None:
        st.info("先に Home ページで CSV を読み込んでください。")
        return

    _render_shortcuts(session)
    if session.is_empty:
        st.warning("有効なレコードがありません。")
    else:
        _render_records(session)
    _render_export(session)
    ui_utils.scroll_into_view(pop_scroll_target())


if __name__ == "__main__":
    main()
