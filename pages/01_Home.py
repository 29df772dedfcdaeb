from __future__ import annotations

import logging

import streamlit as st

st.set_page_config(page_title="Home - Ask-LLM Annotation Helper", layout="wide", initial_sidebar_state="expanded")

from src import data_utils, ui_utils
from src.state import (
    KEYS,
    begin_load,
    end_load,
    ensure_state,
    get_config,
    get_load_error,
    get_session,
    is_loading,
    set_load_error,
    set_session,
)

log = logging.getLogger(__name__)

ui_utils.load_app_style()


def _on_submit() -> None:
    """Submit callback: fetch and swap the session before the page reruns."""
    location = str(st.session_state.get(KEYS.location_input, ""))
    if is_loading():
        return
    begin_load()
    try:
        result = data_utils.load_corpus(location, config=get_config())
    except data_utils.RetrievalError as e:
        log.warning("Corpus retrieval failed for %s: %s", location, e)
        set_load_error(str(e))
        return
    finally:
        end_load()
    set_session(result, location=location)


def _render_load_panel() -> None:
    loading = is_loading()
    with st.form("corpus-load-form"):
        st.text_input(
            "CSV ファイルの URL / パス",
            placeholder="https://example.com/corpus.csv",
            key=KEYS.location_input,
        )
        st.form_submit_button(
            "Loading..." if loading else "Load",
            type="primary",
            disabled=loading,
            on_click=_on_submit,
        )

    err = get_load_error()
    if err:
        ui_utils.render_errors([err])


def _render_overview() -> None:
    session = get_session()
    if session is None:
        st.info("CSV の URL を入力して Load をクリックしてください。")
        return

    dropped = int(st.session_state.get(KEYS.dropped_rows, 0))
    total = int(st.session_state.get(KEYS.total_rows, 0))

    c1, c2, c3 = st.columns(3)
    c1.metric("レコード数", f"{len(session):,}")
    c2.metric("採点済み", f"{session.rated_count:,}")
    c3.metric("除外された行", f"{dropped:,}")

    if dropped:
        cfg = get_config()
        ui_utils.render_warnings([
            f"{total:,} 行中 {dropped:,} 行は `{cfg.id_col}` / `{cfg.text_col}` が空または不正なため除外されました。"
        ])
    if session.is_empty:
        st.warning("有効なレコードがありません。")
    else:
        st.success("左のメニューから **Annotation** ページに進んでください。")


def main() -> None:
    ensure_state()
    st.title("Home：CSV の読み込み")
    st.caption("新しい CSV を読み込むと、現在の点数はすべて破棄されます。")
    _render_load_panel()
    _render_overview()


if __name__ == "__main__":
    main()
