from __future__ import annotations

import logging

import streamlit as st
from src import ui_utils
from src.state import KEYS, ensure_state, get_bindings, get_session


def _render_usage() -> None:
    b = get_bindings()
    rating_keys = ", ".join(f"<kbd>{k}</kbd>" for k in b.ratings)
    st.markdown("### 使い方")
    st.markdown(
        f"""
1. **Home** ページで CSV ファイルの URL（またはサーバー上のパス）を入力して Load をクリックしてください
    - **Annotation** ページに CSV ファイルのテキストが表示されます。
2. テキストごとに点数を付けてください
    - テキストの下部の★ボタンをクリックすると 1〜5 の点数が付けられます。
    - 「選択」をクリックするとそのテキストが選択状態（▶ 印）になります。
      この状態で {rating_keys} のいずれかを押すと、1〜5 の点数が付けられます。
    - <kbd>{b.next}</kbd> / <kbd>{b.prev}</kbd> で選択を次 / 前のテキストに移動できます。
3. 点数をスプレッドシートに転記してください
    1. すべてのテキストに点数を付けたら、ページ最下部の Copy ボタンをクリックしてください。点数がクリップボードにコピーされます。
    2. スプレッドシートの「データ」シートの C2 セルで Ctrl+V を押してください。
""",
        unsafe_allow_html=True,
    )


def main() -> None:
    st.set_page_config(page_title="Ask-LLM Annotation Helper", layout="wide", initial_sidebar_state="expanded")
    ensure_state()
    ui_utils.load_app_style()

    st.title("Ask-LLM Annotation Helper")
    _render_usage()

    st.divider()

    st.markdown("### 現在の状態")
    session = get_session()
    if session is None:
        st.warning("🔴 CSV が未読み込みです：**Home** ページで URL を入力して読み込んでください。")
    else:
        st.success(
            f"🟢 読み込み済み：{len(session):,} 件 | 採点済み {session.rated_count:,} 件 | "
            f"location = `{st.session_state.get(KEYS.location, '')}`"
        )


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
