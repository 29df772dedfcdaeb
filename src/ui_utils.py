from __future__ import annotations

import html
import json
import os
import streamlit as st
from pathlib import Path
from typing import Callable, Mapping, Optional

from src.annotation_utils import MAX_RATING, MIN_RATING, KeyBindings


def load_css(path: str) -> None:
    if not path or not os.path.exists(path):
        return
    try:
        with open(path, "r", encoding="utf-8") as f:
            css = f.read()
        st.markdown(f"<style>{css}</style>", unsafe_allow_html=True)
    except OSError:
        return


def load_app_style() -> None:
    """
    Load global CSS under repo root `assets/style.css`.

    Important: Call this AFTER `st.set_page_config(...)` in each page.
    """
    root = Path(__file__).resolve().parents[1]
    load_css(str(root / "assets" / "style.css"))


def render_warnings(warnings: list[str]) -> None:
    for w in warnings:
        st.warning(w)


def render_errors(errors: list[str]) -> None:
    for e in errors:
        st.error(e)


def record_anchor(index: int) -> str:
    return f"corpus-record-{index}"


def shortcut_label(text: str, key: str) -> str:
    return f"{text} ({key})"


def rating_labels(bindings: KeyBindings) -> dict[str, str]:
    return {k: shortcut_label("★" * (i + MIN_RATING), k) for i, k in enumerate(bindings.ratings)}


def navigation_labels(bindings: KeyBindings) -> dict[str, str]:
    return {bindings.next: shortcut_label("次へ", bindings.next), bindings.prev: shortcut_label("前へ", bindings.prev)}


def _run_script(body: str) -> None:
    # st.html places the script in the app document itself, not in an iframe
    st.html(f"<script>(function () {{\n{body}\n}})();</script>", unsafe_allow_javascript=True)


def install_keyboard_shortcuts(labels: Mapping[str, str]) -> None:
    """
    Forward single-key presses on the page to the button whose text is
    `labels[key]`. Keys typed into inputs are ignored.

    The listener is replaced on every render so it never holds a stale label map.
    """
    _run_script("""
const keymap = %s;
if (window.__annotationKeyHandler) {
  document.removeEventListener("keydown", window.__annotationKeyHandler);
}
window.__annotationKeyHandler = function (e) {
  const t = e.target;
  if (t && (t.tagName === "INPUT" || t.tagName === "TEXTAREA" || t.isContentEditable)) return;
  if (e.ctrlKey || e.metaKey || e.altKey || e.repeat) return;
  const label = keymap[e.key];
  if (!label) return;
  const btn = Array.from(document.querySelectorAll("button")).find((b) => b.innerText.trim() === label);
  if (btn) {
    e.preventDefault();
    btn.click();
  }
};
document.addEventListener("keydown", window.__annotationKeyHandler);
""" % json.dumps(dict(labels)))


def scroll_into_view(index: Optional[int]) -> None:
    if index is None:
        return
    _run_script("""
const el = document.getElementById(%s);
if (el) { el.scrollIntoView({block: "center"}); }
""" % json.dumps(record_anchor(index)))


def copy_button(text: str, *, label: str = "Copy", done_label: str = "Copied") -> None:
    """Clipboard sink; write failures are ignored."""
    st.html(
        """
<button id="corpus-export-copy" style="padding:0.4rem 1.2rem;">%s</button>
<script>
(function () {
  const payload = %s;
  const btn = document.getElementById("corpus-export-copy");
  if (!btn) return;
  btn.onclick = function () {
    navigator.clipboard.writeText(payload).then(() => { btn.innerText = %s; }).catch(() => {});
  };
})();
</script>
""" % (html.escape(label), json.dumps(text), json.dumps(done_label)),
        unsafe_allow_javascript=True,
    )


def render_record(
    *,
    index: int,
    row: int,
    record_id: str,
    text: str,
    rating: Optional[int],
    focused: bool,
    widget_rev: int,
    on_focus: Callable[[int], None],
    on_rate: Callable[[int, Optional[int]], None],
) -> None:
    st.markdown(f'<div id="{record_anchor(index)}"></div>', unsafe_allow_html=True)
    with st.container(border=True):
        c1, c2 = st.columns([8, 1])
        with c1:
            marker = "▶ " if focused else ""
            st.caption(f"{marker}Row: {row}, ID: {record_id}")
        with c2:
            st.button(
                "選択",
                key=f"focus::{widget_rev}::{index}",
                on_click=on_focus,
                args=(index,),
                disabled=focused,
                width="stretch",
            )
        st.text(text)

        # rating is part of the key so keyboard ratings re-seed the default
        key = f"rate::{widget_rev}::{index}::{rating or 0}"
        st.segmented_control(
            "rating",
            options=list(range(MIN_RATING, MAX_RATING + 1)),
            format_func=lambda v: "★" * v,
            default=rating,
            key=key,
            on_change=lambda: on_rate(index, st.session_state.get(key)),
            label_visibility="collapsed",
        )
