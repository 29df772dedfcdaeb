from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import streamlit as st

from src.annotation_utils import AnnotationSession, KeyBindings
from src.data_utils import AnnotationConfig, ValidationResult

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionKeys:
    session: str = "session"
    session_rev: str = "session_rev"  # bumped on every successful load
    location: str = "location"
    location_input: str = "location_input"  # load form text field
    dropped_rows: str = "dropped_rows"
    total_rows: str = "total_rows"
    loading: str = "loading"
    load_error: str = "load_error"

    # UI
    scroll_to: str = "scroll_to"  # position to bring into view on next render
    config: str = "annotation_config"
    bindings: str = "key_bindings"


KEYS = SessionKeys()


def ensure_state() -> None:
    """Initialize Streamlit session_state keys safely (idempotent)."""
    defaults: dict[str, Any] = {
        KEYS.session: None,
        KEYS.session_rev: 0,
        KEYS.location: "",
        KEYS.dropped_rows: 0,
        KEYS.total_rows: 0,
        KEYS.loading: False,
        KEYS.load_error: "",
        KEYS.scroll_to: None,
        KEYS.config: AnnotationConfig(),
        KEYS.bindings: KeyBindings(),
    }
    for k, v in defaults.items():
        if k not in st.session_state:
            st.session_state[k] = v


def get_session() -> Optional[AnnotationSession]:
    return st.session_state.get(KEYS.session)


def get_config() -> AnnotationConfig:
    return st.session_state.get(KEYS.config) or AnnotationConfig()


def get_bindings() -> KeyBindings:
    return st.session_state.get(KEYS.bindings) or KeyBindings()


def _request_scroll(index: int) -> None:
    st.session_state[KEYS.scroll_to] = index


def set_session(result: ValidationResult, *, location: str) -> AnnotationSession:
    """Replace the current session; earlier ratings and focus are discarded."""
    session = AnnotationSession(
        result.records,
        bindings=get_bindings(),
        on_focus_change=_request_scroll,
    )
    previous = get_session()
    if previous is not None:
        log.info("Replacing session of %d records (%d rated)", len(previous), previous.rated_count)
    st.session_state[KEYS.session] = session
    st.session_state[KEYS.location] = location
    st.session_state[KEYS.dropped_rows] = result.dropped
    st.session_state[KEYS.total_rows] = result.total_rows
    st.session_state[KEYS.load_error] = ""
    st.session_state[KEYS.scroll_to] = None
    st.session_state[KEYS.session_rev] = int(st.session_state.get(KEYS.session_rev, 0)) + 1
    return session


def set_load_error(msg: str) -> None:
    st.session_state[KEYS.load_error] = msg


def get_load_error() -> str:
    return str(st.session_state.get(KEYS.load_error, ""))


def begin_load() -> None:
    st.session_state[KEYS.loading] = True
    st.session_state[KEYS.load_error] = ""


def end_load() -> None:
    st.session_state[KEYS.loading] = False


def is_loading() -> bool:
    return bool(st.session_state.get(KEYS.loading, False))


def pop_scroll_target() -> Optional[int]:
    target = st.session_state.get(KEYS.scroll_to)
    st.session_state[KEYS.scroll_to] = None
    return target


def get_session_rev() -> int:
    return int(st.session_state.get(KEYS.session_rev, 0))
