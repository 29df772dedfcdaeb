"""
Tests for the annotation session state machine.

Run with: pytest tests/test_annotation_utils.py -v
"""

import pytest

from src import annotation_utils
from src.annotation_utils import (
    AnnotationSession,
    FocusNext,
    FocusPrev,
    KeyBindings,
    KeyPress,
    Rate,
    SetFocus,
)
from src.data_utils import CorpusRecord


def _session(n: int = 3, **kwargs) -> AnnotationSession:
    return AnnotationSession(tuple(CorpusRecord(f"r{i}", f"text {i}") for i in range(n)), **kwargs)


class TestFocus:
    """Tests for focus navigation."""

    def test_initial_focus(self):
        """A fresh session focuses the first record."""
        s = _session()
        assert s.focus == 0
        assert dict(s.ratings) == {}

    def test_next_clamps_at_last(self):
        """Moving past the end stays on the last record."""
        s = _session(3)
        for _ in range(10):
            s.move_focus_next()
        assert s.focus == 2

    def test_prev_clamps_at_first(self):
        """Moving before the start stays on the first record."""
        s = _session(3)
        s.move_focus_next()
        for _ in range(5):
            s.move_focus_prev()
        assert s.focus == 0

    def test_set_focus(self):
        """Pointer focus sets the index directly."""
        s = _session(3)
        s.set_focus(2)
        assert s.focus == 2
        with pytest.raises(IndexError):
            s.set_focus(3)

    def test_navigation_reports_focus_change(self):
        """Keyboard navigation calls the scroll hook with the new position."""
        seen = []
        s = _session(2, on_focus_change=seen.append)
        s.move_focus_next()
        s.move_focus_next()
        s.move_focus_prev()
        assert seen == [1, 1, 0]

    def test_navigation_does_not_touch_ratings(self):
        """Moving focus leaves ratings alone."""
        s = _session(3)
        s.rate(0, 4)
        s.move_focus_next()
        s.move_focus_prev()
        assert dict(s.ratings) == {0: 4}


class TestRate:
    """Tests for recording ratings."""

    def test_last_write_wins(self):
        """A second rating replaces the first."""
        s = _session(2)
        s.rate(1, 2)
        s.rate(1, 5)
        assert s.rating_at(1) == 5
        assert s.rated_count == 1

    def test_rating_does_not_move_focus(self):
        """Rating another position keeps the focus where it was."""
        s = _session(3)
        s.rate(2, 3)
        assert s.focus == 0

    @pytest.mark.parametrize("value", [0, 6, -1, 2.5, "3", True, None])
    def test_rejects_out_of_range(self, value):
        """Only ints 1..5 are ratings."""
        s = _session(1)
        with pytest.raises(ValueError):
            s.rate(0, value)
        assert dict(s.ratings) == {}

    def test_rejects_bad_index(self):
        """Ratings are only stored at corpus positions."""
        s = _session(2)
        with pytest.raises(IndexError):
            s.rate(2, 1)
        with pytest.raises(IndexError):
            s.rate(-1, 1)

    def test_ratings_view_is_read_only(self):
        """The exposed mapping cannot be mutated."""
        s = _session(1)
        s.rate(0, 1)
        with pytest.raises(TypeError):
            s.ratings[0] = 3


class TestKeyboard:
    """Tests for keyboard dispatch."""

    def test_rating_keys_map_positionally(self):
        """a s d f g rate the focused record 1..5."""
        s = _session(5)
        for i, key in enumerate("asdfg"):
            s.set_focus(i)
            assert s.handle_key(key)
        assert dict(s.ratings) == {0: 1, 1: 2, 2: 3, 3: 4, 4: 5}

    def test_rating_key_targets_current_focus(self):
        """The focus is read when the key fires."""
        s = _session(3)
        s.handle_key("j")
        s.handle_key("j")
        s.handle_key("d")
        s.handle_key("k")
        s.handle_key("g")
        assert dict(s.ratings) == {2: 3, 1: 5}
        assert s.focus == 1

    def test_unbound_key(self):
        """Unbound keys are ignored."""
        s = _session(2)
        assert not s.handle_key("x")
        assert dict(s.ratings) == {}
        assert s.focus == 0

    def test_custom_bindings(self):
        """Bindings are configurable."""
        s = _session(2, bindings=KeyBindings(next="n", prev="p", ratings=("1", "2", "3", "4", "5")))
        s.handle_key("n")
        s.handle_key("4")
        assert dict(s.ratings) == {1: 4}

    def test_invalid_bindings(self):
        """Bindings must be five distinct single characters plus navigation."""
        with pytest.raises(ValueError):
            KeyBindings(ratings=("a", "s", "d"))
        with pytest.raises(ValueError):
            KeyBindings(next="a")
        with pytest.raises(ValueError):
            KeyBindings(prev="kk")


class TestEmptyCorpus:
    """Tests for a session with nothing to annotate."""

    def test_everything_is_a_noop(self):
        """Navigation, rating and keys do nothing and raise nothing."""
        seen = []
        s = _session(0, on_focus_change=seen.append)
        assert s.is_empty
        assert s.focus is None

        s.move_focus_next()
        s.move_focus_prev()
        s.set_focus(0)
        s.rate(0, 3)
        for key in "jkasdfg":
            assert s.handle_key(key)

        assert s.focus is None
        assert dict(s.ratings) == {}
        assert seen == []


class TestDispatch:
    """Tests for event dispatch."""

    def test_events_drive_transitions(self):
        """Each event maps onto its method."""
        s = _session(3)
        s.dispatch(FocusNext())
        s.dispatch(FocusNext())
        s.dispatch(FocusPrev())
        assert s.focus == 1
        s.dispatch(SetFocus(2))
        s.dispatch(Rate(0, 4))
        assert s.dispatch(KeyPress("s"))
        assert dict(s.ratings) == {0: 4, 2: 2}

    def test_unknown_event(self):
        """Unknown events are rejected."""
        with pytest.raises(TypeError):
            _session().dispatch("j")


class TestModule:
    """Tests for module metadata."""

    def test_module_docstring(self):
        """The module description is the module docstring, not a stray string."""
        assert annotation_utils.__doc__
        assert annotation_utils.__doc__.strip().startswith("Annotation session")
