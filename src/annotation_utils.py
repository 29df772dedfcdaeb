"""
Annotation session: the ordered corpus, a single focused record and the
position-keyed ratings.

Every transition is a plain method call; `dispatch` accepts the same
transitions as event objects so Streamlit callbacks, keyboard bridges and
tests all go through one entry point.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Union

from src.data_utils import CorpusRecord

log = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


@dataclass(frozen=True)
class KeyBindings:
    next: str = "j"
    prev: str = "k"
    # key i -> rating i + 1
    ratings: tuple[str, ...] = ("a", "s", "d", "f", "g")

    def __post_init__(self) -> None:
        if len(self.ratings) != MAX_RATING - MIN_RATING + 1:
            raise ValueError(f"Expected {MAX_RATING} rating keys, got {len(self.ratings)}")
        keys = [self.next, self.prev, *self.ratings]
        if any(not isinstance(k, str) or len(k) != 1 for k in keys):
            raise ValueError(f"Key bindings must be single characters: {keys}")
        if len(set(keys)) != len(keys):
            raise ValueError(f"Key bindings must be distinct: {keys}")

    def rating_for(self, key: str) -> Optional[int]:
        if key in self.ratings:
            return self.ratings.index(key) + MIN_RATING
        return None


@dataclass(frozen=True)
class FocusNext:
    pass


@dataclass(frozen=True)
class FocusPrev:
    pass


@dataclass(frozen=True)
class SetFocus:
    index: int


@dataclass(frozen=True)
class Rate:
    index: int
    value: int


@dataclass(frozen=True)
class KeyPress:
    key: str


Event = Union[FocusNext, FocusPrev, SetFocus, Rate, KeyPress]


def check_rating(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Rating must be an int in {MIN_RATING}..{MAX_RATING}: {value!r}")
    if not MIN_RATING <= value <= MAX_RATING:
        raise ValueError(f"Rating out of range {MIN_RATING}..{MAX_RATING}: {value}")
    return value


@dataclass
class AnnotationSession:
    records: tuple[CorpusRecord, ...]
    bindings: KeyBindings = field(default_factory=KeyBindings)
    # scroll-into-view hook, called after keyboard navigation
    on_focus_change: Optional[Callable[[int], None]] = field(default=None, repr=False, compare=False)
    focus: Optional[int] = field(default=None, init=False)
    _ratings: dict[int, int] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self.records = tuple(self.records)
        self.focus = 0 if self.records else None

    def __len__(self) -> int:
        return len(self.records)

    @property
    def is_empty(self) -> bool:
        return len(self.records) == 0

    @property
    def ratings(self) -> Mapping[int, int]:
        return MappingProxyType(self._ratings)

    @property
    def rated_count(self) -> int:
        return len(self._ratings)

    def rating_at(self, index: int) -> Optional[int]:
        return self._ratings.get(index)

    def _check_index(self, index: int) -> int:
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError(f"Index must be an int: {index!r}")
        if not 0 <= index < len(self.records):
            raise IndexError(f"Index {index} out of range for corpus of {len(self.records)}")
        return index

    def _move_focus(self, target: int) -> None:
        self.focus = target
        if self.on_focus_change is not None:
            self.on_focus_change(target)

    def move_focus_next(self) -> None:
        if self.focus is None:
            return
        self._move_focus(min(len(self.records) - 1, self.focus + 1))

    def move_focus_prev(self) -> None:
        if self.focus is None:
            return
        self._move_focus(max(0, self.focus - 1))

    def set_focus(self, index: int) -> None:
        if self.is_empty:
            return
        self.focus = self._check_index(index)

    def rate(self, index: int, value: int) -> None:
        """Record `value` at `index`, replacing any earlier rating there."""
        if self.is_empty:
            return
        self._ratings[self._check_index(index)] = check_rating(value)
        log.debug("Rated position %d = %d", index, value)

    def handle_key(self, key: str) -> bool:
        """
        Apply a keystroke to the session.

        Rating keys rate the record focused at the moment of the call.
        Returns False for keys that are not bound.
        """
        if key == self.bindings.next:
            self.move_focus_next()
            return True
        if key == self.bindings.prev:
            self.move_focus_prev()
            return True
        value = self.bindings.rating_for(key)
        if value is None:
            return False
        if self.focus is not None:
            self.rate(self.focus, value)
        return True

    def dispatch(self, event: Event) -> bool:
        if isinstance(event, FocusNext):
            self.move_focus_next()
        elif isinstance(event, FocusPrev):
            self.move_focus_prev()
        elif isinstance(event, SetFocus):
            self.set_focus(event.index)
        elif isinstance(event, Rate):
            self.rate(event.index, event.value)
        elif isinstance(event, KeyPress):
            return self.handle_key(event.key)
        else:
            raise TypeError(f"Unknown event: {event!r}")
        return True
