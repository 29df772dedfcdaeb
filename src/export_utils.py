from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

from src.data_utils import CorpusRecord

# Spreadsheet row 1 holds the CSV header
FIRST_DATA_ROW = 2


@dataclass(frozen=True)
class ExportResult:
    text: str
    unrated: tuple[str, ...]
    total: int

    @property
    def rated_count(self) -> int:
        return self.total - len(self.unrated)

    @property
    def complete(self) -> bool:
        return len(self.unrated) == 0


def serialize(records: Sequence[CorpusRecord], ratings: Mapping[int, int]) -> ExportResult:
    """
    Project ratings back onto corpus order.

    One line per record, blank for unrated positions, so the text pastes into
    a fixed column range row for row. A falsy rating counts as unrated.
    """
    lines: list[str] = []
    unrated: list[str] = []
    for i, rec in enumerate(records):
        value = ratings.get(i)
        if value:
            lines.append(str(value))
        else:
            lines.append("")
            unrated.append(rec.id)
    return ExportResult("\n".join(lines), tuple(unrated), len(records))


def format_unrated(unrated: Sequence[str]) -> str:
    return ", ".join(f"ID: {rid}" for rid in unrated)


def row_number(index: int) -> int:
    return index + FIRST_DATA_ROW
