from __future__ import annotations

import io
import logging
import requests
import pandas as pd
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping
from urllib.parse import urlparse
from urllib.request import url2pathname

log = logging.getLogger(__name__)

# fetch() exposes a null body for these
_NO_BODY_STATUS = {204, 205}


@dataclass(frozen=True)
class AnnotationConfig:
    id_col: str = "id"
    text_col: str = "text"
    request_timeout: float = 30.0
    encoding: str = "utf-8-sig"


@dataclass(frozen=True)
class CorpusRecord:
    id: str
    text: str


@dataclass(frozen=True)
class ValidationResult:
    records: tuple[CorpusRecord, ...]
    total_rows: int
    dropped: int

    @property
    def ok(self) -> bool:
        return self.dropped == 0


class RetrievalError(Exception):
    """The corpus could not be retrieved (transport failure, bad status, no body)."""

    def __init__(self, message: str, *, location: str = "") -> None:
        super().__init__(message)
        self.location = location


def is_corpus_record(row: Any, *, config: AnnotationConfig = AnnotationConfig()) -> bool:
    if not isinstance(row, Mapping):
        return False
    rid = row.get(config.id_col)
    text = row.get(config.text_col)
    return isinstance(rid, str) and isinstance(text, str) and bool(rid) and bool(text)


def validate_rows(
    rows: Iterable[Any],
    *,
    config: AnnotationConfig = AnnotationConfig(),
) -> ValidationResult:
    """
    Keep rows carrying a non-empty string id and text, in input order.

    Everything else is dropped and only counted; extra columns are ignored.
    """
    records: list[CorpusRecord] = []
    seen = 0
    for row in rows:
        seen += 1
        if is_corpus_record(row, config=config):
            records.append(CorpusRecord(id=row[config.id_col], text=row[config.text_col]))
    return ValidationResult(tuple(records), seen, seen - len(records))


def parse_table(text: str) -> list[dict[str, Any]]:
    """
    Parse header-bearing CSV text into row mappings.

    Cells are kept as str. Short rows get NaN for missing cells, extra cells
    past the header are ignored and unparseable lines are skipped. A document
    pandas cannot read at all parses to no rows.
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    if not text.strip():
        return []

    try:
        df = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            index_col=False,
            on_bad_lines="skip",
        )
    except pd.errors.EmptyDataError:
        return []
    except pd.errors.ParserError as e:
        log.warning("Could not parse corpus table: %s", e)
        return []
    return df.to_dict(orient="records")


def _read_local(location: str, scheme: str) -> bytes:
    path = url2pathname(urlparse(location).path) if scheme == "file" else location
    p = Path(path).expanduser()
    if not p.exists():
        raise RetrievalError(f"File not found: {path}", location=location)
    if p.is_dir():
        raise RetrievalError(f"Path is a directory: {path}", location=location)
    try:
        return p.read_bytes()
    except OSError as e:
        raise RetrievalError(str(e), location=location) from e


def fetch_text(
    location: str,
    *,
    timeout: float = 30.0,
    encoding: str = "utf-8-sig",
) -> str:
    """
    Retrieve the raw corpus text from an http(s) URL, a file:// URL or a
    server-side path.
    """
    if not location or not isinstance(location, str) or not location.strip():
        raise RetrievalError("Location is empty", location=str(location or ""))
    location = location.strip()

    scheme = urlparse(location).scheme.lower()
    if scheme in {"http", "https"}:
        try:
            response = requests.get(location, timeout=timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise RetrievalError(str(e) or type(e).__name__, location=location) from e
        if response.status_code in _NO_BODY_STATUS:
            raise RetrievalError("No response body", location=location)
        data = response.content
    elif scheme == "file" or len(scheme) <= 1:
        # single-letter schemes are Windows drive letters
        data = _read_local(location, scheme)
    else:
        raise RetrievalError(f"Unsupported scheme: {scheme}", location=location)

    try:
        return data.decode(encoding)
    except UnicodeDecodeError as e:
        raise RetrievalError(f"Response is not valid {encoding} text", location=location) from e


def load_corpus(location: str, *, config: AnnotationConfig = AnnotationConfig()) -> ValidationResult:
    """Fetch, parse and validate a corpus. Raises RetrievalError only."""
    log.info("Loading corpus from %s", location)
    text = fetch_text(location, timeout=config.request_timeout, encoding=config.encoding)
    result = validate_rows(parse_table(text), config=config)
    if result.dropped:
        log.warning(
            "Dropped %d of %d rows without a non-empty %r/%r",
            result.dropped, result.total_rows, config.id_col, config.text_col,
        )
    log.info("Corpus loaded: records=%d dropped=%d", len(result.records), result.dropped)
    return result
