from __future__ import annotations

import io
import logging
import re
from typing import Iterable, List, Optional

import pandas as pd
import requests

from .config import WriteupConfig
from .exceptions import DataSourceError, SchemaError

CANONICAL_COLUMNS = {
    "species": ["species"],
    "id": ["id"],
    "name": ["name"],
    "sex": ["sex"],
    "accuracy": ["accuracy"],
    "birth_year": ["birthYear", "birth_year"],
    "acquisition": ["acquisition"],
    "origin_date": ["originDate", "origin_date"],
    "origin_location": ["originLocation", "origin_location"],
    "transfers": ["transfers"],
    "currently": ["currently"],
    "region": ["region"],
    "status": ["status"],
    "status_date": ["statusDate", "status_date"],
}
REQUIRED_COLUMNS = ["species", "sex", "acquisition", "origin_date", "status", "status_date"]

START_MARKER_RE = re.compile(r"^\*\*\* ?START OF (THE|THIS) PROJECT GUTENBERG", re.IGNORECASE)
END_MARKER_RE = re.compile(r"^\*\*\* ?END OF (THE|THIS) PROJECT GUTENBERG", re.IGNORECASE)


def _choose_column(df: pd.DataFrame, candidates: Iterable[str]) -> Optional[str]:
    for name in candidates:
        if name in df.columns:
            return name
    return None


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def fetch_text(url: str, timeout: float) -> str:
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise DataSourceError(url, str(exc)) from exc
    return response.text


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    renamed = {}
    for canonical, options in CANONICAL_COLUMNS.items():
        col = _choose_column(df, options)
        if col:
            renamed[col] = canonical
    normalized = df.rename(columns=renamed)
    missing_required = [c for c in REQUIRED_COLUMNS if c not in normalized.columns]
    if missing_required:
        raise SchemaError(f"Cetacean data is missing columns: {', '.join(missing_required)}")
    for m in CANONICAL_COLUMNS:
        if m not in normalized.columns:
            normalized[m] = None
    return normalized[list(CANONICAL_COLUMNS.keys())]


def load_cetaceans(source: str, timeout: float = 60.0) -> pd.DataFrame:
    """Load the cetacean CSV from a URL or a local path."""
    if _is_url(source):
        df = pd.read_csv(io.StringIO(fetch_text(source, timeout)))
    else:
        try:
            df = pd.read_csv(source)
        except OSError as exc:
            raise DataSourceError(source, str(exc)) from exc
    logging.info("Loaded cetacean dataset with %d rows", len(df))
    return normalize_columns(df)


def strip_gutenberg_boilerplate(text: str) -> List[str]:
    """Return the body lines between the Project Gutenberg start/end markers."""
    lines = text.splitlines()
    start, end = 0, len(lines)
    for i, line in enumerate(lines):
        if START_MARKER_RE.match(line.strip()):
            start = i + 1
            break
    for i in range(len(lines) - 1, start - 1, -1):
        if END_MARKER_RE.match(lines[i].strip()):
            end = i
            break
    return lines[start:end]


def fetch_gutenberg_text(book_id: int, config: WriteupConfig) -> List[str]:
    url = config.gutenberg_mirror.format(book_id=book_id)
    body = strip_gutenberg_boilerplate(fetch_text(url, config.request_timeout))
    logging.info("Downloaded Gutenberg book %d (%d lines)", book_id, len(body))
    return body


def load_letters(config: WriteupConfig) -> pd.DataFrame:
    rows = []
    for book_id in config.gutenberg_ids:
        for line_no, text in enumerate(fetch_gutenberg_text(book_id, config), start=1):
            rows.append({"book_id": book_id, "line": line_no, "text": text})
    lines = pd.DataFrame(rows, columns=["book_id", "line", "text"])
    logging.info("Loaded %d lines from %d documents", len(lines), len(config.gutenberg_ids))
    return lines
