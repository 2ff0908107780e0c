from __future__ import annotations

import logging
import re
from typing import Iterable

import pandas as pd

from .config import WriteupConfig

TOKEN_RE = re.compile(r"[\w']+")
YEAR_PATTERN = r"^\d{4}$"
ALPHA_PATTERN = r"^[a-z]+$"


def normalize_token(token: str) -> str:
    return token.strip().strip("'_").lower()


def tokenize_lines(lines: pd.DataFrame) -> pd.DataFrame:
    """One row per token, keeping document and line order."""
    tokens = lines[["book_id", "line"]].copy()
    tokens["word"] = lines["text"].fillna("").str.lower().str.findall(TOKEN_RE)
    tokens = tokens.explode("word").dropna(subset=["word"])
    tokens["word"] = tokens["word"].map(normalize_token)
    tokens = tokens[tokens["word"] != ""].reset_index(drop=True)
    logging.info("Tokenized %d lines into %d tokens", len(lines), len(tokens))
    return tokens


def assign_years(tokens: pd.DataFrame, config: WriteupConfig) -> pd.DataFrame:
    """Forward-fill each token's year from the nearest preceding year token.

    Year tokens are 4-digit numbers inside ``[min_year, max_year]``; the fill
    does not cross document boundaries and tokens before the first year in a
    document are dropped.
    """
    dated = tokens.copy()
    is_year = dated["word"].str.match(YEAR_PATTERN)
    candidate = pd.to_numeric(dated["word"].where(is_year), errors="coerce")
    in_window = candidate.between(config.min_year, config.max_year)
    dated["year"] = candidate.where(in_window)
    dated["year"] = dated.groupby("book_id")["year"].ffill()
    undated = dated["year"].isna()
    if undated.any():
        logging.info("Dropping %d tokens that precede any year marker", int(undated.sum()))
    dated = dated[~undated].copy()
    dated["year"] = dated["year"].astype(int)
    return dated.reset_index(drop=True)


def remove_stop_words(tokens: pd.DataFrame, stop_words: Iterable[str]) -> pd.DataFrame:
    stop = {w.lower() for w in stop_words}
    alphabetic = tokens["word"].str.match(ALPHA_PATTERN)
    keep = alphabetic & ~tokens["word"].isin(stop)
    logging.info(
        "Removed %d non-alphabetic and %d stop word tokens",
        int((~alphabetic).sum()),
        int((alphabetic & ~keep).sum()),
    )
    return tokens[keep].reset_index(drop=True)


def word_frequencies(words: pd.DataFrame, top_n: int = 20) -> pd.DataFrame:
    counts = words["word"].value_counts().rename_axis("word").reset_index(name="n")
    counts["share"] = counts["n"] / counts["n"].sum()
    return counts.head(top_n)


def prepare_words(lines: pd.DataFrame, stop_words: Iterable[str], config: WriteupConfig) -> pd.DataFrame:
    tokens = tokenize_lines(lines)
    dated = assign_years(tokens, config)
    words = remove_stop_words(dated, stop_words)
    path = config.output_path("lincoln_words.parquet")
    words.to_parquet(path, index=False)
    logging.info("Prepared %d dated words spanning %s", len(words), _year_span(words))
    return words


def _year_span(words: pd.DataFrame) -> str:
    if words.empty:
        return "no years"
    return f"{words['year'].min()}-{words['year'].max()}"
