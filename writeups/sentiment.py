from __future__ import annotations

import logging
from typing import Dict, List

import nltk
import pandas as pd
from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS

from .config import WriteupConfig


def load_stop_words(config: WriteupConfig) -> List[str]:
    if config.stopwords is not None:
        return sorted({w.lower() for w in config.stopwords})
    return sorted(ENGLISH_STOP_WORDS)


def _opinion_lexicon():
    from nltk.corpus import opinion_lexicon

    try:
        nltk.data.find("corpora/opinion_lexicon")
    except LookupError:
        logging.info("Downloading NLTK opinion lexicon")
        nltk.download("opinion_lexicon", quiet=True)
    return opinion_lexicon


def load_sentiment_lexicon(config: WriteupConfig) -> Dict[str, int]:
    """Word -> polarity mapping; +1 positive, -1 negative."""
    if config.sentiment_lexicon is not None:
        return {w.lower(): int(score) for w, score in config.sentiment_lexicon.items()}
    corpus = _opinion_lexicon()
    lexicon = {w: 1 for w in corpus.positive()}
    lexicon.update({w: -1 for w in corpus.negative()})
    logging.info("Loaded opinion lexicon with %d words", len(lexicon))
    return lexicon


def score_words(words: pd.DataFrame, lexicon: Dict[str, int]) -> pd.DataFrame:
    """Inner join of words against the lexicon, adding score and sentiment.

    Neutral (zero) entries carry no polarity and are dropped.
    """
    scored = words.copy()
    scored["score"] = scored["word"].map(lexicon)
    scored = scored.dropna(subset=["score"])
    scored["score"] = scored["score"].astype(int)
    scored = scored[scored["score"] != 0].copy()
    scored["sentiment"] = scored["score"].map(lambda s: "positive" if s > 0 else "negative")
    return scored.reset_index(drop=True)


def sentiment_by_year(words: pd.DataFrame, lexicon: Dict[str, int]) -> pd.DataFrame:
    totals = words.groupby("year").size().rename("total_words")
    scored = score_words(words, lexicon)
    positive = scored[scored["score"] > 0].groupby("year")["score"].sum().rename("positive")
    negative = (-scored[scored["score"] < 0].groupby("year")["score"].sum()).rename("negative")
    table = pd.concat([totals, positive, negative], axis=1).fillna(0)
    table[["positive", "negative"]] = table[["positive", "negative"]].astype(int)
    table["net"] = table["positive"] - table["negative"]
    table["net_per_1000"] = table["net"] / table["total_words"] * 1000
    table = table.rename_axis("year").reset_index()
    logging.info("Scored sentiment across %d years", len(table))
    return table


def top_sentiment_words(words: pd.DataFrame, lexicon: Dict[str, int], n: int = 10) -> pd.DataFrame:
    scored = score_words(words, lexicon)
    counts = scored.groupby(["sentiment", "word"]).size().reset_index(name="n")
    counts = counts.sort_values(["sentiment", "n", "word"], ascending=[True, False, True])
    return counts.groupby("sentiment").head(n).reset_index(drop=True)
