from __future__ import annotations

import argparse
import json
import pathlib
import uuid
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional

CETACEAN_CSV_URL = (
    "https://raw.githubusercontent.com/the-pudding/data/master/cetaceans/allCetaceanData.csv"
)
GUTENBERG_MIRROR = "https://www.gutenberg.org/cache/epub/{book_id}/pg{book_id}.txt"


def _default_gutenberg_ids() -> List[int]:
    # The Papers And Writings Of Abraham Lincoln, volumes 1-7
    return list(range(2653, 2660))


@dataclass
class WriteupConfig:
    """Settings shared by both write-ups."""

    command: str
    output_dir: str = "outputs"
    cetacean_source: str = CETACEAN_CSV_URL
    reference_date: str = "2017-05-07"
    confidence_level: float = 0.95
    min_group_size: int = 10
    top_species: int = 5
    cox_penalizer: float = 0.01
    gutenberg_ids: List[int] = field(default_factory=_default_gutenberg_ids)
    gutenberg_mirror: str = GUTENBERG_MIRROR
    min_year: int = 1809
    max_year: int = 1865
    min_word_count: int = 100
    top_words: int = 20
    trend_alpha: float = 0.05
    stopwords: Optional[List[str]] = None
    sentiment_lexicon: Optional[Dict[str, int]] = None
    request_timeout: float = 60.0
    verbose: bool = False
    run_id: Optional[str] = None

    @classmethod
    def from_args(cls, args: Optional[List[str]] = None) -> "WriteupConfig":
        parser = argparse.ArgumentParser(description="Render the analysis write-ups.")
        parser.add_argument(
            "--output-dir",
            default="outputs",
            help="Directory for run artifacts (default: outputs)",
        )
        parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level")
        sub = parser.add_subparsers(dest="command", required=True)

        cet = sub.add_parser("cetaceans", help="Captive cetacean mortality analysis")
        cet.add_argument(
            "--source",
            dest="cetacean_source",
            default=CETACEAN_CSV_URL,
            help="CSV URL or local path of the cetacean dataset",
        )
        cet.add_argument(
            "--reference-date",
            default="2017-05-07",
            help="Censoring date for animals that have not died (YYYY-MM-DD)",
        )
        cet.add_argument(
            "--confidence-level",
            type=float,
            default=0.95,
            help="Confidence level for lifespan intervals",
        )
        cet.add_argument(
            "--min-group-size",
            type=int,
            default=10,
            help="Smallest group reported in lifespan summaries and survival curves",
        )
        cet.add_argument(
            "--top-species",
            type=int,
            default=5,
            help="Species kept as separate Cox covariates; the rest become Other",
        )
        cet.add_argument(
            "--cox-penalizer",
            type=float,
            default=0.01,
            help="L2 penalizer passed to the Cox model",
        )

        lin = sub.add_parser("lincoln", help="Lincoln letters word analysis")
        lin.add_argument(
            "--book-id",
            dest="gutenberg_ids",
            type=int,
            action="append",
            help="Project Gutenberg e-book id (repeatable; default: volumes 2653-2659)",
        )
        lin.add_argument(
            "--mirror",
            dest="gutenberg_mirror",
            default=GUTENBERG_MIRROR,
            help="URL template with a {book_id} placeholder",
        )
        lin.add_argument("--min-year", type=int, default=1809)
        lin.add_argument("--max-year", type=int, default=1865)
        lin.add_argument(
            "--min-word-count",
            type=int,
            default=100,
            help="Minimum total occurrences before a word's trend is modelled",
        )
        lin.add_argument("--top-words", type=int, default=20)
        lin.add_argument(
            "--trend-alpha",
            type=float,
            default=0.05,
            help="Significance level on Holm-adjusted p-values",
        )
        lin.add_argument(
            "--stopwords-file",
            help="Newline separated stop word list (default: scikit-learn English list)",
        )
        lin.add_argument(
            "--lexicon-file",
            help="CSV with word,score columns (default: NLTK opinion lexicon)",
        )
        parsed = parser.parse_args(args=args)

        config = cls(
            command=parsed.command,
            output_dir=parsed.output_dir,
            verbose=parsed.verbose,
        )
        if parsed.command == "cetaceans":
            config.cetacean_source = parsed.cetacean_source
            config.reference_date = parsed.reference_date
            config.confidence_level = parsed.confidence_level
            config.min_group_size = parsed.min_group_size
            config.top_species = parsed.top_species
            config.cox_penalizer = parsed.cox_penalizer
        else:
            if parsed.gutenberg_ids:
                config.gutenberg_ids = parsed.gutenberg_ids
            config.gutenberg_mirror = parsed.gutenberg_mirror
            config.min_year = parsed.min_year
            config.max_year = parsed.max_year
            config.min_word_count = parsed.min_word_count
            config.top_words = parsed.top_words
            config.trend_alpha = parsed.trend_alpha
            if parsed.stopwords_file:
                config.stopwords = _read_word_list(parsed.stopwords_file)
            if parsed.lexicon_file:
                config.sentiment_lexicon = _read_lexicon(parsed.lexicon_file)
        return config

    def ensure_run_id(self) -> str:
        if not self.run_id:
            self.run_id = str(uuid.uuid4())
        return self.run_id

    def output_path(self, *parts: str) -> pathlib.Path:
        path = pathlib.Path(self.output_dir).joinpath(*parts)
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    def to_json(self) -> str:
        return json.dumps(asdict(self), indent=2, sort_keys=True)


def _read_word_list(path: str) -> List[str]:
    text = pathlib.Path(path).read_text(encoding="utf-8")
    return [line.strip().lower() for line in text.splitlines() if line.strip()]


def _read_lexicon(path: str) -> Dict[str, int]:
    lexicon: Dict[str, int] = {}
    for line in pathlib.Path(path).read_text(encoding="utf-8").splitlines():
        if not line.strip() or line.startswith("word,"):
            continue
        word, score = line.rsplit(",", 1)
        lexicon[word.strip().lower()] = int(score)
    return lexicon


def save_config_snapshot(config: WriteupConfig) -> None:
    path = config.output_path("config_snapshot.json")
    path.write_text(config.to_json())
