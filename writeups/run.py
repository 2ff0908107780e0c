from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Dict

from . import plots
from .cetaceans import clean_cetaceans
from .config import WriteupConfig
from .exceptions import InsufficientDataError, WriteupError
from .ingest import load_cetaceans, load_letters
from .letters import prepare_words, word_frequencies
from .manifest import write_manifest
from .report import cetacean_report, lincoln_report
from .sentiment import (
    load_sentiment_lexicon,
    load_stop_words,
    sentiment_by_year,
    top_sentiment_words,
)
from .summaries import compare_lifespans, count_table, group_summary, write_table
from .survival import cox_model, kaplan_meier, logrank
from .trends import significant_trends, word_shares, word_trends

COX_COVARIATES = ["acquisition", "sex", "species", "seaworld"]


def run_cetaceans(config: WriteupConfig) -> Dict[str, Path]:
    raw = load_cetaceans(config.cetacean_source, timeout=config.request_timeout)
    cleaned = clean_cetaceans(raw, config)
    artifacts: Dict[str, Path] = {}
    figures: Dict[str, Path] = {}
    results: Dict = {}

    results["acquisition_counts"] = count_table(cleaned, "acquisition")
    artifacts["acquisition_counts"] = write_table(results["acquisition_counts"], config, "acquisition_counts.csv")
    species = group_summary(cleaned, "species", "lifespan", config, min_size=config.min_group_size)
    results["species_lifespans"] = species
    artifacts["species_lifespans"] = write_table(species, config, "species_lifespans.csv")
    figures["species_lifespans"] = plots.lifespan_bars(
        species, "species", config.output_path("figures", "species_lifespans.png")
    )

    try:
        results["ttest"] = compare_lifespans(cleaned, "acquisition", "Born", "Capture")
    except InsufficientDataError as exc:
        logging.warning("Skipping born vs captured comparison: %s", exc)

    curves, medians = kaplan_meier(cleaned, "acquisition", config)
    results["km_medians"] = medians
    artifacts["km_acquisition"] = write_table(curves, config, "km_acquisition.csv")
    figures["km_acquisition"] = plots.survival_curves(
        curves, "Survival by acquisition", config.output_path("figures", "km_acquisition.png")
    )
    if len(medians) > 1:
        modelled = cleaned[cleaned["acquisition"].isin(medians["group"])]
        results["logrank"] = logrank(modelled, "acquisition")

    seaworld = cleaned.assign(seaworld=cleaned["seaworld"].map({True: "SeaWorld", False: "Other"}))
    sw_curves, _ = kaplan_meier(seaworld, "seaworld", config)
    figures["km_seaworld"] = plots.survival_curves(
        sw_curves, "Survival by SeaWorld affiliation", config.output_path("figures", "km_seaworld.png")
    )

    try:
        hazards, concordance = cox_model(cleaned, COX_COVARIATES, config)
    except InsufficientDataError as exc:
        logging.warning("Skipping Cox model: %s", exc)
    else:
        results["hazards"] = hazards
        results["concordance"] = concordance
        artifacts["hazards"] = write_table(hazards, config, "cox_hazard_ratios.csv")
        figures["hazards"] = plots.hazard_forest(hazards, config.output_path("figures", "cox_hazards.png"))

    artifacts["report"] = cetacean_report(cleaned, results, figures, config)
    artifacts.update(figures)
    artifacts["manifest"] = write_manifest(config, {"cetaceans": cleaned}, artifacts)
    return artifacts


def run_lincoln(config: WriteupConfig) -> Dict[str, Path]:
    lines = load_letters(config)
    words = prepare_words(lines, load_stop_words(config), config)
    lexicon = load_sentiment_lexicon(config)
    artifacts: Dict[str, Path] = {}
    figures: Dict[str, Path] = {}
    results: Dict = {}

    results["frequencies"] = word_frequencies(words, config.top_words)
    artifacts["frequencies"] = write_table(results["frequencies"], config, "word_frequencies.csv")
    figures["top_words"] = plots.top_words_bar(
        results["frequencies"], config.output_path("figures", "top_words.png")
    )

    results["sentiment_by_year"] = sentiment_by_year(words, lexicon)
    results["sentiment_words"] = top_sentiment_words(words, lexicon, n=10)
    artifacts["sentiment_by_year"] = write_table(results["sentiment_by_year"], config, "sentiment_by_year.csv")
    figures["sentiment"] = plots.sentiment_timeline(
        results["sentiment_by_year"], config.output_path("figures", "sentiment_by_year.png")
    )

    trends = word_trends(words, config)
    significant = significant_trends(trends, config.trend_alpha)
    results["trends"] = trends
    results["significant_trends"] = significant
    artifacts["trends"] = write_table(trends, config, "word_trends.csv")
    strongest = significant.reindex(significant["slope"].abs().sort_values(ascending=False).index).head(6)
    if not strongest.empty:
        figures["trends"] = plots.word_trend_lines(
            word_shares(words, strongest["word"]), config.output_path("figures", "word_trends.png")
        )

    artifacts["report"] = lincoln_report(words, results, figures, config)
    artifacts.update(figures)
    artifacts["manifest"] = write_manifest(config, {"lines": lines, "words": words}, artifacts)
    return artifacts


PIPELINES = {"cetaceans": run_cetaceans, "lincoln": run_lincoln}


def main(argv=None) -> None:
    config = WriteupConfig.from_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )
    logging.info("Starting %s write-up with run_id %s", config.command, config.ensure_run_id())
    try:
        artifacts = PIPELINES[config.command](config)
    except WriteupError:
        logging.exception("The %s write-up failed", config.command)
        sys.exit(1)
    logging.info("Finished; report at %s", artifacts["report"])


if __name__ == "__main__":
    main(sys.argv[1:])
