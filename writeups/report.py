from __future__ import annotations

import logging
import math
import os
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from .config import WriteupConfig


def _fmt(value) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return "NA"
        if math.isinf(value):
            return "not reached"
        return f"{value:.3g}" if abs(value) < 1e-3 and value != 0 else f"{value:.2f}"
    return str(value)


def markdown_table(df: pd.DataFrame, columns: Optional[List[str]] = None, limit: int = 25) -> List[str]:
    columns = columns or list(df.columns)
    lines = ["| " + " | ".join(columns) + " |", "|" + "---|" * len(columns)]
    for row in df.head(limit).to_dict("records"):
        lines.append("| " + " | ".join(_fmt(row[c]) for c in columns) + " |")
    return lines


def _image(path: Optional[Path], caption: str, config: WriteupConfig) -> List[str]:
    if path is None:
        return []
    rel = os.path.relpath(path, config.output_dir)
    return [f"![{caption}]({rel})", ""]


def cetacean_report(
    cleaned: pd.DataFrame,
    results: Dict,
    figures: Dict[str, Path],
    config: WriteupConfig,
) -> Path:
    deaths = int(cleaned["died"].sum())
    lines = [
        "# Mortality of captive cetaceans",
        f"Run: {config.run_id}",
        "",
        f"After cleaning, the dataset holds {len(cleaned)} animals, {deaths} of which "
        f"have died; the rest are censored at their last known status or at "
        f"{config.reference_date}.",
        "",
        "## How were these animals acquired?",
        *markdown_table(results["acquisition_counts"]),
        "",
        "## Lifespan by species",
        "Mean years from origin date to death or censoring, with "
        f"{config.confidence_level:.0%} intervals (lower bounds clamped at zero). "
        "Censored animals pull these means down, so they understate true lifespans.",
        *markdown_table(results["species_lifespans"], ["species", "n", "mean", "ci_low", "ci_high"]),
        "",
        *_image(figures.get("species_lifespans"), "Lifespan by species", config),
        "## Born in captivity or captured?",
    ]
    ttest = results.get("ttest")
    if ttest:
        lines.append(
            f"Animals born in captivity (n={ttest['n_a']}) averaged {ttest['mean_a']:.2f} years against "
            f"{ttest['mean_b']:.2f} for captured animals (n={ttest['n_b']}); Welch t = "
            f"{ttest['statistic']:.2f}, p = {_fmt(ttest['p_value'])}."
        )
    else:
        lines.append("Too few born or captured animals to compare.")
    lines.extend(["", "## Survival curves by acquisition"])
    lines.extend(markdown_table(results["km_medians"]))
    logrank = results.get("logrank")
    if logrank:
        lines.append("")
        lines.append(
            f"Log-rank test across acquisition types: chi2 = {logrank['test_statistic']:.2f} "
            f"on {logrank['degrees_of_freedom']} df, p = {_fmt(logrank['p_value'])}."
        )
    lines.append("")
    lines.extend(_image(figures.get("km_acquisition"), "Kaplan-Meier by acquisition", config))
    lines.extend(_image(figures.get("km_seaworld"), "Kaplan-Meier by SeaWorld affiliation", config))
    lines.append("## Cox proportional-hazards model")
    hazards = results.get("hazards")
    if hazards is not None:
        lines.append(
            "Hazard ratios above 1 mean a higher risk of death relative to the reference level; "
            f"concordance {results['concordance']:.3f}."
        )
        lines.extend(markdown_table(hazards))
        lines.append("")
        lines.extend(_image(figures.get("hazards"), "Hazard ratios", config))
    else:
        lines.append("The Cox model could not be fitted on this data.")
    path = config.output_path("cetaceans_report.md")
    path.write_text("\n".join(lines))
    logging.info("Wrote cetacean report to %s", path)
    return path


def lincoln_report(
    words: pd.DataFrame,
    results: Dict,
    figures: Dict[str, Path],
    config: WriteupConfig,
) -> Path:
    by_year = results["sentiment_by_year"]
    lines = [
        "# Word use in Lincoln's letters",
        f"Run: {config.run_id}",
        "",
        f"Documents: {', '.join(str(b) for b in config.gutenberg_ids)}. After dropping stop words "
        f"and non-alphabetic tokens, {len(words)} dated words remain across "
        f"{words['year'].nunique()} years.",
        "",
        "## Most common words",
        *markdown_table(results["frequencies"]),
        "",
        *_image(figures.get("top_words"), "Top words", config),
        "## Sentiment",
    ]
    if not by_year.empty:
        best = by_year.loc[by_year["net_per_1000"].idxmax()]
        worst = by_year.loc[by_year["net_per_1000"].idxmin()]
        lines.append(
            f"The most positive year was {int(best['year'])} ({best['net_per_1000']:.1f} net per 1000 words), "
            f"the most negative {int(worst['year'])} ({worst['net_per_1000']:.1f})."
        )
    lines.extend(markdown_table(by_year, limit=100))
    lines.append("")
    lines.extend(_image(figures.get("sentiment"), "Sentiment by year", config))
    lines.append("### Words driving sentiment")
    lines.extend(markdown_table(results["sentiment_words"], limit=50))
    lines.extend(["", "## Changing word use"])
    significant = results["significant_trends"]
    lines.append(
        f"{len(results['trends'])} words with at least {config.min_word_count} uses were modelled; "
        f"{len(significant)} show a significant trend (Holm-adjusted p < {config.trend_alpha})."
    )
    lines.extend(markdown_table(significant))
    lines.append("")
    lines.extend(_image(figures.get("trends"), "Word trends", config))
    path = config.output_path("lincoln_report.md")
    path.write_text("\n".join(lines))
    logging.info("Wrote Lincoln report to %s", path)
    return path
