from __future__ import annotations

import logging
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

DPI = 150


def _save(fig, out_path: Path) -> Path:
    fig.tight_layout()
    fig.savefig(out_path, dpi=DPI)
    plt.close(fig)
    logging.info("Wrote figure %s", out_path)
    return out_path


def lifespan_bars(summary: pd.DataFrame, group: str, out_path: Path) -> Path:
    """Mean lifespan per group with confidence interval whiskers."""
    data = summary.sort_values("mean")
    lower = (data["mean"] - data["ci_low"]).fillna(0).to_numpy()
    upper = (data["ci_high"] - data["mean"]).fillna(0).to_numpy()
    fig, ax = plt.subplots(figsize=(8, max(3.0, 0.4 * len(data) + 1)))
    ax.barh(data[group].astype(str), data["mean"], color="#4c78a8", alpha=0.85)
    ax.errorbar(data["mean"], np.arange(len(data)), xerr=[lower, upper], fmt="none", ecolor="#333333")
    ax.set_xlabel("Mean lifespan (years)")
    ax.set_ylabel("")
    ax.set_title(f"Lifespan by {group}")
    ax.grid(True, axis="x", linestyle="--", alpha=0.3)
    return _save(fig, out_path)


def survival_curves(curves: pd.DataFrame, title: str, out_path: Path) -> Path:
    fig, ax = plt.subplots(figsize=(8, 4.8))
    palette = sns.color_palette("tab10", curves["group"].nunique())
    for color, (group, curve) in zip(palette, curves.groupby("group", sort=False)):
        ax.step(curve["timeline"], curve["survival"], where="post", color=color, label=group, linewidth=2.0)
        ax.fill_between(
            curve["timeline"], curve["ci_lower"], curve["ci_upper"], step="post", color=color, alpha=0.15
        )
    ax.set_xlabel("Years in captivity")
    ax.set_ylabel("Survival probability")
    ax.set_ylim(0, 1.02)
    ax.set_title(title)
    ax.grid(True, linestyle="--", alpha=0.3)
    ax.legend(frameon=True)
    return _save(fig, out_path)


def hazard_forest(hazards: pd.DataFrame, out_path: Path) -> Path:
    data = hazards.sort_values("hazard_ratio")
    y = np.arange(len(data))
    fig, ax = plt.subplots(figsize=(8, max(3.0, 0.4 * len(data) + 1)))
    ax.errorbar(
        data["hazard_ratio"],
        y,
        xerr=[data["hazard_ratio"] - data["hr_lower"], data["hr_upper"] - data["hazard_ratio"]],
        fmt="o",
        color="#e45756",
        ecolor="#333333",
        capsize=3,
    )
    ax.axvline(1.0, color="#999999", linestyle="--", linewidth=1.0)
    ax.set_yticks(y)
    ax.set_yticklabels(data["covariate"])
    ax.set_xscale("log")
    ax.set_xlabel("Hazard ratio (log scale)")
    ax.set_title("Cox proportional-hazards model")
    ax.grid(True, axis="x", linestyle="--", alpha=0.3)
    return _save(fig, out_path)


def top_words_bar(frequencies: pd.DataFrame, out_path: Path) -> Path:
    fig, ax = plt.subplots(figsize=(8, max(3.0, 0.3 * len(frequencies) + 1)))
    sns.barplot(data=frequencies, x="n", y="word", color="#54a24b", ax=ax)
    ax.set_xlabel("Occurrences")
    ax.set_ylabel("")
    ax.set_title("Most common words")
    return _save(fig, out_path)


def sentiment_timeline(by_year: pd.DataFrame, out_path: Path) -> Path:
    fig, ax = plt.subplots(figsize=(9, 4.8))
    colors = np.where(by_year["net_per_1000"] >= 0, "#4c78a8", "#e45756")
    ax.bar(by_year["year"], by_year["net_per_1000"], color=colors)
    ax.axhline(0, color="#333333", linewidth=0.8)
    ax.set_xlabel("Year")
    ax.set_ylabel("Net sentiment per 1000 words")
    ax.set_title("Sentiment of Lincoln's writing by year")
    ax.grid(True, axis="y", linestyle="--", alpha=0.3)
    return _save(fig, out_path)


def word_trend_lines(shares: pd.DataFrame, out_path: Path) -> Path:
    fig, ax = plt.subplots(figsize=(9, 4.8))
    sns.lineplot(data=shares, x="year", y="share", hue="word", marker="o", ax=ax)
    ax.set_xlabel("Year")
    ax.set_ylabel("Share of words that year")
    ax.set_title("Words with the strongest change over time")
    ax.grid(True, linestyle="--", alpha=0.3)
    return _save(fig, out_path)
