from __future__ import annotations

import logging
from typing import Dict, List, Union

import numpy as np
import pandas as pd
from scipy import stats

from .config import WriteupConfig
from .exceptions import InsufficientDataError

Keys = Union[str, List[str]]


def group_summary(
    df: pd.DataFrame,
    keys: Keys,
    value: str,
    config: WriteupConfig,
    min_size: int = 1,
) -> pd.DataFrame:
    """Count, mean, sd and a t-based confidence interval of ``value`` per group.

    Missing values are dropped first. Groups with a single observation get
    NaN bounds; for larger groups the lower bound is clamped at zero since
    the summarised quantities (lifespans, counts) cannot be negative.
    """
    keys = [keys] if isinstance(keys, str) else list(keys)
    data = df.dropna(subset=[value])
    grouped = data.groupby(keys)[value].agg(n="count", mean="mean", sd="std").reset_index()
    grouped = grouped[grouped["n"] >= min_size].reset_index(drop=True)

    n = grouped["n"].to_numpy(dtype=float)
    with np.errstate(invalid="ignore", divide="ignore"):
        t_crit = stats.t.ppf((1 + config.confidence_level) / 2, n - 1)
        half_width = t_crit * grouped["sd"].to_numpy() / np.sqrt(n)
    mean = grouped["mean"].to_numpy()
    multi = n > 1
    grouped["ci_low"] = np.where(multi, np.maximum(mean - half_width, 0.0), np.nan)
    grouped["ci_high"] = np.where(multi, mean + half_width, np.nan)
    return grouped.sort_values("mean", ascending=False).reset_index(drop=True)


def count_table(df: pd.DataFrame, keys: Keys) -> pd.DataFrame:
    keys = [keys] if isinstance(keys, str) else list(keys)
    counts = df.groupby(keys).size().reset_index(name="n")
    counts["share"] = counts["n"] / counts["n"].sum()
    return counts.sort_values("n", ascending=False).reset_index(drop=True)


def compare_lifespans(
    df: pd.DataFrame, column: str, group_a: str, group_b: str, value: str = "lifespan"
) -> Dict[str, float]:
    """Welch two-sample t-test of ``value`` between two levels of ``column``."""
    a = df.loc[df[column] == group_a, value].dropna()
    b = df.loc[df[column] == group_b, value].dropna()
    if len(a) < 2 or len(b) < 2:
        raise InsufficientDataError(
            f"Need at least two observations in {group_a!r} and {group_b!r}; got {len(a)} and {len(b)}"
        )
    result = stats.ttest_ind(a, b, equal_var=False)
    summary = {
        "group_a": group_a,
        "group_b": group_b,
        "n_a": int(len(a)),
        "n_b": int(len(b)),
        "mean_a": float(a.mean()),
        "mean_b": float(b.mean()),
        "statistic": float(result.statistic),
        "p_value": float(result.pvalue),
    }
    logging.info(
        "Welch t-test %s vs %s: t=%.3f p=%.4g", group_a, group_b, summary["statistic"], summary["p_value"]
    )
    return summary


def write_table(table: pd.DataFrame, config: WriteupConfig, name: str):
    path = config.output_path(name)
    table.to_csv(path, index=False)
    logging.info("Wrote %s (%d rows)", path, len(table))
    return path
