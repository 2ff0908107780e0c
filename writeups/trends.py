from __future__ import annotations

import logging
import warnings

import numpy as np
import pandas as pd
import statsmodels.api as sm
from statsmodels.stats.multitest import multipletests
from statsmodels.tools.sm_exceptions import PerfectSeparationError, PerfectSeparationWarning

from .config import WriteupConfig

TREND_COLUMNS = ["word", "total", "slope", "std_err", "p_value", "p_adjusted"]


def word_year_counts(words: pd.DataFrame) -> pd.DataFrame:
    """Word x year count matrix, zero-filled."""
    return pd.crosstab(words["word"], words["year"])


def _fit_word(years: np.ndarray, counts: np.ndarray, totals: np.ndarray):
    endog = np.column_stack([counts, totals - counts])
    # centred so the intercept stays well conditioned; the slope is unchanged
    exog = sm.add_constant(years.astype(float) - years.mean())
    with warnings.catch_warnings():
        warnings.simplefilter("error", PerfectSeparationWarning)
        return sm.GLM(endog, exog, family=sm.families.Binomial()).fit()


def word_trends(words: pd.DataFrame, config: WriteupConfig) -> pd.DataFrame:
    """Per-word logistic regression of yearly share on year.

    Only words used at least ``config.min_word_count`` times are modelled.
    p-values are Holm-adjusted across all fitted words.
    """
    counts = word_year_counts(words)
    if counts.shape[1] < 2:
        logging.warning("Word trends need at least two distinct years; got %d", counts.shape[1])
        return pd.DataFrame(columns=TREND_COLUMNS)
    year_totals = words.groupby("year").size().reindex(counts.columns).to_numpy()
    years = counts.columns.to_numpy()
    frequent = counts[counts.sum(axis=1) >= config.min_word_count]

    rows = []
    for word, row in frequent.iterrows():
        try:
            fit = _fit_word(years, row.to_numpy(), year_totals)
        except (PerfectSeparationError, PerfectSeparationWarning, np.linalg.LinAlgError, ValueError) as exc:
            logging.debug("Skipping trend for %r: %s", word, exc)
            continue
        if not fit.converged:
            logging.debug("Skipping trend for %r: fit did not converge", word)
            continue
        rows.append(
            {
                "word": word,
                "total": int(row.sum()),
                "slope": float(fit.params[1]),
                "std_err": float(fit.bse[1]),
                "p_value": float(fit.pvalues[1]),
            }
        )
    trends = pd.DataFrame(rows, columns=TREND_COLUMNS[:-1])
    if trends.empty:
        trends["p_adjusted"] = []
        return trends
    trends["p_adjusted"] = multipletests(trends["p_value"], method="holm")[1]
    trends = trends.sort_values("p_adjusted").reset_index(drop=True)
    logging.info("Fitted trends for %d of %d words", len(trends), len(counts))
    return trends


def significant_trends(trends: pd.DataFrame, alpha: float) -> pd.DataFrame:
    return trends[trends["p_adjusted"] < alpha].reset_index(drop=True)


def word_shares(words: pd.DataFrame, selected) -> pd.DataFrame:
    """Yearly share of each selected word, long format for plotting."""
    counts = word_year_counts(words)
    totals = words.groupby("year").size()
    shares = counts.loc[counts.index.intersection(list(selected))].div(totals, axis=1)
    return shares.rename_axis(index="word", columns="year").stack().rename("share").reset_index()
