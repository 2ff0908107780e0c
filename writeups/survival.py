from __future__ import annotations

import logging
from typing import Dict, List, Tuple

import numpy as np
import pandas as pd
from lifelines import CoxPHFitter, KaplanMeierFitter
from lifelines.statistics import multivariate_logrank_test

from .config import WriteupConfig
from .exceptions import InsufficientDataError

DURATION_COL = "lifespan"
EVENT_COL = "died"


def kaplan_meier(
    df: pd.DataFrame, group: str, config: WriteupConfig
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Kaplan-Meier curves per level of ``group``.

    Returns the stacked survival table and a per-group table of sizes,
    observed deaths and median survival (inf when the curve stays above 0.5).
    Groups smaller than ``config.min_group_size`` are skipped.
    """
    curves = []
    medians = []
    for level, sub in df.groupby(group):
        if len(sub) < config.min_group_size:
            logging.debug("Skipping %s=%s with %d records", group, level, len(sub))
            continue
        kmf = KaplanMeierFitter(alpha=1 - config.confidence_level)
        kmf.fit(sub[DURATION_COL], event_observed=sub[EVENT_COL], label=str(level))
        ci = kmf.confidence_interval_
        curves.append(
            pd.DataFrame(
                {
                    "group": str(level),
                    "timeline": kmf.survival_function_.index.to_numpy(),
                    "survival": kmf.survival_function_.iloc[:, 0].to_numpy(),
                    "ci_lower": ci.iloc[:, 0].to_numpy(),
                    "ci_upper": ci.iloc[:, 1].to_numpy(),
                }
            )
        )
        medians.append(
            {
                "group": str(level),
                "n": len(sub),
                "deaths": int(sub[EVENT_COL].sum()),
                "median_survival": float(kmf.median_survival_time_),
            }
        )
    if not curves:
        raise InsufficientDataError(f"No {group} group has {config.min_group_size} or more records")
    logging.info("Fitted Kaplan-Meier curves for %d %s groups", len(curves), group)
    return pd.concat(curves, ignore_index=True), pd.DataFrame(medians)


def logrank(df: pd.DataFrame, group: str) -> Dict[str, float]:
    result = multivariate_logrank_test(df[DURATION_COL], df[group], df[EVENT_COL])
    return {
        "test_statistic": float(result.test_statistic),
        "p_value": float(result.p_value),
        "degrees_of_freedom": int(result.degrees_of_freedom),
    }


def collapse_rare(series: pd.Series, keep: int, other: str = "Other") -> pd.Series:
    top = series.value_counts().index[:keep]
    return series.where(series.isin(top), other)


def design_matrix(df: pd.DataFrame, covariates: List[str], config: WriteupConfig) -> pd.DataFrame:
    data = df[[DURATION_COL, EVENT_COL] + covariates].copy()
    if "species" in covariates:
        data["species"] = collapse_rare(data["species"], config.top_species)
    for col in covariates:
        if pd.api.types.is_bool_dtype(data[col]):
            data[col] = data[col].astype(float)
    categorical = [c for c in covariates if not pd.api.types.is_numeric_dtype(data[c])]
    design = pd.get_dummies(data, columns=categorical, drop_first=True, dtype=float)
    constant = [c for c in design.columns if c not in (DURATION_COL, EVENT_COL) and design[c].nunique() < 2]
    if constant:
        logging.debug("Dropping constant covariates: %s", ", ".join(constant))
        design = design.drop(columns=constant)
    return design


def cox_model(
    df: pd.DataFrame, covariates: List[str], config: WriteupConfig
) -> Tuple[pd.DataFrame, float]:
    """Cox proportional-hazards fit; returns the hazard-ratio table and concordance."""
    design = design_matrix(df, covariates, config)
    if design[EVENT_COL].sum() < 2 or design.shape[1] <= 2:
        raise InsufficientDataError("Cox model needs at least two deaths and one varying covariate")
    cph = CoxPHFitter(penalizer=config.cox_penalizer, alpha=1 - config.confidence_level)
    cph.fit(design, duration_col=DURATION_COL, event_col=EVENT_COL)
    ci = cph.confidence_intervals_
    table = pd.DataFrame(
        {
            "covariate": cph.params_.index,
            "coef": cph.params_.to_numpy(),
            "hazard_ratio": cph.hazard_ratios_.to_numpy(),
            "hr_lower": np.exp(ci.iloc[:, 0].to_numpy()),
            "hr_upper": np.exp(ci.iloc[:, 1].to_numpy()),
            "p": cph.summary["p"].to_numpy(),
        }
    )
    concordance = float(cph.concordance_index_)
    logging.info(
        "Cox model on %d records, %d covariates, concordance %.3f",
        len(design),
        len(table),
        concordance,
    )
    return table.sort_values("hazard_ratio", ascending=False).reset_index(drop=True), concordance
