from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from .config import WriteupConfig

DAYS_PER_YEAR = 365.25
EXCLUDED_STATUSES = {"stillbirth", "miscarriage"}
SEX_CODES = {"f": "F", "female": "F", "m": "M", "male": "M"}
TEXT_COLUMNS = [
    "id",
    "name",
    "accuracy",
    "birth_year",
    "origin_location",
    "transfers",
    "currently",
    "region",
]


def seaworld_flag(*texts: pd.Series) -> pd.Series:
    """True where any of the given text columns mentions SeaWorld."""
    flag = pd.Series(False, index=texts[0].index)
    for text in texts:
        flag |= text.fillna("").astype(str).str.contains(r"sea\s*world", case=False, regex=True)
    return flag


def compute_lifespan(
    origin: pd.Series, status: pd.Series, status_date: pd.Series, reference_date: str
) -> pd.DataFrame:
    """Censoring indicator, end date and lifespan in years.

    Deaths end at their status date, everything else is censored at the
    reference date. Lifespan is NaN when a date is missing or the interval
    is negative.
    """
    origin = pd.to_datetime(origin, errors="coerce")
    status_date = pd.to_datetime(status_date, errors="coerce")
    died = (status.fillna("").str.strip().str.lower() == "died").astype(int)
    end = status_date.where(died == 1, pd.Timestamp(reference_date))
    lifespan = (end - origin).dt.days / DAYS_PER_YEAR
    lifespan = lifespan.where(lifespan >= 0, np.nan)
    return pd.DataFrame({"died": died, "end_date": end, "lifespan": lifespan})


def _normalize_sex(sex: pd.Series) -> pd.Series:
    return sex.fillna("").astype(str).str.strip().str.lower().map(SEX_CODES).fillna("U")


def clean_cetaceans(df: pd.DataFrame, config: WriteupConfig) -> pd.DataFrame:
    cleaned = df.copy()
    status_lower = cleaned["status"].fillna("").str.strip().str.lower()
    excluded = status_lower.isin(EXCLUDED_STATUSES)
    if excluded.any():
        logging.info("Dropping %d stillbirth/miscarriage records", int(excluded.sum()))
    cleaned = cleaned[~excluded].copy()

    cleaned["status"] = cleaned["status"].fillna("Unknown").str.strip()
    cleaned["sex"] = _normalize_sex(cleaned["sex"])
    cleaned["acquisition"] = cleaned["acquisition"].fillna("Unknown").str.strip()
    cleaned["species"] = cleaned["species"].fillna("Unknown").str.strip()
    cleaned["origin_date"] = pd.to_datetime(cleaned["origin_date"], errors="coerce")
    cleaned["status_date"] = pd.to_datetime(cleaned["status_date"], errors="coerce")
    for col in TEXT_COLUMNS:
        cleaned[col] = cleaned[col].astype("string")

    derived = compute_lifespan(
        cleaned["origin_date"], cleaned["status"], cleaned["status_date"], config.reference_date
    )
    cleaned = pd.concat([cleaned, derived], axis=1)
    cleaned["seaworld"] = seaworld_flag(cleaned["transfers"], cleaned["currently"])

    undefined = cleaned["lifespan"].isna()
    if undefined.any():
        logging.info("Dropping %d records without a computable lifespan", int(undefined.sum()))
    cleaned = cleaned[~undefined].reset_index(drop=True)

    path = config.output_path("cetaceans_clean.parquet")
    cleaned.to_parquet(path, index=False)
    logging.info(
        "Cleaned cetacean records: %d (%d deaths observed)", len(cleaned), int(cleaned["died"].sum())
    )
    return cleaned
