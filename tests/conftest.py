"""Shared fixtures: configs pointed at tmp dirs and synthetic datasets."""

import numpy as np
import pandas as pd
import pytest

from writeups.config import WriteupConfig

REFERENCE_DATE = pd.Timestamp("2017-05-07")


@pytest.fixture
def cetacean_config(tmp_path):
    config = WriteupConfig(command="cetaceans", output_dir=str(tmp_path / "out"), min_group_size=3)
    config.ensure_run_id()
    return config


@pytest.fixture
def lincoln_config(tmp_path):
    config = WriteupConfig(
        command="lincoln",
        output_dir=str(tmp_path / "out"),
        gutenberg_ids=[1],
        min_year=1830,
        max_year=1865,
        min_word_count=5,
        stopwords=["the", "is", "a", "of", "and"],
        sentiment_lexicon={"good": 1, "happy": 1, "bad": -1, "war": -1},
    )
    config.ensure_run_id()
    return config


@pytest.fixture
def raw_cetaceans():
    """Cetacean records with the public CSV's column names.

    Captured animals die roughly three times as fast as those born in
    captivity.
    """
    rng = np.random.default_rng(7)
    n = 240
    acquisition = rng.choice(["Born", "Capture", "Rescue"], size=n)
    scale = np.select([acquisition == "Born", acquisition == "Capture"], [24.0, 8.0], 12.0)
    origin = pd.Timestamp("1970-01-01") + pd.to_timedelta(rng.integers(0, 15000, size=n), unit="D")
    lifetime = pd.to_timedelta(rng.exponential(scale) * 365.25, unit="D")
    death = origin + lifetime
    died = death < REFERENCE_DATE
    transfers = np.where(rng.random(n) < 0.3, "Marineland to SeaWorld Orlando", "Marineland")
    df = pd.DataFrame(
        {
            "Unnamed: 0": np.arange(n),
            "species": rng.choice(["Bottlenose", "Orca", "Beluga", "Pacific White-Sided"], size=n),
            "id": [f"NOA{i:07d}" for i in range(n)],
            "name": [f"Animal {i}" for i in range(n)],
            "sex": rng.choice(["F", "M", "U"], size=n),
            "accuracy": "a",
            "birthYear": origin.year.astype(str),
            "acquisition": acquisition,
            "originDate": origin.strftime("%Y-%m-%d"),
            "originLocation": "Atlantic Ocean",
            "transfers": transfers,
            "currently": "Unknown",
            "region": "US",
            "status": np.where(died, "Died", "Alive"),
            "statusDate": pd.Series(death.strftime("%Y-%m-%d")).where(died, None),
        }
    )
    extra = pd.DataFrame(
        {
            "species": ["Bottlenose", "Orca"],
            "id": ["NOA9999998", "NOA9999999"],
            "sex": ["F", "M"],
            "acquisition": ["Born", "Born"],
            "originDate": ["2001-03-04", "2003-05-06"],
            "status": ["Stillbirth", "Miscarriage"],
            "statusDate": ["2001-03-04", "2003-05-06"],
        }
    )
    return pd.concat([df, extra], ignore_index=True)


@pytest.fixture
def gutenberg_text():
    body = ["THE PAPERS AND WRITINGS OF ABRAHAM LINCOLN", "", "PREFACE. Collected letters."]
    for offset, year in enumerate(range(1850, 1856)):
        body.append(f"TO J. SPEED. SPRINGFIELD, JUNE 1, {year}.")
        body.extend(["The union is good and the union is strong."] * (offset + 1))
        body.extend(["A happy friend of bad news, the farm of corn and the field."] * 4)
        body.append("War war war." if year >= 1854 else "Peace and law.")
    return "\n".join(
        ["The Project Gutenberg eBook", "*** START OF THE PROJECT GUTENBERG EBOOK LINCOLN ***"]
        + body
        + ["*** END OF THE PROJECT GUTENBERG EBOOK LINCOLN ***", "License text"]
    )
