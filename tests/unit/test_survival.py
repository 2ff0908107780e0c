"""Unit tests for Kaplan-Meier curves and the Cox model."""

import math

import pandas as pd
import pytest

from writeups.cetaceans import clean_cetaceans
from writeups.exceptions import InsufficientDataError
from writeups.ingest import normalize_columns
from writeups.survival import collapse_rare, cox_model, design_matrix, kaplan_meier, logrank


@pytest.fixture
def cleaned(raw_cetaceans, cetacean_config):
    return clean_cetaceans(normalize_columns(raw_cetaceans), cetacean_config)


@pytest.mark.unit
def test_kaplan_meier_medians(cetacean_config):
    df = pd.DataFrame(
        {
            "group": ["a"] * 4 + ["b"] * 3 + ["c"],
            "lifespan": [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 1.0],
            "died": [1, 1, 1, 1, 0, 0, 0, 1],
        }
    )
    curves, medians = kaplan_meier(df, "group", cetacean_config)
    medians = medians.set_index("group")
    assert list(medians.index) == ["a", "b"]
    assert medians.loc["a", "median_survival"] == 2.0
    assert math.isinf(medians.loc["b", "median_survival"])
    assert medians.loc["a", "deaths"] == 4
    a = curves[curves["group"] == "a"]
    assert a["survival"].is_monotonic_decreasing
    assert a["survival"].iloc[-1] == 0.0


@pytest.mark.unit
def test_kaplan_meier_no_large_groups(cetacean_config):
    df = pd.DataFrame({"group": ["a", "b"], "lifespan": [1.0, 2.0], "died": [1, 0]})
    with pytest.raises(InsufficientDataError):
        kaplan_meier(df, "group", cetacean_config)


@pytest.mark.unit
def test_logrank_detects_acquisition_difference(cleaned):
    result = logrank(cleaned[cleaned["acquisition"].isin(["Born", "Capture"])], "acquisition")
    assert result["degrees_of_freedom"] == 1
    assert result["p_value"] < 0.05


@pytest.mark.unit
def test_collapse_rare():
    series = pd.Series(["a", "a", "a", "b", "b", "c"])
    assert collapse_rare(series, 2).tolist() == ["a", "a", "a", "b", "b", "Other"]


@pytest.mark.unit
def test_design_matrix(cleaned, cetacean_config):
    cetacean_config.top_species = 2
    design = design_matrix(cleaned, ["acquisition", "species", "seaworld"], cetacean_config)
    assert "acquisition_Capture" in design.columns
    assert "acquisition_Born" not in design.columns
    species_cols = [c for c in design.columns if c.startswith("species_")]
    assert len(species_cols) == 2
    assert design["seaworld"].isin([0.0, 1.0]).all()


@pytest.mark.unit
def test_cox_model_captured_animals_at_higher_risk(cleaned, cetacean_config):
    hazards, concordance = cox_model(cleaned, ["acquisition", "sex", "species", "seaworld"], cetacean_config)
    hazards = hazards.set_index("covariate")
    assert hazards.loc["acquisition_Capture", "hazard_ratio"] > 1.5
    assert hazards.loc["acquisition_Capture", "p"] < 0.05
    assert (hazards["hr_lower"] <= hazards["hazard_ratio"]).all()
    assert (hazards["hazard_ratio"] <= hazards["hr_upper"]).all()
    assert 0.5 < concordance <= 1.0


@pytest.mark.unit
def test_cox_model_without_deaths(cetacean_config):
    df = pd.DataFrame(
        {"lifespan": [1.0, 2.0, 3.0, 4.0], "died": [0, 0, 0, 0], "sex": ["F", "M", "F", "M"]}
    )
    with pytest.raises(InsufficientDataError):
        cox_model(df, ["sex"], cetacean_config)
