"""Unit tests for data loading."""

import pandas as pd
import pytest
import requests

from writeups import ingest
from writeups.exceptions import DataSourceError, SchemaError


class FakeResponse:
    def __init__(self, text, status=200):
        self.text = text
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


@pytest.mark.unit
def test_normalize_columns_maps_csv_names(raw_cetaceans):
    normalized = ingest.normalize_columns(raw_cetaceans)
    assert list(normalized.columns) == list(ingest.CANONICAL_COLUMNS)
    assert normalized["origin_date"].iloc[0] == raw_cetaceans["originDate"].iloc[0]


@pytest.mark.unit
def test_normalize_columns_fills_optional():
    df = pd.DataFrame(
        {
            "species": ["Orca"],
            "sex": ["F"],
            "acquisition": ["Born"],
            "originDate": ["2000-01-01"],
            "status": ["Alive"],
            "statusDate": [None],
        }
    )
    normalized = ingest.normalize_columns(df)
    assert normalized["transfers"].isna().all()


@pytest.mark.unit
def test_normalize_columns_missing_required():
    with pytest.raises(SchemaError, match="status"):
        ingest.normalize_columns(pd.DataFrame({"species": ["Orca"], "sex": ["F"]}))


@pytest.mark.unit
def test_load_cetaceans_from_url(monkeypatch, raw_cetaceans):
    csv_text = raw_cetaceans.to_csv(index=False)
    calls = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return FakeResponse(csv_text)

    monkeypatch.setattr(ingest.requests, "get", fake_get)
    df = ingest.load_cetaceans("https://example.org/cetaceans.csv", timeout=5)
    assert calls == [("https://example.org/cetaceans.csv", 5)]
    assert len(df) == len(raw_cetaceans)


@pytest.mark.unit
def test_load_cetaceans_missing_file(tmp_path):
    with pytest.raises(DataSourceError) as excinfo:
        ingest.load_cetaceans(str(tmp_path / "missing.csv"))
    assert excinfo.value.source.endswith("missing.csv")


@pytest.mark.unit
def test_fetch_text_http_error(monkeypatch):
    monkeypatch.setattr(ingest.requests, "get", lambda url, timeout: FakeResponse("", status=404))
    with pytest.raises(DataSourceError, match="404"):
        ingest.fetch_text("https://example.org/missing", timeout=1)


@pytest.mark.unit
def test_strip_gutenberg_boilerplate(gutenberg_text):
    body = ingest.strip_gutenberg_boilerplate(gutenberg_text)
    assert body[0] == "THE PAPERS AND WRITINGS OF ABRAHAM LINCOLN"
    assert not any("PROJECT GUTENBERG" in line for line in body)
    assert "License text" not in body


@pytest.mark.unit
def test_strip_without_markers_keeps_everything():
    assert ingest.strip_gutenberg_boilerplate("one\ntwo") == ["one", "two"]


@pytest.mark.unit
def test_load_letters(monkeypatch, lincoln_config, gutenberg_text):
    lincoln_config.gutenberg_ids = [2657, 2658]
    urls = []

    def fake_fetch(url, timeout):
        urls.append(url)
        return gutenberg_text

    monkeypatch.setattr(ingest, "fetch_text", fake_fetch)
    lines = ingest.load_letters(lincoln_config)
    assert urls[0] == "https://www.gutenberg.org/cache/epub/2657/pg2657.txt"
    assert set(lines["book_id"]) == {2657, 2658}
    assert lines.groupby("book_id")["line"].min().tolist() == [1, 1]
