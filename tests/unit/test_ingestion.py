import io

import pandas as pd
import pytest
import requests

from data_cleaner.core import ingestion
from data_cleaner.core.ingestion import dataset_to_csv, fetch_url, ingest_file
from data_cleaner.utils.exceptions import FileProcessingError, RemoteSourceError

# --- Tests for file ingestion ---

def test_ingest_valid_csv():
    """A valid CSV is parsed into raw string cells in header order."""
    context = ingest_file(b"A,B\n1,2\n3,4", "test.csv")
    assert context.source == "test.csv"
    assert context.columns == ["A", "B"]
    assert context.rows == [{"A": "1", "B": "2"}, {"A": "3", "B": "4"}]

def test_ingest_semicolon_csv():
    context = ingest_file(b"A;B\n1;2\n3;4", "semi.csv")
    assert context.columns == ["A", "B"]
    assert len(context.rows) == 2

def test_ingest_keeps_blank_cells_and_drops_blank_rows():
    context = ingest_file(b" A , B \n1,\n,\n3,4\n", "blank.csv")
    assert context.columns == ["A", "B"]
    assert context.rows == [{"A": "1", "B": ""}, {"A": "3", "B": "4"}]

def test_ingest_empty_csv():
    """An empty file raises an error."""
    with pytest.raises(FileProcessingError):
        ingest_file(b"", "empty.csv")

def test_ingest_header_only_csv():
    with pytest.raises(FileProcessingError):
        ingest_file(b"A,B\n", "header.csv")

def test_ingest_unsupported_extension():
    with pytest.raises(FileProcessingError):
        ingest_file(b"A,B\n1,2", "data.json")

def test_ingest_xlsx():
    buffer = io.BytesIO()
    pd.DataFrame({"Age": [28, None], "City": ["Paris", "Tokyo"]}).to_excel(buffer, index=False)
    context = ingest_file(buffer.getvalue(), "people.xlsx")
    assert context.columns == ["Age", "City"]
    assert context.rows[0]["City"] == "Paris"
    assert context.rows[1]["Age"] in ("", None)

def test_dataset_to_csv_writes_missing_as_blank():
    context = ingest_file(b"A,B\n1,\n3,4", "t.csv")
    assert dataset_to_csv(context) == "A,B\n1,\n3,4\n"

# --- Tests for URL fetch ---

class _FakeResponse:
    def __init__(self, content, status=200):
        self.content = content
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


def test_fetch_url(monkeypatch):
    monkeypatch.setattr(ingestion.requests, "get", lambda url, timeout: _FakeResponse(b"x,y\n1,a\n"))
    context = fetch_url("https://example.com/files/data")
    assert context.source == "https://example.com/files/data"
    assert context.rows == [{"x": "1", "y": "a"}]

def test_fetch_url_http_error(monkeypatch):
    monkeypatch.setattr(ingestion.requests, "get", lambda url, timeout: _FakeResponse(b"", status=404))
    with pytest.raises(RemoteSourceError):
        fetch_url("https://example.com/missing.csv")

def test_fetch_url_rejects_non_http_scheme():
    with pytest.raises(RemoteSourceError):
        fetch_url("file:///etc/passwd")
