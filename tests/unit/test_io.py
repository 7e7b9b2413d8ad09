import json

import pytest
import requests

from sampleview.lib import io as dataset_io
from sampleview.lib.errors import DatasetLoadError
from sampleview.lib.io import fetch_document, is_url


class FakeResponse:
    def __init__(self, payload=None, status_code=200, text=None):
        self.payload = payload
        self.status_code = status_code
        self.text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self.text is not None:
            return json.loads(self.text)
        return self.payload


def test_is_url():
    assert is_url("https://example.org/samples.json")
    assert is_url("http://localhost:8000/data/samples.json")
    assert not is_url("data/samples.json")


def test_fetch_local_document(tmp_path):
    path = tmp_path / "samples.json"
    path.write_text(json.dumps([{"sample_idx": 1}]))
    assert fetch_document(path) == [{"sample_idx": 1}]


def test_fetch_missing_local_document(tmp_path):
    with pytest.raises(DatasetLoadError, match="Could not read"):
        fetch_document(tmp_path / "missing.json")


def test_fetch_invalid_local_json(tmp_path):
    path = tmp_path / "samples.json"
    path.write_text("[{")
    with pytest.raises(DatasetLoadError, match="Invalid JSON"):
        fetch_document(path)


def test_fetch_local_document_not_utf8(tmp_path):
    path = tmp_path / "samples.json"
    path.write_bytes(b'[{"sample_idx": 1, "label": "\xff\xfe"}]')
    with pytest.raises(DatasetLoadError, match="Invalid JSON"):
        fetch_document(path)


def test_fetch_url_document(monkeypatch):
    calls = []

    def fake_get(url, timeout=None):
        calls.append((url, timeout))
        return FakeResponse([{"sample_idx": 2}])

    monkeypatch.setattr(dataset_io.requests, "get", fake_get)
    assert fetch_document("https://example.org/samples.json", timeout=5) == [{"sample_idx": 2}]
    assert calls == [("https://example.org/samples.json", 5)]


def test_fetch_url_http_error(monkeypatch):
    monkeypatch.setattr(dataset_io.requests, "get", lambda url, timeout=None: FakeResponse(status_code=404))
    with pytest.raises(DatasetLoadError, match="Could not fetch"):
        fetch_document("https://example.org/samples.json")


def test_fetch_url_connection_error(monkeypatch):
    def fake_get(url, timeout=None):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(dataset_io.requests, "get", fake_get)
    with pytest.raises(DatasetLoadError, match="connection refused"):
        fetch_document("http://localhost:1/samples.json")


def test_fetch_url_invalid_json(monkeypatch):
    monkeypatch.setattr(dataset_io.requests, "get", lambda url, timeout=None: FakeResponse(text="<html>"))
    with pytest.raises(DatasetLoadError, match="Invalid JSON"):
        fetch_document("https://example.org/samples.json")
