"""Tests for descriptor source resolution."""

import json

import pytest
import requests

from tablecast import ErrorKind, SchemaLoadError
from tablecast import loader
from tablecast.loader import load_descriptor

DESCRIPTOR = {"fields": [{"name": "id", "type": "integer"}]}


class FakeResponse:
    def __init__(self, text, status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class TestLoadDescriptor:
    """Test load_descriptor for each kind of source."""

    def test_mapping_is_deep_copied(self):
        descriptor = load_descriptor(DESCRIPTOR)
        descriptor["fields"][0]["name"] = "changed"
        assert DESCRIPTOR["fields"][0]["name"] == "id"

    def test_json_text(self):
        assert load_descriptor(json.dumps(DESCRIPTOR)) == DESCRIPTOR

    def test_invalid_json_text(self):
        with pytest.raises(SchemaLoadError) as exc_info:
            load_descriptor('{"fields": [')
        (error,) = exc_info.value.validation_errors
        assert error.kind is ErrorKind.LOAD_FAILED
        assert "not valid JSON" in error.error

    def test_json_array_is_not_an_object(self):
        with pytest.raises(SchemaLoadError, match="descriptor must be an object"):
            load_descriptor("[1, 2]")

    def test_file_path(self, tmp_path):
        path = tmp_path / "schema.json"
        path.write_text(json.dumps(DESCRIPTOR), encoding="utf-8")
        assert load_descriptor(str(path)) == DESCRIPTOR
        assert load_descriptor(path) == DESCRIPTOR

    def test_missing_file(self, tmp_path):
        with pytest.raises(SchemaLoadError, match="failed to read descriptor"):
            load_descriptor(str(tmp_path / "missing.json"))

    def test_url(self, monkeypatch):
        calls = []

        def fake_get(url, timeout):
            calls.append((url, timeout))
            return FakeResponse(json.dumps(DESCRIPTOR))

        monkeypatch.setattr(loader.requests, "get", fake_get)
        assert load_descriptor("https://example.com/schema.json", timeout=3) == DESCRIPTOR
        assert calls == [("https://example.com/schema.json", 3)]

    def test_url_http_error(self, monkeypatch):
        monkeypatch.setattr(
            loader.requests, "get", lambda url, timeout: FakeResponse("", 404)
        )
        with pytest.raises(SchemaLoadError, match="failed to fetch descriptor"):
            load_descriptor("http://example.com/missing.json")

    def test_url_connection_error(self, monkeypatch):
        def fake_get(url, timeout):
            raise requests.ConnectionError("refused")

        monkeypatch.setattr(loader.requests, "get", fake_get)
        with pytest.raises(SchemaLoadError, match="refused"):
            load_descriptor("http://example.com/schema.json")

    def test_unsupported_source(self):
        with pytest.raises(SchemaLoadError, match="got int"):
            load_descriptor(5)
