"""Tests for loading the built catalog artifacts."""

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from web.loader import CatalogLoadError, load_catalog, read_artifact


def _response(status=200, payload=None):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload
    if status >= 400:
        resp.raise_for_status.side_effect = requests.exceptions.HTTPError(response=resp)
    return resp


class TestLoadFromDirectory:

    def test_loads_rows_and_lookup_maps(self, artifact_dir, rows):
        catalog = load_catalog(str(artifact_dir))

        assert [r.title for r in catalog.rows] == [r.title for r in rows]
        assert catalog.built_at == "2024-06-01T12:30:00.000Z"
        assert catalog.name_map == {"宝鐘マリン": "Houshou Marine"}
        assert "マリン" in catalog.search_terms["Houshou Marine"]

    def test_every_talent_matches_itself(self, artifact_dir):
        catalog = load_catalog(str(artifact_dir))
        assert catalog.search_terms["Shirakami Fubuki"] == ["Shirakami Fubuki"]

    def test_localized_talent_is_mapped_to_english(self, artifact_dir):
        data = json.loads((artifact_dir / "items.json").read_text(encoding="utf-8"))
        data["items"][0]["talent"] = "宝鐘マリン"
        (artifact_dir / "items.json").write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")

        catalog = load_catalog(str(artifact_dir))

        assert catalog.rows[0].talent == "Houshou Marine"

    def test_missing_items_is_fatal(self, tmp_path):
        with pytest.raises(CatalogLoadError, match="Missing artifact"):
            load_catalog(str(tmp_path))

    def test_items_without_array_is_fatal(self, artifact_dir):
        (artifact_dir / "items.json").write_text(json.dumps({"items": {}}), encoding="utf-8")
        with pytest.raises(CatalogLoadError, match="no items array"):
            load_catalog(str(artifact_dir))

    def test_invalid_json_is_fatal(self, artifact_dir):
        (artifact_dir / "items.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(CatalogLoadError, match="Unreadable"):
            load_catalog(str(artifact_dir))

    def test_auxiliary_artifacts_degrade(self, artifact_dir, caplog):
        (artifact_dir / "talent-jp-to-en.json").unlink()
        (artifact_dir / "talent-search-terms.json").write_text("[1, 2]", encoding="utf-8")

        catalog = load_catalog(str(artifact_dir))

        assert len(catalog.rows) == 5
        assert catalog.name_map == {}
        assert catalog.search_terms["Houshou Marine"] == ["Houshou Marine"]
        assert "Optional artifact unavailable" in caplog.text


class TestLoadFromUrl:

    def test_reads_artifacts_relative_to_base_url(self, rows):
        payloads = {
            "https://cdn.example.com/data/items.json": {"items": [r.to_dict() for r in rows], "builtAt": None},
            "https://cdn.example.com/data/talent-jp-to-en.json": {},
            "https://cdn.example.com/data/talent-search-terms.json": {},
        }

        def fake_get(url, timeout):
            return _response(200, payloads[url])

        with patch("web.loader.requests.get", side_effect=fake_get) as get:
            catalog = load_catalog("https://cdn.example.com/data/")

        assert get.call_count == 3
        assert len(catalog.rows) == 5
        assert catalog.built_at is None

    def test_http_error_status_is_reported(self):
        with patch("web.loader.requests.get", return_value=_response(404)):
            with pytest.raises(CatalogLoadError, match="404"):
                read_artifact("https://cdn.example.com", "items.json")

    def test_network_failure_is_reported(self):
        with patch("web.loader.requests.get", side_effect=requests.exceptions.ConnectionError("down")):
            with pytest.raises(CatalogLoadError, match="Failed to fetch"):
                read_artifact("https://cdn.example.com", "items.json")
