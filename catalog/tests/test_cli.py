"""End-to-end tests for the pipeline CLI on local files."""

import json
import logging
from unittest.mock import patch

import pytest

from catalog import cli


@pytest.fixture(autouse=True)
def pinned_build_time(monkeypatch):
    monkeypatch.setenv("BUILD_TIMESTAMP", "2024-06-01T12:00:00Z")


@pytest.fixture(autouse=True)
def drop_cli_handlers():
    """main() attaches a console handler bound to the captured stdout."""
    yield
    logger = logging.getLogger("catalog")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


class TestFetchCommand:

    def test_report_only_writes_nothing(self, tmp_path, catalog_file, capsys):
        code = cli.main(["--no-log-file", "fetch", "--from-file", str(catalog_file), "--report-only"])

        assert code == 0
        out = capsys.readouterr().out
        assert "In stock (orderable): 3" in out
        assert "Out of stock:         1" in out
        assert sorted(p.name for p in tmp_path.iterdir()) == ["catalog.json"]

    def test_from_file_writes_stock_split(self, tmp_path, catalog_file):
        code = cli.main(["--no-log-file", "fetch", "--from-file", str(catalog_file)])

        assert code == 0
        assert (tmp_path / "catalog-in-stock.json").exists()
        assert (tmp_path / "catalog-out-of-stock.json").exists()

    def test_fetch_from_api_saves_catalog(self, tmp_path, catalog_document):
        output = tmp_path / "fetched.json"
        with patch("catalog.workflows.fetch_full_catalog", return_value=catalog_document):
            code = cli.main(["--no-log-file", "fetch", str(output)])

        assert code == 0
        saved = json.loads(output.read_text(encoding="utf-8"))
        assert saved["meta"] == {"source": "test"}
        assert (tmp_path / "fetched-in-stock.json").exists()

    def test_missing_file_exits_1(self, tmp_path, capsys):
        code = cli.main(["--no-log-file", "fetch", "--from-file", str(tmp_path / "nope.json")])
        assert code == 1
        assert "File not found" in capsys.readouterr().err

    def test_malformed_document_exits_1(self, tmp_path, capsys):
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"data": {}}), encoding="utf-8")
        code = cli.main(["--no-log-file", "fetch", "--from-file", str(bad)])
        assert code == 1
        assert "data.items" in capsys.readouterr().err


class TestBuildCommand:

    def test_builds_tables_and_browser_artifacts(self, tmp_path, catalog_file):
        in_stock = tmp_path / "catalog-in-stock.json"
        assert cli.main(["--no-log-file", "fetch", "--from-file", str(catalog_file)]) == 0

        out_dir = tmp_path / "site"
        code = cli.main(["--no-log-file", "build", str(in_stock), "--output-json", str(out_dir / "items.json")])

        assert code == 0
        assert (tmp_path / "catalog-in-stock-table.md").exists()
        assert (tmp_path / "catalog-in-stock-table.html").exists()

        items = json.loads((out_dir / "items.json").read_text(encoding="utf-8"))
        assert items["builtAt"] == "2024-06-01T12:00:00Z"
        titles = [r["title"] for r in items["items"]]
        assert titles == ["Acrylic Stand", "Voice Pack"]

        voice = items["items"][1]
        assert voice["talent"] == "Houshou Marine"
        assert voice["isDigital"] is True
        assert voice["isPreorder"] is True
        assert voice["stock"] is None
        assert voice["stockDisplay"] == "Unlimited"

        terms = json.loads((out_dir / "talent-search-terms.json").read_text(encoding="utf-8"))
        assert "宝鐘マリン" in terms["Houshou Marine"]
        assert (out_dir / "talent-jp-to-en.json").exists()

    def test_physical_only_filters_through_info_endpoint(self, tmp_path, catalog_file):
        with patch("catalog.workflows.filter_physical_only", side_effect=lambda products: products[:1]) as check:
            code = cli.main([
                "--no-log-file", "build", str(catalog_file), "--physical-only",
                "--output-json", str(tmp_path / "items.json"),
            ])

        assert code == 0
        assert check.called
        items = json.loads((tmp_path / "items.json").read_text(encoding="utf-8"))
        assert [r["title"] for r in items["items"]] == ["Acrylic Stand"]

    def test_missing_input_exits_1(self, tmp_path):
        assert cli.main(["--no-log-file", "build", str(tmp_path / "missing.json")]) == 1
