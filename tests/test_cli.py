"""Tests for CLI commands."""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from aozoraindex.cli import _ensure_db_parent, _setup_logging, app
from aozoraindex.errors import CollectionAbortedError, FetchError, StoreError
from aozoraindex.index.collector import CollectStats
from aozoraindex.index.storage import SQLiteFullTextStore
from aozoraindex.models import WorkDescriptor


runner = CliRunner()


def _populated_db(tmp_path: Path) -> Path:
    db_path = tmp_path / "aozora.db"
    with SQLiteFullTextStore(db_path) as store:
        store.add_work(
            WorkDescriptor(
                author_id="000001",
                title_id="11",
                title="虫とココア",
                detail_url="https://site/cards/000001/card11.html",
                author_name="甲",
            ),
            "虫とココアの話",
            "虫 と ココア の 話",
        )
    return db_path


class TestSetupLogging:
    def test_setup_logging_verbose(self) -> None:
        with patch("aozoraindex.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=True)
            assert mock_config.call_args[1]["level"] == logging.DEBUG

    def test_setup_logging_normal(self) -> None:
        with patch("aozoraindex.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=False)
            assert mock_config.call_args[1]["level"] == logging.INFO


def test_ensure_db_parent_creates_directory(tmp_path: Path) -> None:
    db_path = tmp_path / "subdir" / "test.db"
    _ensure_db_parent(db_path)
    assert db_path.parent.exists()


class TestCollectCommand:
    @patch("aozoraindex.cli.Segmenter")
    @patch("aozoraindex.cli.Fetcher")
    @patch("aozoraindex.cli.Collector")
    def test_collect_prints_summary(
        self,
        mock_collector_class: MagicMock,
        mock_fetcher_class: MagicMock,
        mock_segmenter_class: MagicMock,
        tmp_path: Path,
    ) -> None:
        mock_collector_class.return_value.collect.return_value = CollectStats(
            discovered=5, inserted=3, updated=0, skipped=1, failed=1
        )
        db_path = tmp_path / "nested" / "aozora.db"

        result = runner.invoke(
            app,
            ["collect", "https://site/index_pages/person879.html", "--db", str(db_path), "--workers", "2"],
        )

        assert result.exit_code == 0, result.stdout
        assert "Discovered: 5, inserted: 3, updated: 0, skipped: 1, failed: 1" in result.stdout
        assert db_path.exists()
        mock_collector_class.return_value.collect.assert_called_once_with(
            "https://site/index_pages/person879.html"
        )
        assert mock_collector_class.call_args[1]["workers"] == 2
        mock_fetcher_class.return_value.close.assert_called_once()

    @patch("aozoraindex.cli.Segmenter")
    @patch("aozoraindex.cli.Fetcher")
    @patch("aozoraindex.cli.Collector")
    def test_discovery_failure_exits_non_zero(
        self,
        mock_collector_class: MagicMock,
        mock_fetcher_class: MagicMock,
        mock_segmenter_class: MagicMock,
        tmp_path: Path,
    ) -> None:
        mock_collector_class.return_value.collect.side_effect = FetchError("listing", status=503)

        result = runner.invoke(app, ["collect", "listing", "--db", str(tmp_path / "a.db")])

        assert result.exit_code == 1
        assert "Collection aborted" in result.stdout

    @patch("aozoraindex.cli.Segmenter")
    @patch("aozoraindex.cli.Fetcher")
    @patch("aozoraindex.cli.Collector")
    def test_aborted_run_prints_partial_summary(
        self,
        mock_collector_class: MagicMock,
        mock_fetcher_class: MagicMock,
        mock_segmenter_class: MagicMock,
        tmp_path: Path,
    ) -> None:
        partial = CollectStats(discovered=10, inserted=2, failed=3)
        mock_collector_class.return_value.collect.side_effect = CollectionAbortedError(
            "Aborting after 3 consecutive store failures", stats=partial
        )

        result = runner.invoke(app, ["collect", "listing", "--db", str(tmp_path / "a.db")])

        assert result.exit_code == 1
        assert "Collection aborted" in result.stdout
        assert "Discovered: 10, inserted: 2, updated: 0, skipped: 0, failed: 3" in result.stdout
        mock_fetcher_class.return_value.close.assert_called_once()

    @patch("aozoraindex.cli.SQLiteFullTextStore")
    def test_store_open_failure_exits_non_zero(
        self, mock_store_class: MagicMock, tmp_path: Path
    ) -> None:
        mock_store_class.side_effect = StoreError("unable to open database file")

        result = runner.invoke(app, ["collect", "listing", "--db", str(tmp_path / "a.db")])

        assert result.exit_code == 1

    def test_invalid_link_policy(self, tmp_path: Path) -> None:
        result = runner.invoke(
            app, ["collect", "listing", "--db", str(tmp_path / "a.db"), "--link-policy", "middle"]
        )

        assert result.exit_code != 0


class TestSearchCommand:
    def test_search_prints_matches(self, tmp_path: Path) -> None:
        db_path = _populated_db(tmp_path)

        result = runner.invoke(app, ["search", "虫 AND ココア", "--db", str(db_path)])

        assert result.exit_code == 0
        assert "虫とココア" in result.stdout

    def test_search_no_matches(self, tmp_path: Path) -> None:
        db_path = _populated_db(tmp_path)

        result = runner.invoke(app, ["search", "猫", "--db", str(db_path)])

        assert result.exit_code == 0
        assert "No matches found" in result.stdout

    def test_search_missing_database(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["search", "虫", "--db", str(tmp_path / "missing.db")])

        assert result.exit_code != 0


class TestShowCommand:
    def test_show_prints_content(self, tmp_path: Path) -> None:
        db_path = _populated_db(tmp_path)

        result = runner.invoke(app, ["show", "000001", "11", "--db", str(db_path)])

        assert result.exit_code == 0
        assert "虫とココアの話" in result.stdout

    def test_show_unknown_work(self, tmp_path: Path) -> None:
        db_path = _populated_db(tmp_path)

        result = runner.invoke(app, ["show", "000001", "99", "--db", str(db_path)])

        assert result.exit_code == 1
