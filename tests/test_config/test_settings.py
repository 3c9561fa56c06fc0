"""Tests for settings, logging helpers and application bootstrap."""

import os
from unittest.mock import Mock, patch

import pytest
from pydantic import ValidationError

from support_tracker.bootstrap import build_components, build_store
from support_tracker.config.logging import parse_file_size
from support_tracker.config.settings import Settings, get_settings
from support_tracker.ormdb.store import SqlWatchlistStore
from support_tracker.store import JsonFileWatchlistStore


class TestSettings:
    """Test settings defaults and validation."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.refresh_interval_seconds == 10.0
        assert settings.refresh_initial_delay_seconds == 5.0
        assert settings.endpoint_port == 3000
        assert settings.store_backend == "database"
        assert settings.max_tracked_symbols == 0

    def test_reads_environment(self):
        env = {
            "REFRESH_INTERVAL_SECONDS": "30",
            "STORE_BACKEND": "JSON",
            "LOG_LEVEL": "debug",
        }
        with patch.dict(os.environ, env):
            settings = Settings(_env_file=None)

        assert settings.refresh_interval_seconds == 30.0
        assert settings.store_backend == "json"
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"environment": "staging"},
            {"refresh_interval_seconds": 0},
            {"refresh_initial_delay_seconds": -1},
            {"store_backend": "redis"},
            {"endpoint_port": 70000},
            {"log_format": "xml"},
            {"max_tracked_symbols": -1},
        ],
    )
    def test_invalid_values(self, overrides):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **overrides)

    def test_database_url_defaults_to_sqlite_in_data_directory(self, tmp_path):
        settings = Settings(_env_file=None, data_directory=str(tmp_path / "data"))

        url = settings.get_database_url()

        assert url == f"sqlite:///{tmp_path / 'data' / 'support_tracker.db'}"
        assert (tmp_path / "data").is_dir()

    def test_explicit_database_url(self):
        settings = Settings(_env_file=None, database_url="sqlite://")

        assert settings.get_database_url() == "sqlite://"

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestParseFileSize:
    """Test log rotation size parsing."""

    @pytest.mark.parametrize(
        "size,expected",
        [("512KB", 512 * 1024), ("10MB", 10 * 1024 * 1024), ("1gb", 1024**3), ("100", 100)],
    )
    def test_parse(self, size, expected):
        assert parse_file_size(size) == expected


class TestBootstrap:
    """Test component wiring."""

    def test_json_backend(self, tmp_path):
        settings = Settings(
            _env_file=None,
            store_backend="json",
            json_store_path=str(tmp_path / "stocks.json"),
        )

        store = build_store(settings)

        assert isinstance(store, JsonFileWatchlistStore)

    @patch("support_tracker.ormdb.get_session_factory")
    @patch("support_tracker.ormdb.create_tables")
    def test_database_backend(self, mock_create_tables, mock_factory):
        store = build_store(Settings(_env_file=None))

        mock_create_tables.assert_called_once()
        assert isinstance(store, SqlWatchlistStore)
        assert store.session_factory is mock_factory.return_value

    def test_components_share_locks_and_store(self, json_store):
        quote_source = Mock()

        components = build_components(
            Settings(_env_file=None, max_tracked_symbols=5, refresh_interval_seconds=30),
            store=json_store,
            quote_source=quote_source,
        )

        assert components.watchlist_service.store is json_store
        assert components.refresher.store is json_store
        assert components.watchlist_service.locks is components.locks
        assert components.refresher.locks is components.locks
        assert components.watchlist_service.max_tracked_symbols == 5
        assert components.refresh_scheduler.refresher is components.refresher
        assert components.refresh_scheduler.interval.total_seconds() == 30
        assert not components.refresh_scheduler.is_running
