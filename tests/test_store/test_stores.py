"""Tests for the watchlist store backends."""

import json
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from support_tracker.exceptions import ConflictError, StoreError
from support_tracker.ormdb.repositories import TrackedStockRepository
from support_tracker.ormdb.store import SqlWatchlistStore
from support_tracker.store import JsonFileWatchlistStore


class TestWatchlistStore:
    """Contract tests run against every backend."""

    def test_empty_store(self, store):
        assert store.list_all() == []
        assert store.find_by_symbol("AAPL") is None

    def test_insert_and_find(self, store, record_factory):
        record = record_factory("AAPL", 150.0, [145.0, 140.0])

        stored = store.insert(record)

        assert stored == record
        assert store.find_by_symbol("AAPL") == record
        assert store.find_by_symbol("aapl") == record

    def test_insert_duplicate_conflicts(self, store, record_factory):
        store.insert(record_factory("AAPL", 150.0, [140.0]))

        with pytest.raises(ConflictError):
            store.insert(record_factory("AAPL", 1.0, [1.0]))

        assert store.find_by_symbol("AAPL").last_price == 150.0

    def test_update_replaces_record(self, store, record_factory):
        store.insert(record_factory("AAPL", 150.0, [140.0]))
        updated = record_factory("AAPL", 120.0, [130.0, 110.0], currency="EUR")

        store.update(updated)

        assert store.find_by_symbol("AAPL") == updated

    def test_update_missing_record_fails(self, store, record_factory):
        with pytest.raises(StoreError):
            store.update(record_factory("AAPL", 150.0, [140.0]))

    def test_delete(self, store, record_factory):
        record = record_factory("AAPL", 150.0, [140.0])
        store.insert(record)
        store.insert(record_factory("MSFT", 410.0, [400.0]))

        assert store.delete_by_symbol("aapl") == record
        assert store.delete_by_symbol("AAPL") is None
        assert [r.symbol for r in store.list_all()] == ["MSFT"]

    def test_records_without_support_round_trip(self, store, record_factory):
        record = record_factory("NEW", 12.0, [])

        store.insert(record)
        stored = store.find_by_symbol("NEW")

        assert stored.support_levels == []
        assert stored.nearest_support is None
        assert stored.distance_percent is None

    def test_timestamps_are_timezone_aware(self, store, record_factory):
        store.insert(record_factory("AAPL", 150.0, [140.0]))

        stored = store.find_by_symbol("AAPL")

        assert stored.created_at.tzinfo is not None
        assert stored.last_updated.tzinfo is not None


class TestJsonFileWatchlistStore:
    """Test file handling of the JSON backend."""

    def test_missing_file_is_created(self, tmp_path):
        path = tmp_path / "nested" / "stocks.json"
        store = JsonFileWatchlistStore(str(path))

        assert store.list_all() == []
        assert json.loads(path.read_text()) == []

    def test_file_holds_json_array(self, json_store, record_factory):
        json_store.insert(record_factory("AAPL", 150.0, [140.0]))

        data = json.loads(json_store.path.read_text())

        assert isinstance(data, list)
        assert data[0]["symbol"] == "AAPL"
        assert data[0]["nearest_support"] == 140.0
        assert data[0]["distance_to_nearest_support"] == 10.0

    def test_no_temp_files_left_behind(self, json_store, record_factory):
        json_store.insert(record_factory("AAPL", 150.0, [140.0]))
        json_store.insert(record_factory("MSFT", 410.0, [400.0]))

        assert [p.name for p in json_store.path.parent.iterdir()] == ["stocks.json"]

    def test_corrupt_file_raises_store_error(self, tmp_path):
        path = tmp_path / "stocks.json"
        path.write_text("{not json")

        with pytest.raises(StoreError) as exc_info:
            JsonFileWatchlistStore(str(path)).list_all()

        assert exc_info.value.operation == "read"

    def test_empty_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "stocks.json"
        path.write_text("")

        assert JsonFileWatchlistStore(str(path)).list_all() == []

    def test_write_failure_raises_store_error(self, json_store, record_factory):
        json_store.list_all()

        with patch("support_tracker.store.os.replace", side_effect=OSError("read-only")):
            with pytest.raises(StoreError) as exc_info:
                json_store.insert(record_factory("AAPL", 150.0, [140.0]))

        assert exc_info.value.operation == "write"
        assert [p.name for p in json_store.path.parent.iterdir()] == ["stocks.json"]


class TestSqlWatchlistStore:
    """Test the SQLAlchemy backend specifics."""

    def test_list_is_ordered_by_symbol(self, sql_store, record_factory):
        for symbol in ("MSFT", "AAPL", "GOOG"):
            sql_store.insert(record_factory(symbol, 100.0, [90.0]))

        assert [r.symbol for r in sql_store.list_all()] == ["AAPL", "GOOG", "MSFT"]

    def test_database_errors_become_store_errors(self, sql_store):
        with patch.object(
            TrackedStockRepository,
            "get_all_stocks",
            side_effect=OperationalError("SELECT", {}, Exception("locked")),
        ):
            with pytest.raises(StoreError) as exc_info:
                sql_store.list_all()

        assert exc_info.value.operation == "list"
        assert exc_info.value.status_code == 500

    def test_repository_closes_its_session(self, sql_session_factory):
        with TrackedStockRepository(session_factory=sql_session_factory) as repo:
            session = repo.session
            assert repo.get_all_stocks() == []

        assert not session.in_transaction()

    def test_default_session_factory(self, sql_session_factory):
        with patch(
            "support_tracker.ormdb.store.get_session_factory",
            return_value=sql_session_factory,
        ):
            store = SqlWatchlistStore()

        assert store.session_factory is sql_session_factory
