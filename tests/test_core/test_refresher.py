"""Tests for the batched price refresh cycle."""

from unittest.mock import Mock

from support_tracker.core.refresher import PriceRefresher, RefreshResult
from support_tracker.exceptions import QuoteSourceError, StoreError


class TestPriceRefresher:
    """Test refresh cycles against both store backends."""

    def test_empty_watchlist_skips_quote_request(self, refresher, quote_source):
        result = refresher.run_cycle()

        assert result.succeeded
        assert result.total == 0
        assert quote_source.calls == []

    def test_updates_price_and_derived_fields(
        self, store, refresher, quote_source, record_factory
    ):
        store.insert(record_factory("AAPL", 140.0, [145.0, 130.0]))
        quote_source.set_price("AAPL", 133.0)

        result = refresher.run_cycle()

        assert result.succeeded
        assert result.updated == 1
        record = store.find_by_symbol("AAPL")
        assert record.last_price == 133.0
        assert record.nearest_support == 130.0
        assert record.distance_to_nearest_support == 3.0
        assert record.distance_percent == 2.31
        assert record.display_name == "AAPL Inc."
        assert record.last_updated > record.created_at

    def test_single_batched_request(self, store, refresher, quote_source, record_factory):
        store.insert(record_factory("AAPL", 140.0, [130.0]))
        store.insert(record_factory("MSFT", 400.0, [390.0]))

        refresher.run_cycle()

        assert len(quote_source.calls) == 1
        assert sorted(quote_source.calls[0]) == ["AAPL", "MSFT"]

    def test_missing_quote_keeps_previous_values(
        self, store, refresher, quote_source, record_factory
    ):
        original = record_factory("GONE", 12.0, [10.0])
        store.insert(original)
        store.insert(record_factory("AAPL", 140.0, [130.0]))

        result = refresher.run_cycle()

        assert result.succeeded
        assert result.updated == 1
        assert result.skipped == ["GONE"]
        assert store.find_by_symbol("GONE") == original

    def test_quote_failure_writes_nothing(
        self, store, failing_quote_source, locks, record_factory
    ):
        original = record_factory("AAPL", 140.0, [130.0])
        store.insert(original)
        refresher = PriceRefresher(store, failing_quote_source, locks=locks)

        result = refresher.run_cycle()

        assert not result.succeeded
        assert "upstream unavailable" in result.error
        assert result.updated == 0
        assert store.find_by_symbol("AAPL") == original

    def test_unexpected_error_is_contained(self, quote_source):
        store = Mock()
        store.list_all.side_effect = StoreError("read", "disk gone")
        refresher = PriceRefresher(store, quote_source)

        result = refresher.run_cycle()

        assert result.error == "Store read failed: disk gone"
        assert result.duration_ms >= 0

    def test_symbol_deleted_mid_cycle_is_not_recreated(
        self, store, quote_source, locks, record_factory
    ):
        store.insert(record_factory("AAPL", 140.0, [130.0]))
        store.insert(record_factory("MSFT", 400.0, [390.0]))

        class DeletingSource:
            """Removes MSFT while the quote request is in flight."""

            def get_prices(self, symbols):
                store.delete_by_symbol("MSFT")
                return quote_source.get_prices(symbols)

        result = PriceRefresher(store, DeletingSource(), locks=locks).run_cycle()

        assert result.updated == 1
        assert result.skipped == ["MSFT"]
        assert store.find_by_symbol("MSFT") is None

    def test_edit_during_cycle_is_preserved(
        self, store, quote_source, locks, record_factory
    ):
        store.insert(record_factory("AAPL", 140.0, [130.0]))

        class EditingSource:
            """Replaces AAPL's levels while the quote request is in flight."""

            def get_prices(self, symbols):
                current = store.find_by_symbol("AAPL")
                store.update(current.model_copy(update={"support_levels": [149.0]}))
                return quote_source.get_prices(symbols)

        PriceRefresher(store, EditingSource(), locks=locks).run_cycle()

        record = store.find_by_symbol("AAPL")
        assert record.support_levels == [149.0]
        assert record.nearest_support == 149.0
        assert record.distance_to_nearest_support == 1.0


class TestRefreshResult:
    """Test refresh result reporting."""

    def test_as_dict(self):
        result = RefreshResult(total=3, updated=2, skipped=["X"], duration_ms=12.345)

        data = result.as_dict()

        assert data["total"] == 3
        assert data["updated"] == 2
        assert data["skipped"] == ["X"]
        assert data["error"] is None
        assert data["duration_ms"] == 12.3
        assert isinstance(data["started_at"], str)

    def test_error_marks_failure(self):
        assert not RefreshResult(error=str(QuoteSourceError("boom"))).succeeded
