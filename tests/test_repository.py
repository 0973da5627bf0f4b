"""
Unit tests for the in-memory repository.

Tests ID issuance, history queries, snapshots, and concurrent appends.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta

import pytest

from water_usage_monitor.storage.models import WaterMeter
from water_usage_monitor.storage.repository import IdSequence, UsageRepository


@pytest.fixture
def repository():
    """Create a repository seeded with two meters."""
    return UsageRepository([
        WaterMeter("WM001", "Building A", "John Doe"),
        WaterMeter("WM002", "Building B", "Jane Smith"),
    ])


class TestIdSequence:
    """Test ID sequence issuance."""

    def test_ids_start_at_one_and_increase(self):
        sequence = IdSequence()

        assert [sequence.next_id() for _ in range(3)] == [1, 2, 3]

    def test_concurrent_ids_are_unique(self):
        """Test no two threads receive the same ID."""
        sequence = IdSequence()

        with ThreadPoolExecutor(max_workers=8) as pool:
            ids = list(pool.map(lambda _: sequence.next_id(), range(2000)))

        assert len(set(ids)) == 2000
        assert sorted(ids) == list(range(1, 2001))


class TestRecordStorage:
    """Test record insertion and snapshots."""

    def test_record_ids_strictly_increase(self, repository):
        today = date.today()

        first = repository.add_record("WM001", today, 10.0)
        second = repository.add_record("WM002", today, 20.0)
        third = repository.add_record("WM001", today, 30.0)

        assert first.record_id < second.record_id < third.record_id

    def test_records_kept_in_arrival_order(self, repository):
        """Test insertion order is arrival order, not date order."""
        today = date.today()
        repository.add_record("WM001", today, 10.0)
        repository.add_record("WM001", today - timedelta(days=5), 20.0)

        records = repository.get_records()

        assert [r.usage_amount for r in records] == [10.0, 20.0]

    def test_get_records_returns_copy(self, repository):
        """Test mutating the returned list does not affect the store."""
        repository.add_record("WM001", date.today(), 10.0)

        snapshot = repository.get_records()
        snapshot.clear()

        assert repository.count() == 1

    def test_concurrent_appends_are_all_kept(self, repository):
        """Test concurrent inserts neither lose nor duplicate records."""
        today = date.today()

        with ThreadPoolExecutor(max_workers=8) as pool:
            created = list(pool.map(
                lambda i: repository.add_record("WM001", today, float(i % 100)),
                range(500)
            ))

        ids = [record.record_id for record in created]
        stored = repository.get_records()
        assert len(set(ids)) == 500
        assert len(stored) == 500
        # Arrival order matches ID order
        assert [r.record_id for r in stored] == sorted(ids)


class TestUsageHistory:
    """Test date-range history queries."""

    def test_history_sorted_by_date(self, repository):
        today = date.today()
        repository.add_record("WM001", today - timedelta(days=1), 1.0)
        repository.add_record("WM001", today - timedelta(days=3), 3.0)
        repository.add_record("WM001", today - timedelta(days=2), 2.0)

        history = repository.get_usage_history("WM001", today - timedelta(days=10), today)

        assert [r.usage_amount for r in history] == [3.0, 2.0, 1.0]

    def test_history_bounds_are_inclusive(self, repository):
        """Test records on both bounds are returned and outside ones are not."""
        today = date.today()
        start = today - timedelta(days=5)
        repository.add_record("WM001", start - timedelta(days=1), 1.0)
        repository.add_record("WM001", start, 2.0)
        repository.add_record("WM001", today, 3.0)

        history = repository.get_usage_history("WM001", start, today)

        assert [r.usage_amount for r in history] == [2.0, 3.0]
        assert all(start <= r.date <= today for r in history)

    def test_same_day_records_keep_arrival_order(self, repository):
        """Test the sort is stable for records sharing a date."""
        today = date.today()
        repository.add_record("WM001", today, 1.0)
        repository.add_record("WM001", today - timedelta(days=1), 0.5)
        repository.add_record("WM001", today, 2.0)

        history = repository.get_usage_history("WM001", today - timedelta(days=1), today)

        assert [r.usage_amount for r in history] == [0.5, 1.0, 2.0]

    def test_history_filters_by_meter(self, repository):
        today = date.today()
        repository.add_record("WM001", today, 1.0)
        repository.add_record("WM002", today, 2.0)

        history = repository.get_usage_history("WM002", today, today)

        assert [r.meter_id for r in history] == ["WM002"]

    def test_empty_history(self, repository):
        assert repository.get_usage_history("WM003", date.today(), date.today()) == []


class TestMeters:
    """Test meter lookups."""

    def test_find_meter(self, repository):
        meter = repository.find_meter("WM002")

        assert meter is not None
        assert meter.owner_name == "Jane Smith"

    def test_unknown_meter(self, repository):
        assert repository.find_meter("WM999") is None
        assert not repository.has_meter("WM999")

    def test_get_meters_returns_copy(self, repository):
        meters = repository.get_meters()
        meters.clear()

        assert len(repository.get_meters()) == 2
