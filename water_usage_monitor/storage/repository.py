"""
Repository pattern for data access.

Holds meters and usage records in memory for the life of the process.
"""

import itertools
import threading
from datetime import date
from typing import Iterable, List, Optional

from .models import UsageRecord, WaterMeter


class IdSequence:
    """Thread-safe, strictly increasing integer IDs starting at 1."""

    def __init__(self, start: int = 1):
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next_id(self) -> int:
        with self._lock:
            return next(self._counter)


class UsageRepository:
    """Append-only, in-memory store of meters and usage records.

    Record IDs are issued under the same lock as insertion, so the
    insertion order of records always matches ID order. Every read
    copies under the lock and returns the copy.
    """

    def __init__(self, meters: Optional[Iterable[WaterMeter]] = None):
        """Initialize the repository.

        Args:
            meters: Seed meters registered at bootstrap
        """
        self._lock = threading.Lock()
        self._meters: List[WaterMeter] = list(meters or [])
        self._records: List[UsageRecord] = []
        self._record_ids = itertools.count(1)

    def add_record(self, meter_id: str, usage_date: date, usage_amount: float) -> UsageRecord:
        """Create and append a usage record with a fresh ID.

        The caller is responsible for validating the values first.

        Args:
            meter_id: Meter the reading belongs to
            usage_date: Calendar date of the reading
            usage_amount: Amount in liters

        Returns:
            The stored record
        """
        with self._lock:
            record = UsageRecord(
                record_id=next(self._record_ids),
                meter_id=meter_id,
                date=usage_date,
                usage_amount=usage_amount
            )
            self._records.append(record)
        return record

    def get_records(self) -> List[UsageRecord]:
        """All records in arrival order."""
        with self._lock:
            return list(self._records)

    def get_meters(self) -> List[WaterMeter]:
        with self._lock:
            return list(self._meters)

    def find_meter(self, meter_id: str) -> Optional[WaterMeter]:
        with self._lock:
            for meter in self._meters:
                if meter.meter_id == meter_id:
                    return meter
        return None

    def has_meter(self, meter_id: str) -> bool:
        return self.find_meter(meter_id) is not None

    def get_usage_history(
        self,
        meter_id: str,
        start_date: date,
        end_date: date
    ) -> List[UsageRecord]:
        """Get a meter's records within an inclusive date range.

        Args:
            meter_id: Meter to filter on
            start_date: First date included
            end_date: Last date included

        Returns:
            Matching records sorted by date ascending (ties keep arrival order)
        """
        snapshot = self.get_records()
        matching = [
            record for record in snapshot
            if record.meter_id == meter_id and start_date <= record.date <= end_date
        ]
        # sorted() is stable, so same-day records stay in arrival order
        return sorted(matching, key=lambda r: r.date)

    def count(self) -> int:
        with self._lock:
            return len(self._records)
