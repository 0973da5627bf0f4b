"""
Usage reports.

Reports are immutable text artifacts derived from a snapshot of usage
records taken when the report is built.
"""

import time
from abc import ABC, abstractmethod
from datetime import date
from enum import Enum
from typing import Iterable, Tuple

from .usage_stats import compute_usage_stats
from water_usage_monitor.storage.models import UsageRecord

REPORT_RULE = "====================================="
TABLE_RULE = "-------------------------"


class ReportKind(Enum):
    """Variants of report the monitor can produce."""
    USAGE = "usage"


def _new_report_id() -> str:
    # Millisecond clock; not unique for reports built in the same millisecond
    return f"RPT{time.time_ns() // 1_000_000}"


class Report(ABC):
    """Base class for generated reports."""

    kind: ReportKind

    def __init__(self, meter_id: str):
        self._report_id = _new_report_id()
        self._meter_id = meter_id
        self._generated_date = date.today()

    @property
    def report_id(self) -> str:
        return self._report_id

    @property
    def meter_id(self) -> str:
        return self._meter_id

    @property
    def generated_date(self) -> date:
        return self._generated_date

    @abstractmethod
    def generate_report(self) -> str:
        """Render the full multi-section report."""

    @abstractmethod
    def get_summary(self) -> str:
        """Render a one-line summary."""


class UsageReport(Report):
    """Report over a snapshot of a meter's usage records.

    The snapshot is copied at construction, so later changes to the
    store or to the caller's list are not reflected. Amounts are
    captured as well, so a record corrected afterwards does not alter
    the report either.
    """

    kind = ReportKind.USAGE

    def __init__(self, meter_id: str, usage_records: Iterable[UsageRecord], period: str):
        super().__init__(meter_id)
        self._period = period
        self._rows: Tuple[Tuple[date, float], ...] = tuple(
            (record.date, record.usage_amount) for record in usage_records
        )
        self._stats = compute_usage_stats(amount for _, amount in self._rows)

    @property
    def period(self) -> str:
        return self._period

    @property
    def rows(self) -> Tuple[Tuple[date, float], ...]:
        """``(date, usage_amount)`` pairs in snapshot order."""
        return self._rows

    @property
    def total_usage(self) -> float:
        return self._stats.total_usage

    @property
    def record_count(self) -> int:
        return self._stats.record_count

    @property
    def average_daily(self) -> float:
        """Total usage divided by the number of records."""
        return self._stats.average_daily

    def generate_report(self) -> str:
        lines = [
            REPORT_RULE,
            "        WATER USAGE REPORT",
            REPORT_RULE,
            "",
            f"Report ID: {self.report_id}",
            f"Meter ID: {self.meter_id}",
            f"Period: {self.period}",
            f"Generated: {self.generated_date.isoformat()}",
            "",
        ]

        if not self._rows:
            lines.append("No usage records found for this period.")
        else:
            lines.append("USAGE RECORDS:")
            lines.append("Date          Usage (Liters)")
            lines.append(TABLE_RULE)
            for usage_date, amount in self._rows:
                lines.append(f"{usage_date.isoformat():<12}  {amount:8.2f}")
            lines.append("")
            lines.append(f"Total Usage: {self.total_usage:.2f} liters")
            lines.append(f"Average Daily: {self.average_daily:.2f} liters")

        lines.append(REPORT_RULE)
        return "\n".join(lines)

    def get_summary(self) -> str:
        if not self._rows:
            return f"No usage data available for {self.period}"
        return (
            f"Period: {self.period} | Total: {self.total_usage:.2f} liters | "
            f"Records: {self.record_count}"
        )
