"""
Aggregate statistics over usage records.

Shared by the abnormal-usage detector and the usage report.
"""

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class UsageStats:
    """Totals computed from a set of usage records."""
    total_usage: float
    record_count: int

    def __post_init__(self):
        """Validate stats are reasonable."""
        if self.total_usage < 0:
            raise ValueError("total_usage cannot be negative")
        if self.record_count < 0:
            raise ValueError("record_count cannot be negative")

    @property
    def average_daily(self) -> float:
        """Average usage per record.

        Divides by the number of records found, not by the number of
        days in the window. Zero when there are no records.
        """
        if self.record_count == 0:
            return 0.0
        return self.total_usage / self.record_count


def compute_usage_stats(amounts: Iterable[float]) -> UsageStats:
    """Compute total and record count from usage amounts.

    Args:
        amounts: One amount in liters per record

    Returns:
        UsageStats for the amounts; empty input yields zero stats
    """
    values = list(amounts)
    return UsageStats(total_usage=sum(values), record_count=len(values))
