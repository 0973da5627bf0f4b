"""
Abnormal usage detection.

Flags meters whose trailing average consumption is unusually high.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import List, Optional

from .usage_stats import UsageStats, compute_usage_stats
from water_usage_monitor.storage.models import UsageRecord

DEFAULT_ABNORMAL_AVERAGE = 200.0
DEFAULT_WINDOW_DAYS = 7
DEFAULT_MIN_RECORDS = 2


class WindowState(Enum):
    """State of a detection window based on data availability."""
    INSUFFICIENT = "insufficient"  # Too few records to judge
    SUFFICIENT = "sufficient"


@dataclass(frozen=True)
class AbnormalUsage:
    """Detected abnormal usage with details and explanation."""
    meter_id: str
    average_daily: float
    threshold: float
    record_count: int
    message: str


def detection_window(today: date, window_days: int = DEFAULT_WINDOW_DAYS):
    """Inclusive ``(start, end)`` dates of the trailing detection window."""
    return today - timedelta(days=window_days), today


def window_state(stats: UsageStats, min_records: int = DEFAULT_MIN_RECORDS) -> WindowState:
    if stats.record_count >= min_records:
        return WindowState.SUFFICIENT
    return WindowState.INSUFFICIENT


def detect_abnormal_usage(
    meter_id: str,
    records: List[UsageRecord],
    threshold: float = DEFAULT_ABNORMAL_AVERAGE,
    min_records: int = DEFAULT_MIN_RECORDS,
) -> Optional[AbnormalUsage]:
    """Detect abnormal usage from a meter's windowed records.

    The average is total usage divided by the number of records in the
    window, not by the window length. Usage exactly at the threshold
    is not abnormal.

    Args:
        meter_id: Meter being checked
        records: The meter's records inside the detection window
        threshold: Average liters per day above which usage is abnormal
        min_records: Minimum records required before judging

    Returns:
        AbnormalUsage if the average exceeds the threshold, else None
    """
    stats = compute_usage_stats(record.usage_amount for record in records)
    if window_state(stats, min_records) == WindowState.INSUFFICIENT:
        return None

    average = stats.average_daily
    if average <= threshold:
        return None

    return AbnormalUsage(
        meter_id=meter_id,
        average_daily=average,
        threshold=threshold,
        record_count=stats.record_count,
        message=f"High water usage detected: {average:.2f} L/day average"
    )
