"""
Daily usage thresholds.

Checks a single day's reading against fixed high/low limits and raises
an alert through the alert center when a limit is crossed.

Check Order:
1. High usage - reading strictly above ``daily_high``
2. Low usage - reading strictly below ``daily_low``
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from .alerts import AlertCenter

DEFAULT_DAILY_HIGH = 180.0
DEFAULT_DAILY_LOW = 50.0


class DailyUsageLevel(Enum):
    """Outcome of a daily threshold check."""
    NORMAL = auto()
    LOW = auto()
    HIGH = auto()


@dataclass(frozen=True)
class DailyThresholds:
    """Limits for a single day's reading, in liters."""
    high: float = DEFAULT_DAILY_HIGH
    low: float = DEFAULT_DAILY_LOW

    def __post_init__(self):
        """Validate the limits are ordered."""
        if self.low < 0:
            raise ValueError("low threshold cannot be negative")
        if self.high <= self.low:
            raise ValueError("high threshold must be greater than low threshold")


def classify_daily_usage(usage: float, thresholds: DailyThresholds) -> DailyUsageLevel:
    if usage > thresholds.high:
        return DailyUsageLevel.HIGH
    if usage < thresholds.low:
        return DailyUsageLevel.LOW
    return DailyUsageLevel.NORMAL


def check_daily_usage(
    alert_center: AlertCenter,
    meter_id: Optional[str],
    usage: float,
    thresholds: Optional[DailyThresholds] = None
) -> DailyUsageLevel:
    """Raise a high or low usage alert when a daily reading crosses a limit.

    Args:
        alert_center: Alert log to record into
        meter_id: Meter the reading belongs to (None is logged as UNKNOWN)
        usage: Today's reading in liters
        thresholds: Limits to apply (defaults to 180 L high / 50 L low)

    Returns:
        The level the reading was classified as
    """
    thresholds = thresholds or DailyThresholds()
    level = classify_daily_usage(usage, thresholds)

    if level == DailyUsageLevel.HIGH:
        alert_center.add_high_usage(meter_id, usage, thresholds.high)
    elif level == DailyUsageLevel.LOW:
        alert_center.add_low_usage(meter_id, usage, thresholds.low)

    return level
