"""
Water usage monitor.

Coordinates validated ingestion of usage records, abnormal-usage
detection, and report generation.

Ingestion Order:
1. Validation - meter ID shape, amount range, date window
2. Storage - record appended with a fresh ID
3. Detection - trailing-window average re-evaluated for the meter
"""

import threading
from datetime import date, timedelta
from typing import List, Optional

from .alerts import AlertCenter
from .anomaly import detect_abnormal_usage, detection_window
from .reports import Report, UsageReport
from .thresholds import DailyThresholds, DailyUsageLevel, check_daily_usage
from .validator import failed_checks
from water_usage_monitor.config.loader import MonitorConfig, default_monitor_config
from water_usage_monitor.storage.models import Alert, AlertType, UsageRecord, WaterMeter
from water_usage_monitor.storage.repository import UsageRepository
from water_usage_monitor.utils.logger import get_logger

logger = get_logger(__name__)


class UsageMonitor:
    """In-memory monitor for a fixed set of water meters.

    The monitor keeps its own history of abnormal-usage alerts, separate
    from the alert center's log. Both draw IDs from the alert center's
    sequence.
    """

    def __init__(
        self,
        config: Optional[MonitorConfig] = None,
        alert_center: Optional[AlertCenter] = None
    ):
        """Initialize the monitor and register the configured meters.

        Args:
            config: Thresholds, windows, and seed meters (defaults built in)
            alert_center: Shared alert log (a new one is created if omitted)
        """
        self.config = config or default_monitor_config()
        self.alert_center = alert_center or AlertCenter()
        self.repository = UsageRepository(
            WaterMeter(m.meter_id, m.location, m.owner_name)
            for m in self.config.meters
        )
        self.daily_thresholds = DailyThresholds(
            high=self.config.thresholds.daily_high,
            low=self.config.thresholds.daily_low
        )
        self._alerts_lock = threading.Lock()
        self._alerts: List[Alert] = []

    def add_usage_record(
        self,
        meter_id: str,
        usage_date: date,
        amount: float
    ) -> Optional[UsageRecord]:
        """Validate and store a usage reading, then re-check the meter.

        Invalid readings are dropped without raising; nothing is stored
        and no alert is raised.

        Args:
            meter_id: Meter the reading belongs to
            usage_date: Calendar date of the reading
            amount: Amount in liters

        Returns:
            The stored record, or None if the reading was rejected
        """
        failures = failed_checks(meter_id, usage_date, amount)
        if "usage_amount" not in failures and amount > self.config.thresholds.max_usage:
            failures.append("usage_amount")
        if failures:
            logger.info(
                "Rejected usage record for %r on %s (%s L): failed %s",
                meter_id, usage_date, amount, ", ".join(failures)
            )
            return None

        record = self.repository.add_record(meter_id, usage_date, amount)
        logger.debug(
            "Stored record %d for %s on %s: %.2f L",
            record.record_id, meter_id, usage_date.isoformat(), amount
        )

        self.check_for_abnormal_usage(meter_id)
        return record

    def record_daily_usage(
        self,
        meter_id: str,
        amount: float,
        usage_date: Optional[date] = None
    ) -> Optional[DailyUsageLevel]:
        """Store a day's reading and check it against the daily limits.

        Args:
            meter_id: Meter the reading belongs to
            amount: Amount in liters
            usage_date: Calendar date (defaults to today)

        Returns:
            The daily usage level, or None if the reading was rejected
        """
        usage_date = usage_date or date.today()
        record = self.add_usage_record(meter_id, usage_date, amount)
        if record is None:
            return None
        return check_daily_usage(self.alert_center, meter_id, amount, self.daily_thresholds)

    def check_for_abnormal_usage(self, meter_id: str) -> bool:
        """Check a meter's trailing-window average and alert if too high.

        Args:
            meter_id: Meter to check

        Returns:
            True if abnormal usage was detected and an alert appended
        """
        windows = self.config.windows
        start_date, end_date = detection_window(date.today(), windows.abnormal_days)
        recent_records = self.get_usage_history(meter_id, start_date, end_date)

        abnormal = detect_abnormal_usage(
            meter_id,
            recent_records,
            threshold=self.config.thresholds.abnormal_average,
            min_records=windows.min_records
        )
        if abnormal is None:
            return False

        with self._alerts_lock:
            alert = Alert(
                alert_id=self.alert_center.id_sequence.next_id(),
                meter_id=meter_id,
                alert_type=AlertType.HIGH_USAGE,
                alert_message=abnormal.message
            )
            self._alerts.append(alert)
        logger.warning("Alert raised: %s", alert.details())
        return True

    def generate_report(self, meter_id: str, period: str) -> Report:
        """Build a usage report over the trailing report window.

        ``period`` is only a display label; the queried window is always
        the last ``report_days`` days ending today.

        Args:
            meter_id: Meter to report on
            period: Label shown in the report

        Returns:
            UsageReport over a snapshot of the matching records
        """
        end_date = date.today()
        start_date = end_date - timedelta(days=self.config.windows.report_days)
        period_records = self.get_usage_history(meter_id, start_date, end_date)
        return UsageReport(meter_id, period_records, period)

    def get_usage_history(
        self,
        meter_id: str,
        start_date: date,
        end_date: date
    ) -> List[UsageRecord]:
        """Records for a meter within ``[start_date, end_date]``, oldest first."""
        return self.repository.get_usage_history(meter_id, start_date, end_date)

    def bind_meter_to_user(self, user_id: str, meter_id: str) -> bool:
        """Check whether a meter exists for binding.

        No binding is stored; this only confirms the meter is known.
        """
        return self.repository.has_meter(meter_id)

    def find_meter(self, meter_id: str) -> Optional[WaterMeter]:
        return self.repository.find_meter(meter_id)

    def get_meters(self) -> List[WaterMeter]:
        return self.repository.get_meters()

    def get_usage_records(self) -> List[UsageRecord]:
        return self.repository.get_records()

    def get_alerts(self) -> List[Alert]:
        """Snapshot of the monitor's own abnormal-usage alerts."""
        with self._alerts_lock:
            return list(self._alerts)
