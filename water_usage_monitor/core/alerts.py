"""
Alert log for abnormal usage.

Collects high/low usage notices raised at ingestion time and renders
them for display.
"""

import threading
from datetime import datetime
from typing import List, Optional

from water_usage_monitor.storage.models import Alert, AlertType
from water_usage_monitor.storage.repository import IdSequence
from water_usage_monitor.utils.logger import get_logger

logger = get_logger(__name__)

NO_ALERTS_MESSAGE = "No abnormal usage alerts currently."
UNKNOWN_METER = "UNKNOWN"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"


class AlertCenter:
    """Append-only, thread-safe log of alerts.

    One instance is created per process and passed to the collaborators
    that need it. The ``id_sequence`` is shared with the monitor so that
    alert IDs stay unique across both alert histories.
    """

    def __init__(self, id_sequence: Optional[IdSequence] = None):
        self.id_sequence = id_sequence or IdSequence()
        self._lock = threading.Lock()
        self._alerts: List[Alert] = []

    def add_high_usage(self, meter_id: Optional[str], usage: float, threshold: float) -> Alert:
        """Record that today's usage exceeded a threshold."""
        message = (
            f"Today's usage {usage:.1f} L exceeds threshold {threshold:.1f} L "
            f"at {_timestamp()}"
        )
        return self._append(meter_id, AlertType.HIGH_USAGE, message)

    def add_low_usage(self, meter_id: Optional[str], usage: float, threshold: float) -> Alert:
        """Record that today's usage fell below a threshold."""
        message = (
            f"Today's usage {usage:.1f} L is below threshold {threshold:.1f} L "
            f"at {_timestamp()}"
        )
        return self._append(meter_id, AlertType.LOW_USAGE, message)

    def _append(self, meter_id: Optional[str], alert_type: AlertType, message: str) -> Alert:
        with self._lock:
            alert = Alert(
                alert_id=self.id_sequence.next_id(),
                meter_id=UNKNOWN_METER if meter_id is None else meter_id,
                alert_type=alert_type,
                alert_message=message
            )
            self._alerts.append(alert)
        logger.warning("Alert raised: %s", alert.details())
        return alert

    def get_alerts(self) -> List[Alert]:
        """Snapshot of all alerts in insertion order."""
        with self._lock:
            return list(self._alerts)

    def format_alerts(self) -> str:
        """Render the alert log one alert per line."""
        alerts = self.get_alerts()
        if not alerts:
            return NO_ALERTS_MESSAGE
        return "".join(f"{alert.details()}\n" for alert in alerts)

    def clear(self) -> None:
        with self._lock:
            count = len(self._alerts)
            self._alerts = []
        logger.info("Cleared %d alerts", count)


def _timestamp() -> str:
    return datetime.now().strftime(TIMESTAMP_FORMAT)
