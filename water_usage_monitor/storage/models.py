"""
Data models for storage layer.

Defines meters, usage records, alerts, and users.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

from water_usage_monitor.core.validator import is_valid_date, is_valid_usage_amount
from water_usage_monitor.utils.logger import get_logger

logger = get_logger(__name__)


class AlertType(Enum):
    """Kinds of alert the monitor can raise."""
    HIGH_USAGE = "HIGH_USAGE"
    LOW_USAGE = "LOW_USAGE"


@dataclass
class WaterMeter:
    """A tracked water meter.

    Only ``location`` and ``owner_name`` may change after creation.
    """
    meter_id: str
    location: str
    owner_name: str

    def __post_init__(self):
        if not self.meter_id or not self.meter_id.strip():
            raise ValueError("meter_id cannot be empty")

    def __setattr__(self, name, value):
        if name == "meter_id" and "meter_id" in self.__dict__:
            raise AttributeError("meter_id cannot be reassigned")
        super().__setattr__(name, value)


@dataclass
class UsageRecord:
    """One dated liters-measurement for a meter.

    ``record_id`` and ``meter_id`` are fixed for the life of the record;
    ``date`` and ``usage_amount`` may be corrected through :meth:`correct`.
    """
    record_id: int
    meter_id: str
    date: date
    usage_amount: float

    def __post_init__(self):
        """Validate record identity and amount."""
        if self.record_id <= 0:
            raise ValueError("record_id must be > 0")
        if not self.meter_id or not self.meter_id.strip():
            raise ValueError("meter_id cannot be empty")
        if self.usage_amount < 0:
            raise ValueError("usage_amount cannot be negative")

    def __setattr__(self, name, value):
        if name in ("record_id", "meter_id") and name in self.__dict__:
            raise AttributeError(f"{name} cannot be reassigned")
        super().__setattr__(name, value)

    def correct(
        self,
        date: Optional[date] = None,
        usage_amount: Optional[float] = None
    ) -> None:
        """Correct the date and/or amount of this record.

        Both values are checked before either is applied, so a failed
        correction leaves the record unchanged.

        Args:
            date: Corrected calendar date
            usage_amount: Corrected amount in liters

        Raises:
            ValueError: If a new value would fail validation
        """
        if date is not None and not is_valid_date(date):
            raise ValueError(f"Invalid date for record {self.record_id}: {date}")
        if usage_amount is not None and not is_valid_usage_amount(usage_amount):
            raise ValueError(
                f"Invalid usage amount for record {self.record_id}: {usage_amount}"
            )

        if date is not None:
            self.date = date
        if usage_amount is not None:
            self.usage_amount = usage_amount

    def __str__(self) -> str:
        return (
            f"Record[{self.record_id}]: {self.meter_id} - "
            f"{self.usage_amount:.2f} liters on {self.date.isoformat()}"
        )


@dataclass(frozen=True)
class Alert:
    """Immutable notice that usage crossed a threshold."""
    alert_id: int
    meter_id: str
    alert_type: AlertType
    alert_message: str
    alert_date: date = field(default_factory=date.today)

    def __post_init__(self):
        if self.alert_id <= 0:
            raise ValueError("alert_id must be > 0")

    def details(self) -> str:
        """One-line rendering used by alert listings."""
        return (
            f"Alert[{self.alert_id}]: {self.alert_type.value} - "
            f"{self.alert_message} ({self.meter_id}) on {self.alert_date.isoformat()}"
        )


class User:
    """A resident linked to a single meter."""

    def __init__(self, user_id: str, linked_meter_id: str):
        self.user_id = user_id
        self.linked_meter_id = linked_meter_id
        self.is_logged_in = False

    @property
    def is_logged_out(self) -> bool:
        return not self.is_logged_in

    def login(self, meter_id: str) -> bool:
        """Log in when ``meter_id`` matches the linked meter exactly."""
        if self.linked_meter_id == meter_id:
            self.is_logged_in = True
            return True
        return False

    def logout(self) -> None:
        self.is_logged_in = False

    def view_usage_report(self) -> str:
        if not self.is_logged_in:
            return "Please log in first."
        return f"Usage report for meter: {self.linked_meter_id}"

    def receive_alert(self, alert: Alert) -> bool:
        """Deliver an alert to the user.

        Returns:
            True if the user was logged in and the alert was delivered
        """
        if not self.is_logged_in:
            return False
        logger.info("Alert received by %s: %s", self.user_id, alert.alert_message)
        return True
