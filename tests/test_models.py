"""
Unit tests for storage models.

Tests entity invariants, corrections, and renderings.
"""

from datetime import date, timedelta

import pytest

from water_usage_monitor.storage.models import (
    Alert,
    AlertType,
    UsageRecord,
    User,
    WaterMeter
)


class TestWaterMeter:
    """Test the water meter entity."""

    def test_location_and_owner_are_mutable(self):
        meter = WaterMeter("WM001", "Building A", "John Doe")

        meter.location = "Building Z"
        meter.owner_name = "Jane Roe"

        assert meter.location == "Building Z"
        assert meter.owner_name == "Jane Roe"

    def test_meter_id_cannot_be_reassigned(self):
        meter = WaterMeter("WM001", "Building A", "John Doe")

        with pytest.raises(AttributeError):
            meter.meter_id = "WM002"
        assert meter.meter_id == "WM001"

    def test_blank_meter_id_rejected(self):
        with pytest.raises(ValueError, match="meter_id cannot be empty"):
            WaterMeter("  ", "Building A", "John Doe")


class TestUsageRecord:
    """Test the usage record entity."""

    def create_record(self, amount: float = 120.0) -> UsageRecord:
        return UsageRecord(record_id=1, meter_id="WM001", date=date.today(), usage_amount=amount)

    def test_string_rendering(self):
        """Test the one-line rendering of a record."""
        record = UsageRecord(record_id=7, meter_id="WM002", date=date(2024, 5, 1), usage_amount=85.5)

        assert str(record) == "Record[7]: WM002 - 85.50 liters on 2024-05-01"

    def test_identity_fields_are_fixed(self):
        record = self.create_record()

        with pytest.raises(AttributeError):
            record.record_id = 2
        with pytest.raises(AttributeError):
            record.meter_id = "WM002"

    def test_negative_amount_rejected(self):
        with pytest.raises(ValueError, match="usage_amount cannot be negative"):
            self.create_record(amount=-1.0)

    def test_non_positive_id_rejected(self):
        with pytest.raises(ValueError, match="record_id must be > 0"):
            UsageRecord(record_id=0, meter_id="WM001", date=date.today(), usage_amount=1.0)

    def test_correct_updates_date_and_amount(self):
        """Test a valid correction is applied."""
        record = self.create_record()
        yesterday = date.today() - timedelta(days=1)

        record.correct(date=yesterday, usage_amount=99.0)

        assert record.date == yesterday
        assert record.usage_amount == 99.0
        assert record.record_id == 1

    def test_invalid_correction_leaves_record_unchanged(self):
        """Test a correction failing validation changes nothing."""
        record = self.create_record(amount=120.0)
        original_date = record.date

        with pytest.raises(ValueError, match="Invalid usage amount"):
            record.correct(date=date.today() - timedelta(days=2), usage_amount=20000.0)

        assert record.date == original_date
        assert record.usage_amount == 120.0

    def test_future_date_correction_rejected(self):
        record = self.create_record()

        with pytest.raises(ValueError, match="Invalid date"):
            record.correct(date=date.today() + timedelta(days=1))


class TestAlert:
    """Test the alert entity."""

    def test_details_rendering(self):
        """Test the one-line rendering of an alert."""
        alert = Alert(
            alert_id=3,
            meter_id="WM001",
            alert_type=AlertType.HIGH_USAGE,
            alert_message="High water usage detected: 250.00 L/day average",
            alert_date=date(2024, 1, 15)
        )

        assert alert.details() == (
            "Alert[3]: HIGH_USAGE - High water usage detected: 250.00 L/day average "
            "(WM001) on 2024-01-15"
        )

    def test_alert_date_defaults_to_today(self):
        alert = Alert(alert_id=1, meter_id="WM001", alert_type=AlertType.LOW_USAGE, alert_message="m")

        assert alert.alert_date == date.today()

    def test_alert_is_immutable(self):
        alert = Alert(alert_id=1, meter_id="WM001", alert_type=AlertType.LOW_USAGE, alert_message="m")

        with pytest.raises(Exception):
            alert.alert_message = "changed"


class TestUser:
    """Test user login and alert delivery."""

    def test_new_user_is_logged_out(self):
        user = User("U1", "WM001")

        assert not user.is_logged_in
        assert user.is_logged_out
        assert user.view_usage_report() == "Please log in first."

    def test_login_requires_exact_meter_match(self):
        """Test login is case-sensitive on the linked meter."""
        user = User("U1", "WM001")

        assert not user.login("wm001")
        assert not user.login("WM002")
        assert user.login("WM001")
        assert user.view_usage_report() == "Usage report for meter: WM001"

    def test_logout(self):
        user = User("U1", "WM001")
        user.login("WM001")

        user.logout()

        assert user.is_logged_out
        assert user.view_usage_report() == "Please log in first."

    def test_receive_alert_only_when_logged_in(self):
        user = User("U1", "WM001")
        alert = Alert(alert_id=1, meter_id="WM001", alert_type=AlertType.HIGH_USAGE, alert_message="m")

        assert not user.receive_alert(alert)
        user.login("WM001")
        assert user.receive_alert(alert)
