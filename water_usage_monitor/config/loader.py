"""
Configuration management and loading.

Handles monitor thresholds, detection windows, and seed meters.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Dict, List, Tuple

import yaml

from water_usage_monitor.core.anomaly import (
    DEFAULT_ABNORMAL_AVERAGE,
    DEFAULT_MIN_RECORDS,
    DEFAULT_WINDOW_DAYS
)
from water_usage_monitor.core.thresholds import DEFAULT_DAILY_HIGH, DEFAULT_DAILY_LOW
from water_usage_monitor.core.validator import MAX_USAGE_LITERS, is_valid_meter_id

DEFAULT_REPORT_DAYS = 30


@dataclass(frozen=True)
class ThresholdConfig:
    """Usage limits in liters."""
    abnormal_average: float = DEFAULT_ABNORMAL_AVERAGE
    daily_high: float = DEFAULT_DAILY_HIGH
    daily_low: float = DEFAULT_DAILY_LOW
    max_usage: float = MAX_USAGE_LITERS

    def __post_init__(self):
        """Validate threshold values are positive and ordered."""
        if self.abnormal_average <= 0:
            raise ValueError("abnormal_average must be > 0")
        if self.daily_high <= 0:
            raise ValueError("daily_high must be > 0")
        if self.daily_low <= 0:
            raise ValueError("daily_low must be > 0")
        if self.daily_low >= self.daily_high:
            raise ValueError("daily_low must be < daily_high")
        if self.max_usage <= 0 or self.max_usage > MAX_USAGE_LITERS:
            raise ValueError(f"max_usage must be > 0 and <= {MAX_USAGE_LITERS:g}")


@dataclass(frozen=True)
class WindowConfig:
    """Lengths of the trailing query windows."""
    abnormal_days: int = DEFAULT_WINDOW_DAYS
    report_days: int = DEFAULT_REPORT_DAYS
    min_records: int = DEFAULT_MIN_RECORDS

    def __post_init__(self):
        if self.abnormal_days <= 0:
            raise ValueError("abnormal_days must be > 0")
        if self.report_days <= 0:
            raise ValueError("report_days must be > 0")
        if self.min_records <= 0:
            raise ValueError("min_records must be > 0")


@dataclass(frozen=True)
class MeterConfig:
    """A meter registered at bootstrap."""
    meter_id: str
    location: str
    owner_name: str

    def __post_init__(self):
        if not is_valid_meter_id(self.meter_id):
            raise ValueError(f"Invalid meter_id: {self.meter_id!r}")


DEFAULT_METERS = (
    MeterConfig("WM001", "Building A", "John Doe"),
    MeterConfig("WM002", "Building B", "Jane Smith"),
    MeterConfig("WM003", "Building C", "Bob Johnson"),
)


@dataclass(frozen=True)
class MonitorConfig:
    """Complete monitor configuration."""
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)
    windows: WindowConfig = field(default_factory=WindowConfig)
    meters: Tuple[MeterConfig, ...] = DEFAULT_METERS


def default_monitor_config() -> MonitorConfig:
    """Built-in configuration: 200 L/day average, 180/50 L daily, three meters."""
    return MonitorConfig()


def load_monitor_config(path: str) -> MonitorConfig:
    """Load and validate monitor configuration from YAML file.

    Every section is optional; missing sections and keys fall back to
    the built-in defaults. Unknown keys are rejected so typos never pass
    silently.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated MonitorConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Monitor config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if raw_config is None:
        return default_monitor_config()
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a dictionary")

    allowed_top_keys = {'thresholds', 'windows', 'meters'}
    unknown_keys = set(raw_config.keys()) - allowed_top_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    thresholds = ThresholdConfig(**_parse_numbers(
        raw_config.get('thresholds', {}),
        'thresholds',
        {'abnormal_average', 'daily_high', 'daily_low', 'max_usage'},
        float
    ))
    windows = WindowConfig(**_parse_numbers(
        raw_config.get('windows', {}),
        'windows',
        {'abnormal_days', 'report_days', 'min_records'},
        int
    ))

    meters = DEFAULT_METERS
    if 'meters' in raw_config:
        meters = _parse_meters(raw_config['meters'])

    return MonitorConfig(thresholds=thresholds, windows=windows, meters=meters)


def _parse_numbers(data, path: str, allowed_keys: set, kind: type) -> Dict:
    """Parse a flat section of numeric settings.

    Args:
        data: Section data
        path: Section name for error messages
        allowed_keys: Keys the section may contain
        kind: ``int`` or ``float``

    Returns:
        Dictionary of converted values for the keys present

    Raises:
        ValueError: If the section is malformed
    """
    if not isinstance(data, dict):
        raise ValueError(f"'{path}' must be a dictionary")

    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown keys in {path}: {unknown_keys}")

    parsed = {}
    for key, value in data.items():
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"'{key}' in {path} must be a number")
        if kind is int and value != int(value):
            raise ValueError(f"'{key}' in {path} must be a whole number")
        parsed[key] = kind(value)
    return parsed


def _parse_meters(data) -> Tuple[MeterConfig, ...]:
    if not isinstance(data, list):
        raise ValueError("'meters' must be a list")

    required_keys = {'meter_id', 'location', 'owner_name'}
    meters = []
    seen = set()
    for index, entry in enumerate(data):
        path = f"meters[{index}]"
        if not isinstance(entry, dict):
            raise ValueError(f"{path} must be a dictionary")

        unknown_keys = set(entry.keys()) - required_keys
        if unknown_keys:
            raise ValueError(f"Unknown keys in {path}: {unknown_keys}")
        missing_keys = required_keys - set(entry.keys())
        if missing_keys:
            raise ValueError(f"Missing keys in {path}: {missing_keys}")

        for key in required_keys:
            if not isinstance(entry[key], str):
                raise ValueError(f"'{key}' in {path} must be a string")

        if entry['meter_id'] in seen:
            raise ValueError(f"Duplicate meter_id in {path}: {entry['meter_id']}")
        seen.add(entry['meter_id'])

        meters.append(MeterConfig(
            meter_id=entry['meter_id'],
            location=entry['location'],
            owner_name=entry['owner_name']
        ))
    return tuple(meters)


@dataclass(frozen=True)
class Reading:
    """One raw reading from a readings file, not yet validated."""
    meter_id: str
    date: date
    amount: float


def load_readings(path: str) -> List[Reading]:
    """Load raw usage readings from a YAML file.

    The file holds a list of ``{meter_id, date, amount}`` mappings.
    Only the file's structure is checked here; whether each reading is
    acceptable is left to the monitor.

    Args:
        path: Path to YAML readings file

    Returns:
        Readings in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If an entry is malformed
    """
    readings_path = Path(path)
    if not readings_path.exists():
        raise FileNotFoundError(f"Readings file not found: {path}")

    with open(readings_path, 'r', encoding='utf-8') as f:
        try:
            raw_readings = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in readings file {path}: {e}")

    if raw_readings is None:
        return []
    if not isinstance(raw_readings, list):
        raise ValueError("Readings file must contain a list")

    readings = []
    for index, entry in enumerate(raw_readings):
        item = f"readings[{index}]"
        if not isinstance(entry, dict):
            raise ValueError(f"{item} must be a dictionary")
        missing_keys = {'meter_id', 'date', 'amount'} - set(entry.keys())
        if missing_keys:
            raise ValueError(f"Missing keys in {item}: {missing_keys}")

        amount = entry['amount']
        if isinstance(amount, bool) or not isinstance(amount, (int, float)):
            raise ValueError(f"'amount' in {item} must be a number")

        readings.append(Reading(
            meter_id=str(entry['meter_id']),
            date=_parse_date(entry['date'], item),
            amount=float(amount)
        ))
    return readings


def _parse_date(value, item: str) -> date:
    # PyYAML already turns unquoted ISO dates into date objects
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            raise ValueError(f"'date' in {item} must be an ISO date (YYYY-MM-DD)")
    raise ValueError(f"'date' in {item} must be an ISO date (YYYY-MM-DD)")
