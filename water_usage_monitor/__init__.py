"""
Water Usage Monitor.

Tracks per-meter water usage readings, flags abnormal consumption,
and produces usage reports.
"""

__version__ = "0.1.0"
