"""
Core modules for the Water Usage Monitor.

This package contains validation, abnormal-usage detection, alerting,
reporting, and the monitor that coordinates them.
"""
