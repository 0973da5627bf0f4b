"""
CLI interface for the Water Usage Monitor.

Every command builds a fresh in-memory monitor; readings are loaded
from a YAML file for the duration of the command only.
"""

import sys
from datetime import date
from typing import List, Optional, Tuple

import typer
import yaml
from rich.console import Console
from rich.table import Table

from water_usage_monitor.config.loader import (
    MonitorConfig,
    default_monitor_config,
    load_monitor_config,
    load_readings
)
from water_usage_monitor.core.alerts import AlertCenter
from water_usage_monitor.core.monitor import UsageMonitor
from water_usage_monitor.core.validator import (
    is_valid_date,
    is_valid_meter_id,
    is_valid_usage_amount
)

app = typer.Typer()
console = Console()

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to a YAML monitor configuration"
)
READINGS_OPTION = typer.Option(
    ...,
    "--readings",
    "-r",
    help="Path to a YAML list of {meter_id, date, amount} readings"
)


def _load_config(config_path: Optional[str]) -> MonitorConfig:
    if config_path is None:
        return default_monitor_config()
    return load_monitor_config(config_path)


def _build_monitor(
    config_path: Optional[str],
    readings_path: Optional[str],
    daily_checks: bool = False
) -> Tuple[UsageMonitor, int, int]:
    """Create a monitor and ingest the readings file into it.

    Returns:
        The monitor, the number of accepted readings, and the number skipped
    """
    monitor = UsageMonitor(config=_load_config(config_path), alert_center=AlertCenter())
    if readings_path is None:
        return monitor, 0, 0

    accepted = skipped = 0
    today = date.today()
    for reading in load_readings(readings_path):
        # daily limits describe today's usage only
        if daily_checks and reading.date == today:
            result = monitor.record_daily_usage(reading.meter_id, reading.amount, reading.date)
        else:
            result = monitor.add_usage_record(reading.meter_id, reading.date, reading.amount)
        if result is None:
            skipped += 1
        else:
            accepted += 1
    return monitor, accepted, skipped


def _fail(error: Exception) -> None:
    console.print(f"[red]Error:[/] {str(error)}")
    sys.exit(EXIT_CODE_FAIL)


def _print_ingest_counts(accepted: int, skipped: int) -> None:
    console.print(f"Readings loaded: {accepted} accepted, {skipped} skipped")


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context):
    """Water Usage Monitor CLI."""
    if ctx.invoked_subcommand is None:
        console.print("Water Usage Monitor - Use --help to see available commands")


@app.command()
def meters(config: Optional[str] = CONFIG_OPTION):
    """List the registered water meters."""
    try:
        monitor = UsageMonitor(config=_load_config(config))
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        _fail(e)

    table = Table(title="Water Meters")
    table.add_column("Meter ID")
    table.add_column("Location")
    table.add_column("Owner")
    for meter in monitor.get_meters():
        table.add_row(meter.meter_id, meter.location, meter.owner_name)
    console.print(table)
    sys.exit(EXIT_CODE_PASS)


@app.command()
def validate(
    meter_id: str = typer.Argument(..., help="Meter ID to check"),
    amount: Optional[float] = typer.Option(
        None,
        "--amount",
        "-a",
        help="Usage amount in liters to check"
    ),
    usage_date: Optional[str] = typer.Option(
        None,
        "--date",
        "-d",
        help="Reading date (YYYY-MM-DD) to check"
    )
):
    """Check a reading against the ingestion rules."""
    checks: List[Tuple[str, bool]] = [("Meter ID", is_valid_meter_id(meter_id))]
    if amount is not None:
        checks.append(("Usage amount", is_valid_usage_amount(amount)))
    if usage_date is not None:
        try:
            parsed = date.fromisoformat(usage_date)
        except ValueError:
            checks.append(("Date", False))
        else:
            checks.append(("Date", is_valid_date(parsed)))

    for name, ok in checks:
        mark = "[green]✓[/]" if ok else "[red]✗[/]"
        console.print(f"{mark} {name}")

    if all(ok for _, ok in checks):
        sys.exit(EXIT_CODE_PASS)
    sys.exit(EXIT_CODE_FAIL)


@app.command()
def report(
    meter_id: str = typer.Argument(..., help="Meter to report on"),
    period: str = typer.Option(
        ...,
        "--period",
        "-p",
        help="Label shown in the report (the last 30 days are always queried)"
    ),
    readings: str = READINGS_OPTION,
    config: Optional[str] = CONFIG_OPTION
):
    """Print a usage report for a meter."""
    try:
        monitor, accepted, skipped = _build_monitor(config, readings)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        _fail(e)

    _print_ingest_counts(accepted, skipped)
    usage_report = monitor.generate_report(meter_id, period)
    console.print(usage_report.generate_report(), markup=False, highlight=False, soft_wrap=True)
    console.print(usage_report.get_summary(), markup=False, highlight=False, soft_wrap=True)
    sys.exit(EXIT_CODE_PASS)


@app.command()
def history(
    meter_id: str = typer.Argument(..., help="Meter to list"),
    start: str = typer.Option(..., "--start", "-s", help="First date (YYYY-MM-DD)"),
    end: str = typer.Option(..., "--end", "-e", help="Last date (YYYY-MM-DD)"),
    readings: str = READINGS_OPTION,
    config: Optional[str] = CONFIG_OPTION
):
    """List a meter's usage records between two dates."""
    try:
        start_date = date.fromisoformat(start)
        end_date = date.fromisoformat(end)
        monitor, accepted, skipped = _build_monitor(config, readings)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        _fail(e)

    _print_ingest_counts(accepted, skipped)
    records = monitor.get_usage_history(meter_id, start_date, end_date)
    if not records:
        console.print(f"\n[dim]No usage records for {meter_id} in this range.[/]")
        sys.exit(EXIT_CODE_PASS)

    table = Table(title=f"Usage History for {meter_id}")
    table.add_column("Record")
    table.add_column("Date")
    table.add_column("Usage (Liters)", justify="right")
    for record in records:
        table.add_row(str(record.record_id), record.date.isoformat(), f"{record.usage_amount:,.2f}")
    console.print(table)
    sys.exit(EXIT_CODE_PASS)


@app.command()
def alerts(
    readings: str = READINGS_OPTION,
    config: Optional[str] = CONFIG_OPTION
):
    """Ingest readings, check today's against the daily limits, and print every alert."""
    try:
        monitor, accepted, skipped = _build_monitor(config, readings, daily_checks=True)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        _fail(e)

    _print_ingest_counts(accepted, skipped)

    console.print("\n[bold]Daily Usage Alerts[/bold]")
    console.print(monitor.alert_center.format_alerts(), markup=False, highlight=False, soft_wrap=True)

    console.print("\n[bold]Abnormal Usage Alerts[/bold]")
    abnormal = monitor.get_alerts()
    if not abnormal:
        console.print("[dim]No abnormal usage detected.[/]")
    for alert in abnormal:
        console.print(alert.details(), markup=False, highlight=False, soft_wrap=True)
    sys.exit(EXIT_CODE_PASS)


if __name__ == "__main__":
    app()
