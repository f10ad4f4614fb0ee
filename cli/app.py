from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer

from cli.render import render_readings, render_summary
from logging_config import configure_logging
from models.records import AirQualityReading
from services.aggregator import Aggregator
from services.readers import (
    InputFormat,
    ReadingSourceError,
    encode_json_readings,
    load_readings,
)
from settings import get_settings


class LogLevel(str, Enum):
    """Level names accepted by ``--log-level``."""

    critical = "CRITICAL"
    error = "ERROR"
    warning = "WARNING"
    info = "INFO"
    debug = "DEBUG"


app = typer.Typer(
    help="Summarise air-quality sensor readings from CSV or JSON files.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def main(
    log_level: Optional[LogLevel] = typer.Option(
        None,
        "--log-level",
        case_sensitive=False,
        help="Logging level for diagnostics on stderr (defaults to LOG_LEVEL env or INFO).",
    ),
) -> None:
    """Entry point for the CLI."""
    configure_logging(log_level.value if log_level is not None else None)


def _resolve_path(path: Optional[Path]) -> Path:
    return path if path is not None else Path(get_settings().input_path)


def _resolve_format(fmt: Optional[InputFormat]) -> InputFormat:
    return fmt if fmt is not None else InputFormat(get_settings().input_format)


def _load(path: Optional[Path], fmt: Optional[InputFormat]) -> List[AirQualityReading]:
    try:
        return load_readings(_resolve_path(path), _resolve_format(fmt))
    except ReadingSourceError as exc:
        typer.secho(f"Failed to parse readings: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc


@app.command("report")
def report_command(
    path: Optional[Path] = typer.Argument(
        None,
        dir_okay=False,
        help="Readings file (defaults to AIRQ_INPUT_PATH env or readings.csv).",
    ),
    fmt: Optional[InputFormat] = typer.Option(
        None,
        "--format",
        "-f",
        case_sensitive=False,
        help="Input format; auto picks JSON for .json files and CSV otherwise.",
    ),
    show_readings: Optional[bool] = typer.Option(
        None,
        "--show-readings/--no-show-readings",
        help="Echo every parsed reading before the summary.",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the summary as a JSON document instead of text.",
    ),
) -> None:
    """Parse readings and print pollutant averages and hourly dominance."""
    readings = _load(path, fmt)
    summary = Aggregator().aggregate(readings)

    if as_json:
        typer.echo(summary.to_report().model_dump_json(indent=2))
        return

    if show_readings is None:
        show_readings = get_settings().show_readings
    if show_readings:
        render_readings(readings)
        typer.echo()
    render_summary(summary)


@app.command("export")
def export_command(
    path: Optional[Path] = typer.Argument(
        None,
        dir_okay=False,
        help="Readings file (defaults to AIRQ_INPUT_PATH env or readings.csv).",
    ),
    fmt: Optional[InputFormat] = typer.Option(
        None,
        "--format",
        "-f",
        case_sensitive=False,
        help="Input format; auto picks JSON for .json files and CSV otherwise.",
    ),
    indent: Optional[int] = typer.Option(
        2,
        "--indent",
        min=0,
        help="Indentation for the JSON output.",
    ),
) -> None:
    """Decode readings and write them to stdout as a normalised JSON array."""
    readings = _load(path, fmt)
    typer.echo(encode_json_readings(readings, indent=indent or None))
