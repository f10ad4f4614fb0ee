from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

import typer

from models.records import AirQualityReading
from services.aggregator import AggregationSummary


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_readings(readings: Sequence[AirQualityReading]) -> None:
    echo_heading("Readings")
    if not readings:
        typer.echo("No readings parsed.")
        return
    for reading in readings:
        fields = [
            f"sensor_id={reading.sensor_id}",
            f"timestamp={reading.timestamp.isoformat()}",
            f"pm25={reading.pm25}",
            f"co2={reading.co2}",
        ]
        if reading.no2 is not None:
            fields.append(f"no2={reading.no2}")
        if reading.ozone is not None:
            fields.append(f"ozone={reading.ozone}")
        typer.echo("  - " + " ".join(fields))


def render_averages(averages: Mapping[str, float]) -> None:
    echo_heading("Averages for all readings")
    if not averages:
        typer.echo("No readings available.")
        return
    echo_key_values((pollutant, f"{value:.2f}") for pollutant, value in averages.items())


def render_hourly(hourly: Iterable[tuple[int, str]]) -> None:
    echo_heading("Highest pollutant by hour")
    for hour, pollutant in hourly:
        typer.echo(f"Hour {hour}: {pollutant or '-'}")


def render_summary(summary: AggregationSummary) -> None:
    render_averages(summary.global_averages)
    typer.echo()
    render_hourly(summary.hourly_dominant.items())
