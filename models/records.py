"""Domain models shared across services."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

# Extended ISO-8601 date followed by a time separator.
_DATE_TIME_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}")


class Pollutant(str, Enum):
    """Pollutants taking part in aggregation.

    Definition order is the evaluation order used when two pollutants tie.
    """

    pm25 = "pm25"
    co2 = "co2"


@dataclass(frozen=True, slots=True)
class AirQualityReading:
    """A single sensor observation. ``no2``/``ozone`` are ``None`` when not measured."""

    sensor_id: str
    timestamp: datetime
    pm25: float
    co2: float
    no2: Optional[float] = None
    ozone: Optional[float] = None

    def value_of(self, pollutant: Pollutant) -> float:
        return getattr(self, pollutant.value)


def ensure_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 style timestamp, keeping its recorded offset.

    A date and a time of day are both required. Naive values are read as UTC.
    """
    candidate = value.strip()
    if not candidate:
        raise ValueError("Timestamp is empty.")
    if not _DATE_TIME_PREFIX.match(candidate):
        raise ValueError("Timestamp needs a date and a time of day")

    if candidate.endswith(("Z", "z")):
        candidate = candidate[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError as exc:
        raise ValueError("Invalid timestamp format") from exc

    return ensure_aware(parsed)


def parse_concentration(value: Any) -> float:
    """Convert a number or numeric string into a finite concentration."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"expected a number, got {type(value).__name__}")
    try:
        number = float(value)
    except ValueError as exc:
        raise ValueError(f"{value!r} is not a number") from exc
    if not math.isfinite(number):
        raise ValueError("value must be finite")
    return number
