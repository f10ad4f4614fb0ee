"""Aggregation logic for air-quality readings."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from models.records import AirQualityReading, Pollutant
from models.schemas import AggregateReport

HOURS_PER_DAY = 24

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HourlyDominance:
    """Dominant pollutant for each hour of the day, indexed 0-23."""

    slots: Tuple[Optional[Pollutant], ...] = (None,) * HOURS_PER_DAY

    def __post_init__(self) -> None:
        if len(self.slots) != HOURS_PER_DAY:
            raise ValueError(
                f"Expected {HOURS_PER_DAY} hourly slots, got {len(self.slots)}."
            )

    def __len__(self) -> int:
        return HOURS_PER_DAY

    def __getitem__(self, hour: int) -> str:
        if not 0 <= hour < HOURS_PER_DAY:
            raise IndexError(f"Hour {hour} is outside 0-{HOURS_PER_DAY - 1}.")
        pollutant = self.slots[hour]
        return pollutant.value if pollutant is not None else ""

    def __iter__(self) -> Iterator[str]:
        return (self[hour] for hour in range(HOURS_PER_DAY))

    def items(self) -> Iterator[Tuple[int, str]]:
        return ((hour, self[hour]) for hour in range(HOURS_PER_DAY))

    def as_dict(self) -> Dict[int, str]:
        return dict(self.items())


@dataclass
class AggregationSummary:
    """Computed statistics for a batch of readings."""

    reading_count: int = 0
    global_averages: Dict[str, float] = field(default_factory=dict)
    hourly_dominant: HourlyDominance = field(default_factory=HourlyDominance)

    def to_report(self) -> AggregateReport:
        return AggregateReport(
            reading_count=self.reading_count,
            global_averages=dict(self.global_averages),
            hourly_dominant=self.hourly_dominant.as_dict(),
        )


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def aggregate(self, readings: Iterable[AirQualityReading]) -> AggregationSummary:
        materialized: Sequence[AirQualityReading] = list(readings)
        summary = AggregationSummary(
            reading_count=len(materialized),
            global_averages=self.global_averages(materialized),
            hourly_dominant=self.hourly_dominant(materialized),
        )
        logger.debug(
            "Aggregated readings",
            extra={
                "reading_count": summary.reading_count,
                "hours_with_data": sum(1 for name in summary.hourly_dominant if name),
            },
        )
        return summary

    def global_averages(self, readings: Iterable[AirQualityReading]) -> Dict[str, float]:
        """Mean of each pollutant over all readings; empty when there are none."""
        materialized = list(readings)
        if not materialized:
            return {}

        totals = {pollutant: 0.0 for pollutant in Pollutant}
        for reading in materialized:
            for pollutant in Pollutant:
                totals[pollutant] += reading.value_of(pollutant)

        count = len(materialized)
        return {pollutant.value: totals[pollutant] / count for pollutant in Pollutant}

    def hourly_dominant(self, readings: Iterable[AirQualityReading]) -> HourlyDominance:
        """Pollutant with the strictly highest hourly average, per hour of day.

        Pollutants are compared in ``Pollutant`` order against a baseline of
        0.0, so the earlier pollutant wins a tie and an hour without data or
        with only zero averages has no dominant pollutant.
        """
        sums: List[Dict[Pollutant, float]] = [
            {pollutant: 0.0 for pollutant in Pollutant} for _ in range(HOURS_PER_DAY)
        ]
        counts: List[Dict[Pollutant, int]] = [
            {pollutant: 0 for pollutant in Pollutant} for _ in range(HOURS_PER_DAY)
        ]

        for reading in readings:
            hour = reading.timestamp.hour
            for pollutant in Pollutant:
                sums[hour][pollutant] += reading.value_of(pollutant)
                counts[hour][pollutant] += 1

        slots: List[Optional[Pollutant]] = []
        for hour in range(HOURS_PER_DAY):
            max_pollutant: Optional[Pollutant] = None
            max_average = 0.0
            for pollutant in Pollutant:
                count = counts[hour][pollutant]
                if count == 0:
                    continue
                average = sums[hour][pollutant] / count
                if average > max_average:
                    max_average = average
                    max_pollutant = pollutant
            slots.append(max_pollutant)

        return HourlyDominance(slots=tuple(slots))
