"""Pydantic schemas for the JSON wire formats."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.records import (
    AirQualityReading,
    ensure_aware,
    parse_concentration,
    parse_timestamp,
)


class ReadingRecord(BaseModel):
    """JSON representation of one reading."""

    model_config = ConfigDict(extra="ignore")

    sensor_id: str = Field(..., min_length=1)
    timestamp: datetime
    pm25: float
    co2: float
    no2: Optional[float] = None
    ozone: Optional[float] = None

    @field_validator("timestamp", mode="plain")
    @classmethod
    def _validate_timestamp(cls, value: Any) -> datetime:
        if isinstance(value, datetime):
            return ensure_aware(value)
        if not isinstance(value, str):
            raise ValueError("timestamp must be an ISO-8601 string")
        return parse_timestamp(value)

    @field_validator("pm25", "co2", mode="plain")
    @classmethod
    def _validate_required(cls, value: Any) -> float:
        return parse_concentration(value)

    @field_validator("no2", "ozone", mode="plain")
    @classmethod
    def _validate_optional(cls, value: Any) -> Optional[float]:
        if value is None:
            return None
        return parse_concentration(value)

    @classmethod
    def from_reading(cls, reading: AirQualityReading) -> "ReadingRecord":
        return cls(
            sensor_id=reading.sensor_id,
            timestamp=reading.timestamp,
            pm25=reading.pm25,
            co2=reading.co2,
            no2=reading.no2,
            ozone=reading.ozone,
        )

    def to_reading(self) -> AirQualityReading:
        return AirQualityReading(
            sensor_id=self.sensor_id,
            timestamp=self.timestamp,
            pm25=self.pm25,
            co2=self.co2,
            no2=self.no2,
            ozone=self.ozone,
        )


class AggregateReport(BaseModel):
    """Serialisable aggregation output."""

    reading_count: int = Field(..., ge=0)
    global_averages: Dict[str, float] = Field(default_factory=dict)
    hourly_dominant: Dict[int, str] = Field(
        default_factory=dict,
        description="Dominant pollutant per hour of day; empty string when none.",
    )
