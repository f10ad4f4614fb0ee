"""Decoding and encoding of air-quality readings from CSV and JSON sources."""

from __future__ import annotations

import csv
import io
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import TypeAdapter, ValidationError

from models.records import AirQualityReading, parse_concentration, parse_timestamp
from models.schemas import ReadingRecord

logger = logging.getLogger(__name__)

CSV_COLUMNS = ("sensor_id", "timestamp", "pm25", "co2")
_NUMERIC_FIELDS = frozenset({"pm25", "co2", "no2", "ozone"})

_records_adapter = TypeAdapter(List[ReadingRecord])


class InputFormat(str, Enum):
    """Supported reading source formats."""

    auto = "auto"
    csv = "csv"
    json = "json"


class ReadingSourceError(ValueError):
    """Base class for failures that abort decoding of a reading source."""

    def __init__(
        self, message: str, row_number: Optional[int] = None, *, label: str = "row"
    ) -> None:
        self.message = message
        self.row_number = row_number
        text = f"{label} {row_number}: {message}" if row_number is not None else message
        super().__init__(text)


class SourceOpenError(ReadingSourceError):
    """The source file could not be opened or read."""


class MalformedRowError(ReadingSourceError):
    """A header or row does not have the expected shape."""


class MalformedTimestampError(ReadingSourceError):
    """A timestamp could not be parsed."""


class MalformedNumericError(ReadingSourceError):
    """A pollutant value could not be parsed as a number."""


class MalformedDocumentError(ReadingSourceError):
    """A JSON document is malformed or not an array of reading objects."""


def parse_csv_readings(text: str) -> List[AirQualityReading]:
    """Decode CSV text with a ``sensor_id,timestamp,pm25,co2`` header."""
    reader = csv.DictReader(io.StringIO(text))

    try:
        fieldnames = reader.fieldnames
    except csv.Error as exc:
        raise MalformedRowError(f"unreadable header: {exc}", row_number=1) from exc
    if not fieldnames:
        raise MalformedRowError("CSV file is missing a header row.")

    normalized = {name.lower().strip(): name for name in fieldnames}
    missing = [column for column in CSV_COLUMNS if column not in normalized]
    if missing:
        raise MalformedRowError(
            f"CSV missing required columns: {', '.join(missing)}", row_number=1
        )
    columns = {column: normalized[column] for column in CSV_COLUMNS}
    expected_fields = len(fieldnames)

    readings: List[AirQualityReading] = []
    try:
        for row in reader:
            readings.append(
                _reading_from_row(row, columns, expected_fields, reader.line_num)
            )
    except csv.Error as exc:
        raise MalformedRowError(f"unreadable row: {exc}", row_number=reader.line_num) from exc

    return readings


def _reading_from_row(
    row: Dict[Any, Any], columns: Dict[str, str], expected_fields: int, row_number: int
) -> AirQualityReading:
    # DictReader stores surplus fields under None and fills short rows with None.
    if None in row or any(value is None for value in row.values()):
        raise MalformedRowError(
            f"wrong number of fields (expected {expected_fields})",
            row_number=row_number,
        )

    sensor_raw = row[columns["sensor_id"]].strip()
    timestamp_raw = row[columns["timestamp"]].strip()
    if not sensor_raw:
        raise MalformedRowError("missing sensor_id", row_number=row_number)
    if not timestamp_raw:
        raise MalformedRowError("missing timestamp", row_number=row_number)

    try:
        timestamp = parse_timestamp(timestamp_raw)
    except ValueError as exc:
        raise MalformedTimestampError(
            f"invalid timestamp {timestamp_raw!r}", row_number=row_number
        ) from exc

    values: Dict[str, float] = {}
    for column in ("pm25", "co2"):
        raw = row[columns[column]].strip()
        try:
            values[column] = parse_concentration(raw)
        except ValueError as exc:
            raise MalformedNumericError(
                f"invalid {column} value {raw!r}", row_number=row_number
            ) from exc

    return AirQualityReading(
        sensor_id=sensor_raw,
        timestamp=timestamp,
        pm25=values["pm25"],
        co2=values["co2"],
    )


def parse_json_readings(data: Union[str, bytes]) -> List[AirQualityReading]:
    """Decode a JSON array of reading objects."""
    try:
        records = _records_adapter.validate_json(data)
    except ValidationError as exc:
        raise _translate_validation_error(exc) from exc

    return [record.to_reading() for record in records]


def _translate_validation_error(exc: ValidationError) -> ReadingSourceError:
    first = exc.errors()[0]
    loc = first.get("loc", ())
    detail = first.get("msg", "invalid value")

    if first.get("type") == "json_invalid" or len(loc) < 2 or not isinstance(loc[0], int):
        return MalformedDocumentError(f"malformed JSON document: {detail}")

    record_number = loc[0] + 1
    field_name = loc[1]
    if first.get("type") == "missing":
        return MalformedDocumentError(
            f"missing field {field_name}", row_number=record_number, label="record"
        )
    if field_name == "timestamp":
        return MalformedTimestampError(
            f"invalid timestamp: {detail}", row_number=record_number, label="record"
        )
    if field_name in _NUMERIC_FIELDS:
        return MalformedNumericError(
            f"invalid {field_name} value: {detail}", row_number=record_number, label="record"
        )
    return MalformedDocumentError(
        f"invalid {field_name}: {detail}", row_number=record_number, label="record"
    )


def encode_json_readings(readings: Iterable[AirQualityReading], indent: Optional[int] = None) -> str:
    """Encode readings as a JSON array, omitting optional fields that are absent."""
    records = [ReadingRecord.from_reading(reading) for reading in readings]
    return _records_adapter.dump_json(records, indent=indent, exclude_none=True).decode("utf-8")


def resolve_format(path: Path, fmt: InputFormat = InputFormat.auto) -> InputFormat:
    if fmt is not InputFormat.auto:
        return fmt
    return InputFormat.json if path.suffix.lower() == ".json" else InputFormat.csv


def load_readings(path: Union[str, Path], fmt: InputFormat = InputFormat.auto) -> List[AirQualityReading]:
    """Read and decode a reading file, aborting on the first malformed entry."""
    source = Path(path)
    resolved = resolve_format(source, fmt)

    try:
        try:
            text = source.read_text(encoding="utf-8-sig")
        except OSError as exc:
            raise SourceOpenError(f"error opening {source}: {exc.strerror or exc}") from exc
        except UnicodeDecodeError as exc:
            raise SourceOpenError(f"error reading {source}: not valid UTF-8") from exc

        if resolved is InputFormat.json:
            readings = parse_json_readings(text)
        else:
            readings = parse_csv_readings(text)
    except ReadingSourceError as exc:
        logger.warning(
            "Failed to decode readings",
            extra={
                "source": str(source),
                "format": resolved.value,
                "row_number": exc.row_number,
                "reason": exc.message,
            },
        )
        raise

    logger.info(
        "Loaded readings",
        extra={"source": str(source), "format": resolved.value, "reading_count": len(readings)},
    )
    return readings
