from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import pytest

from models.records import AirQualityReading
from services.readers import (
    InputFormat,
    MalformedNumericError,
    MalformedRowError,
    MalformedTimestampError,
    SourceOpenError,
    load_readings,
    parse_csv_readings,
    parse_timestamp,
)


def test_parse_csv_success() -> None:
    csv_body = (
        "sensor_id,timestamp,pm25,co2\n"
        "sensor-a,2024-01-01T08:15:00Z,10.5,400\n"
        "sensor-b,2024-01-01T09:00:00+02:00,7,410.25\n"
    )

    readings = parse_csv_readings(csv_body)

    assert readings == [
        AirQualityReading(
            sensor_id="sensor-a",
            timestamp=datetime(2024, 1, 1, 8, 15, tzinfo=timezone.utc),
            pm25=10.5,
            co2=400.0,
        ),
        AirQualityReading(
            sensor_id="sensor-b",
            timestamp=datetime(2024, 1, 1, 9, 0, tzinfo=timezone(timedelta(hours=2))),
            pm25=7.0,
            co2=410.25,
        ),
    ]
    assert readings[1].timestamp.hour == 9
    assert readings[1].no2 is None and readings[1].ozone is None


def test_parse_csv_header_is_case_insensitive_and_reordered() -> None:
    csv_body = " CO2 ,PM25,Timestamp,Sensor_ID\n400,12,2024-01-01T00:00:00Z,s1\n"

    readings = parse_csv_readings(csv_body)

    assert readings[0].sensor_id == "s1"
    assert readings[0].pm25 == 12.0
    assert readings[0].co2 == 400.0


def test_parse_csv_header_only_yields_no_readings() -> None:
    assert parse_csv_readings("sensor_id,timestamp,pm25,co2\n") == []


def test_parse_csv_empty_text_is_missing_header() -> None:
    with pytest.raises(MalformedRowError, match="missing a header row"):
        parse_csv_readings("")


def test_parse_csv_missing_columns() -> None:
    with pytest.raises(MalformedRowError) as excinfo:
        parse_csv_readings("sensor_id,timestamp,value\ns,2024-01-01T00:00:00Z,1\n")

    assert "pm25, co2" in str(excinfo.value)
    assert excinfo.value.row_number == 1


@pytest.mark.parametrize(
    "row",
    ["s1,2024-01-01T00:00:00Z,1", "s1,2024-01-01T00:00:00Z,1,2,3"],
)
def test_parse_csv_wrong_field_count_aborts(row: str) -> None:
    csv_body = f"sensor_id,timestamp,pm25,co2\ns0,2024-01-01T00:00:00Z,1,2\n{row}\n"

    with pytest.raises(MalformedRowError, match="wrong number of fields") as excinfo:
        parse_csv_readings(csv_body)

    assert excinfo.value.row_number == 3


def test_parse_csv_invalid_timestamp_aborts() -> None:
    csv_body = "sensor_id,timestamp,pm25,co2\ns1,yesterday,1,2\n"

    with pytest.raises(MalformedTimestampError) as excinfo:
        parse_csv_readings(csv_body)

    assert str(excinfo.value) == "row 2: invalid timestamp 'yesterday'"


def test_parse_csv_invalid_number_aborts_whole_decode() -> None:
    csv_body = (
        "sensor_id,timestamp,pm25,co2\n"
        "s1,2024-01-01T00:00:00Z,1,2\n"
        "s2,2024-01-01T01:00:00Z,1,lots\n"
        "s3,2024-01-01T02:00:00Z,1,2\n"
    )

    with pytest.raises(MalformedNumericError, match="invalid co2 value 'lots'") as excinfo:
        parse_csv_readings(csv_body)

    assert excinfo.value.row_number == 3


def test_parse_csv_blank_sensor_id() -> None:
    with pytest.raises(MalformedRowError, match="missing sensor_id"):
        parse_csv_readings("sensor_id,timestamp,pm25,co2\n ,2024-01-01T00:00:00Z,1,2\n")


def test_parse_timestamp_naive_is_treated_as_utc() -> None:
    parsed = parse_timestamp("2024-03-05T17:45:00")

    assert parsed.tzinfo is timezone.utc
    assert parsed.hour == 17


def test_parse_timestamp_keeps_offset() -> None:
    parsed = parse_timestamp("2024-03-05T17:45:00-05:00")

    assert parsed.utcoffset() == timedelta(hours=-5)
    assert parsed.hour == 17


def test_load_readings_missing_file(tmp_path) -> None:
    with pytest.raises(SourceOpenError, match="error opening"):
        load_readings(tmp_path / "absent.csv")


def test_load_readings_picks_format_from_suffix(tmp_path, caplog) -> None:
    csv_path = tmp_path / "readings.csv"
    csv_path.write_text("sensor_id,timestamp,pm25,co2\ns1,2024-01-01T00:00:00Z,1,2\n")
    json_path = tmp_path / "readings.json"
    json_path.write_text(
        '[{"sensor_id": "s1", "timestamp": "2024-01-01T00:00:00Z", "pm25": 1, "co2": 2, "no2": 3}]'
    )

    with caplog.at_level(logging.INFO, logger="services.readers"):
        from_csv = load_readings(csv_path)
        from_json = load_readings(json_path)

    assert from_csv[0].no2 is None
    assert from_json[0].no2 == 3.0
    loaded = [record for record in caplog.records if record.getMessage() == "Loaded readings"]
    assert [record.format for record in loaded] == ["csv", "json"]
    assert all(record.reading_count == 1 for record in loaded)


def test_load_readings_explicit_format_overrides_suffix(tmp_path) -> None:
    path = tmp_path / "readings.txt"
    path.write_text('[{"sensor_id": "s1", "timestamp": "2024-01-01T00:00:00Z", "pm25": 1, "co2": 2}]')

    readings = load_readings(path, InputFormat.json)

    assert readings[0].sensor_id == "s1"


def test_load_readings_logs_failures(tmp_path, caplog) -> None:
    path = tmp_path / "bad.csv"
    path.write_text("sensor_id,timestamp,pm25,co2\ns1,2024-01-01T00:00:00Z,x,2\n")

    with caplog.at_level(logging.WARNING, logger="services.readers"):
        with pytest.raises(MalformedNumericError):
            load_readings(path)

    (record,) = caplog.records
    assert record.row_number == 2
    assert record.reason == "invalid pm25 value 'x'"


@pytest.mark.parametrize("raw", ["NaN", "inf", "-Infinity"])
def test_parse_csv_non_finite_value_aborts(raw: str) -> None:
    csv_body = f"sensor_id,timestamp,pm25,co2\ns1,2024-01-01T00:00:00Z,{raw},1\n"

    with pytest.raises(MalformedNumericError, match=f"invalid pm25 value '{raw}'"):
        parse_csv_readings(csv_body)


@pytest.mark.parametrize("raw", ["2024-01-01", "20240101T080000Z", "2024-01-01T08"])
def test_parse_csv_timestamp_without_time_of_day_aborts(raw: str) -> None:
    csv_body = f"sensor_id,timestamp,pm25,co2\ns1,{raw},1,2\n"

    with pytest.raises(MalformedTimestampError) as excinfo:
        parse_csv_readings(csv_body)

    assert excinfo.value.row_number == 2


def test_parse_timestamp_accepts_space_separator_and_lowercase_z() -> None:
    parsed = parse_timestamp("2024-03-05 17:45:00z")

    assert parsed.utcoffset() == timedelta(0)
    assert parsed.hour == 17
