from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Any

from pydantic import TypeAdapter, ValidationError

from fuel_log.exceptions import InvalidLogRequestError
from fuel_log.schemas import FuelLogRequest
from fuel_log.services.allocation import (
    MAX_PURCHASES,
    MIN_FILL_GALLONS,
    fill_capacity,
    purchase_count,
    span_days,
)
from fuel_log.services.types import LogRequest

INVALID_DATES_MESSAGE = "Please enter valid start and end dates."
END_BEFORE_START_MESSAGE = "End Date must be after Start Date."
INVALID_CAPACITY_MESSAGE = "Max Tank Capacity must be a positive number."
CAPACITY_BELOW_MIN_FILL_MESSAGE = f"Max Tank Capacity must be at least {MIN_FILL_GALLONS:g} gallons."
INVALID_TOTAL_MESSAGE = "Total Gallons to Purchase must be a positive number."
NO_STATIONS_MESSAGE = "Please enter at least one gas station."
TOTAL_BELOW_CAPACITY_MESSAGE = (
    "Total gallons to purchase should generally be greater than or equal to max tank capacity."
)
TOO_MANY_PURCHASES_MESSAGE = (
    f"Total gallons to purchase would need more than {MAX_PURCHASES} purchases; "
    "lower the total or raise the tank capacity."
)

# Form order decides which message wins when several fields fail to parse.
_FIELD_MESSAGES = (
    ("start_date", INVALID_DATES_MESSAGE),
    ("end_date", INVALID_DATES_MESSAGE),
    ("max_tank_capacity", INVALID_CAPACITY_MESSAGE),
    ("total_gallons", INVALID_TOTAL_MESSAGE),
    ("stations", NO_STATIONS_MESSAGE),
)

_DATE_ADAPTER = TypeAdapter(date | None)


def build_log_request(payload: FuelLogRequest) -> LogRequest:
    date_message = _date_range_message(payload.start_date, payload.end_date)
    if date_message:
        raise InvalidLogRequestError(date_message)
    if payload.max_tank_capacity is None or payload.max_tank_capacity <= 0:
        raise InvalidLogRequestError(INVALID_CAPACITY_MESSAGE)
    if payload.max_tank_capacity < MIN_FILL_GALLONS:
        raise InvalidLogRequestError(CAPACITY_BELOW_MIN_FILL_MESSAGE)
    if payload.total_gallons is None or payload.total_gallons <= 0:
        raise InvalidLogRequestError(INVALID_TOTAL_MESSAGE)

    stations = parse_stations(payload.stations)
    if not stations:
        raise InvalidLogRequestError(NO_STATIONS_MESSAGE)
    if payload.total_gallons < payload.max_tank_capacity:
        raise InvalidLogRequestError(TOTAL_BELOW_CAPACITY_MESSAGE)

    days = span_days(payload.start_date, payload.end_date)
    count = purchase_count(payload.total_gallons, fill_capacity(payload.max_tank_capacity), days)
    if count > MAX_PURCHASES:
        raise InvalidLogRequestError(TOO_MANY_PURCHASES_MESSAGE)

    return LogRequest(
        start_date=payload.start_date,
        end_date=payload.end_date,
        max_tank_capacity=payload.max_tank_capacity,
        total_gallons=payload.total_gallons,
        stations=stations,
    )


def parse_stations(stations: str | list[str]) -> tuple[str, ...]:
    """One station per line; surrounding whitespace and blank lines are dropped."""
    lines = stations.splitlines() if isinstance(stations, str) else stations
    return tuple(line.strip() for line in lines if line.strip())


def validation_error_message(
    exc: ValidationError, data: Mapping[str, Any] | None = None
) -> str:
    """Pick the user-facing message for a payload that failed to parse.

    When both dates parsed, their range check still comes first, so pass the
    raw ``data`` to keep the same order as :func:`build_log_request`.
    """
    failed_fields = {error["loc"][0] for error in exc.errors() if error["loc"]}
    if data is not None and not failed_fields & {"start_date", "end_date"}:
        date_message = _date_range_message(
            _DATE_ADAPTER.validate_python(data.get("start_date")),
            _DATE_ADAPTER.validate_python(data.get("end_date")),
        )
        if date_message:
            return date_message

    for field_name, message in _FIELD_MESSAGES:
        if field_name in failed_fields:
            return message
    return "Invalid request payload"


def _date_range_message(start_date: date | None, end_date: date | None) -> str | None:
    if start_date is None or end_date is None:
        return INVALID_DATES_MESSAGE
    if start_date >= end_date:
        return END_BEFORE_START_MESSAGE
    return None
