from __future__ import annotations

import random
from datetime import date, timedelta

import pytest

from fuel_log.services import allocation
from fuel_log.services.allocation import (
    CONVERGENCE_TOLERANCE_GALLONS,
    MAX_CORRECTION_ITERATIONS,
    MIN_FILL_GALLONS,
    allocate_gallons,
    allocate_purchases,
    fill_capacity,
    purchase_count,
    select_dates,
)
from fuel_log.services.types import LogRequest

STATIONS = ("Shell, 721 N Tucker Blvd", "BP, 1815 Arsenal", "QuikTrip, 2600 Chouteau Ave")


class FixedRandom:
    """Predictable stand-in for the random module."""

    def __init__(self, fill: float) -> None:
        self.fill = fill

    def uniform(self, a: float, b: float) -> float:
        return self.fill

    def choice(self, seq):
        return seq[0]

    def sample(self, population, k):
        return list(population[:k])


class CyclingRandom(FixedRandom):
    """Hands out fills from a fixed cycle."""

    def __init__(self, fills: list[float]) -> None:
        super().__init__(fills[0])
        self.fills = fills
        self.calls = 0

    def uniform(self, a: float, b: float) -> float:
        fill = self.fills[self.calls % len(self.fills)]
        self.calls += 1
        return fill


def _request(
    start: date = date(2024, 7, 1),
    end: date = date(2025, 6, 30),
    capacity: float = 26.0,
    total: float = 2450.0,
) -> LogRequest:
    return LogRequest(
        start_date=start,
        end_date=end,
        max_tank_capacity=capacity,
        total_gallons=total,
        stations=STATIONS,
    )


@pytest.mark.parametrize("seed", [0, 1, 7, 42, 2024])
def test_records_respect_capacity_range_and_order(seed: int) -> None:
    request = _request()

    fuel_log = allocate_purchases(request, rng=random.Random(seed))

    assert fuel_log.records
    for record in fuel_log.records:
        assert MIN_FILL_GALLONS <= record.gallons <= request.max_tank_capacity
        assert request.start_date <= record.date <= request.end_date
        assert record.station in STATIONS
    dates = [record.date for record in fuel_log.records]
    assert dates == sorted(dates)


@pytest.mark.parametrize("seed", [3, 11, 99])
def test_default_request_converges_to_target(seed: int) -> None:
    rng = random.Random(seed)

    values, iterations = allocate_gallons(2450.0, 26.0, purchase_count(2450.0, 26.0, 365), rng)

    assert abs(sum(values) - 2450.0) <= CONVERGENCE_TOLERANCE_GALLONS
    assert iterations <= MAX_CORRECTION_ITERATIONS


def test_rounded_log_total_stays_near_target() -> None:
    fuel_log = allocate_purchases(_request(), rng=random.Random(5))

    assert fuel_log.converged is True
    # Each record rounds to one decimal, so the total drifts by at most 0.05 per record.
    tolerance = CONVERGENCE_TOLERANCE_GALLONS + 0.05 * len(fuel_log.records)
    assert fuel_log.total_gallons == pytest.approx(2450.0, abs=tolerance)


def test_purchase_count_uses_average_fill() -> None:
    assert purchase_count(2450.0, 26.0, 364) == 159


def test_purchase_count_is_bounded_by_days_but_not_below_tank_minimum() -> None:
    # 27 fills by average, only 2 days, but 20 fills are needed at full tank.
    assert purchase_count(200.0, 10.0, 2) == 20
    assert purchase_count(50.0, 10.0, 4) == 5


def test_purchase_count_is_at_least_one() -> None:
    assert purchase_count(5.0, 5.0, 0) == 1


def test_distinct_dates_when_range_allows() -> None:
    fuel_log = allocate_purchases(_request(), rng=random.Random(8))

    dates = [record.date for record in fuel_log.records]
    assert len(set(dates)) == len(dates)


def test_every_day_is_used_when_count_matches_range() -> None:
    start = date(2024, 1, 1)

    fuel_log = allocate_purchases(
        _request(start=start, end=date(2024, 1, 5), capacity=10.0, total=50.0),
        rng=random.Random(21),
    )

    assert [record.date for record in fuel_log.records] == [
        start + timedelta(days=offset) for offset in range(5)
    ]


def test_dates_repeat_when_purchases_outnumber_days() -> None:
    request = _request(start=date(2024, 1, 1), end=date(2024, 1, 3), capacity=10.0, total=200.0)

    fuel_log = allocate_purchases(request, rng=random.Random(13))

    dates = [record.date for record in fuel_log.records]
    assert len(dates) == 20
    assert set(dates) <= {date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3)}
    assert dates == sorted(dates)
    assert all(5.0 <= record.gallons <= 10.0 for record in fuel_log.records)


def test_select_dates_samples_inclusive_range() -> None:
    dates = select_dates(date(2024, 3, 1), 2, 3, FixedRandom(10.0))

    assert dates == [date(2024, 3, 1), date(2024, 3, 2), date(2024, 3, 3)]


def test_scaling_hits_target_without_correction() -> None:
    values, iterations = allocate_gallons(30.0, 20.0, 2, FixedRandom(10.0))

    assert values == pytest.approx([15.0, 15.0])
    assert iterations == 0


def test_correction_stops_at_iteration_cap_when_target_is_unreachable() -> None:
    values, iterations = allocate_gallons(100.0, 10.0, 5, random.Random(1))

    assert iterations == MAX_CORRECTION_ITERATIONS
    assert values == pytest.approx([10.0] * 5)


def test_unreachable_target_is_logged_not_raised(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setattr(allocation, "purchase_count", lambda *_: 2)
    request = _request(start=date(2024, 1, 1), end=date(2024, 1, 3), capacity=10.0, total=200.0)

    with caplog.at_level("WARNING", logger="fuel_log.services.allocation"):
        fuel_log = allocate_purchases(request, rng=random.Random(4))

    assert fuel_log.converged is False
    assert fuel_log.iterations == MAX_CORRECTION_ITERATIONS
    assert [record.gallons for record in fuel_log.records] == [10.0, 10.0]
    assert any("Allocation stopped" in record.getMessage() for record in caplog.records)


def test_converged_log_does_not_warn(caplog: pytest.LogCaptureFixture) -> None:
    request = _request(start=date(2024, 1, 1), end=date(2024, 1, 3), capacity=10.0, total=200.0)

    with caplog.at_level("WARNING", logger="fuel_log.services.allocation"):
        fuel_log = allocate_purchases(request, rng=FixedRandom(10.0))

    assert fuel_log.converged is True
    assert fuel_log.total_gallons == pytest.approx(200.0)
    assert not caplog.records


def test_rounding_never_exceeds_capacity() -> None:
    request = _request(capacity=26.07, total=2600.0)

    for seed in range(5):
        fuel_log = allocate_purchases(request, rng=random.Random(seed))
        assert all(record.gallons <= 26.07 for record in fuel_log.records)


def test_station_choice_comes_from_random_source() -> None:
    fuel_log = allocate_purchases(_request(), rng=FixedRandom(15.5))

    assert {record.station for record in fuel_log.records} == {STATIONS[0]}


@pytest.mark.parametrize(
    ("capacity", "expected"),
    [(26.0, 26.0), (26.07, 26.0), (15.995, 15.9), (8.2, 8.2), (5.0, 5.0)],
)
def test_fill_capacity_floors_to_one_decimal(capacity: float, expected: float) -> None:
    assert fill_capacity(capacity) == pytest.approx(expected)


def test_full_tank_fills_do_not_drag_total_below_target() -> None:
    request = _request(start=date(2024, 1, 1), end=date(2024, 2, 1), capacity=26.07, total=1042.8)

    fuel_log = allocate_purchases(request, rng=CyclingRandom([26.0, 5.0]))

    assert len(fuel_log.records) == 41
    assert fuel_log.converged is True
    assert max(record.gallons for record in fuel_log.records) == 26.0
    assert abs(request.total_gallons - fuel_log.total_gallons) <= 0.1 + 0.05 * len(fuel_log.records)


@pytest.mark.parametrize("seed", range(10))
def test_converged_log_total_stays_within_rounding_band(seed: int) -> None:
    request = _request(start=date(2024, 1, 1), end=date(2024, 2, 1), capacity=26.07, total=1042.8)

    fuel_log = allocate_purchases(request, rng=random.Random(seed))

    assert all(record.gallons <= 26.07 for record in fuel_log.records)
    if fuel_log.converged:
        band = 0.1 + 0.05 * len(fuel_log.records)
        assert abs(request.total_gallons - fuel_log.total_gallons) <= band
