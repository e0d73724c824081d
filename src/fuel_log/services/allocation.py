from __future__ import annotations

import logging
import math
import random
from collections.abc import Sequence
from datetime import date, timedelta
from typing import Protocol, TypeVar

from fuel_log.services.types import FuelLog, LogRequest, PurchaseRecord

logger = logging.getLogger(__name__)

MIN_FILL_GALLONS = 5.0
CONVERGENCE_TOLERANCE_GALLONS = 0.1
MAX_CORRECTION_ITERATIONS = 100
MAX_PURCHASES = 5000

T = TypeVar("T")


class RandomSource(Protocol):
    """Uniform random source; the ``random`` module and ``random.Random`` both fit."""

    def uniform(self, a: float, b: float) -> float: ...

    def choice(self, seq: Sequence[T]) -> T: ...

    def sample(self, population: Sequence[T], k: int) -> list[T]: ...


def allocate_purchases(request: LogRequest, rng: RandomSource | None = None) -> FuelLog:
    source: RandomSource = random if rng is None else rng

    days = span_days(request.start_date, request.end_date)
    fill_cap = fill_capacity(request.max_tank_capacity)
    count = purchase_count(request.total_gallons, fill_cap, days)
    dates = select_dates(request.start_date, days, count, source)
    values, iterations = allocate_gallons(request.total_gallons, fill_cap, count, source)

    residual = request.total_gallons - sum(values)
    converged = abs(residual) <= CONVERGENCE_TOLERANCE_GALLONS
    if not converged:
        logger.warning(
            "Allocation stopped after %s iterations with %.2f gallons left unallocated",
            iterations,
            residual,
        )

    records = [
        PurchaseRecord(
            date=purchase_date,
            gallons=round(gallons, 1),
            station=source.choice(request.stations),
        )
        for purchase_date, gallons in zip(dates, values, strict=True)
    ]
    records.sort(key=lambda record: record.date)

    logger.info(
        "Generated %s purchases between %s and %s (target %.1f gallons)",
        len(records),
        request.start_date.isoformat(),
        request.end_date.isoformat(),
        request.total_gallons,
    )
    return FuelLog(records=tuple(records), iterations=iterations, converged=converged)


def span_days(start_date: date, end_date: date) -> int:
    return math.ceil((end_date - start_date) / timedelta(days=1))


def fill_capacity(max_tank_capacity: float) -> float:
    """Largest fill that still fits the tank once shown to one decimal."""
    return math.floor(round(max_tank_capacity * 10, 6)) / 10


def purchase_count(total_gallons: float, max_tank_capacity: float, days: int) -> int:
    """Size the log by the average fill, bounded by the day span and the tank minimum."""
    average_fill = (MIN_FILL_GALLONS + max_tank_capacity) / 2.0
    count = math.ceil(total_gallons / average_fill)
    count = max(min(count, days), math.ceil(total_gallons / max_tank_capacity))
    return max(count, 1)


def select_dates(start_date: date, days: int, count: int, rng: RandomSource) -> list[date]:
    candidates = [start_date + timedelta(days=offset) for offset in range(days + 1)]
    if count <= len(candidates):
        selected = rng.sample(candidates, count)
    else:
        # More purchases than calendar days, so some days get repeat fills.
        selected = [rng.choice(candidates) for _ in range(count)]
    return sorted(selected)


def allocate_gallons(
    total_gallons: float,
    max_tank_capacity: float,
    count: int,
    rng: RandomSource,
) -> tuple[list[float], int]:
    """Spread ``total_gallons`` over ``count`` fills bounded by the tank.

    Random fills are scaled to the target and clamped, then the residual is
    spread evenly until the sum is within tolerance or the iteration cap is
    reached. Returns the unrounded fills and the number of correction passes.
    """
    raw = [rng.uniform(MIN_FILL_GALLONS, max_tank_capacity) for _ in range(count)]
    scale = total_gallons / sum(raw)
    values = [_clamp(value * scale, max_tank_capacity) for value in raw]

    current_sum = sum(values)
    iterations = 0
    while (
        abs(total_gallons - current_sum) > CONVERGENCE_TOLERANCE_GALLONS
        and iterations < MAX_CORRECTION_ITERATIONS
    ):
        adjustment = (total_gallons - current_sum) / count
        values = [_clamp(value + adjustment, max_tank_capacity) for value in values]
        current_sum = sum(values)
        iterations += 1
        logger.debug("Correction pass %s: %.3f of %.3f gallons", iterations, current_sum, total_gallons)

    return values, iterations


def _clamp(gallons: float, max_tank_capacity: float) -> float:
    return max(MIN_FILL_GALLONS, min(max_tank_capacity, gallons))

