from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(slots=True, frozen=True)
class LogRequest:
    start_date: date
    end_date: date
    max_tank_capacity: float
    total_gallons: float
    stations: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class PurchaseRecord:
    date: date
    gallons: float
    station: str


@dataclass(slots=True, frozen=True)
class FuelLog:
    records: tuple[PurchaseRecord, ...]
    iterations: int
    converged: bool

    @property
    def total_gallons(self) -> float:
        return sum(record.gallons for record in self.records)
