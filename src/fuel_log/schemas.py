from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, FiniteFloat


class FuelLogRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    start_date: date | None = None
    end_date: date | None = None
    max_tank_capacity: FiniteFloat | None = None
    total_gallons: FiniteFloat | None = None
    stations: str | list[str] = ""


class PurchaseRecordResponse(BaseModel):
    date: str
    gallons: float
    station: str


class FuelLogResponse(BaseModel):
    records: list[PurchaseRecordResponse]
    total_gallons: float
    purchase_count: int
    converged: bool
