from __future__ import annotations

from fuel_log.schemas import FuelLogRequest, FuelLogResponse, PurchaseRecordResponse
from fuel_log.services.allocation import RandomSource, allocate_purchases
from fuel_log.services.validation import build_log_request


class FuelLogService:
    def __init__(self, rng: RandomSource | None = None) -> None:
        self.rng = rng

    def generate(self, payload: FuelLogRequest) -> FuelLogResponse:
        log_request = build_log_request(payload)
        fuel_log = allocate_purchases(log_request, rng=self.rng)

        records = [
            PurchaseRecordResponse(
                date=record.date.isoformat(),
                gallons=round(record.gallons, 1),
                station=record.station,
            )
            for record in fuel_log.records
        ]
        return FuelLogResponse(
            records=records,
            total_gallons=round(fuel_log.total_gallons, 1),
            purchase_count=len(records),
            converged=fuel_log.converged,
        )
