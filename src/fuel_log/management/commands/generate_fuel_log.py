from __future__ import annotations

import random
from typing import Any

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from pydantic import ValidationError

from fuel_log.exceptions import InvalidLogRequestError
from fuel_log.schemas import FuelLogRequest
from fuel_log.services.generator import FuelLogService
from fuel_log.services.validation import validation_error_message


class Command(BaseCommand):
    help = "Generate a synthetic fuel purchase log and print it as a table."

    def add_arguments(self, parser: Any) -> None:
        parser.add_argument("--start-date", default=settings.DEFAULT_START_DATE)
        parser.add_argument("--end-date", default=settings.DEFAULT_END_DATE)
        parser.add_argument(
            "--tank-capacity",
            default=str(settings.DEFAULT_TANK_CAPACITY_GALLONS),
            help="Max gallons for a single fill",
        )
        parser.add_argument(
            "--total-gallons",
            default=str(settings.DEFAULT_TOTAL_GALLONS),
            help="Gallons the log should add up to",
        )
        parser.add_argument(
            "--station",
            action="append",
            dest="stations",
            help="Gas station name; repeat for several stations (defaults to settings)",
        )
        parser.add_argument(
            "--seed", type=int, default=None, help="Seed for a reproducible log"
        )

    def handle(self, *_: Any, **options: Any) -> None:
        stations = options["stations"] or list(settings.DEFAULT_GAS_STATIONS)
        rng = random.Random(options["seed"]) if options["seed"] is not None else None

        data = {
            "start_date": options["start_date"],
            "end_date": options["end_date"],
            "max_tank_capacity": options["tank_capacity"],
            "total_gallons": options["total_gallons"],
            "stations": stations,
        }
        try:
            payload = FuelLogRequest.model_validate(data)
            fuel_log = FuelLogService(rng=rng).generate(payload)
        except ValidationError as exc:
            raise CommandError(validation_error_message(exc, data)) from exc
        except InvalidLogRequestError as exc:
            raise CommandError(str(exc)) from exc

        self.stdout.write(f"{'Date':<10}  {'Gallons':>8}  Gas Station")
        for record in fuel_log.records:
            self.stdout.write(f"{record.date:<10}  {record.gallons:>8.1f}  {record.station}")
        self.stdout.write(
            self.style.SUCCESS(
                f"Total Gallons: {fuel_log.total_gallons:.1f} across {fuel_log.purchase_count} purchases"
            )
        )
        if not fuel_log.converged:
            self.stdout.write(self.style.WARNING("Allocation did not reach the requested total"))
