from __future__ import annotations

import json
from typing import Any

from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import render
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST
from pydantic import ValidationError

from fuel_log.exceptions import InvalidLogRequestError
from fuel_log.schemas import FuelLogRequest, FuelLogResponse
from fuel_log.services.generator import FuelLogService
from fuel_log.services.validation import validation_error_message

SESSION_LOG_KEY = "fuel_log"
FORM_FIELDS = ("start_date", "end_date", "max_tank_capacity", "total_gallons", "stations")

_fuel_log_service: FuelLogService | None = None


def get_fuel_log_service() -> FuelLogService:
    global _fuel_log_service
    if _fuel_log_service is None:
        _fuel_log_service = FuelLogService()
    return _fuel_log_service


@require_http_methods(["GET", "POST"])
def fuel_log_view(request: HttpRequest) -> HttpResponse:
    form_values = _default_form_values()
    error_message = ""

    if request.method == "POST":
        form_values = {field: request.POST.get(field, "") for field in FORM_FIELDS}
        try:
            payload = FuelLogRequest.model_validate(form_values)
            response = get_fuel_log_service().generate(payload)
        except ValidationError as exc:
            error_message = validation_error_message(exc, form_values)
        except InvalidLogRequestError as exc:
            error_message = str(exc)
        else:
            request.session[SESSION_LOG_KEY] = response.model_dump(mode="json")

    return render(
        request,
        "fuel_log/fuel_log.html",
        {
            "form": form_values,
            "error_message": error_message,
            "fuel_log": _session_log(request),
        },
    )


@require_GET
def health_view(_: HttpRequest) -> HttpResponse:
    return JsonResponse(
        {
            "status": "ok",
            "defaults": {
                "start_date": settings.DEFAULT_START_DATE,
                "end_date": settings.DEFAULT_END_DATE,
                "max_tank_capacity": float(settings.DEFAULT_TANK_CAPACITY_GALLONS),
                "total_gallons": float(settings.DEFAULT_TOTAL_GALLONS),
                "stations": len(settings.DEFAULT_GAS_STATIONS),
            },
        }
    )


@csrf_exempt
@require_POST
def fuel_log_api_view(request: HttpRequest) -> HttpResponse:
    payload = _parse_json_payload(request)
    if isinstance(payload, JsonResponse):
        return payload

    try:
        log_request = FuelLogRequest.model_validate(payload)
    except ValidationError as exc:
        return JsonResponse(
            {
                "error": {
                    "code": "validation_error",
                    "message": validation_error_message(exc, payload),
                    "details": exc.errors(include_url=False),
                }
            },
            status=400,
        )

    try:
        response = get_fuel_log_service().generate(log_request)
    except InvalidLogRequestError as exc:
        return _error_response("invalid_request", str(exc), status=400)

    return JsonResponse(response.model_dump(mode="json"), status=200)


def _default_form_values() -> dict[str, str]:
    return {
        "start_date": settings.DEFAULT_START_DATE,
        "end_date": settings.DEFAULT_END_DATE,
        "max_tank_capacity": f"{float(settings.DEFAULT_TANK_CAPACITY_GALLONS):g}",
        "total_gallons": f"{float(settings.DEFAULT_TOTAL_GALLONS):g}",
        "stations": "\n".join(settings.DEFAULT_GAS_STATIONS),
    }


def _session_log(request: HttpRequest) -> FuelLogResponse | None:
    stored = request.session.get(SESSION_LOG_KEY)
    if not stored:
        return None
    return FuelLogResponse.model_validate(stored)


def _parse_json_payload(request: HttpRequest) -> dict[str, Any] | JsonResponse:
    if not request.body:
        return {}

    try:
        payload = json.loads(request.body)
    except json.JSONDecodeError:
        return _error_response("invalid_json", "Request body must be valid JSON", status=400)

    if not isinstance(payload, dict):
        return _error_response("invalid_json", "JSON body must be an object", status=400)

    return payload


def _error_response(code: str, message: str, status: int) -> JsonResponse:
    return JsonResponse({"error": {"code": code, "message": message}}, status=status)
