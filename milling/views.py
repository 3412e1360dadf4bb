from __future__ import annotations

import json
import logging
from typing import Any, Optional

from django.core.exceptions import ValidationError
from django.http import HttpRequest, JsonResponse
from django.shortcuts import get_object_or_404
from django.utils.dateparse import parse_date
from django.views import View

from ricemill.mixins import StaffApiMixin

from .models import Outturn
from .services.outturns import clear_outturn, paddy_bags_summary

logger = logging.getLogger(__name__)


def _json_error(message: str, *, status: int = 400, errors: Optional[dict[str, Any]] = None) -> JsonResponse:
    payload: dict[str, Any] = {"error": message}
    if errors:
        payload["errors"] = errors
    return JsonResponse(payload, status=status)


def _load_json_body(request: HttpRequest) -> tuple[Optional[dict[str, Any]], Optional[JsonResponse]]:
    try:
        payload = json.loads(request.body or "{}")
    except json.JSONDecodeError:
        return None, _json_error("Invalid JSON.")
    if not isinstance(payload, dict):
        return None, _json_error("The body must be a JSON object.")
    return payload, None


class OutturnAvailableBagsView(StaffApiMixin, View):
    http_method_names = ["get"]

    def get(self, request: HttpRequest, pk: int, *args: Any, **kwargs: Any) -> JsonResponse:
        outturn = get_object_or_404(Outturn, pk=pk)
        return JsonResponse(paddy_bags_summary(outturn).as_dict())


class OutturnClearView(StaffApiMixin, View):
    http_method_names = ["post"]

    def post(self, request: HttpRequest, pk: int, *args: Any, **kwargs: Any) -> JsonResponse:
        outturn = get_object_or_404(Outturn, pk=pk)
        payload, error = _load_json_body(request)
        if error:
            return error
        raw_date = str(payload.get("clear_date") or "").strip()
        try:
            clear_date = parse_date(raw_date) if raw_date else None
        except ValueError:
            return _json_error("clear_date must be a date in YYYY-MM-DD format.")
        if raw_date and clear_date is None:
            return _json_error("clear_date must be a date in YYYY-MM-DD format.")
        try:
            outturn = clear_outturn(outturn, clear_date, request.user)
        except ValidationError as exc:
            return _json_error(" ".join(exc.messages))
        return JsonResponse(
            {
                "outturn": outturn.code,
                "is_cleared": outturn.is_cleared,
                "cleared_on": outturn.cleared_on.isoformat(),
                "remaining_bags": outturn.remaining_bags,
            }
        )
