from __future__ import annotations

import logging
from typing import Any, Optional

from django.db import DatabaseError
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.utils.dateparse import parse_date
from django.views import View

from milling.models import Outturn
from ricemill.mixins import StaffApiMixin

from .services.books import outturn_by_products, paddy_stock_book, rice_stock_book
from .services.driver import ReconciliationRequest, ReconciliationResult
from .services.export import UNIT_BAGS, UNIT_QUINTALS, flat_rows, result_payload, rows_to_csv, rows_to_xlsx
from .services.sources import fetch_opening_balance

logger = logging.getLogger(__name__)


def _json_error(message: str, *, status: int = 400, errors: Optional[dict[str, Any]] = None) -> JsonResponse:
    payload: dict[str, Any] = {"error": message}
    if errors:
        payload["errors"] = errors
    return JsonResponse(payload, status=status)


def _unavailable(generation: str = "") -> JsonResponse:
    response = _json_error("Stock data is temporarily unavailable. Please retry.", status=503)
    if generation:
        response["X-Generation"] = generation
    return response


class StockBookView(StaffApiMixin, View):
    """Shared GET handling for the paddy and rice stock books."""

    http_method_names = ["get"]
    unit = UNIT_BAGS

    def load(self, stock_request: ReconciliationRequest) -> ReconciliationResult:
        raise NotImplementedError

    def build(self, request: HttpRequest) -> tuple[Optional[ReconciliationResult], Optional[JsonResponse]]:
        try:
            stock_request = ReconciliationRequest.from_query(request.GET)
        except ValueError as exc:
            return None, _json_error(str(exc))
        try:
            return self.load(stock_request), None
        except DatabaseError:
            logger.exception("Could not load movements for the %s book", self.unit)
            return None, _unavailable(stock_request.generation)

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> HttpResponse:
        result, error = self.build(request)
        if error is not None:
            return error
        return JsonResponse(result_payload(result, self.unit))


class PaddyStockView(StockBookView):
    unit = UNIT_BAGS

    def load(self, stock_request: ReconciliationRequest) -> ReconciliationResult:
        return paddy_stock_book(stock_request)


class RiceStockView(StockBookView):
    unit = UNIT_QUINTALS

    def load(self, stock_request: ReconciliationRequest) -> ReconciliationResult:
        return rice_stock_book(stock_request)


class PaddyStockExportView(PaddyStockView):
    """Flat paddy book rows, as CSV or (``?format=xlsx``) a workbook."""

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> HttpResponse:
        result, error = self.build(request)
        if error is not None:
            return error
        rows = flat_rows(result)
        if (request.GET.get("format") or "").lower() == "xlsx":
            response = HttpResponse(
                rows_to_xlsx(rows, title="Paddy stock"),
                content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            )
            response["Content-Disposition"] = 'attachment; filename="paddy-stock.xlsx"'
        else:
            response = HttpResponse(rows_to_csv(rows), content_type="text/csv; charset=utf-8")
            response["Content-Disposition"] = 'attachment; filename="paddy-stock.csv"'
        if result.generation:
            response["X-Generation"] = result.generation
        return response


class OpeningBalanceView(StaffApiMixin, View):
    http_method_names = ["get"]

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        raw = (request.GET.get("before") or "").strip()
        try:
            before = parse_date(raw) if raw else None
        except ValueError:
            before = None
        if before is None:
            return _json_error("before must be a date in YYYY-MM-DD format.")
        try:
            balance = fetch_opening_balance(before)
        except DatabaseError:
            logger.exception("Could not compute the opening balance before %s", before)
            return _unavailable()
        return JsonResponse(balance.as_dict())


class OutturnByProductsView(StaffApiMixin, View):
    http_method_names = ["get"]

    def get(self, request: HttpRequest, code: str, *args: Any, **kwargs: Any) -> JsonResponse:
        try:
            summary = outturn_by_products(code)
        except Outturn.DoesNotExist:
            return _json_error("Outturn not found.", status=404)
        except DatabaseError:
            logger.exception("Could not load by-products for outturn %s", code)
            return _unavailable()
        return JsonResponse(summary.as_dict())
