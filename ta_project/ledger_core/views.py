import json
import logging
from functools import wraps

from django.http import JsonResponse
from django.views.decorators.http import require_http_methods

from .exceptions import InvalidRequest, LedgerError
from .services import (advance_return, balance_transfer, client_payment,
                       expense, investment, sequences, vendor_advance_return,
                       vendor_payment)
from .services.reconciliation import ReconciliationChecker

logger = logging.getLogger(__name__)


def _parse_body(request):
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise InvalidRequest("Request body must be valid JSON") from None
    if not isinstance(data, dict):
        raise InvalidRequest("Request body must be a JSON object")
    return data


def ledger_view(view):
    """Resolve request.company (403 without one) and render LedgerError as JSON."""
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        company = getattr(request, "company", None)
        if company is None:
            return JsonResponse(
                {"ok": False, "error": "No active company for this request", "code": "FORBIDDEN"},
                status=403,
            )
        try:
            return view(request, company, *args, **kwargs)
        except LedgerError as exc:
            # UI shows the message verbatim
            if exc.status_code >= 500:
                logger.error("%s %s failed: %s", request.method, request.path, exc.message)
            return JsonResponse(exc.as_dict(), status=exc.status_code)
    return wrapper


def posting_views(create, update, delete, prefix):
    """Build the collection (create) and detail (update/delete) views for one posting kind."""

    @require_http_methods(["GET", "POST"])
    @ledger_view
    def collection(request, company):
        if request.method == "GET":
            # voucher preview for the entry form
            return JsonResponse({"ok": True, "next_voucher": sequences.peek_voucher(prefix, company)})
        result = create(company, _parse_body(request), user=getattr(request, "user", None))
        return JsonResponse(result.to_dict(), status=201)

    @require_http_methods(["POST", "PUT", "PATCH", "DELETE"])
    @ledger_view
    def detail(request, company, pk):
        user = getattr(request, "user", None)
        if request.method == "DELETE":
            result = delete(company, pk, user=user)
        else:
            result = update(company, pk, _parse_body(request), user=user)
        return JsonResponse(result.to_dict())

    return collection, detail


advance_return_list, advance_return_detail = posting_views(
    advance_return.create_advance_return,
    advance_return.update_advance_return,
    advance_return.delete_advance_return,
    sequences.ADVANCE_RETURN,
)
balance_transfer_list, balance_transfer_detail = posting_views(
    balance_transfer.create_balance_transfer,
    balance_transfer.update_balance_transfer,
    balance_transfer.delete_balance_transfer,
    sequences.BALANCE_TRANSFER,
)
expense_list, expense_detail = posting_views(
    expense.create_expense,
    expense.update_expense,
    expense.delete_expense,
    sequences.EXPENSE,
)
investment_list, investment_detail = posting_views(
    investment.create_investment,
    investment.update_investment,
    investment.delete_investment,
    sequences.INVESTMENT,
)
vendor_advance_return_list, vendor_advance_return_detail = posting_views(
    vendor_advance_return.create_vendor_advance_return,
    vendor_advance_return.update_vendor_advance_return,
    vendor_advance_return.delete_vendor_advance_return,
    sequences.VENDOR_ADVANCE_RETURN,
)
client_payment_list, client_payment_detail = posting_views(
    client_payment.create_client_payment,
    client_payment.update_client_payment,
    client_payment.delete_client_payment,
    sequences.MONEY_RECEIPT,
)
vendor_payment_list, vendor_payment_detail = posting_views(
    vendor_payment.create_vendor_payment,
    vendor_payment.update_vendor_payment,
    vendor_payment.delete_vendor_payment,
    sequences.VENDOR_PAYMENT,
)


@require_http_methods(["GET", "POST"])
@ledger_view
def reconciliation_view(request, company):
    """GET ?action=report is read-only; POST {"action": "reconcile"} corrects dues."""
    user = getattr(request, "user", None)
    checker = ReconciliationChecker(company, user=user)

    if request.method == "GET":
        action = request.GET.get("action", "report")
        if action != "report":
            raise InvalidRequest(f"Invalid action: {action}. Use 'report'")
        return JsonResponse({"ok": True, **checker.report()})

    data = _parse_body(request)
    action = data.get("action")
    if action != "reconcile":
        raise InvalidRequest(f"Invalid action: {action}. Use 'reconcile'")

    client_id = data.get("client_id")
    if client_id not in (None, ""):
        result = checker.reconcile_client(client_id)
        return JsonResponse({"ok": True, "result": result.to_dict()})

    summary = checker.reconcile()
    logger.info(
        "Manual reconciliation for company %s: %s clients corrected",
        company.pk, summary["reconciled_clients"],
    )
    return JsonResponse({"ok": True, **summary})
