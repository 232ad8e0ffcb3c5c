import logging
from decimal import Decimal

from ..exceptions import InvalidRequest
from ..models import Account, Expense, ExpenseHead, ExpenseLine
from ..models.ledger import EXPENSE
from . import balances, sequences
from .base import (Delta, PostingResult, acting_user, get_for_company, merged,
                   parse_amount, parse_date, persist, post_deltas,
                   posting_unit, remove_entries, reverse_deltas)

logger = logging.getLogger(__name__)


# ----------------------------
# Expense workflows
# ----------------------------
# No client/vendor side: one account payout for the sum of the lines
def _deltas(record):
    return [
        Delta(balances.ACCOUNT, record.account, -record.total_amount, "account_balance"),
    ]


def _parse_items(company, items):
    """[{head_id, amount}, ...] -> [(ExpenseHead, Decimal), ...]"""
    if not isinstance(items, (list, tuple)) or not items:
        raise InvalidRequest("An expense needs at least one line item")
    parsed = []
    for item in items:
        if not isinstance(item, dict):
            raise InvalidRequest(f"Invalid expense line: {item}")
        head = get_for_company(ExpenseHead, company, item.get("head_id"), "Expense head")
        parsed.append((head, parse_amount(item.get("amount"), "item amount")))
    return parsed


def _apply_payload(record, company, data):
    record.account = get_for_company(
        Account, company, merged(data, "account_id", record.account_id), "Account")
    record.date = parse_date(merged(data, "date", record.date))
    record.payment_method = merged(data, "payment_method", record.payment_method)
    record.note = merged(data, "note", record.note) or ""

    if "items" in data or record.pk is None:
        items = _parse_items(company, data.get("items"))
    else:
        items = [(line.head, line.amount) for line in record.lines.select_related("head")]

    record.total_amount = sum((amount for _head, amount in items), Decimal("0.00"))
    return items


def _write_lines(record, items):
    record.lines.all().delete()
    ExpenseLine.objects.bulk_create([
        ExpenseLine(
            company=record.company,
            expense=record,
            head=head,
            head_name=head.name,
            amount=amount,
        )
        for head, amount in items
    ])


def _post(record):
    return post_deltas(
        record.company,
        _deltas(record),
        voucher_no=record.voucher_no,
        operation=EXPENSE,
        date=record.date,
        pay_type=record.payment_method,
        note=record.note,
    )


def _display(record):
    return {
        "account_name": record.account.name,
        "total_amount": str(record.total_amount),
        "date": record.date.isoformat(),
        "items": [
            {"head_id": line.head_id, "head_name": line.head_name, "amount": str(line.amount)}
            for line in record.lines.order_by("id")
        ],
    }


def create_expense(company, data, user=None) -> PostingResult:
    with posting_unit("expense.create"):
        record = Expense(company=company, created_by=acting_user(user))
        items = _apply_payload(record, company, data)

        record.voucher_no = sequences.next_voucher(sequences.EXPENSE, company)
        new_balances = _post(record)
        persist(record)
        _write_lines(record, items)
        display = _display(record)

    logger.info(
        "Expense %s posted: account=%s total=%s lines=%s company=%s",
        record.voucher_no, record.account_id, record.total_amount, len(items), company.pk,
    )
    return PostingResult(record, record.voucher_no, display, new_balances)


def update_expense(company, pk, data, user=None) -> PostingResult:
    with posting_unit("expense.update"):
        record = get_for_company(Expense, company, pk, "Expense", lock=True)
        reverse_deltas(_deltas(record))  # account +old total
        warnings = remove_entries(company, record.voucher_no, EXPENSE)

        items = _apply_payload(record, company, data)
        new_balances = _post(record)
        persist(record)
        _write_lines(record, items)  # old lines dropped, new ones written
        display = _display(record)

    logger.info("Expense %s updated (company %s)", record.voucher_no, company.pk)
    return PostingResult(record, record.voucher_no, display, new_balances, warnings)


def delete_expense(company, pk, user=None) -> PostingResult:
    with posting_unit("expense.delete"):
        record = get_for_company(Expense, company, pk, "Expense", lock=True)
        # every line total goes back to the account in one delta
        restored = reverse_deltas(_deltas(record))
        warnings = remove_entries(company, record.voucher_no, EXPENSE)
        display = _display(record)
        record.delete()  # lines cascade

    logger.info("Expense %s deleted (company %s)", record.voucher_no, company.pk)
    return PostingResult(record, record.voucher_no, display, restored, warnings, deleted=True)
