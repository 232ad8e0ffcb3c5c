import logging

from ..exceptions import InvalidAmount
from ..models import Account, Client, ClientPayment
from ..models.ledger import CLIENT_PAYMENT
from . import balances, sequences
from .audit_helper import log_action
from .base import (Delta, PostingResult, acting_user, get_for_company, merged,
                   parse_amount, parse_date, persist, post_deltas,
                   posting_unit, remove_entries, reverse_deltas)

logger = logging.getLogger(__name__)


# ----------------------------
# Client payment (money receipt) workflows
# ----------------------------
def _deltas(record):
    """
    due -= received - refund; the account gets the receipt in and the refund out,
    each as its own ledger leg (skipped when zero).
    """
    deltas = [
        Delta(balances.CLIENT_DUE, record.client,
              -(record.received_amount - record.refund_amount), "client_due_amount"),
    ]
    if record.received_amount > 0:
        deltas.append(Delta(balances.ACCOUNT, record.account,
                            record.received_amount, "account_balance"))
    if record.refund_amount > 0:
        deltas.append(Delta(balances.ACCOUNT, record.account,
                            -record.refund_amount, "account_balance"))
    return deltas


def _apply_payload(record, company, data):
    record.client = get_for_company(
        Client, company, merged(data, "client_id", record.client_id), "Client")
    record.account = get_for_company(
        Account, company, merged(data, "account_id", record.account_id), "Account")
    record.received_amount = parse_amount(
        merged(data, "received_amount", record.received_amount), "received_amount", allow_zero=True)
    record.refund_amount = parse_amount(
        merged(data, "refund_amount", record.refund_amount), "refund_amount", allow_zero=True)
    if record.received_amount == 0 and record.refund_amount == 0:
        raise InvalidAmount(
            "Either received or refund amount must be positive",
            details={"field": "received_amount", "value": "0"},
        )
    record.date = parse_date(merged(data, "date", record.date))
    record.payment_method = merged(data, "payment_method", record.payment_method)
    record.note = merged(data, "note", record.note) or ""


def _post(record):
    return post_deltas(
        record.company,
        _deltas(record),
        voucher_no=record.voucher_no,
        operation=CLIENT_PAYMENT,
        date=record.date,
        pay_type=record.payment_method,
        note=record.note,
        client=record.client,
    )


def _snapshot(record):
    return {
        "voucher_no": record.voucher_no,
        "client_id": record.client_id,
        "account_id": record.account_id,
        "received_amount": str(record.received_amount),
        "refund_amount": str(record.refund_amount),
        "net_amount": str(record.net_amount),
        "payment_method": record.payment_method,
    }


def _display(record):
    return {
        "client_name": record.client.name,
        "account_name": record.account.name,
        "received_amount": str(record.received_amount),
        "refund_amount": str(record.refund_amount),
        "net_amount": str(record.net_amount),
        "date": record.date.isoformat(),
    }


def create_client_payment(company, data, user=None) -> PostingResult:
    with posting_unit("client_payment.create"):
        record = ClientPayment(company=company, created_by=acting_user(user))
        _apply_payload(record, company, data)

        due_before = balances.locked_balance(balances.CLIENT_DUE, record.client)
        record.voucher_no = sequences.next_voucher(sequences.MONEY_RECEIPT, company)
        new_balances = _post(record)
        persist(record)

        log_action(
            action="CREATE_TRANSACTION",
            instance=record,
            user=user,
            company=company,
            balance_before=due_before,
            balance_after=new_balances["client_due_amount"],
            changes=_snapshot(record),
        )

    logger.info(
        "Client payment %s posted: client=%s received=%s refund=%s company=%s",
        record.voucher_no, record.client_id, record.received_amount,
        record.refund_amount, company.pk,
    )
    return PostingResult(record, record.voucher_no, _display(record), new_balances)


def update_client_payment(company, pk, data, user=None) -> PostingResult:
    with posting_unit("client_payment.update"):
        record = get_for_company(ClientPayment, company, pk, "Client payment", lock=True)
        old = _snapshot(record)  # audit "old" side, taken before the reversal
        # the client row stays locked through the re-post
        due_before = balances.locked_balance(balances.CLIENT_DUE, record.client)

        reverse_deltas(_deltas(record))
        warnings = remove_entries(company, record.voucher_no, CLIENT_PAYMENT)

        _apply_payload(record, company, data)
        new_balances = _post(record)
        persist(record)

        log_action(
            action="UPDATE_TRANSACTION",
            instance=record,
            user=user,
            company=company,
            balance_before=due_before,
            balance_after=new_balances["client_due_amount"],
            changes={"old": old, "new": _snapshot(record)},
        )

    logger.info("Client payment %s updated (company %s)", record.voucher_no, company.pk)
    return PostingResult(record, record.voucher_no, _display(record), new_balances, warnings)


def delete_client_payment(company, pk, user=None) -> PostingResult:
    with posting_unit("client_payment.delete"):
        record = get_for_company(ClientPayment, company, pk, "Client payment", lock=True)
        due_before = balances.locked_balance(balances.CLIENT_DUE, record.client)

        restored = reverse_deltas(_deltas(record))
        warnings = remove_entries(company, record.voucher_no, CLIENT_PAYMENT)
        display = _display(record)

        # logged before the row goes so object_id is still set
        log_action(
            action="DELETE_TRANSACTION",
            instance=record,
            user=user,
            company=company,
            balance_before=due_before,
            balance_after=restored["client_due_amount"],
            changes=_snapshot(record),
        )
        record.delete()

    logger.info("Client payment %s deleted (company %s)", record.voucher_no, company.pk)
    return PostingResult(record, record.voucher_no, display, restored, warnings, deleted=True)
