import logging

from ..models import Account, AdvanceReturn, Client
from ..models.ledger import ADVANCE_RETURN
from . import balances, sequences
from .base import (Delta, PostingResult, acting_user, get_for_company, merged,
                   parse_amount, parse_date, persist, post_deltas,
                   posting_unit, remove_entries, reverse_deltas)

logger = logging.getLogger(__name__)


# ----------------------------
# Advance return workflows
# ----------------------------
# The agency pays back part of the advance a client holds:
#   client present balance -amount, account +amount, one "receiv" ledger row
def _deltas(record):
    return [
        Delta(balances.CLIENT, record.client, -record.amount, "client_present_balance"),
        Delta(balances.ACCOUNT, record.account, record.amount, "account_balance"),
    ]


def _apply_payload(record, company, data):
    record.client = get_for_company(
        Client, company, merged(data, "client_id", record.client_id), "Client")
    record.account = get_for_company(
        Account, company, merged(data, "account_id", record.account_id), "Account")
    record.amount = parse_amount(merged(data, "amount", record.amount))
    record.transaction_charge = parse_amount(
        merged(data, "transaction_charge", record.transaction_charge),
        "transaction_charge", allow_zero=True,
    )
    record.return_date = parse_date(merged(data, "return_date", record.return_date), "return_date")
    record.payment_method = merged(data, "payment_method", record.payment_method)
    record.receipt_no = merged(data, "receipt_no", record.receipt_no) or ""
    record.note = merged(data, "note", record.note) or ""


def _post(record):
    return post_deltas(
        record.company,
        _deltas(record),
        voucher_no=record.voucher_no,
        operation=ADVANCE_RETURN,
        date=record.return_date,
        pay_type=record.payment_method,
        note=record.note,
        client=record.client,
    )


def _display(record):
    return {
        "client_name": record.client.name,
        "account_name": record.account.name,
        "amount": str(record.amount),
        "return_date": record.return_date.isoformat(),
    }


def create_advance_return(company, data, user=None) -> PostingResult:
    with posting_unit("advance_return.create"):
        record = AdvanceReturn(company=company, created_by=acting_user(user))
        _apply_payload(record, company, data)

        # cannot hand back more advance than the client holds
        balances.ensure_covers(balances.CLIENT, record.client, record.amount)

        record.voucher_no = sequences.next_voucher(sequences.ADVANCE_RETURN, company)
        new_balances = _post(record)
        persist(record)

    logger.info(
        "Advance return %s posted: client=%s amount=%s company=%s",
        record.voucher_no, record.client_id, record.amount, company.pk,
    )
    return PostingResult(record, record.voucher_no, _display(record), new_balances)


def update_advance_return(company, pk, data, user=None) -> PostingResult:
    with posting_unit("advance_return.update"):
        record = get_for_company(AdvanceReturn, company, pk, "Advance return", lock=True)

        # Undo the old posting first so the coverage check sees the restored pool
        reverse_deltas(_deltas(record))
        warnings = remove_entries(company, record.voucher_no, ADVANCE_RETURN)

        _apply_payload(record, company, data)
        balances.ensure_covers(balances.CLIENT, record.client, record.amount)

        new_balances = _post(record)  # same voucher
        persist(record)

    logger.info("Advance return %s updated (company %s)", record.voucher_no, company.pk)
    return PostingResult(record, record.voucher_no, _display(record), new_balances, warnings)


def delete_advance_return(company, pk, user=None) -> PostingResult:
    with posting_unit("advance_return.delete"):
        record = get_for_company(AdvanceReturn, company, pk, "Advance return", lock=True)
        restored = reverse_deltas(_deltas(record))
        warnings = remove_entries(company, record.voucher_no, ADVANCE_RETURN)
        display = _display(record)
        record.delete()

    logger.info("Advance return %s deleted (company %s)", record.voucher_no, company.pk)
    return PostingResult(record, record.voucher_no, display, restored, warnings, deleted=True)
