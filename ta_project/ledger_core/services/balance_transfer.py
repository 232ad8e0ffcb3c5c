import logging

from ..exceptions import InvalidRequest
from ..models import Account, BalanceTransfer
from ..models.ledger import BALANCE_TRANSFER
from . import balances, sequences
from .base import (Delta, PostingResult, acting_user, get_for_company, merged,
                   parse_amount, parse_date, persist, post_deltas,
                   posting_unit, remove_entries, reverse_deltas)

logger = logging.getLogger(__name__)


# ----------------------------
# Balance transfer workflows
# ----------------------------
def _deltas(record):
    """Source pays amount + charge, destination gets amount; the charge leaves the books."""
    return [
        Delta(balances.ACCOUNT, record.transfer_from,
              -(record.amount + record.transfer_charge), "from_account_balance"),
        Delta(balances.ACCOUNT, record.transfer_to, record.amount, "to_account_balance"),
    ]


def _apply_payload(record, company, data):
    from_id = merged(data, "transfer_from_id", record.transfer_from_id)
    to_id = merged(data, "transfer_to_id", record.transfer_to_id)
    if from_id not in (None, "") and str(from_id) == str(to_id):
        raise InvalidRequest("Cannot transfer to the same account")

    record.transfer_from = get_for_company(Account, company, from_id, "Source account")
    record.transfer_to = get_for_company(Account, company, to_id, "Destination account")
    record.amount = parse_amount(merged(data, "amount", record.amount))
    record.transfer_charge = parse_amount(
        merged(data, "transfer_charge", record.transfer_charge),
        "transfer_charge", allow_zero=True,
    )
    record.date = parse_date(merged(data, "date", record.date))
    record.note = merged(data, "note", record.note) or ""


def _post(record):
    return post_deltas(
        record.company,
        _deltas(record),
        voucher_no=record.voucher_no,
        operation=BALANCE_TRANSFER,
        date=record.date,
        pay_type="transfer",
        note=record.note,
    )


def _display(record):
    return {
        "transfer_from_name": record.transfer_from.name,
        "transfer_to_name": record.transfer_to.name,
        "amount": str(record.amount),
        "transfer_charge": str(record.transfer_charge),
        "total_debit": str(record.total_debit),
        "date": record.date.isoformat(),
    }


def create_balance_transfer(company, data, user=None) -> PostingResult:
    with posting_unit("balance_transfer.create"):
        record = BalanceTransfer(company=company, created_by=acting_user(user))
        _apply_payload(record, company, data)

        # voucher comes from the same atomic block as the postings
        record.voucher_no = sequences.next_voucher(sequences.BALANCE_TRANSFER, company)
        new_balances = _post(record)
        persist(record)

    logger.info(
        "Balance transfer %s posted: %s -> %s amount=%s charge=%s company=%s",
        record.voucher_no, record.transfer_from_id, record.transfer_to_id,
        record.amount, record.transfer_charge, company.pk,
    )
    return PostingResult(record, record.voucher_no, _display(record), new_balances)


def update_balance_transfer(company, pk, data, user=None) -> PostingResult:
    with posting_unit("balance_transfer.update"):
        # locked until commit; a second edit of the same transfer waits here
        record = get_for_company(BalanceTransfer, company, pk, "Balance transfer", lock=True)
        # both legs back: source +(amount + charge), destination -amount
        reverse_deltas(_deltas(record))
        warnings = remove_entries(company, record.voucher_no, BALANCE_TRANSFER)

        _apply_payload(record, company, data)  # re-checks same-account
        new_balances = _post(record)  # same voucher, fresh legs
        persist(record)

    logger.info("Balance transfer %s updated (company %s)", record.voucher_no, company.pk)
    return PostingResult(record, record.voucher_no, _display(record), new_balances, warnings)


def delete_balance_transfer(company, pk, user=None) -> PostingResult:
    with posting_unit("balance_transfer.delete"):
        record = get_for_company(BalanceTransfer, company, pk, "Balance transfer", lock=True)
        # restored balances are what the caller shows after the delete
        restored = reverse_deltas(_deltas(record))
        warnings = remove_entries(company, record.voucher_no, BALANCE_TRANSFER)
        display = _display(record)
        record.delete()

    logger.info("Balance transfer %s deleted (company %s)", record.voucher_no, company.pk)
    return PostingResult(record, record.voucher_no, display, restored, warnings, deleted=True)
