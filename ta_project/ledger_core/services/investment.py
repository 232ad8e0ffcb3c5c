import logging

from ..models import Account, Investment
from ..models.ledger import INVESTMENT
from . import balances, sequences
from .base import (Delta, PostingResult, acting_user, get_for_company, merged,
                   parse_amount, parse_date, persist, post_deltas,
                   posting_unit, remove_entries, reverse_deltas)

logger = logging.getLogger(__name__)

# An investment is incoming capital: it credits the account.
# Flip to treat investments as outflows to the target company.
INVESTMENT_CREDITS_ACCOUNT = True


# ----------------------------
# Investment workflows
# ----------------------------
def _deltas(record):
    amount = record.amount if INVESTMENT_CREDITS_ACCOUNT else -record.amount
    return [Delta(balances.ACCOUNT, record.account, amount, "account_balance")]


def _apply_payload(record, company, data):
    record.account = get_for_company(
        Account, company, merged(data, "account_id", record.account_id), "Account")
    record.target_company_name = (
        merged(data, "target_company_name", record.target_company_name) or ""
    ).strip()
    record.amount = parse_amount(merged(data, "amount", record.amount))
    record.date = parse_date(merged(data, "date", record.date))
    record.payment_method = merged(data, "payment_method", record.payment_method)
    record.note = merged(data, "note", record.note) or ""


def _post(record):
    return post_deltas(
        record.company,
        _deltas(record),
        voucher_no=record.voucher_no,
        operation=INVESTMENT,
        date=record.date,
        pay_type=record.payment_method,
        note=record.note,
    )


def _display(record):
    return {
        "account_name": record.account.name,
        "target_company_name": record.target_company_name,
        "amount": str(record.amount),
        "date": record.date.isoformat(),
    }


def create_investment(company, data, user=None) -> PostingResult:
    with posting_unit("investment.create"):
        record = Investment(company=company, created_by=acting_user(user))
        _apply_payload(record, company, data)

        record.voucher_no = sequences.next_voucher(sequences.INVESTMENT, company)
        new_balances = _post(record)
        persist(record)

    logger.info(
        "Investment %s posted: account=%s amount=%s target=%s company=%s",
        record.voucher_no, record.account_id, record.amount,
        record.target_company_name, company.pk,
    )
    return PostingResult(record, record.voucher_no, _display(record), new_balances)


def update_investment(company, pk, data, user=None) -> PostingResult:
    with posting_unit("investment.update"):
        record = get_for_company(Investment, company, pk, "Investment", lock=True)

        # undo with the policy in force now
        reverse_deltas(_deltas(record))
        warnings = remove_entries(company, record.voucher_no, INVESTMENT)

        _apply_payload(record, company, data)
        new_balances = _post(record)
        persist(record)

    logger.info("Investment %s updated (company %s)", record.voucher_no, company.pk)
    return PostingResult(record, record.voucher_no, _display(record), new_balances, warnings)


def delete_investment(company, pk, user=None) -> PostingResult:
    with posting_unit("investment.delete"):
        record = get_for_company(Investment, company, pk, "Investment", lock=True)
        restored = reverse_deltas(_deltas(record))
        # a missing entry is a warning, the delete still goes through
        warnings = remove_entries(company, record.voucher_no, INVESTMENT)
        display = _display(record)
        record.delete()

    logger.info("Investment %s deleted (company %s)", record.voucher_no, company.pk)
    return PostingResult(record, record.voucher_no, display, restored, warnings, deleted=True)
