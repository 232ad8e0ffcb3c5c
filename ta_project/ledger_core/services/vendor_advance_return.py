import logging

from ..models import Account, Vendor, VendorAdvanceReturn
from ..models.ledger import VENDOR_ADVANCE_RETURN
from . import balances, sequences
from .base import (Delta, PostingResult, acting_user, get_for_company, merged,
                   parse_amount, parse_date, persist, post_deltas,
                   posting_unit, remove_entries, reverse_deltas)

logger = logging.getLogger(__name__)


# ----------------------------
# Vendor advance return workflows
# ----------------------------
# A vendor refunds advance we paid them:
#   vendor net advance -amount, account +amount
def _deltas(record):
    return [
        Delta(balances.VENDOR, record.vendor, -record.amount, "vendor_balance"),
        Delta(balances.ACCOUNT, record.account, record.amount, "account_balance"),
    ]


def _apply_payload(record, company, data):
    record.vendor = get_for_company(
        Vendor, company, merged(data, "vendor_id", record.vendor_id), "Vendor")
    record.account = get_for_company(
        Account, company, merged(data, "account_id", record.account_id), "Account")
    record.amount = parse_amount(merged(data, "amount", record.amount))
    record.return_date = parse_date(merged(data, "return_date", record.return_date), "return_date")
    record.payment_method = merged(data, "payment_method", record.payment_method)
    record.note = merged(data, "note", record.note) or ""


def _post(record):
    return post_deltas(
        record.company,
        _deltas(record),
        voucher_no=record.voucher_no,
        operation=VENDOR_ADVANCE_RETURN,
        date=record.return_date,
        pay_type=record.payment_method,
        note=record.note,
        vendor=record.vendor,
    )


def _display(record):
    vendor = record.vendor
    return {
        "vendor_name": vendor.name,
        "account_name": record.account.name,
        "amount": str(record.amount),
        "return_date": record.return_date.isoformat(),
        # tagged form for the UI
        "vendor_balance_type": vendor.present_balance_type,
        "vendor_balance_amount": str(vendor.present_balance_amount),
    }


def create_vendor_advance_return(company, data, user=None) -> PostingResult:
    with posting_unit("vendor_advance_return.create"):
        record = VendorAdvanceReturn(company=company, created_by=acting_user(user))
        _apply_payload(record, company, data)
        balances.ensure_covers(balances.VENDOR, record.vendor, record.amount)

        record.voucher_no = sequences.next_voucher(sequences.VENDOR_ADVANCE_RETURN, company)
        new_balances = _post(record)
        persist(record)

    logger.info(
        "Vendor advance return %s posted: vendor=%s amount=%s company=%s",
        record.voucher_no, record.vendor_id, record.amount, company.pk,
    )
    return PostingResult(record, record.voucher_no, _display(record), new_balances)


def update_vendor_advance_return(company, pk, data, user=None) -> PostingResult:
    with posting_unit("vendor_advance_return.update"):
        record = get_for_company(
            VendorAdvanceReturn, company, pk, "Vendor advance return", lock=True)
        # give the advance back first so the coverage check below sees it
        reverse_deltas(_deltas(record))
        warnings = remove_entries(company, record.voucher_no, VENDOR_ADVANCE_RETURN)

        _apply_payload(record, company, data)
        balances.ensure_covers(balances.VENDOR, record.vendor, record.amount)
        new_balances = _post(record)
        persist(record)

    logger.info("Vendor advance return %s updated (company %s)", record.voucher_no, company.pk)
    return PostingResult(record, record.voucher_no, _display(record), new_balances, warnings)


def delete_vendor_advance_return(company, pk, user=None) -> PostingResult:
    with posting_unit("vendor_advance_return.delete"):
        record = get_for_company(
            VendorAdvanceReturn, company, pk, "Vendor advance return", lock=True)
        restored = reverse_deltas(_deltas(record))
        warnings = remove_entries(company, record.voucher_no, VENDOR_ADVANCE_RETURN)
        display = _display(record)
        record.delete()

    logger.info("Vendor advance return %s deleted (company %s)", record.voucher_no, company.pk)
    return PostingResult(record, record.voucher_no, display, restored, warnings, deleted=True)
