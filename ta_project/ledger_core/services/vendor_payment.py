import logging

from ..exceptions import InvalidRequest
from ..models import Account, Vendor, VendorPayment
from ..models.ledger import VENDOR_PAYMENT
from ..models.vendor_payment import PAYMENT_TARGETS
from . import balances, sequences
from .base import (Delta, PostingResult, acting_user, get_for_company, merged,
                   parse_amount, parse_date, persist, post_deltas,
                   posting_unit, remove_entries, reverse_deltas)

logger = logging.getLogger(__name__)

TARGETS = {key for key, _label in PAYMENT_TARGETS}


# ----------------------------
# Vendor payment workflows
# ----------------------------
# We pay a vendor:
#   vendor net advance +amount (due shrinks or advance grows),
#   account -(amount + vendor_ait), one payout leg for the total
def _deltas(record):
    return [
        Delta(balances.VENDOR, record.vendor, record.amount, "vendor_balance"),
        Delta(balances.ACCOUNT, record.account, -record.total_amount, "account_balance"),
    ]


def _apply_payload(record, company, data):
    payment_to = merged(data, "payment_to", record.payment_to)
    if payment_to not in TARGETS:
        # invoice-level allocation is not handled here
        raise InvalidRequest(f"Invalid payment_to: {payment_to}. Use 'overall' or 'advance'")
    record.payment_to = payment_to

    record.vendor = get_for_company(
        Vendor, company, merged(data, "vendor_id", record.vendor_id), "Vendor")
    record.account = get_for_company(
        Account, company, merged(data, "account_id", record.account_id), "Account")
    record.amount = parse_amount(merged(data, "amount", record.amount))
    record.vendor_ait = parse_amount(
        merged(data, "vendor_ait", record.vendor_ait), "vendor_ait", allow_zero=True)
    # total is always derived, never taken from the payload
    record.total_amount = record.amount + record.vendor_ait

    record.date = parse_date(merged(data, "date", record.date))
    record.payment_method = merged(data, "payment_method", record.payment_method)
    record.receipt_no = merged(data, "receipt_no", record.receipt_no) or ""
    record.note = merged(data, "note", record.note) or ""


def _post(record):
    return post_deltas(
        record.company,
        _deltas(record),
        voucher_no=record.voucher_no,
        operation=VENDOR_PAYMENT,
        date=record.date,
        pay_type=record.payment_method,
        note=record.note or f"Vendor payment to {record.vendor.name}",
        vendor=record.vendor,
    )


def _display(record):
    vendor = record.vendor
    return {
        "vendor_name": vendor.name,
        "account_name": record.account.name,
        "payment_to": record.payment_to,
        "amount": str(record.amount),
        "vendor_ait": str(record.vendor_ait),
        "total_amount": str(record.total_amount),
        "date": record.date.isoformat(),
        # tagged form for the UI
        "vendor_balance_type": vendor.present_balance_type,
        "vendor_balance_amount": str(vendor.present_balance_amount),
    }


def create_vendor_payment(company, data, user=None) -> PostingResult:
    with posting_unit("vendor_payment.create"):
        record = VendorPayment(company=company, created_by=acting_user(user))
        _apply_payload(record, company, data)

        # payments may overdraw the account, so no coverage check
        record.voucher_no = sequences.next_voucher(sequences.VENDOR_PAYMENT, company)
        new_balances = _post(record)
        persist(record)

    logger.info(
        "Vendor payment %s posted: vendor=%s account=%s total=%s company=%s",
        record.voucher_no, record.vendor_id, record.account_id,
        record.total_amount, company.pk,
    )
    return PostingResult(record, record.voucher_no, _display(record), new_balances)


def update_vendor_payment(company, pk, data, user=None) -> PostingResult:
    with posting_unit("vendor_payment.update"):
        # lock the record so two edits cannot reverse it twice
        record = get_for_company(VendorPayment, company, pk, "Vendor payment", lock=True)

        # undo the stored posting: vendor -amount, account +total
        reverse_deltas(_deltas(record))
        warnings = remove_entries(company, record.voucher_no, VENDOR_PAYMENT)

        _apply_payload(record, company, data)
        new_balances = _post(record)  # same voucher
        persist(record)

    logger.info("Vendor payment %s updated (company %s)", record.voucher_no, company.pk)
    return PostingResult(record, record.voucher_no, _display(record), new_balances, warnings)


def delete_vendor_payment(company, pk, user=None) -> PostingResult:
    with posting_unit("vendor_payment.delete"):
        record = get_for_company(VendorPayment, company, pk, "Vendor payment", lock=True)
        restored = reverse_deltas(_deltas(record))
        warnings = remove_entries(company, record.voucher_no, VENDOR_PAYMENT)
        display = _display(record)
        record.delete()

    logger.info("Vendor payment %s deleted (company %s)", record.voucher_no, company.pk)
    return PostingResult(record, record.voucher_no, display, restored, warnings, deleted=True)
