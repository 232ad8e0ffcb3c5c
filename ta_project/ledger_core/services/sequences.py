import logging

from django.db import IntegrityError, transaction
from django.db.transaction import TransactionManagementError

from ..models import VoucherCounter

logger = logging.getLogger(__name__)

# Voucher prefixes, one counter per (company, prefix)
ADVANCE_RETURN = "ADR"
BALANCE_TRANSFER = "BT"
EXPENSE = "EX"
INVESTMENT = "IVT"
VENDOR_ADVANCE_RETURN = "ADVR"
MONEY_RECEIPT = "MR"
VENDOR_PAYMENT = "VP"


def format_voucher(prefix: str, seq: int) -> str:
    return f"{prefix.upper()}-{seq:04d}"


def next_voucher(prefix: str, company) -> str:
    """
    Increment the (company, prefix) counter and return e.g. "BT-0007".

    Must run inside the posting's transaction.atomic() block: the counter row
    stays locked until that block commits, so concurrent postings of the same
    kind are serialized and a rolled back posting releases nothing but a gap.
    """
    if not transaction.get_connection().in_atomic_block:
        raise TransactionManagementError(
            "next_voucher() must be called inside transaction.atomic()"
        )

    key = prefix.upper()
    counter = (
        VoucherCounter.objects.select_for_update()
        .filter(company=company, key=key)
        .first()
    )
    if counter is None:
        try:
            # savepoint: a concurrent first caller may win the insert
            with transaction.atomic():
                counter = VoucherCounter.objects.create(company=company, key=key, seq=0)
        except IntegrityError:
            counter = VoucherCounter.objects.select_for_update().get(
                company=company, key=key
            )

    counter.seq += 1
    counter.save(update_fields=["seq", "updated_at"])

    voucher = format_voucher(key, counter.seq)
    logger.debug("Allocated voucher %s for company %s", voucher, company.pk)
    return voucher


def peek_voucher(prefix: str, company) -> str:
    """Voucher the next posting would get (read-only, for form previews)."""
    seq = (
        VoucherCounter.objects.for_company(company)
        .filter(key=prefix.upper())
        .values_list("seq", flat=True)
        .first()
    )
    return format_voucher(prefix, (seq or 0) + 1)
