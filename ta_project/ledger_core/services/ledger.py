import logging

from ..models import LedgerEntry

logger = logging.getLogger(__name__)


def append(
    *,
    company,
    date,
    voucher_no: str,
    operation: str,
    account,
    direction: str,
    amount,
    last_total_amount,
    pay_type: str = "",
    note: str = "",
    client=None,
    vendor=None,
) -> LedgerEntry:
    """Insert one ledger row. Rows are never updated afterwards."""
    return LedgerEntry.objects.create(
        company=company,
        date=date,
        voucher_no=voucher_no,
        operation=operation,
        account=account,
        account_name=account.name,
        direction=direction,
        amount=amount,
        last_total_amount=last_total_amount,
        pay_type=pay_type or "",
        note=note or "",
        client=client,
        vendor=vendor,
    )


def remove(company, voucher_no, operation=None, direction=None, client=None, vendor=None) -> int:
    """
    Delete the rows a posting wrote, matched by voucher (one voucher may carry
    two legs). Returns how many rows went away; callers decide what zero means.
    """
    qs = LedgerEntry.objects.for_company(company).filter(voucher_no=voucher_no)
    if operation:
        qs = qs.filter(operation=operation)
    if direction:
        qs = qs.filter(direction=direction)
    if client is not None:
        qs = qs.filter(client=client)
    if vendor is not None:
        qs = qs.filter(vendor=vendor)

    deleted, _per_model = qs.delete()
    logger.debug("Removed %s ledger rows for voucher %s", deleted, voucher_no)
    return deleted
