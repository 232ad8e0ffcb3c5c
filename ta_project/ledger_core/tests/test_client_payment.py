from decimal import Decimal

import pytest

from ledger_core.exceptions import InvalidAmount
from ledger_core.models import AuditLog, ClientPayment, LedgerEntry
from ledger_core.models.ledger import PAYOUT, RECEIV
from ledger_core.services.client_payment import (create_client_payment,
                                                 delete_client_payment,
                                                 update_client_payment)


def _payload(traveller, account, **overrides):
    data = {
        "client_id": traveller.pk,
        "account_id": account.pk,
        "received_amount": "300",
        "refund_amount": "0",
        "date": "2025-09-17",
        "payment_method": "cash",
    }
    data.update(overrides)
    return data


@pytest.mark.django_db
def test_receipt_reduces_due_and_credits_account(company, traveller, cash, member):
    result = create_client_payment(company, _payload(traveller, cash), user=member)

    traveller.refresh_from_db()
    cash.refresh_from_db()
    assert traveller.due_amount == Decimal("500.00")
    assert cash.balance == Decimal("1300.00")
    assert result.voucher_no == "MR-0001"

    entry = LedgerEntry.objects.get(voucher_no="MR-0001")
    assert (entry.direction, entry.amount, entry.client_id) == (RECEIV, Decimal("300.00"), traveller.pk)

    log = AuditLog.objects.get(action="CREATE_TRANSACTION")
    assert log.user == member
    assert log.object_type == "ClientPayment"
    assert log.object_id == str(result.record.pk)
    assert (log.balance_before, log.balance_after) == (Decimal("800.00"), Decimal("500.00"))
    assert log.changes["voucher_no"] == "MR-0001"


@pytest.mark.django_db
def test_refund_in_same_receipt_gets_its_own_leg(company, traveller, cash):
    create_client_payment(company, _payload(traveller, cash, refund_amount="50"))

    traveller.refresh_from_db()
    cash.refresh_from_db()
    assert traveller.due_amount == Decimal("550.00")
    assert cash.balance == Decimal("1250.00")

    legs = list(
        LedgerEntry.objects.filter(voucher_no="MR-0001")
        .values_list("direction", "amount", "last_total_amount")
    )
    assert legs == [
        (RECEIV, Decimal("300.00"), Decimal("1300.00")),
        (PAYOUT, Decimal("50.00"), Decimal("1250.00")),
    ]


@pytest.mark.django_db
def test_refund_only_raises_the_due(company, traveller, cash):
    create_client_payment(company, _payload(traveller, cash, received_amount="0", refund_amount="25"))
    traveller.refresh_from_db()
    assert traveller.due_amount == Decimal("825.00")
    assert LedgerEntry.objects.get(voucher_no="MR-0001").direction == PAYOUT


@pytest.mark.django_db
def test_both_amounts_zero_rejected(company, traveller, cash):
    with pytest.raises(InvalidAmount):
        create_client_payment(company, _payload(traveller, cash, received_amount="0"))
    assert not ClientPayment.objects.exists()
    assert not AuditLog.objects.exists()


@pytest.mark.django_db
def test_anonymous_callers_are_logged_without_user(company, traveller, cash):
    create_client_payment(company, _payload(traveller, cash))
    assert AuditLog.objects.get().user is None


@pytest.mark.django_db
def test_update_and_delete_write_audit_rows(company, traveller, cash):
    result = create_client_payment(company, _payload(traveller, cash))

    update_client_payment(company, result.record.pk, {"received_amount": "100"})
    traveller.refresh_from_db()
    assert traveller.due_amount == Decimal("700.00")

    update_log = AuditLog.objects.get(action="UPDATE_TRANSACTION")
    assert (update_log.balance_before, update_log.balance_after) == (
        Decimal("500.00"), Decimal("700.00"))
    assert update_log.changes["old"]["received_amount"] == "300.00"
    assert update_log.changes["new"]["received_amount"] == "100.00"

    delete_client_payment(company, result.record.pk)
    traveller.refresh_from_db()
    cash.refresh_from_db()
    assert traveller.due_amount == Decimal("800.00")
    assert cash.balance == Decimal("1000.00")

    delete_log = AuditLog.objects.get(action="DELETE_TRANSACTION")
    assert delete_log.object_id == str(result.record.pk)
    assert delete_log.balance_after == Decimal("800.00")
    assert not ClientPayment.objects.exists()


@pytest.mark.django_db
def test_failed_update_leaves_no_audit_row(company, traveller, cash):
    result = create_client_payment(company, _payload(traveller, cash))

    with pytest.raises(InvalidAmount):
        update_client_payment(company, result.record.pk, {"received_amount": "abc"})

    traveller.refresh_from_db()
    assert traveller.due_amount == Decimal("500.00")
    assert not AuditLog.objects.filter(action="UPDATE_TRANSACTION").exists()
