from decimal import Decimal
from unittest import mock

import pytest
from django.db import DatabaseError

from ledger_core.exceptions import NotFound
from ledger_core.models import AuditLog, Client
from ledger_core.services.client_payment import create_client_payment
from ledger_core.services.reconciliation import ReconciliationChecker


def _pay(company, client, account, received="300", refund="0"):
    return create_client_payment(company, {
        "client_id": client.pk,
        "account_id": account.pk,
        "received_amount": received,
        "refund_amount": refund,
    })


@pytest.mark.django_db
def test_expected_due_follows_contract_and_receipts(company, traveller, cash):
    _pay(company, traveller, cash, received="300", refund="50")
    checker = ReconciliationChecker(company)

    assert checker.net_received(traveller) == Decimal("250.00")
    assert checker.expected_due(traveller) == Decimal("550.00")

    traveller.refresh_from_db()
    assert traveller.due_amount == Decimal("550.00")


@pytest.mark.django_db
def test_expected_due_is_never_negative(company, traveller, cash):
    _pay(company, traveller, cash, received="2000")
    assert ReconciliationChecker(company).expected_due(traveller) == Decimal("0.00")


@pytest.mark.django_db
def test_report_is_read_only(company, traveller, cash):
    _pay(company, traveller, cash)
    Client.objects.filter(pk=traveller.pk).update(due_amount=Decimal("650.00"))

    report = ReconciliationChecker(company).report()

    assert report["total_clients"] == 1
    assert report["drifting_clients"] == 1
    detail = report["details"][0]
    assert detail["current_due_amount"] == "650.00"
    assert detail["calculated_due_amount"] == "500.00"
    assert detail["difference"] == "150.00"
    assert detail["transaction_count"] == 1
    assert detail["last_transaction_date"] is not None

    traveller.refresh_from_db()
    assert traveller.due_amount == Decimal("650.00")
    assert not AuditLog.objects.filter(action="RECONCILE_BALANCE").exists()


@pytest.mark.django_db
def test_reconcile_corrects_drift_and_audits(company, traveller, cash):
    _pay(company, traveller, cash)
    Client.objects.filter(pk=traveller.pk).update(due_amount=Decimal("650.00"))

    summary = ReconciliationChecker(company).reconcile()

    assert summary["reconciled_clients"] == 1
    assert summary["total_difference"] == "150.00"
    assert summary["errors"] == []
    traveller.refresh_from_db()
    assert traveller.due_amount == Decimal("500.00")
    assert traveller.reconciliation_difference == Decimal("-150.00")
    assert traveller.last_reconciled_at is not None

    log = AuditLog.objects.get(action="RECONCILE_BALANCE")
    assert (log.balance_before, log.balance_after) == (Decimal("650.00"), Decimal("500.00"))


@pytest.mark.django_db
def test_drift_within_threshold_is_left_alone(company, traveller):
    Client.objects.filter(pk=traveller.pk).update(due_amount=Decimal("800.01"))

    result = ReconciliationChecker(company).reconcile_client(traveller.pk)

    assert result.was_reconciled is False
    traveller.refresh_from_db()
    assert traveller.due_amount == Decimal("800.01")


@pytest.mark.django_db
def test_archived_and_foreign_clients_are_skipped(company, other_company, traveller):
    Client.objects.create(company=company, name="Gone", is_archived=True,
                          contract_amount=Decimal("10"), due_amount=Decimal("99"))
    Client.objects.create(company=other_company, name="Elsewhere", due_amount=Decimal("5"))

    report = ReconciliationChecker(company).report()

    assert [d["client_name"] for d in report["details"]] == [traveller.name]


@pytest.mark.django_db
def test_unknown_client_not_found(company, other_company):
    foreign = Client.objects.create(company=other_company, name="Elsewhere")
    with pytest.raises(NotFound):
        ReconciliationChecker(company).reconcile_client(foreign.pk)


@pytest.mark.django_db
def test_one_failing_client_does_not_stop_the_batch(company, traveller):
    second = Client.objects.create(
        company=company, name="Karim", contract_amount=Decimal("100"), due_amount=Decimal("40"),
    )
    Client.objects.filter(pk=traveller.pk).update(due_amount=Decimal("1.00"))
    checker = ReconciliationChecker(company)
    real_expected_due = checker.expected_due

    def flaky(client):
        if client.pk == traveller.pk:
            raise DatabaseError("lock timeout")
        return real_expected_due(client)

    with mock.patch.object(checker, "expected_due", side_effect=flaky):
        summary = checker.reconcile()

    assert summary["total_clients"] == 2
    assert summary["reconciled_clients"] == 1
    assert len(summary["errors"]) == 1
    assert summary["errors"][0].startswith(f"Client {traveller.pk}:")
    failed = next(r for r in summary["results"] if r["client_id"] == traveller.pk)
    assert failed["error"] and failed["was_reconciled"] is False

    second.refresh_from_db()
    traveller.refresh_from_db()
    assert second.due_amount == Decimal("100.00")
    assert traveller.due_amount == Decimal("1.00")
