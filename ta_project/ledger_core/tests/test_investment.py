from decimal import Decimal

import pytest

from ledger_core.exceptions import InvalidAmount, NotFound
from ledger_core.models import Investment, LedgerEntry
from ledger_core.models.ledger import INVESTMENT, RECEIV
from ledger_core.services import investment
from ledger_core.services.investment import (create_investment,
                                             delete_investment,
                                             update_investment)


@pytest.mark.django_db
def test_investment_credits_the_account(company, cash):
    result = create_investment(company, {
        "account_id": cash.pk,
        "amount": "250",
        "target_company_name": "  Sky Holdings ",
        "date": "2025-09-01",
    })

    cash.refresh_from_db()
    assert cash.balance == Decimal("1250.00")
    assert result.voucher_no == "IVT-0001"
    assert result.record.target_company_name == "Sky Holdings"

    entry = LedgerEntry.objects.get(voucher_no="IVT-0001")
    assert (entry.direction, entry.amount, entry.operation) == (RECEIV, Decimal("250.00"), INVESTMENT)
    assert entry.last_total_amount == Decimal("1250.00")


@pytest.mark.django_db
def test_outflow_direction_when_switched_off(company, cash, monkeypatch):
    monkeypatch.setattr(investment, "INVESTMENT_CREDITS_ACCOUNT", False)
    create_investment(company, {"account_id": cash.pk, "amount": "250"})
    cash.refresh_from_db()
    assert cash.balance == Decimal("750.00")


@pytest.mark.django_db
def test_invalid_investment_rejected(company, cash, other_company):
    with pytest.raises(InvalidAmount):
        create_investment(company, {"account_id": cash.pk, "amount": "-1"})
    with pytest.raises(NotFound):
        create_investment(other_company, {"account_id": cash.pk, "amount": "10"})
    assert not Investment.objects.exists()


@pytest.mark.django_db
def test_update_and_delete_investment(company, cash, bank):
    result = create_investment(company, {"account_id": cash.pk, "amount": "250"})

    update_investment(company, result.record.pk, {"account_id": bank.pk, "amount": "100"})
    cash.refresh_from_db()
    bank.refresh_from_db()
    assert (cash.balance, bank.balance) == (Decimal("1000.00"), Decimal("500.00"))

    delete_investment(company, result.record.pk)
    bank.refresh_from_db()
    assert bank.balance == Decimal("400.00")
    assert not LedgerEntry.objects.exists()
    assert not Investment.objects.exists()
