from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.db import transaction

from ..exceptions import InsufficientBalance, InvalidRequest, NotFound
from ..models import Account, Vendor
from ..services import balances


@pytest.mark.django_db
def test_account_delta_updates_row_and_instance(cash):
    with transaction.atomic():
        new_balance = balances.apply_delta(balances.ACCOUNT, cash, Decimal("250.50"))

    assert new_balance == Decimal("1250.50")
    assert cash.balance == Decimal("1250.50")  # instance kept in sync
    assert cash.has_transactions is True
    cash.refresh_from_db()
    assert cash.balance == Decimal("1250.50")
    assert cash.has_transactions is True


@pytest.mark.django_db
def test_delta_applies_to_committed_value_not_stale_instance(cash):
    stale = Account.objects.get(pk=cash.pk)
    with transaction.atomic():
        balances.apply_delta(balances.ACCOUNT, cash.pk, Decimal("100"))
        # stale copy still says 1000, the store re-reads the row
        balances.apply_delta(balances.ACCOUNT, stale, Decimal("-50"))

    cash.refresh_from_db()
    assert cash.balance == Decimal("1050.00")


@pytest.mark.django_db
def test_client_present_and_due_are_separate_kinds(traveller):
    with transaction.atomic():
        balances.apply_delta(balances.CLIENT, traveller, Decimal("-100"))
        balances.apply_delta(balances.CLIENT_DUE, traveller, Decimal("-300"))

    traveller.refresh_from_db()
    assert traveller.present_balance == Decimal("400.00")
    assert traveller.due_amount == Decimal("500.00")
    assert balances.read_balance(balances.CLIENT, traveller) == Decimal("400.00")
    assert balances.read_balance(balances.CLIENT_DUE, traveller.pk) == Decimal("500.00")


@pytest.mark.django_db
def test_vendor_tag_only_at_boundary(airline):
    assert balances.read_balance(balances.VENDOR, airline) == Decimal("300.00")

    with transaction.atomic():
        new_value = balances.apply_delta(balances.VENDOR, airline, Decimal("-450"))

    assert new_value == Decimal("-150.00")
    airline.refresh_from_db()
    assert airline.present_balance_type == "due"
    assert airline.present_balance_amount == Decimal("150.00")

    with transaction.atomic():
        balances.apply_delta(balances.VENDOR, airline, Decimal("150"))
    airline.refresh_from_db()
    # zero re-tags as advance
    assert airline.present_balance_type == "advance"
    assert airline.present_balance_amount == Decimal("0.00")


@pytest.mark.django_db
def test_vendor_signed_helpers(company):
    vendor = Vendor(company=company, name="Hotel")
    vendor.set_signed_balance(Decimal("-20"))
    assert (vendor.present_balance_type, vendor.present_balance_amount) == ("due", Decimal("20"))
    assert vendor.signed_balance == Decimal("-20")

    vendor.present_balance_amount = Decimal("-1")
    with pytest.raises(ValidationError):
        vendor.full_clean()


@pytest.mark.django_db
def test_ensure_covers_respects_tolerance(traveller):
    with transaction.atomic():
        assert balances.ensure_covers(balances.CLIENT, traveller, Decimal("500")) == Decimal("500.00")
        with pytest.raises(InsufficientBalance) as exc:
            balances.ensure_covers(balances.CLIENT, traveller, Decimal("500.01"))
    assert exc.value.details["available"] == "500.00"

    with transaction.atomic():
        # a custom tolerance widens the slack
        balances.ensure_covers(
            balances.CLIENT, traveller, Decimal("500.01"), tolerance=Decimal("0.05")
        )


@pytest.mark.django_db
def test_missing_entity_and_unknown_kind(company):
    with transaction.atomic():
        with pytest.raises(NotFound):
            balances.apply_delta(balances.ACCOUNT, 987654, Decimal("1"))
    with pytest.raises(InvalidRequest):
        balances.read_balance("wallet", 1)
