"""Pytest fixtures shared by the function-style tests."""
from decimal import Decimal

import pytest

from ledger_core.models import (Account, Client, Company, EntityMembership,
                                ExpenseHead, Vendor)


@pytest.fixture
def company(db):
    return Company.objects.create(name="Sky Travels", slug="sky-travels")


@pytest.fixture
def other_company(db):
    return Company.objects.create(name="Other Travels", slug="other-travels")


@pytest.fixture
def cash(company):
    return Account.objects.create(company=company, name="Cash", balance=Decimal("1000.00"))


@pytest.fixture
def bank(company):
    return Account.objects.create(
        company=company, name="City Bank", category="bank", balance=Decimal("400.00")
    )


@pytest.fixture
def traveller(company):
    return Client.objects.create(
        company=company,
        name="Rahim Uddin",
        present_balance=Decimal("500.00"),
        contract_amount=Decimal("1000.00"),
        initial_payment=Decimal("200.00"),
        due_amount=Decimal("800.00"),
    )


@pytest.fixture
def airline(company):
    vendor = Vendor.objects.create(company=company, name="Biman")
    vendor.set_signed_balance(Decimal("300.00"))
    vendor.save()
    return vendor


@pytest.fixture
def heads(company):
    return (
        ExpenseHead.objects.create(company=company, name="Office rent"),
        ExpenseHead.objects.create(company=company, name="Utilities"),
    )


@pytest.fixture
def member(company, django_user_model):
    """Logged-in style user with an active membership in `company`."""
    user = django_user_model.objects.create_user(username="alice", password="pw")
    user.default_company = company
    user.save()
    EntityMembership.objects.create(user=user, company=company, role="accountant")
    return user
