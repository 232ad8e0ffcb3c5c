from decimal import Decimal

from ledger_core.models import Account, Client, Company, Vendor


def make_books(name, cash="1000.00", bank="400.00", advance="500.00"):
    """A company with two accounts, a client and a vendor; used by TestCase classes."""
    company = Company.objects.create(name=name)
    books = {
        "company": company,
        "cash": Account.objects.create(company=company, name="Cash", balance=Decimal(cash)),
        "bank": Account.objects.create(
            company=company, name="Bank", category="bank", balance=Decimal(bank)
        ),
        "client": Client.objects.create(
            company=company, name=f"{name} client", present_balance=Decimal(advance)
        ),
        "vendor": Vendor.objects.create(company=company, name=f"{name} vendor"),
    }
    return books


def balances_of(*rows):
    """Fresh balances straight from the database."""
    values = []
    for row in rows:
        row.refresh_from_db()
        if isinstance(row, Account):
            values.append(row.balance)
        elif isinstance(row, Client):
            values.append((row.present_balance, row.due_amount))
        else:
            values.append(row.signed_balance)
    return values
