from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils.text import slugify

from ledger_core.models import (Account, Client, Company, EntityMembership,
                                ExpenseHead, Vendor)

User = get_user_model()


class Command(BaseCommand):
    help = (
        "Create a demo travel agency (company), user, accounts, a client and a vendor "
        "for local exploration."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--company-name",
            default="Demo Travels",
            help="Name of the demo company to create.",
        )
        parser.add_argument(
            "--username", default="demo", help="Username for the demo user."
        )
        parser.add_argument(
            "--password", default="demo123", help="Password for the demo user."
        )

    @transaction.atomic
    def handle(self, *args, **options):
        company_name = options["company_name"]
        username = options["username"]
        password = options["password"]

        # "Demo Travels" -> "demo-travels", then "-1", "-2" ... while taken
        def unique_slug_for_company(name, max_tries=100):
            base = slugify(name) or "company"
            slug = base
            i = 1
            while Company.objects.filter(slug=slug).exists():
                slug = f"{base}-{i}"
                i += 1
                if i > max_tries:
                    raise RuntimeError("Couldn't generate unique slug")
            return slug

        # 1. Company
        company = Company.objects.filter(name=company_name).first()
        if company is None:
            company = Company.objects.create(
                name=company_name, slug=unique_slug_for_company(company_name)
            )
        self.stdout.write(self.style.SUCCESS(f"Company: {company} ({company.slug})"))

        # 2. User + membership
        user, created = User.objects.get_or_create(
            username=username,
            defaults={"email": f"{username}@example.com"},
        )
        if created:
            user.set_password(password)
        user.default_company = company
        user.save()
        EntityMembership.objects.get_or_create(
            user=user, company=company, defaults={"role": "owner"}
        )
        if company.owner_id is None:
            company.owner = user
            company.save(update_fields=["owner"])
        self.stdout.write(
            self.style.SUCCESS(f"User: {user.username} (pw={password})")
        )

        # 3. Accounts (opening balances set at creation only)
        Account.objects.get_or_create(
            company=company, name="Cash in Hand",
            defaults={"category": "cash", "balance": Decimal("1000.00")},
        )
        Account.objects.get_or_create(
            company=company, name="City Bank",
            defaults={
                "category": "bank",
                "bank_name": "City Bank",
                "account_no": "0123456789",
                "balance": Decimal("400.00"),
            },
        )
        self.stdout.write(self.style.SUCCESS("Accounts: Cash in Hand, City Bank"))

        # 4. Counterparties and lookups
        Client.objects.get_or_create(
            company=company, name="Demo Client",
            defaults={
                "present_balance": Decimal("500.00"),
                "contract_amount": Decimal("2000.00"),
                "due_amount": Decimal("2000.00"),
            },
        )
        vendor, created = Vendor.objects.get_or_create(company=company, name="Demo Airline")
        if created:
            vendor.set_signed_balance(Decimal("300.00"))
            vendor.save(update_fields=["present_balance_type", "present_balance_amount"])
        for head in ("Office rent", "Utilities"):
            ExpenseHead.objects.get_or_create(company=company, name=head)
        self.stdout.write(self.style.SUCCESS("Client, vendor and expense heads created"))
        self.stdout.write(self.style.SUCCESS("Demo tenant setup complete!"))
