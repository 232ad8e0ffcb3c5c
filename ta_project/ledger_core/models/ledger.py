from django.core.exceptions import ValidationError
from django.db import models

from ..managers import TenantManager, TenantQuerySet
from .account import Account
from .client import Client
from .entitymembership import Company
from .vendor import Vendor

PAYOUT = "payout"
RECEIV = "receiv"

DIRECTIONS = [
    (PAYOUT, "Payout"),  # money left the account
    (RECEIV, "Receive"),  # money came into the account
]

# Which posting produced the row; update/delete remove rows by voucher + operation
ADVANCE_RETURN = "ADVANCE_RETURN"
BALANCE_TRANSFER = "BALANCE_TRANSFER"
EXPENSE = "EXPENSE"
INVESTMENT = "INVESTMENT"
VENDOR_ADVANCE_RETURN = "VENDOR_ADVANCE_RETURN"
CLIENT_PAYMENT = "CLIENT_PAYMENT"
VENDOR_PAYMENT = "VENDOR_PAYMENT"

OPERATIONS = [
    (ADVANCE_RETURN, "Advance return"),
    (BALANCE_TRANSFER, "Balance transfer"),
    (EXPENSE, "Expense"),
    (INVESTMENT, "Investment"),
    (VENDOR_ADVANCE_RETURN, "Vendor advance return"),
    (CLIENT_PAYMENT, "Client payment"),
    (VENDOR_PAYMENT, "Vendor payment"),
]


class LedgerEntryQuerySet(TenantQuerySet):
    # Entries are append-only: bulk edits are refused,
    # bulk deletes stay allowed (they are how a posting is reversed)
    def update(self, **kwargs):
        raise ValidationError("Ledger entries are immutable; delete and re-append instead.")


class LedgerEntryManager(TenantManager):
    def get_queryset(self):
        return LedgerEntryQuerySet(self.model, using=self._db)


# ---------- Ledger entry ----------
class LedgerEntry(models.Model):  # One leg of money movement on one account
    """
    Append-only. Removed (never edited) when its posting is updated or deleted.
    last_total_amount is the account balance right after this leg.
    """

    company = models.ForeignKey(Company, on_delete=models.CASCADE)
    date = models.DateField()
    voucher_no = models.CharField(max_length=32)

    # Optional counterparty links
    client = models.ForeignKey(
        Client, null=True, blank=True, on_delete=models.PROTECT,
        related_name="ledger_entries",
    )
    vendor = models.ForeignKey(
        Vendor, null=True, blank=True, on_delete=models.PROTECT,
        related_name="ledger_entries",
    )

    operation = models.CharField(max_length=32, choices=OPERATIONS)

    # PROTECT: history must survive the account
    account = models.ForeignKey(
        Account, on_delete=models.PROTECT, related_name="ledger_entries"
    )
    account_name = models.CharField(max_length=200)  # display copy
    pay_type = models.CharField(max_length=50, blank=True, default="")

    direction = models.CharField(max_length=10, choices=DIRECTIONS)
    amount = models.DecimalField(max_digits=18, decimal_places=2)
    last_total_amount = models.DecimalField(max_digits=18, decimal_places=2)

    note = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    objects = LedgerEntryManager()

    class Meta:
        ordering = ["date", "id"]
        indexes = [
            models.Index(fields=["company", "voucher_no"], name="ledger_company_voucher_idx"),
            models.Index(fields=["company", "account"], name="ledger_company_account_idx"),
            models.Index(fields=["company", "client"], name="ledger_company_client_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gte=0),
                name="ledger_amount_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.voucher_no} {self.direction} {self.amount} on {self.account_name}"

    @property
    def signed_amount(self):
        return self.amount if self.direction == RECEIV else -self.amount

    def clean(self):
        if self.amount is not None and self.amount < 0:
            raise ValidationError("Ledger amount must be >= 0")
        # counterparties must live in the same tenant as the row
        for related in (self.account, self.client, self.vendor):
            if related is not None and related.company_id != self.company_id:
                raise ValidationError(
                    f"{related.__class__.__name__} must belong to the entry's company")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Ledger entries are immutable once written.")
        self.full_clean()
        return super().save(*args, **kwargs)
