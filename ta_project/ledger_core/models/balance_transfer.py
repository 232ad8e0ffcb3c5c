from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from ..managers import TenantManager
from .account import Account
from .entitymembership import Company


# ---------- Balance transfer ----------
class BalanceTransfer(models.Model):  # Moves funds between two of the company's accounts
    """
    The source pays amount + transfer_charge, the destination receives amount.
    The charge leaves the system (bank fee).
    """

    company = models.ForeignKey(Company, on_delete=models.CASCADE)
    voucher_no = models.CharField(max_length=32)  # BT-0001

    transfer_from = models.ForeignKey(
        Account, on_delete=models.PROTECT, related_name="transfers_out"
    )
    transfer_to = models.ForeignKey(
        Account, on_delete=models.PROTECT, related_name="transfers_in"
    )

    amount = models.DecimalField(max_digits=18, decimal_places=2)
    transfer_charge = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    date = models.DateField()
    note = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True, on_delete=models.SET_NULL
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["company", "voucher_no"], name="uq_bt_company_voucher"
            ),
            models.CheckConstraint(
                condition=models.Q(transfer_charge__gte=0),
                name="bt_charge_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.voucher_no} {self.transfer_from} -> {self.transfer_to} {self.amount}"

    @property
    def total_debit(self):
        return self.amount + self.transfer_charge

    def clean(self):
        if self.transfer_from_id == self.transfer_to_id:
            raise ValidationError("Cannot transfer to the same account.")
