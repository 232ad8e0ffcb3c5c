from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from ..managers import TenantManager
from .account import PAYMENT_METHODS, Account
from .client import Client
from .entitymembership import Company


# ---------- Advance return ----------
class AdvanceReturn(models.Model):  # Agency hands back part of a client's advance
    company = models.ForeignKey(Company, on_delete=models.CASCADE)
    voucher_no = models.CharField(max_length=32)  # ADR-0001

    client = models.ForeignKey(Client, on_delete=models.PROTECT)
    account = models.ForeignKey(Account, on_delete=models.PROTECT)
    payment_method = models.CharField(
        max_length=20, choices=PAYMENT_METHODS, default="cash"
    )

    amount = models.DecimalField(max_digits=18, decimal_places=2)
    return_date = models.DateField()
    note = models.TextField(blank=True, default="")
    receipt_no = models.CharField(max_length=64, blank=True, default="")

    # Informational only: never posted to any balance
    transaction_charge = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True, on_delete=models.SET_NULL
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [
            models.Index(fields=["company", "client"], name="adr_company_client_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "voucher_no"], name="uq_adr_company_voucher"
            )
        ]

    def __str__(self):
        return f"{self.voucher_no} {self.client} {self.amount}"

    def clean(self):
        if self.client.company_id != self.company_id or self.account.company_id != self.company_id:
            raise ValidationError("Client and account must belong to the same company.")
