from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from ..managers import TenantManager
from .account import PAYMENT_METHODS, Account
from .client import Client
from .entitymembership import Company


# ---------- Client payment (money receipt) ----------
class ClientPayment(models.Model):
    """
    Money received from a client against their due, optionally with a refund
    paid back in the same receipt. Net = received - refund reduces the due.
    """

    company = models.ForeignKey(Company, on_delete=models.CASCADE)
    voucher_no = models.CharField(max_length=32)  # MR-0001

    client = models.ForeignKey(Client, on_delete=models.PROTECT)
    account = models.ForeignKey(Account, on_delete=models.PROTECT)
    payment_method = models.CharField(
        max_length=20, choices=PAYMENT_METHODS, default="cash"
    )
    received_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    refund_amount = models.DecimalField(
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
        indexes = [
            models.Index(fields=["company", "client"], name="mr_company_client_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "voucher_no"], name="uq_mr_company_voucher"
            ),
            models.CheckConstraint(
                condition=(
                    models.Q(received_amount__gte=0) &
                    models.Q(refund_amount__gte=0)
                ),
                name="mr_non_negative_amounts",
            ),
        ]

    def __str__(self):
        return f"{self.voucher_no} {self.client} {self.net_amount}"

    @property
    def net_amount(self):
        return self.received_amount - self.refund_amount

    def clean(self):
        if self.received_amount <= 0 and self.refund_amount <= 0:
            raise ValidationError("Either received or refund amount must be > 0")
