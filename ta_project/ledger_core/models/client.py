from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from ..managers import TenantManager
from .entitymembership import Company


# ---------- Client ----------
# Traveller or corporate customer the agency sells services to
class Client(models.Model):
    company = models.ForeignKey(Company, on_delete=models.CASCADE)

    name = models.CharField(max_length=200)
    email = models.EmailField(null=True, blank=True)
    phone = models.CharField(max_length=32, blank=True, default="")

    # Advance held on the client's behalf (positive) or owed (negative).
    # This is the pool an advance return draws from.
    present_balance = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )

    # Amount still owed for sold services; moved by client payments
    due_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )

    # Inputs to the reconciliation formula; fixed at creation
    contract_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    initial_payment = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )

    is_archived = models.BooleanField(default=False)

    # Stamped by the reconciliation checker
    last_reconciled_at = models.DateTimeField(null=True, blank=True)
    reconciliation_difference = models.DecimalField(
        max_digits=18, decimal_places=2, null=True, blank=True
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [
            models.Index(fields=["company", "name"], name="client_company_name_idx"),
            models.Index(fields=["company", "is_archived"], name="client_company_arch_idx"),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        if self.contract_amount < 0 or self.initial_payment < 0:
            raise ValidationError(
                "Contract amount and initial payment must be >= 0")
        return super().clean()
