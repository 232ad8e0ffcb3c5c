from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from ..managers import TenantManager
from .entitymembership import Company

DUE = "due"
ADVANCE = "advance"

BALANCE_TYPES = [
    (DUE, "Due"),
    (ADVANCE, "Advance"),
]


class Vendor(models.Model):  # Airline, hotel or consolidator the agency buys from
    """
    present balance is stored tagged: {type: due|advance, amount >= 0}.
    Arithmetic never touches the tag; use signed_balance / set_signed_balance.
    """

    company = models.ForeignKey(Company, on_delete=models.CASCADE)

    name = models.CharField(max_length=200)
    email = models.EmailField(null=True, blank=True)
    mobile = models.CharField(max_length=32, blank=True, default="")

    present_balance_type = models.CharField(
        max_length=10, choices=BALANCE_TYPES, default=ADVANCE
    )
    present_balance_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [
            models.Index(fields=["company", "name"], name="vendor_company_name_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(present_balance_amount__gte=0),
                name="vendor_balance_amount_non_negative",
            ),
        ]

    def __str__(self):
        return self.name

    # advance = positive, due = negative
    @property
    def signed_balance(self):
        if self.present_balance_type == DUE:
            return -self.present_balance_amount
        return self.present_balance_amount

    def set_signed_balance(self, value):
        value = Decimal(value)
        self.present_balance_type = ADVANCE if value >= 0 else DUE
        self.present_balance_amount = abs(value)

    def clean(self):
        if self.present_balance_amount < 0:
            raise ValidationError(
                "Vendor balance amount must be >= 0; the sign lives in the type")
        return super().clean()
