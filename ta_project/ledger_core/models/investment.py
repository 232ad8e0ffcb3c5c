from django.conf import settings
from django.db import models

from ..managers import TenantManager
from .account import PAYMENT_METHODS, Account
from .entitymembership import Company


# ---------- Investment ----------
# Funds moved between the agency and an outside company it invests with
class Investment(models.Model):
    company = models.ForeignKey(Company, on_delete=models.CASCADE)
    voucher_no = models.CharField(max_length=32)  # IVT-0001

    account = models.ForeignKey(Account, on_delete=models.PROTECT)
    target_company_name = models.CharField(max_length=200)
    payment_method = models.CharField(
        max_length=20, choices=PAYMENT_METHODS, default="cash"
    )
    amount = models.DecimalField(max_digits=18, decimal_places=2)
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
                fields=["company", "voucher_no"], name="uq_ivt_company_voucher"
            )
        ]

    def __str__(self):
        return f"{self.voucher_no} {self.target_company_name} {self.amount}"
