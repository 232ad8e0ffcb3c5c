from django.conf import settings
from django.db import models

from ..managers import TenantManager
from .account import PAYMENT_METHODS, Account
from .entitymembership import Company
from .vendor import Vendor


# ---------- Vendor advance return ----------
class VendorAdvanceReturn(models.Model):  # Vendor refunds part of an advance we paid
    company = models.ForeignKey(Company, on_delete=models.CASCADE)
    voucher_no = models.CharField(max_length=32)  # ADVR-0001

    vendor = models.ForeignKey(Vendor, on_delete=models.PROTECT)
    account = models.ForeignKey(Account, on_delete=models.PROTECT)
    payment_method = models.CharField(
        max_length=20, choices=PAYMENT_METHODS, default="cash"
    )
    amount = models.DecimalField(max_digits=18, decimal_places=2)
    return_date = models.DateField()
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
            models.Index(fields=["company", "vendor"], name="advr_company_vendor_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "voucher_no"], name="uq_advr_company_voucher"
            )
        ]

    def __str__(self):
        return f"{self.voucher_no} {self.vendor} {self.amount}"
