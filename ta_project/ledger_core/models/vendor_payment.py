from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from ..managers import TenantManager
from .account import PAYMENT_METHODS, Account
from .entitymembership import Company
from .vendor import Vendor

# overall: settles what we owe the vendor; advance: prepays future purchases.
# Both move the same net balance; the tag is for reporting.
PAYMENT_TARGETS = [
    ("overall", "Overall"),
    ("advance", "Advance"),
]


# ---------- Vendor payment ----------
class VendorPayment(models.Model):  # We pay a vendor out of one of our accounts
    company = models.ForeignKey(Company, on_delete=models.CASCADE)
    voucher_no = models.CharField(max_length=32)  # VP-0001

    vendor = models.ForeignKey(Vendor, on_delete=models.PROTECT)
    account = models.ForeignKey(Account, on_delete=models.PROTECT)
    payment_to = models.CharField(max_length=10, choices=PAYMENT_TARGETS, default="overall")
    payment_method = models.CharField(
        max_length=20, choices=PAYMENT_METHODS, default="cash"
    )

    # amount credits the vendor; vendor_ait (advance income tax withheld
    # on the vendor's behalf) leaves the account on top of it
    amount = models.DecimalField(max_digits=18, decimal_places=2)
    vendor_ait = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    total_amount = models.DecimalField(max_digits=18, decimal_places=2)

    date = models.DateField()
    receipt_no = models.CharField(max_length=64, blank=True, default="")
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
            models.Index(fields=["company", "vendor"], name="vp_company_vendor_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "voucher_no"], name="uq_vp_company_voucher"
            ),
            models.CheckConstraint(
                condition=models.Q(vendor_ait__gte=0),
                name="vp_ait_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.voucher_no} {self.vendor} {self.total_amount}"

    def clean(self):
        if self.vendor.company_id != self.company_id or self.account.company_id != self.company_id:
            raise ValidationError("Vendor and account must belong to the same company.")
        if self.total_amount != self.amount + self.vendor_ait:
            raise ValidationError("Total amount must equal amount plus vendor AIT.")
