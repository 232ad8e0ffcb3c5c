from decimal import Decimal

from django.db import models

from ..managers import TenantManager
from .entitymembership import Company

# Where the money physically sits
ACCOUNT_CATEGORIES = [
    ("cash", "Cash"),
    ("bank", "Bank"),
    ("mobile", "Mobile banking"),
    ("card", "Credit Card"),
]

PAYMENT_METHODS = [
    # How the money moved; stored on every operation record and copied
    # onto its ledger rows as pay_type
    ("cash", "Cash"),
    ("cheque", "Cheque"),
    ("bank_transfer", "Bank Transfer"),
    ("mobile", "Mobile banking"),
    ("card", "Card"),
    ("other", "Other"),
]


class Account(models.Model):
    """
    A cash, bank, mobile-wallet or card account the agency moves money through.
    - balance is signed; positive = funds available
    - balance is only written by services.balances
    - has_transactions flips on at the first posting and blocks deletion
    """

    company = models.ForeignKey(Company, on_delete=models.CASCADE)
    name = models.CharField(max_length=200)  # "Cash in Hand", "City Bank 0123"
    category = models.CharField(
        max_length=10, choices=ACCOUNT_CATEGORIES, default="cash"
    )

    # Bank / card details (display only)
    account_no = models.CharField(max_length=64, blank=True, default="")
    bank_name = models.CharField(max_length=200, blank=True, default="")
    branch = models.CharField(max_length=200, blank=True, default="")

    balance = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    has_transactions = models.BooleanField(default=False)

    # hide in UI and stop new postings without deleting history
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [
            models.Index(fields=["company", "name"], name="account_company_name_idx"),
            models.Index(fields=["company", "category"], name="account_company_cat_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "name"], name="uq_company_account_name"
            )
        ]

    def __str__(self):
        return f"{self.name} ({self.get_category_display()})"
