from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from ..managers import TenantManager
from .account import PAYMENT_METHODS, Account
from .entitymembership import Company


# ---------- Expense head (lookup) ----------
class ExpenseHead(models.Model):  # "Office rent", "Utilities"
    company = models.ForeignKey(Company, on_delete=models.CASCADE)
    name = models.CharField(max_length=200)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["company", "name"], name="uq_company_expense_head"
            )
        ]

    def __str__(self):
        return self.name


# ---------- Expense (Header) & ExpenseLine ----------
class Expense(models.Model):  # One payout from one account, split over heads
    company = models.ForeignKey(Company, on_delete=models.CASCADE)
    voucher_no = models.CharField(max_length=32)  # EX-0001

    account = models.ForeignKey(Account, on_delete=models.PROTECT)
    payment_method = models.CharField(
        max_length=20, choices=PAYMENT_METHODS, default="cash"
    )
    # Always equal to the sum of lines
    total_amount = models.DecimalField(
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
            models.Index(fields=["company", "date"], name="expense_company_date_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "voucher_no"], name="uq_expense_company_voucher"
            )
        ]

    def __str__(self):
        return f"{self.voucher_no} {self.total_amount}"

    def compute_total(self):
        agg = self.lines.aggregate(total=models.Sum("amount"))
        return agg["total"] or Decimal("0.00")


class ExpenseLine(models.Model):
    company = models.ForeignKey(Company, on_delete=models.CASCADE)
    expense = models.ForeignKey(
        Expense, on_delete=models.CASCADE, related_name="lines"
    )
    head = models.ForeignKey(ExpenseHead, on_delete=models.PROTECT)
    head_name = models.CharField(max_length=200)  # copy at posting time
    amount = models.DecimalField(max_digits=18, decimal_places=2)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="expense_line_amount_positive",
            ),
        ]

    def __str__(self):
        return f"{self.head_name}: {self.amount}"

    def clean(self):
        if self.amount is not None and self.amount <= 0:
            raise ValidationError("Expense line amount must be > 0")
        if self.head.company_id != self.company_id:
            raise ValidationError("Expense head must belong to the same company.")
