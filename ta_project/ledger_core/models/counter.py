from django.db import models

from ..managers import TenantManager
from .entitymembership import Company


class VoucherCounter(models.Model):
    """Per-company, per-prefix sequence. seq only ever grows."""

    company = models.ForeignKey(Company, on_delete=models.CASCADE)
    key = models.CharField(max_length=16)  # voucher prefix: ADR, BT, EX ...
    seq = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["company", "key"], name="uq_company_counter_key"
            )
        ]

    def __str__(self):
        return f"{self.key}:{self.seq}"
