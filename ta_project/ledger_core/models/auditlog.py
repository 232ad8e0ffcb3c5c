from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from ..managers import TenantManager
from .entitymembership import Company


# ---------- Audit / Event log ----------
class AuditLog(models.Model):  # Before/after snapshot of a balance-moving action
    # Nullable for system-wide events
    company = models.ForeignKey(
        Company,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
    )
    # Nullable when the action was automated (Celery task, management command)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True, on_delete=models.SET_NULL
    )
    # e.g. CREATE_TRANSACTION, DELETE_TRANSACTION, RECONCILE_BALANCE
    action = models.CharField(max_length=50)
    object_type = models.CharField(max_length=100)  # "ClientPayment", "Client"
    object_id = models.CharField(max_length=100)

    # Tracked balance around the action (client due amount for payments)
    balance_before = models.DecimalField(
        max_digits=18, decimal_places=2, null=True, blank=True
    )
    balance_after = models.DecimalField(
        max_digits=18, decimal_places=2, null=True, blank=True
    )

    # Free-form metadata in JSON
    changes = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [
            models.Index(fields=["company", "user"], name="audit_company_user_idx"),
            models.Index(fields=["company", "created_at"], name="audit_company_created_idx"),
            models.Index(fields=["company", "object_type", "object_id"], name="audit_company_object_idx"),
        ]

    def __str__(self):
        return (
            f"[{self.created_at:%Y-%m-%d %H:%M}] {self.user} "
            f"{self.action} {self.object_type}({self.object_id})"
        )

    def clean(self):
        # Ensure the user is a member of the company being logged
        if self.user and self.company:
            if not self.user.memberships.filter(
                company=self.company, is_active=True
            ).exists():
                raise ValidationError(
                    "AuditLog.user must be a member of AuditLog.company"
                )

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
