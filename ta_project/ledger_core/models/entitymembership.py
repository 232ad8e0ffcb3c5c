from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.db import models
from django.utils.text import slugify

from ..managers import TenantManager


# ---------- Tenant / Company ----------
class Company(models.Model):
    """Tenant / travel agency. Every balance-bearing row belongs to one."""

    name = models.CharField(max_length=200)

    # URL-friendly identifier, unique across tenants
    slug = models.SlugField(max_length=80, unique=True)

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        # if the owner is deleted the company stays
        on_delete=models.SET_NULL,
        related_name="owned_companies",
    )

    currency_code = models.CharField(max_length=10, default="BDT")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = "companies"

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)[:80] or "company"
        return super().save(*args, **kwargs)


# ---------- Custom User ----------
class User(AbstractUser):
    # Company picked when the session has no explicit choice
    default_company = models.ForeignKey(
        "Company",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="default_users",
    )

    phone = models.CharField(max_length=32, blank=True)

    objects = TenantManager()

    class Meta(AbstractUser.Meta):
        indexes = [models.Index(fields=["default_company"], name="user_default_company_idx")]

    def __str__(self):
        return self.get_full_name() or self.username


# ---------- EntityMembership ----------
class EntityMembership(models.Model):
    """Bridge between User and Company; the middleware only lets a user act
    for companies they hold an active membership in."""

    ROLE_CHOICES = [
        ("owner", "Owner"),
        ("admin", "Admin"),
        ("accountant", "Accountant"),
        ("viewer", "Viewer"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="memberships",
    )
    company = models.ForeignKey(
        "Company", on_delete=models.CASCADE, related_name="memberships"
    )
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default="viewer")

    # Suspend access without deleting the record
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["user", "company"], name="uq_user_company_membership"
            ),
        ]
        indexes = [
            models.Index(fields=["company", "user"], name="membership_company_user_idx"),
        ]

    def __str__(self):
        return f"{self.user} @ {self.company} ({self.role})"

    def clean(self):
        # A user's default company must be one of their memberships
        # (the membership being saved counts)
        default_company_id = getattr(self.user, "default_company_id", None)
        if not default_company_id or default_company_id == self.company_id:
            return
        others = self.user.memberships.all()
        if self.pk:
            others = others.exclude(pk=self.pk)
        if not others.filter(company_id=default_company_id).exists():
            raise ValidationError(
                f"Default company {self.user.default_company} must be a user's membership."
            )

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
