import decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import ledger_core.managers


class Migration(migrations.Migration):

    dependencies = [
        ("ledger_core", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="ledgerentry",
            name="operation",
            field=models.CharField(choices=[("ADVANCE_RETURN", "Advance return"), ("BALANCE_TRANSFER", "Balance transfer"), ("EXPENSE", "Expense"), ("INVESTMENT", "Investment"), ("VENDOR_ADVANCE_RETURN", "Vendor advance return"), ("CLIENT_PAYMENT", "Client payment"), ("VENDOR_PAYMENT", "Vendor payment")], max_length=32),
        ),
        migrations.CreateModel(
            name="VendorPayment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("voucher_no", models.CharField(max_length=32)),
                ("payment_to", models.CharField(choices=[("overall", "Overall"), ("advance", "Advance")], default="overall", max_length=10)),
                ("payment_method", models.CharField(choices=[("cash", "Cash"), ("cheque", "Cheque"), ("bank_transfer", "Bank Transfer"), ("mobile", "Mobile banking"), ("card", "Card"), ("other", "Other")], default="cash", max_length=20)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("vendor_ait", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=18)),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("date", models.DateField()),
                ("receipt_no", models.CharField(blank=True, default="", max_length=64)),
                ("note", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to="ledger_core.account")),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="ledger_core.company")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
                ("vendor", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to="ledger_core.vendor")),
            ],
            options={
                "indexes": [models.Index(fields=["company", "vendor"], name="vp_company_vendor_idx")],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "voucher_no"), name="uq_vp_company_voucher"),
                    models.CheckConstraint(condition=models.Q(("vendor_ait__gte", 0)), name="vp_ait_non_negative"),
                ],
            },
            managers=[
                ("objects", ledger_core.managers.TenantManager()),
            ],
        ),
    ]
