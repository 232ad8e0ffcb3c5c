import decimal

import django.contrib.auth.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import ledger_core.managers
import ledger_core.models.ledger


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="Company",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("slug", models.SlugField(max_length=80, unique=True)),
                ("currency_code", models.CharField(default="BDT", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name_plural": "companies",
            },
        ),
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("is_superuser", models.BooleanField(default=False, help_text="Designates that this user has all permissions without explicitly assigning them.", verbose_name="superuser status")),
                ("username", models.CharField(error_messages={"unique": "A user with that username already exists."}, help_text="Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.", max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name="username")),
                ("first_name", models.CharField(blank=True, max_length=150, verbose_name="first name")),
                ("last_name", models.CharField(blank=True, max_length=150, verbose_name="last name")),
                ("email", models.EmailField(blank=True, max_length=254, verbose_name="email address")),
                ("is_staff", models.BooleanField(default=False, help_text="Designates whether the user can log into this admin site.", verbose_name="staff status")),
                ("is_active", models.BooleanField(default=True, help_text="Designates whether this user should be treated as active. Unselect this instead of deleting accounts.", verbose_name="active")),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                ("phone", models.CharField(blank=True, max_length=32)),
                ("default_company", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="default_users", to="ledger_core.company")),
                ("groups", models.ManyToManyField(blank=True, help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.", related_name="user_set", related_query_name="user", to="auth.group", verbose_name="groups")),
                ("user_permissions", models.ManyToManyField(blank=True, help_text="Specific permissions for this user.", related_name="user_set", related_query_name="user", to="auth.permission", verbose_name="user permissions")),
            ],
            options={
                "verbose_name": "user",
                "verbose_name_plural": "users",
                "abstract": False,
                "indexes": [models.Index(fields=["default_company"], name="user_default_company_idx")],
            },
            managers=[
                ("objects", ledger_core.managers.TenantManager()),
            ],
        ),
        migrations.AddField(
            model_name="company",
            name="owner",
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="owned_companies", to=settings.AUTH_USER_MODEL),
        ),
        migrations.CreateModel(
            name="EntityMembership",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("role", models.CharField(choices=[("owner", "Owner"), ("admin", "Admin"), ("accountant", "Accountant"), ("viewer", "Viewer")], default="viewer", max_length=20)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="memberships", to="ledger_core.company")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="memberships", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "indexes": [models.Index(fields=["company", "user"], name="membership_company_user_idx")],
                "constraints": [models.UniqueConstraint(fields=("user", "company"), name="uq_user_company_membership")],
            },
            managers=[
                ("objects", ledger_core.managers.TenantManager()),
            ],
        ),
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("category", models.CharField(choices=[("cash", "Cash"), ("bank", "Bank"), ("mobile", "Mobile banking"), ("card", "Credit Card")], default="cash", max_length=10)),
                ("account_no", models.CharField(blank=True, default="", max_length=64)),
                ("bank_name", models.CharField(blank=True, default="", max_length=200)),
                ("branch", models.CharField(blank=True, default="", max_length=200)),
                ("balance", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=18)),
                ("has_transactions", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="ledger_core.company")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["company", "name"], name="account_company_name_idx"),
                    models.Index(fields=["company", "category"], name="account_company_cat_idx"),
                ],
                "constraints": [models.UniqueConstraint(fields=("company", "name"), name="uq_company_account_name")],
            },
            managers=[
                ("objects", ledger_core.managers.TenantManager()),
            ],
        ),
        migrations.CreateModel(
            name="Client",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("email", models.EmailField(blank=True, max_length=254, null=True)),
                ("phone", models.CharField(blank=True, default="", max_length=32)),
                ("present_balance", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=18)),
                ("due_amount", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=18)),
                ("contract_amount", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=18)),
                ("initial_payment", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=18)),
                ("is_archived", models.BooleanField(default=False)),
                ("last_reconciled_at", models.DateTimeField(blank=True, null=True)),
                ("reconciliation_difference", models.DecimalField(blank=True, decimal_places=2, max_digits=18, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="ledger_core.company")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["company", "name"], name="client_company_name_idx"),
                    models.Index(fields=["company", "is_archived"], name="client_company_arch_idx"),
                ],
            },
            managers=[
                ("objects", ledger_core.managers.TenantManager()),
            ],
        ),
        migrations.CreateModel(
            name="Vendor",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("email", models.EmailField(blank=True, max_length=254, null=True)),
                ("mobile", models.CharField(blank=True, default="", max_length=32)),
                ("present_balance_type", models.CharField(choices=[("due", "Due"), ("advance", "Advance")], default="advance", max_length=10)),
                ("present_balance_amount", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=18)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="ledger_core.company")),
            ],
            options={
                "indexes": [models.Index(fields=["company", "name"], name="vendor_company_name_idx")],
                "constraints": [models.CheckConstraint(condition=models.Q(("present_balance_amount__gte", 0)), name="vendor_balance_amount_non_negative")],
            },
            managers=[
                ("objects", ledger_core.managers.TenantManager()),
            ],
        ),
        migrations.CreateModel(
            name="VoucherCounter",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(max_length=16)),
                ("seq", models.PositiveIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="ledger_core.company")),
            ],
            options={
                "constraints": [models.UniqueConstraint(fields=("company", "key"), name="uq_company_counter_key")],
            },
            managers=[
                ("objects", ledger_core.managers.TenantManager()),
            ],
        ),
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action", models.CharField(max_length=50)),
                ("object_type", models.CharField(max_length=100)),
                ("object_id", models.CharField(max_length=100)),
                ("balance_before", models.DecimalField(blank=True, decimal_places=2, max_digits=18, null=True)),
                ("balance_after", models.DecimalField(blank=True, decimal_places=2, max_digits=18, null=True)),
                ("changes", models.JSONField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("company", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to="ledger_core.company")),
                ("user", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["company", "user"], name="audit_company_user_idx"),
                    models.Index(fields=["company", "created_at"], name="audit_company_created_idx"),
                    models.Index(fields=["company", "object_type", "object_id"], name="audit_company_object_idx"),
                ],
            },
            managers=[
                ("objects", ledger_core.managers.TenantManager()),
            ],
        ),
        migrations.CreateModel(
            name="ExpenseHead",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="ledger_core.company")),
            ],
            options={
                "constraints": [models.UniqueConstraint(fields=("company", "name"), name="uq_company_expense_head")],
            },
            managers=[
                ("objects", ledger_core.managers.TenantManager()),
            ],
        ),
        migrations.CreateModel(
            name="AdvanceReturn",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("voucher_no", models.CharField(max_length=32)),
                ("payment_method", models.CharField(choices=[("cash", "Cash"), ("cheque", "Cheque"), ("bank_transfer", "Bank Transfer"), ("mobile", "Mobile banking"), ("card", "Card"), ("other", "Other")], default="cash", max_length=20)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("return_date", models.DateField()),
                ("note", models.TextField(blank=True, default="")),
                ("receipt_no", models.CharField(blank=True, default="", max_length=64)),
                ("transaction_charge", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=18)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to="ledger_core.account")),
                ("client", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to="ledger_core.client")),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="ledger_core.company")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "indexes": [models.Index(fields=["company", "client"], name="adr_company_client_idx")],
                "constraints": [models.UniqueConstraint(fields=("company", "voucher_no"), name="uq_adr_company_voucher")],
            },
            managers=[
                ("objects", ledger_core.managers.TenantManager()),
            ],
        ),
        migrations.CreateModel(
            name="BalanceTransfer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("voucher_no", models.CharField(max_length=32)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("transfer_charge", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=18)),
                ("date", models.DateField()),
                ("note", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="ledger_core.company")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
                ("transfer_from", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="transfers_out", to="ledger_core.account")),
                ("transfer_to", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="transfers_in", to="ledger_core.account")),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("company", "voucher_no"), name="uq_bt_company_voucher"),
                    models.CheckConstraint(condition=models.Q(("transfer_charge__gte", 0)), name="bt_charge_non_negative"),
                ],
            },
            managers=[
                ("objects", ledger_core.managers.TenantManager()),
            ],
        ),
        migrations.CreateModel(
            name="Expense",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("voucher_no", models.CharField(max_length=32)),
                ("payment_method", models.CharField(choices=[("cash", "Cash"), ("cheque", "Cheque"), ("bank_transfer", "Bank Transfer"), ("mobile", "Mobile banking"), ("card", "Card"), ("other", "Other")], default="cash", max_length=20)),
                ("total_amount", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=18)),
                ("date", models.DateField()),
                ("note", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to="ledger_core.account")),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="ledger_core.company")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "indexes": [models.Index(fields=["company", "date"], name="expense_company_date_idx")],
                "constraints": [models.UniqueConstraint(fields=("company", "voucher_no"), name="uq_expense_company_voucher")],
            },
            managers=[
                ("objects", ledger_core.managers.TenantManager()),
            ],
        ),
        migrations.CreateModel(
            name="ExpenseLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("head_name", models.CharField(max_length=200)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="ledger_core.company")),
                ("expense", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="lines", to="ledger_core.expense")),
                ("head", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to="ledger_core.expensehead")),
            ],
            options={
                "constraints": [models.CheckConstraint(condition=models.Q(("amount__gt", 0)), name="expense_line_amount_positive")],
            },
            managers=[
                ("objects", ledger_core.managers.TenantManager()),
            ],
        ),
        migrations.CreateModel(
            name="Investment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("voucher_no", models.CharField(max_length=32)),
                ("target_company_name", models.CharField(max_length=200)),
                ("payment_method", models.CharField(choices=[("cash", "Cash"), ("cheque", "Cheque"), ("bank_transfer", "Bank Transfer"), ("mobile", "Mobile banking"), ("card", "Card"), ("other", "Other")], default="cash", max_length=20)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("date", models.DateField()),
                ("note", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to="ledger_core.account")),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="ledger_core.company")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "constraints": [models.UniqueConstraint(fields=("company", "voucher_no"), name="uq_ivt_company_voucher")],
            },
            managers=[
                ("objects", ledger_core.managers.TenantManager()),
            ],
        ),
        migrations.CreateModel(
            name="VendorAdvanceReturn",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("voucher_no", models.CharField(max_length=32)),
                ("payment_method", models.CharField(choices=[("cash", "Cash"), ("cheque", "Cheque"), ("bank_transfer", "Bank Transfer"), ("mobile", "Mobile banking"), ("card", "Card"), ("other", "Other")], default="cash", max_length=20)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("return_date", models.DateField()),
                ("note", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to="ledger_core.account")),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="ledger_core.company")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
                ("vendor", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to="ledger_core.vendor")),
            ],
            options={
                "indexes": [models.Index(fields=["company", "vendor"], name="advr_company_vendor_idx")],
                "constraints": [models.UniqueConstraint(fields=("company", "voucher_no"), name="uq_advr_company_voucher")],
            },
            managers=[
                ("objects", ledger_core.managers.TenantManager()),
            ],
        ),
        migrations.CreateModel(
            name="ClientPayment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("voucher_no", models.CharField(max_length=32)),
                ("payment_method", models.CharField(choices=[("cash", "Cash"), ("cheque", "Cheque"), ("bank_transfer", "Bank Transfer"), ("mobile", "Mobile banking"), ("card", "Card"), ("other", "Other")], default="cash", max_length=20)),
                ("received_amount", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=18)),
                ("refund_amount", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=18)),
                ("date", models.DateField()),
                ("note", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to="ledger_core.account")),
                ("client", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to="ledger_core.client")),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="ledger_core.company")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "indexes": [models.Index(fields=["company", "client"], name="mr_company_client_idx")],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "voucher_no"), name="uq_mr_company_voucher"),
                    models.CheckConstraint(condition=models.Q(("received_amount__gte", 0), ("refund_amount__gte", 0)), name="mr_non_negative_amounts"),
                ],
            },
            managers=[
                ("objects", ledger_core.managers.TenantManager()),
            ],
        ),
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("voucher_no", models.CharField(max_length=32)),
                ("operation", models.CharField(choices=[("ADVANCE_RETURN", "Advance return"), ("BALANCE_TRANSFER", "Balance transfer"), ("EXPENSE", "Expense"), ("INVESTMENT", "Investment"), ("VENDOR_ADVANCE_RETURN", "Vendor advance return"), ("CLIENT_PAYMENT", "Client payment")], max_length=32)),
                ("account_name", models.CharField(max_length=200)),
                ("pay_type", models.CharField(blank=True, default="", max_length=50)),
                ("direction", models.CharField(choices=[("payout", "Payout"), ("receiv", "Receive")], max_length=10)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("last_total_amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("note", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="ledger_entries", to="ledger_core.account")),
                ("client", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="ledger_entries", to="ledger_core.client")),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="ledger_core.company")),
                ("vendor", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="ledger_entries", to="ledger_core.vendor")),
            ],
            options={
                "ordering": ["date", "id"],
                "indexes": [
                    models.Index(fields=["company", "voucher_no"], name="ledger_company_voucher_idx"),
                    models.Index(fields=["company", "account"], name="ledger_company_account_idx"),
                    models.Index(fields=["company", "client"], name="ledger_company_client_idx"),
                ],
                "constraints": [models.CheckConstraint(condition=models.Q(("amount__gte", 0)), name="ledger_amount_non_negative")],
            },
            managers=[
                ("objects", ledger_core.models.ledger.LedgerEntryManager()),
            ],
        ),
    ]
