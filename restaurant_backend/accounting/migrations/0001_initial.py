from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("branches", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ChartOfAccounts",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, unique=True)),
                (
                    "code",
                    models.SlugField(
                        help_text="Stable chart key used by resolvers/seeders. Do not change after go-live.",
                        max_length=64,
                        unique=True,
                    ),
                ),
                ("industry", models.CharField(blank=True, default="", max_length=100)),
                ("is_active", models.BooleanField(db_index=True, default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Chart of Accounts",
                "verbose_name_plural": "Charts of Accounts",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=10)),
                ("name", models.CharField(max_length=150)),
                (
                    "account_type",
                    models.CharField(
                        choices=[
                            ("ASSET", "Asset"),
                            ("LIABILITY", "Liability"),
                            ("EQUITY", "Equity"),
                            ("REVENUE", "Revenue"),
                            ("EXPENSE", "Expense"),
                        ],
                        max_length=20,
                    ),
                ),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "chart",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="accounts",
                        to="accounting.chartofaccounts",
                    ),
                ),
            ],
            options={
                "verbose_name": "Account",
                "verbose_name_plural": "Accounts",
                "ordering": ["code"],
                "indexes": [
                    models.Index(fields=["chart", "account_type"], name="acct_account_chart_type_idx"),
                    models.Index(fields=["is_active"], name="acct_account_active_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("chart", "code"), name="uniq_account_chart_code"),
                    models.CheckConstraint(condition=models.Q(("code", ""), _negated=True), name="chk_account_code_not_blank"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Vendor",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=150, unique=True)),
                ("contact_name", models.CharField(blank=True, default="", max_length=150)),
                ("phone", models.CharField(blank=True, default="", max_length=50)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("address", models.CharField(blank=True, default="", max_length=255)),
                ("tax_id", models.CharField(blank=True, default="", max_length=50)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="JournalEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "reference",
                    models.CharField(
                        blank=True,
                        help_text="Idempotency reference, e.g. PURCHASE:12 or PAYROLL:2024-05-31",
                        max_length=100,
                        null=True,
                    ),
                ),
                ("description", models.TextField(help_text="Narrative description of the journal entry")),
                (
                    "source_type",
                    models.CharField(
                        choices=[
                            ("MANUAL", "Manual Entry"),
                            ("ADJUSTMENT", "Manual Adjustment"),
                            ("EXPENSE", "Expense"),
                            ("PAYROLL", "Payroll"),
                            ("PURCHASE", "Purchase Receipt"),
                            ("WASTE", "Waste"),
                            ("TRANSFER", "Stock Transfer"),
                            ("STOCK_COUNT", "Stock Count"),
                            ("SALES", "Sales"),
                            ("PERIOD_CLOSE", "Period Close"),
                            ("REVERSAL", "Reversal"),
                        ],
                        db_index=True,
                        default="MANUAL",
                        max_length=20,
                    ),
                ),
                (
                    "posted_at",
                    models.DateTimeField(default=django.utils.timezone.now, help_text="Accounting effective date"),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "branch",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="journal_entries",
                        to="branches.branch",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="journal_entries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "reverses",
                    models.OneToOneField(
                        blank=True,
                        help_text="The entry this one reverses (set on reversal entries only).",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reversed_by",
                        to="accounting.journalentry",
                    ),
                ),
            ],
            options={
                "verbose_name": "Journal Entry",
                "verbose_name_plural": "Journal Entries",
                "ordering": ["-posted_at", "-created_at"],
                "indexes": [
                    models.Index(fields=["posted_at"], name="acct_journal_posted_idx"),
                    models.Index(fields=["reference"], name="acct_journal_reference_idx"),
                    models.Index(fields=["branch", "posted_at"], name="acct_journal_branch_posted_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("reference__isnull", False), models.Q(("reference", ""), _negated=True)),
                        fields=("reference",),
                        name="uniq_journal_reference_not_blank",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("entry_type", models.CharField(choices=[("DEBIT", "Debit"), ("CREDIT", "Credit")], max_length=6)),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Positive monetary value",
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                ("memo", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to="accounting.account",
                    ),
                ),
                (
                    "branch",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to="branches.branch",
                    ),
                ),
                (
                    "journal_entry",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to="accounting.journalentry",
                    ),
                ),
            ],
            options={
                "verbose_name": "Ledger Entry",
                "verbose_name_plural": "Ledger Entries",
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["account", "entry_type"], name="acct_ledger_account_type_idx"),
                    models.Index(fields=["journal_entry", "entry_type"], name="acct_ledger_journal_type_idx"),
                    models.Index(fields=["branch", "account"], name="acct_ledger_branch_account_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AccountingMapping",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("event_key", models.CharField(max_length=50)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="mappings",
                        to="accounting.account",
                    ),
                ),
                (
                    "chart",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="mappings",
                        to="accounting.chartofaccounts",
                    ),
                ),
            ],
            options={
                "ordering": ["event_key"],
                "constraints": [
                    models.UniqueConstraint(fields=("chart", "event_key"), name="uniq_mapping_chart_event_key"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PeriodClose",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "chart",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="period_closes",
                        to="accounting.chartofaccounts",
                    ),
                ),
                (
                    "closed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="period_closes",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "journal_entry",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="period_closes",
                        to="accounting.journalentry",
                    ),
                ),
            ],
            options={
                "verbose_name": "Period Close",
                "verbose_name_plural": "Period Closes",
                "ordering": ["-end_date", "-created_at"],
                "indexes": [
                    models.Index(fields=["chart", "start_date", "end_date"], name="acct_close_chart_window_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("chart", "start_date", "end_date"),
                        name="uniq_period_close_chart_start_end",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("end_date__gte", models.F("start_date"))),
                        name="chk_period_close_end_gte_start",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ExpenseCategory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, unique=True)),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("is_active", models.BooleanField(default=True)),
                (
                    "credit_account",
                    models.ForeignKey(
                        blank=True,
                        help_text="Default paying account (cash, petty cash, payables)",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="expense_categories_credit",
                        to="accounting.account",
                    ),
                ),
                (
                    "debit_account",
                    models.ForeignKey(
                        blank=True,
                        help_text="Default expense account for claims in this category",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="expense_categories_debit",
                        to="accounting.account",
                    ),
                ),
            ],
            options={
                "verbose_name": "Expense Category",
                "verbose_name_plural": "Expense Categories",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Expense",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("custom_category", models.CharField(blank=True, default="", max_length=100)),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                ("expense_date", models.DateField(default=django.utils.timezone.localdate)),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "status",
                    models.CharField(
                        choices=[("PENDING", "Pending"), ("APPROVED", "Approved"), ("REJECTED", "Rejected")],
                        db_index=True,
                        default="PENDING",
                        max_length=10,
                    ),
                ),
                ("reviewed_at", models.DateTimeField(blank=True, null=True)),
                ("rejection_reason", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "branch",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="expenses",
                        to="branches.branch",
                    ),
                ),
                (
                    "category",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="expenses",
                        to="accounting.expensecategory",
                    ),
                ),
                (
                    "credit_account",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="expenses_credited",
                        to="accounting.account",
                    ),
                ),
                (
                    "debit_account",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="expenses_debited",
                        to="accounting.account",
                    ),
                ),
                (
                    "journal_entry",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="expenses",
                        to="accounting.journalentry",
                    ),
                ),
                (
                    "reviewed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="reviewed_expenses",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "submitted_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="submitted_expenses",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-expense_date", "-created_at"],
                "indexes": [
                    models.Index(fields=["expense_date"], name="acct_expense_date_idx"),
                    models.Index(fields=["branch", "status"], name="acct_expense_branch_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("status", "APPROVED"), _negated=True),
                            ("journal_entry__isnull", False),
                            _connector="OR",
                        ),
                        name="chk_expense_approved_requires_journal",
                    ),
                ],
            },
        ),
    ]
