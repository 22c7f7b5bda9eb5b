import datetime

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def document_fields():
    return [
        ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
        ("deleted_at", models.DateTimeField(blank=True, db_index=True, null=True)),
        ("prefix", models.CharField(blank=True, default="", max_length=10)),
        ("code", models.CharField(blank=True, db_index=True, default="", max_length=20)),
        ("date", models.DateField(default=datetime.date.today)),
        ("currency_rate", models.DecimalField(blank=True, decimal_places=6, max_digits=18, null=True)),
        ("note", models.TextField(blank=True, default="")),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
        (
            "created_by",
            models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="+",
                to=settings.AUTH_USER_MODEL,
            ),
        ),
        (
            "currency",
            models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.PROTECT,
                related_name="+",
                to="erp.currency",
            ),
        ),
    ]


def approval_fields():
    return [
        ("approved_at", models.DateTimeField(blank=True, null=True)),
        (
            "approved_by",
            models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="+",
                to=settings.AUTH_USER_MODEL,
            ),
        ),
    ]


def stock_fields():
    return [
        ("total", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
        ("fees", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
        ("tax", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
        ("final_total_usd", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
        (
            "warehouse",
            models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="+", to="erp.warehouse"),
        ),
    ]


def line_fields(document_model):
    return [
        ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
        ("deleted_at", models.DateTimeField(blank=True, db_index=True, null=True)),
        ("quantity", models.DecimalField(decimal_places=2, max_digits=12)),
        ("unit_price", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
        (
            "discount_type",
            models.CharField(
                choices=[("percent", "Percent"), ("amount", "Amount")], default="amount", max_length=10
            ),
        ),
        ("discount", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
        ("total", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
        ("total_usd", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
        ("item", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="+", to="erp.item")),
        (
            "warehouse",
            models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="+", to="erp.warehouse"),
        ),
        (
            "document",
            models.ForeignKey(
                on_delete=django.db.models.deletion.CASCADE, related_name="items", to=document_model
            ),
        ),
    ]


def note_fields():
    return [
        ("type", models.CharField(choices=[("credit", "Credit"), ("debit", "Debit")], max_length=10)),
        ("amount", models.DecimalField(decimal_places=2, max_digits=14)),
        ("amount_usd", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
    ]


def entry_fields():
    return [
        ("subject", models.CharField(max_length=255)),
        ("category", models.CharField(blank=True, default="", max_length=100)),
        ("amount", models.DecimalField(decimal_places=2, max_digits=14)),
        ("amount_usd", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
        ("order_number", models.CharField(blank=True, default="", max_length=50)),
        ("check_number", models.CharField(blank=True, default="", max_length=50)),
        ("bank_ref_number", models.CharField(blank=True, default="", max_length=50)),
    ]


def document_options():
    return {"ordering": ["-date", "-id"], "abstract": False}


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("contenttypes", "0002_remove_content_type_name"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Setting",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("group_name", models.CharField(max_length=100)),
                ("key_name", models.CharField(max_length=100)),
                ("value", models.CharField(blank=True, default="", max_length=255)),
                (
                    "data_type",
                    models.CharField(
                        choices=[
                            ("string", "String"),
                            ("integer", "Integer"),
                            ("decimal", "Decimal"),
                            ("boolean", "Boolean"),
                        ],
                        default="string",
                        max_length=10,
                    ),
                ),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"unique_together": {("group_name", "key_name")}},
        ),
        migrations.CreateModel(
            name="Currency",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=3, unique=True)),
                ("name", models.CharField(blank=True, max_length=100)),
                (
                    "calculation_type",
                    models.CharField(
                        choices=[("multiply", "Multiply"), ("divide", "Divide")], default="multiply", max_length=10
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"ordering": ["code"], "verbose_name_plural": "Currencies"},
        ),
        migrations.CreateModel(
            name="CurrencyRate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("rate", models.DecimalField(decimal_places=6, max_digits=18)),
                ("is_active", models.BooleanField(default=True)),
                ("effective_date", models.DateField(default=datetime.date.today)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "currency",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="rates", to="erp.currency"
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="Activity",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "action_type",
                    models.CharField(
                        choices=[
                            ("created", "Created"),
                            ("updated", "Updated"),
                            ("deleted", "Deleted"),
                            ("restored", "Restored"),
                            ("approved", "Approved"),
                        ],
                        max_length=10,
                    ),
                ),
                ("description", models.CharField(max_length=255)),
                ("timestamp", models.DateTimeField(auto_now_add=True)),
                ("object_id", models.PositiveIntegerField()),
                ("object_repr", models.TextField(blank=True, null=True)),
                (
                    "content_type",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, to="contenttypes.contenttype"
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="activities",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={"ordering": ["-timestamp"], "verbose_name_plural": "Activities"},
        ),
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("cash", "Cash"),
                            ("bank", "Bank"),
                            ("pos", "POS"),
                            ("partner", "Partner"),
                            ("credit_card", "Credit Card"),
                            ("liability", "Liability"),
                            ("other", "Other"),
                        ],
                        default="cash",
                        max_length=20,
                    ),
                ),
                ("current_balance", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "currency",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="accounts",
                        to="erp.currency",
                    ),
                ),
            ],
            options={"ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="Supplier",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("email", models.EmailField(blank=True, max_length=254, null=True)),
                ("phone", models.CharField(blank=True, max_length=20, null=True)),
                ("current_balance", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "currency",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="suppliers",
                        to="erp.currency",
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="Customer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("email", models.EmailField(blank=True, max_length=254, null=True)),
                ("phone", models.CharField(blank=True, max_length=20, null=True)),
                ("credit_limit", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "currency",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="customers",
                        to="erp.currency",
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="CustomerBalanceMonthly",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("year", models.PositiveSmallIntegerField()),
                ("month", models.PositiveSmallIntegerField()),
                ("total_sale", models.IntegerField(default=0)),
                ("total_sale_amount", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("total_return", models.IntegerField(default=0)),
                ("total_return_amount", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("total_credit", models.IntegerField(default=0)),
                ("total_credit_amount", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("total_debit", models.IntegerField(default=0)),
                ("total_debit_amount", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("total_payment", models.IntegerField(default=0)),
                ("total_payment_amount", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("transaction_total", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("closing_balance", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("last_updated_by", models.CharField(blank=True, default="", max_length=20)),
                ("updated_by_entry_id", models.PositiveIntegerField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="monthly_balances",
                        to="erp.customer",
                    ),
                ),
            ],
            options={
                "ordering": ["-year", "-month"],
                "verbose_name_plural": "Customer monthly balances",
                "unique_together": {("customer", "year", "month")},
            },
        ),
        migrations.CreateModel(
            name="Warehouse",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255, unique=True)),
                ("location", models.CharField(blank=True, max_length=255)),
                ("is_default", models.BooleanField(default=False)),
            ],
        ),
        migrations.CreateModel(
            name="Item",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=50, unique=True)),
                ("name", models.CharField(max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.CreateModel(
            name="Inventory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="stocks", to="erp.item"
                    ),
                ),
                (
                    "warehouse",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="stocks", to="erp.warehouse"
                    ),
                ),
            ],
            options={"verbose_name_plural": "Inventory", "unique_together": {("warehouse", "item")}},
        ),
        migrations.CreateModel(
            name="ItemPrice",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("price_usd", models.DecimalField(decimal_places=2, max_digits=14)),
                ("effective_date", models.DateField(default=datetime.date.today)),
                (
                    "item",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE, related_name="price", to="erp.item"
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="ItemPriceHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("deleted_at", models.DateTimeField(blank=True, db_index=True, null=True)),
                ("price_usd", models.DecimalField(decimal_places=2, max_digits=14)),
                ("previous_price_usd", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("effective_date", models.DateField(default=datetime.date.today)),
                ("source_type", models.CharField(max_length=30)),
                ("source_id", models.PositiveIntegerField(blank=True, null=True)),
                ("source_line_id", models.PositiveIntegerField(blank=True, null=True)),
                ("note", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="price_history", to="erp.item"
                    ),
                ),
            ],
            options={"ordering": ["-effective_date", "-id"], "verbose_name_plural": "Item price history"},
        ),
        migrations.CreateModel(
            name="CustomerPayment",
            fields=document_fields()
            + approval_fields()
            + [
                ("amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("amount_usd", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="customer_payments",
                        to="erp.account",
                    ),
                ),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="payments", to="erp.customer"
                    ),
                ),
            ],
            options=document_options(),
        ),
        migrations.CreateModel(
            name="SupplierPayment",
            fields=document_fields()
            + approval_fields()
            + [
                ("amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("amount_usd", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="supplier_payments",
                        to="erp.account",
                    ),
                ),
                (
                    "supplier",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="payments", to="erp.supplier"
                    ),
                ),
            ],
            options=document_options(),
        ),
        migrations.CreateModel(
            name="Purchase",
            fields=document_fields()
            + approval_fields()
            + stock_fields()
            + [
                (
                    "supplier",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="purchases", to="erp.supplier"
                    ),
                ),
            ],
            options=document_options(),
        ),
        migrations.CreateModel(
            name="PurchaseItem",
            fields=line_fields("erp.purchase"),
            options={"abstract": False},
        ),
        migrations.CreateModel(
            name="PurchaseReturn",
            fields=document_fields()
            + stock_fields()
            + [
                (
                    "supplier",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="purchase_returns",
                        to="erp.supplier",
                    ),
                ),
                (
                    "purchase",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="returns",
                        to="erp.purchase",
                    ),
                ),
            ],
            options=document_options(),
        ),
        migrations.CreateModel(
            name="PurchaseReturnItem",
            fields=line_fields("erp.purchasereturn"),
            options={"abstract": False},
        ),
        migrations.CreateModel(
            name="CustomerCreditDebitNote",
            fields=document_fields()
            + note_fields()
            + [
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="credit_debit_notes",
                        to="erp.customer",
                    ),
                ),
            ],
            options=document_options(),
        ),
        migrations.CreateModel(
            name="SupplierCreditDebitNote",
            fields=document_fields()
            + note_fields()
            + [
                (
                    "supplier",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="credit_debit_notes",
                        to="erp.supplier",
                    ),
                ),
            ],
            options=document_options(),
        ),
        migrations.CreateModel(
            name="AccountTransfer",
            fields=document_fields()
            + [
                ("sent_amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("received_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                (
                    "from_account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="transfers_out", to="erp.account"
                    ),
                ),
                (
                    "to_account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="transfers_in", to="erp.account"
                    ),
                ),
            ],
            options=document_options(),
        ),
        migrations.CreateModel(
            name="Sale",
            fields=document_fields()
            + approval_fields()
            + [
                ("total", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("total_usd", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="sales", to="erp.customer"
                    ),
                ),
                (
                    "warehouse",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="+", to="erp.warehouse"
                    ),
                ),
            ],
            options=document_options(),
        ),
        migrations.CreateModel(
            name="SaleItem",
            fields=line_fields("erp.sale"),
            options={"abstract": False},
        ),
        migrations.CreateModel(
            name="CustomerReturn",
            fields=document_fields()
            + approval_fields()
            + [
                ("total", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("total_usd", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="returns", to="erp.customer"
                    ),
                ),
                (
                    "sale",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="returns",
                        to="erp.sale",
                    ),
                ),
                (
                    "warehouse",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="+", to="erp.warehouse"
                    ),
                ),
            ],
            options=document_options(),
        ),
        migrations.CreateModel(
            name="CustomerReturnItem",
            fields=line_fields("erp.customerreturn"),
            options={"abstract": False},
        ),
        migrations.CreateModel(
            name="AccountAdjust",
            fields=document_fields()
            + note_fields()
            + [
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="adjustments", to="erp.account"
                    ),
                ),
            ],
            options=document_options(),
        ),
        migrations.CreateModel(
            name="IncomeTransaction",
            fields=document_fields()
            + entry_fields()
            + [
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="incomes", to="erp.account"
                    ),
                ),
            ],
            options=document_options(),
        ),
        migrations.CreateModel(
            name="ExpenseTransaction",
            fields=document_fields()
            + entry_fields()
            + [
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="expenses", to="erp.account"
                    ),
                ),
            ],
            options=document_options(),
        ),
    ]
