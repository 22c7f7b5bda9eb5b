# backend/erp/models.py
from datetime import date
from decimal import Decimal

from django.contrib.auth.models import User
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.db import models, transaction
from django.utils import timezone

from . import transitions
from .services import counters, customer_balance, inventory, ledger, pricing
from .services.currency import DIVIDE, MULTIPLY, document_to_usd, money, resolve_rate, to_decimal


class SoftDeleteQuerySet(models.QuerySet):
    def alive(self):
        return self.filter(deleted_at__isnull=True)

    def trashed(self):
        return self.filter(deleted_at__isnull=False)


class SoftDeleteManager(models.Manager.from_queryset(SoftDeleteQuerySet)):
    """Default manager that hides soft-deleted rows."""

    def get_queryset(self):
        return super().get_queryset().filter(deleted_at__isnull=True)


class SoftDeleteModel(models.Model):
    deleted_at = models.DateTimeField(null=True, blank=True, db_index=True)

    objects = SoftDeleteManager()
    all_objects = SoftDeleteQuerySet.as_manager()

    class Meta:
        abstract = True

    @property
    def is_deleted(self):
        return self.deleted_at is not None

    def delete(self, using=None, keep_parents=False):
        if self.deleted_at is not None:
            return
        self.deleted_at = timezone.now()
        self.save(update_fields=["deleted_at"])

    def restore(self):
        if self.deleted_at is None:
            return
        self.deleted_at = None
        self.save(update_fields=["deleted_at"])

    def hard_delete(self, using=None, keep_parents=False):
        return super().delete(using=using, keep_parents=keep_parents)


class Setting(models.Model):
    """Keyed configuration value; numeric rows double as atomic counters."""

    DATA_TYPES = (
        ("string", "String"),
        ("integer", "Integer"),
        ("decimal", "Decimal"),
        ("boolean", "Boolean"),
    )

    group_name = models.CharField(max_length=100)
    key_name = models.CharField(max_length=100)
    value = models.CharField(max_length=255, blank=True, default="")
    data_type = models.CharField(max_length=10, choices=DATA_TYPES, default="string")
    description = models.CharField(max_length=255, blank=True, default="")
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ("group_name", "key_name")

    def __str__(self):
        return f"{self.group_name}.{self.key_name}={self.value}"

    @classmethod
    def increment_value(cls, group_name, key_name, amount=1, default=None):
        """Lock the row, add ``amount`` and return the new value.

        A missing row is created at ``default``; without a default a missing
        row raises :class:`ValueError`.
        """

        with transaction.atomic():
            if default is not None:
                cls.objects.get_or_create(
                    group_name=group_name,
                    key_name=key_name,
                    defaults={"value": str(default), "data_type": "integer"},
                )
            try:
                setting = cls.objects.select_for_update().get(group_name=group_name, key_name=key_name)
            except cls.DoesNotExist as exc:
                raise ValueError(f"Setting {group_name}.{key_name} does not exist") from exc
            try:
                current = int(setting.value)
            except (TypeError, ValueError) as exc:
                raise ValueError(f"Setting {group_name}.{key_name} is not numeric") from exc
            new_value = current + amount
            setting.value = str(new_value)
            setting.save(update_fields=["value", "updated_at"])
            return new_value


class Currency(models.Model):
    """Represents a currency available within the system."""

    CALCULATION_TYPES = (
        (MULTIPLY, "Multiply"),
        (DIVIDE, "Divide"),
    )

    code = models.CharField(max_length=3, unique=True)
    name = models.CharField(max_length=100, blank=True)
    calculation_type = models.CharField(max_length=10, choices=CALCULATION_TYPES, default=MULTIPLY)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["code"]
        verbose_name_plural = "Currencies"

    def __str__(self):
        return f"{self.code}"

    def save(self, *args, **kwargs):
        self.code = (self.code or "").upper()
        if not self.name:
            self.name = self.code
        super().save(*args, **kwargs)

    @property
    def active_rate(self):
        rate = (
            self.rates.filter(is_active=True)
            .order_by("-effective_date", "-id")
            .values_list("rate", flat=True)
            .first()
        )
        return rate if rate is not None else Decimal("1")

    def set_active_rate(self, rate, effective_date=None):
        """Record ``rate`` as the only active rate for this currency."""

        with transaction.atomic():
            self.rates.filter(is_active=True).update(is_active=False)
            return self.rates.create(
                rate=rate,
                is_active=True,
                effective_date=effective_date or timezone.localdate(),
            )


class CurrencyRate(models.Model):
    currency = models.ForeignKey(Currency, on_delete=models.CASCADE, related_name="rates")
    rate = models.DecimalField(max_digits=18, decimal_places=6)
    is_active = models.BooleanField(default=True)
    effective_date = models.DateField(default=date.today)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.currency.code} @ {self.rate}"


class Activity(models.Model):
    ACTION_TYPES = (
        ('created', 'Created'),
        ('updated', 'Updated'),
        ('deleted', 'Deleted'),
        ('restored', 'Restored'),
        ('approved', 'Approved'),
    )

    user = models.ForeignKey(
        User, on_delete=models.SET_NULL, related_name='activities', null=True, blank=True
    )
    action_type = models.CharField(max_length=10, choices=ACTION_TYPES)
    description = models.CharField(max_length=255)
    timestamp = models.DateTimeField(auto_now_add=True)

    content_type = models.ForeignKey(ContentType, on_delete=models.CASCADE)
    object_id = models.PositiveIntegerField()
    content_object = GenericForeignKey('content_type', 'object_id')

    # Serialized snapshot kept for deleted objects
    object_repr = models.TextField(blank=True, null=True)

    class Meta:
        ordering = ['-timestamp']
        verbose_name_plural = 'Activities'

    def __str__(self):
        username = self.user.username if self.user_id else 'system'
        return f'{username} {self.action_type} - {self.description}'


class Account(models.Model):
    """Ledger account (cash box, bank, card) holding a stored running balance."""

    CATEGORY_CASH = "cash"
    CATEGORY_BANK = "bank"
    CATEGORY_POS = "pos"
    CATEGORY_PARTNER = "partner"
    CATEGORY_CREDIT_CARD = "credit_card"
    CATEGORY_LIABILITY = "liability"
    CATEGORY_OTHER = "other"

    CATEGORY_CHOICES = (
        (CATEGORY_CASH, "Cash"),
        (CATEGORY_BANK, "Bank"),
        (CATEGORY_POS, "POS"),
        (CATEGORY_PARTNER, "Partner"),
        (CATEGORY_CREDIT_CARD, "Credit Card"),
        (CATEGORY_LIABILITY, "Liability"),
        (CATEGORY_OTHER, "Other"),
    )

    name = models.CharField(max_length=255)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default=CATEGORY_CASH)
    currency = models.ForeignKey(
        Currency, on_delete=models.PROTECT, related_name="accounts", null=True, blank=True
    )
    current_balance = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Supplier(models.Model):
    name = models.CharField(max_length=255)
    email = models.EmailField(max_length=254, blank=True, null=True)
    phone = models.CharField(max_length=20, blank=True, null=True)
    currency = models.ForeignKey(
        Currency, on_delete=models.PROTECT, related_name="suppliers", null=True, blank=True
    )
    # Positive means we owe the supplier.
    current_balance = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name


class Customer(models.Model):
    BALANCE_CREDIT = "credit"
    BALANCE_DEBIT = "debit"
    BALANCE_BALANCED = "balanced"

    name = models.CharField(max_length=255)
    email = models.EmailField(max_length=254, blank=True, null=True)
    phone = models.CharField(max_length=20, blank=True, null=True)
    currency = models.ForeignKey(
        Currency, on_delete=models.PROTECT, related_name="customers", null=True, blank=True
    )
    # Largest debt we accept; zero disables the check.
    credit_limit = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    @property
    def current_balance(self):
        """
        Latest positive monthly closing balance plus the open month's total.

        Positive means the customer is in credit.  The value is read from
        the monthly aggregate and is never stored on the customer row.
        """
        if not self.pk:
            return Decimal("0.00")
        return customer_balance.current_balance(self.pk)

    @property
    def balance_status(self):
        balance = self.current_balance
        if balance > 0:
            return self.BALANCE_CREDIT
        if balance < 0:
            return self.BALANCE_DEBIT
        return self.BALANCE_BALANCED

    def is_over_credit_limit(self):
        if not self.credit_limit:
            return False
        return -self.current_balance > self.credit_limit


class CustomerBalanceMonthly(models.Model):
    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name="monthly_balances")
    year = models.PositiveSmallIntegerField()
    month = models.PositiveSmallIntegerField()

    total_sale = models.IntegerField(default=0)
    total_sale_amount = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    total_return = models.IntegerField(default=0)
    total_return_amount = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    total_credit = models.IntegerField(default=0)
    total_credit_amount = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    total_debit = models.IntegerField(default=0)
    total_debit_amount = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    total_payment = models.IntegerField(default=0)
    total_payment_amount = models.DecimalField(max_digits=14, decimal_places=2, default=0)

    transaction_total = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    closing_balance = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    last_updated_by = models.CharField(max_length=20, blank=True, default="")
    updated_by_entry_id = models.PositiveIntegerField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ("customer", "year", "month")
        ordering = ["-year", "-month"]
        verbose_name_plural = "Customer monthly balances"

    def __str__(self):
        return f"{self.customer_id} {self.year}-{self.month:02d}: {self.transaction_total}"


class Warehouse(models.Model):
    """Physical storage location for item inventory."""

    name = models.CharField(max_length=255, unique=True)
    location = models.CharField(max_length=255, blank=True)
    is_default = models.BooleanField(default=False)

    def __str__(self):
        return self.name

    @classmethod
    def get_default(cls):
        warehouse = cls.objects.filter(is_default=True).first()
        if warehouse is None:
            warehouse, _ = cls.objects.get_or_create(name="Main Warehouse", defaults={"is_default": True})
        return warehouse


class Item(models.Model):
    code = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.code} {self.name}"


class Inventory(models.Model):
    """Quantity of an item stored in a specific warehouse."""

    warehouse = models.ForeignKey(Warehouse, on_delete=models.CASCADE, related_name="stocks")
    item = models.ForeignKey(Item, on_delete=models.CASCADE, related_name="stocks")
    quantity = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    class Meta:
        unique_together = ("warehouse", "item")
        verbose_name_plural = "Inventory"

    def __str__(self):
        return f"{self.item.name} @ {self.warehouse.name}: {self.quantity}"


class ItemPrice(models.Model):
    item = models.OneToOneField(Item, on_delete=models.CASCADE, related_name="price")
    price_usd = models.DecimalField(max_digits=14, decimal_places=2)
    effective_date = models.DateField(default=date.today)

    def __str__(self):
        return f"{self.item_id}: {self.price_usd}"


class ItemPriceHistory(SoftDeleteModel):
    item = models.ForeignKey(Item, on_delete=models.CASCADE, related_name="price_history")
    price_usd = models.DecimalField(max_digits=14, decimal_places=2)
    previous_price_usd = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    effective_date = models.DateField(default=date.today)
    source_type = models.CharField(max_length=30)
    source_id = models.PositiveIntegerField(null=True, blank=True)
    source_line_id = models.PositiveIntegerField(null=True, blank=True)
    note = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-effective_date", "-id"]
        verbose_name_plural = "Item price history"


class FinancialDocument(SoftDeleteModel):
    """Shared shape of every balance-affecting document.

    Saving, soft-deleting and restoring a document run the matching
    transition from ``ledger_table`` and post the resulting adjustments in
    the same transaction as the row write.
    """

    PREFIX = ""
    COUNTER_GROUP = ""
    ledger_table = None
    # Documents whose balances are posted by their service instead of save().
    posts_on_save = True
    lines_relation = None
    derived_fields = {}

    prefix = models.CharField(max_length=10, blank=True, default="")
    code = models.CharField(max_length=20, blank=True, default="", db_index=True)
    date = models.DateField(default=date.today)
    currency = models.ForeignKey(
        Currency, on_delete=models.PROTECT, related_name="+", null=True, blank=True
    )
    currency_rate = models.DecimalField(max_digits=18, decimal_places=6, null=True, blank=True)
    note = models.TextField(blank=True, default="")
    created_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, related_name="+", null=True, blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["-date", "-id"]

    def __str__(self):
        return self.number

    @property
    def number(self):
        return f"{self.prefix}-{self.code}" if self.code else f"{self.PREFIX}-draft"

    def ledger_state(self):
        raise NotImplementedError

    def compute_totals(self):
        """Fill base-currency amounts from native amounts and the recorded rate."""

    def ensure_rate(self):
        """Record the currency's active rate unless a positive rate is already set."""

        self.currency_rate = resolve_rate(self.currency, self.currency_rate)
        return self.currency_rate

    def save(self, *args, **kwargs):
        with transaction.atomic():
            previous = None
            if self.pk:
                previous = type(self).all_objects.select_for_update().filter(pk=self.pk).first()
            if not self.prefix:
                self.prefix = self.PREFIX
            if not self.code:
                self.code = counters.reserve_next_code(self.COUNTER_GROUP)
            if (
                previous is not None
                and previous.currency_id != self.currency_id
                and self.currency_rate == previous.currency_rate
            ):
                # The old currency's rate does not apply to the new one.
                self.currency_rate = None
            self.ensure_rate()
            self.compute_totals()
            super().save(*args, **kwargs)

            if not self.posts_on_save or self.deleted_at is not None:
                return
            if previous is None:
                adjustments = self.ledger_table.created(self.ledger_state())
            elif previous.deleted_at is not None:
                # Restores are posted by restore().
                return
            else:
                adjustments = self.ledger_table.updated(previous.ledger_state(), self.ledger_state())
            ledger.post_adjustments(adjustments, entry_id=self.pk)

    def lines(self):
        if not self.lines_relation:
            return []
        return list(getattr(self, self.lines_relation).all())

    def delete(self, using=None, keep_parents=False):
        if self.deleted_at is not None:
            return
        with transaction.atomic():
            state = self.ledger_state()
            self.deleted_at = timezone.now()
            self.save(update_fields=["deleted_at"])
            self.delete_lines()
            if self.posts_on_save:
                ledger.post_adjustments(self.ledger_table.deleted(state), entry_id=self.pk)

    def restore(self):
        if self.deleted_at is None:
            return
        with transaction.atomic():
            deleted_at = self.deleted_at
            self.deleted_at = None
            self.save(update_fields=["deleted_at"])
            self.restore_lines(deleted_at)
            if self.posts_on_save:
                ledger.post_adjustments(self.ledger_table.restored(self.ledger_state()), entry_id=self.pk)

    def hard_delete(self, using=None, keep_parents=False):
        """Remove the row for good; live documents are soft-deleted first."""

        with transaction.atomic():
            if self.deleted_at is None:
                self.delete()
            for line in self._all_lines():
                line.hard_delete()
            return super().hard_delete(using=using, keep_parents=keep_parents)

    def _all_lines(self):
        if not self.lines_relation:
            return []
        manager = getattr(self, self.lines_relation)
        return list(manager.model.all_objects.filter(document=self))

    def delete_lines(self):
        for line in self.lines():
            line.delete(deleted_at=self.deleted_at)

    def restore_lines(self, deleted_at):
        # Only lines removed together with the document come back.
        for line in self._all_lines():
            if line.deleted_at == deleted_at:
                line.restore()

    def line_removed(self, line):
        """Called after ``line`` was dropped from the document during an update."""


class ApprovableDocument(FinancialDocument):
    approved_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, related_name="+", null=True, blank=True
    )
    approved_at = models.DateTimeField(null=True, blank=True)

    class Meta(FinancialDocument.Meta):
        abstract = True

    @property
    def is_approved(self):
        return self.approved_by_id is not None

    def save(self, *args, **kwargs):
        if self.approved_by_id is None:
            self.approved_at = None
        elif self.approved_at is None:
            self.approved_at = timezone.now()
        super().save(*args, **kwargs)

    def approve(self, user):
        self.approved_by = user
        self.approved_at = timezone.now()
        self.save()

    def unapprove(self):
        self.approved_by = None
        self.approved_at = None
        self.save()


class DocumentLine(SoftDeleteModel):
    """Stock line of a document; moves inventory as it is saved and removed."""

    DISCOUNT_PERCENT = "percent"
    DISCOUNT_AMOUNT = "amount"
    DISCOUNT_TYPES = (
        (DISCOUNT_PERCENT, "Percent"),
        (DISCOUNT_AMOUNT, "Amount"),
    )

    # +1 brings stock in, -1 takes it out.
    stock_direction = 1

    item = models.ForeignKey(Item, on_delete=models.PROTECT, related_name="+")
    warehouse = models.ForeignKey(Warehouse, on_delete=models.PROTECT, related_name="+")
    quantity = models.DecimalField(max_digits=12, decimal_places=2)
    unit_price = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    discount_type = models.CharField(max_length=10, choices=DISCOUNT_TYPES, default=DISCOUNT_AMOUNT)
    discount = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    total = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    total_usd = models.DecimalField(max_digits=14, decimal_places=2, default=0)

    class Meta:
        abstract = True

    def compute_totals(self, document):
        gross = to_decimal(self.unit_price) * to_decimal(self.quantity)
        if self.discount_type == self.DISCOUNT_PERCENT:
            discount = gross * to_decimal(self.discount) / Decimal("100")
        else:
            discount = to_decimal(self.discount)
        self.total = money(gross - discount)
        self.total_usd = document_to_usd(document, self.total)

    @property
    def unit_price_usd(self):
        if not self.quantity:
            return Decimal("0.00")
        return money(self.total_usd / self.quantity)

    def _move_stock(self, item_id, warehouse_id, quantity):
        inventory.adjust(item_id, warehouse_id, self.stock_direction * quantity)

    def on_created(self):
        """Hook for lines that record more than stock."""

    def save(self, *args, **kwargs):
        with transaction.atomic():
            previous = None
            if self.pk:
                previous = type(self).all_objects.select_for_update().filter(pk=self.pk).first()
            super().save(*args, **kwargs)
            if self.deleted_at is not None or (previous is not None and previous.deleted_at is not None):
                return
            if previous is None:
                self._move_stock(self.item_id, self.warehouse_id, self.quantity)
                self.on_created()
            elif (previous.item_id, previous.warehouse_id) != (self.item_id, self.warehouse_id):
                self._move_stock(previous.item_id, previous.warehouse_id, -previous.quantity)
                self._move_stock(self.item_id, self.warehouse_id, self.quantity)
            else:
                self._move_stock(self.item_id, self.warehouse_id, self.quantity - previous.quantity)

    def delete(self, using=None, keep_parents=False, deleted_at=None):
        # Works from the line's own columns so a removed parent is never needed.
        if self.deleted_at is not None:
            return
        with transaction.atomic():
            self.deleted_at = deleted_at or timezone.now()
            self.save(update_fields=["deleted_at"])
            self._move_stock(self.item_id, self.warehouse_id, -self.quantity)

    def restore(self):
        if self.deleted_at is None:
            return
        with transaction.atomic():
            self.deleted_at = None
            self.save(update_fields=["deleted_at"])
            self._move_stock(self.item_id, self.warehouse_id, self.quantity)

    def hard_delete(self, using=None, keep_parents=False):
        with transaction.atomic():
            if self.deleted_at is None:
                self._move_stock(self.item_id, self.warehouse_id, -self.quantity)
            return super().hard_delete(using=using, keep_parents=keep_parents)


class CustomerPayment(ApprovableDocument):
    PREFIX = "RCT"
    COUNTER_GROUP = "customer_payments"
    ledger_table = transitions.CUSTOMER_PAYMENT

    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name="payments")
    account = models.ForeignKey(Account, on_delete=models.PROTECT, related_name="customer_payments")
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    amount_usd = models.DecimalField(max_digits=14, decimal_places=2, default=0)

    def compute_totals(self):
        self.amount = money(self.amount)
        self.amount_usd = document_to_usd(self, self.amount)

    def ledger_state(self):
        return transitions.PaymentState(
            approved=self.is_approved,
            account_id=self.account_id,
            counterparty_id=self.customer_id,
            amount_usd=to_decimal(self.amount_usd),
        )


class SupplierPayment(ApprovableDocument):
    PREFIX = "SPAY"
    COUNTER_GROUP = "supplier_payments"
    ledger_table = transitions.SUPPLIER_PAYMENT

    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, related_name="payments")
    account = models.ForeignKey(Account, on_delete=models.PROTECT, related_name="supplier_payments")
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    amount_usd = models.DecimalField(max_digits=14, decimal_places=2, default=0)

    def compute_totals(self):
        self.amount = money(self.amount)
        self.amount_usd = document_to_usd(self, self.amount)

    def ledger_state(self):
        return transitions.PaymentState(
            approved=self.is_approved,
            account_id=self.account_id,
            counterparty_id=self.supplier_id,
            amount_usd=to_decimal(self.amount_usd),
        )


class StockDocumentMixin(models.Model):
    """Totals and item price history shared by purchases and purchase returns."""

    PRICE_SOURCE = ""
    PRICE_NOTE = ""

    warehouse = models.ForeignKey(Warehouse, on_delete=models.PROTECT, related_name="+")
    total = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    fees = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    tax = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    final_total_usd = models.DecimalField(max_digits=14, decimal_places=2, default=0)

    class Meta:
        abstract = True

    def recalculate_totals(self, lines):
        for line in lines:
            line.compute_totals(self)
        self.total = money(sum((line.total for line in lines), Decimal("0")))
        self.final_total_usd = money(
            sum((line.total_usd for line in lines), Decimal("0"))
            + document_to_usd(self, to_decimal(self.fees) + to_decimal(self.tax))
        )

    def record_line_price(self, line):
        pricing.record_price(
            line.item_id,
            line.unit_price_usd,
            self.date,
            self.PRICE_SOURCE,
            self.pk,
            note=f"{self.PRICE_NOTE} {self.number}",
            source_line_id=line.pk,
        )

    def delete_lines(self):
        # Stock goes back first, then the price history is reverted.
        super().delete_lines()
        pricing.revert_source(self.PRICE_SOURCE, self.pk, deleted_at=self.deleted_at)

    def restore_lines(self, deleted_at):
        super().restore_lines(deleted_at)
        pricing.restore_source(self.PRICE_SOURCE, self.pk, deleted_at=deleted_at)

    def line_removed(self, line):
        pricing.revert_source(self.PRICE_SOURCE, self.pk, source_line_id=line.pk, deleted_at=line.deleted_at)


class Purchase(StockDocumentMixin, ApprovableDocument):
    PREFIX = "PUR"
    COUNTER_GROUP = "purchases"
    PRICE_SOURCE = "purchase"
    PRICE_NOTE = "Purchase"
    ledger_table = transitions.PURCHASE
    lines_relation = "items"

    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, related_name="purchases")

    class Meta(ApprovableDocument.Meta):
        pass

    def ledger_state(self):
        return transitions.ChargeState(
            effective=self.is_approved,
            counterparty_id=self.supplier_id,
            total_usd=to_decimal(self.final_total_usd),
        )


class PurchaseItem(DocumentLine):
    stock_direction = 1

    document = models.ForeignKey(Purchase, on_delete=models.CASCADE, related_name="items")

    def on_created(self):
        self.document.record_line_price(self)


class PurchaseReturn(StockDocumentMixin, FinancialDocument):
    PREFIX = "PURTN"
    COUNTER_GROUP = "purchase_returns"
    PRICE_SOURCE = "purchase_return"
    PRICE_NOTE = "Purchase Return"
    ledger_table = transitions.PURCHASE_RETURN
    lines_relation = "items"

    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, related_name="purchase_returns")
    purchase = models.ForeignKey(
        Purchase, on_delete=models.SET_NULL, related_name="returns", null=True, blank=True
    )

    class Meta(FinancialDocument.Meta):
        pass

    def ledger_state(self):
        return transitions.ChargeState(
            effective=True,
            counterparty_id=self.supplier_id,
            total_usd=to_decimal(self.final_total_usd),
        )


class PurchaseReturnItem(DocumentLine):
    stock_direction = -1

    document = models.ForeignKey(PurchaseReturn, on_delete=models.CASCADE, related_name="items")

    def on_created(self):
        self.document.record_line_price(self)


class CreditDebitNote(FinancialDocument):
    TYPE_CREDIT = transitions.CREDIT
    TYPE_DEBIT = transitions.DEBIT
    TYPE_CHOICES = (
        (TYPE_CREDIT, "Credit"),
        (TYPE_DEBIT, "Debit"),
    )

    type = models.CharField(max_length=10, choices=TYPE_CHOICES)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    amount_usd = models.DecimalField(max_digits=14, decimal_places=2, default=0)

    class Meta(FinancialDocument.Meta):
        abstract = True

    def is_credit(self):
        return self.type == self.TYPE_CREDIT

    def is_debit(self):
        return self.type == self.TYPE_DEBIT

    def compute_totals(self):
        self.amount = money(self.amount)
        self.amount_usd = document_to_usd(self, self.amount)


class CustomerCreditDebitNote(CreditDebitNote):
    PREFIX = "CCDN"
    COUNTER_GROUP = "customer_credit_debit_notes"
    ledger_table = transitions.CUSTOMER_NOTE

    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name="credit_debit_notes")

    class Meta(CreditDebitNote.Meta):
        pass

    def ledger_state(self):
        return transitions.NoteState(
            counterparty_id=self.customer_id,
            note_type=self.type,
            amount_usd=to_decimal(self.amount_usd),
        )


class SupplierCreditDebitNote(CreditDebitNote):
    PREFIX = "SCDN"
    COUNTER_GROUP = "supplier_credit_debit_notes"
    ledger_table = transitions.SUPPLIER_NOTE

    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, related_name="credit_debit_notes")

    class Meta(CreditDebitNote.Meta):
        pass

    def ledger_state(self):
        return transitions.NoteState(
            counterparty_id=self.supplier_id,
            note_type=self.type,
            amount_usd=to_decimal(self.amount_usd),
        )


class AccountTransfer(FinancialDocument):
    """Transfer between two accounts.

    Saving a transfer never touches balances; :mod:`erp.services.documents`
    posts the two account movements explicitly.
    """

    PREFIX = "TRF"
    COUNTER_GROUP = "account_transfers"
    ledger_table = transitions.ACCOUNT_TRANSFER
    posts_on_save = False
    # Fields recomputed on update when their inputs change and no value is sent.
    derived_fields = {"received_amount": ("sent_amount", "currency", "currency_rate")}

    from_account = models.ForeignKey(Account, on_delete=models.PROTECT, related_name="transfers_out")
    to_account = models.ForeignKey(Account, on_delete=models.PROTECT, related_name="transfers_in")
    sent_amount = models.DecimalField(max_digits=14, decimal_places=2)
    received_amount = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)

    def compute_totals(self):
        self.sent_amount = money(self.sent_amount)
        if self.received_amount in (None, ""):
            self.received_amount = document_to_usd(self, self.sent_amount)
        else:
            self.received_amount = money(self.received_amount)

    def ledger_state(self):
        return transitions.TransferState(
            from_account_id=self.from_account_id,
            to_account_id=self.to_account_id,
            sent_amount=to_decimal(self.sent_amount),
            received_amount=to_decimal(self.received_amount),
        )


class AccountAdjust(CreditDebitNote):
    """Manual correction of an account: credits raise it, debits lower it."""

    PREFIX = "ADJ"
    COUNTER_GROUP = "account_adjusts"
    ledger_table = transitions.ACCOUNT_ADJUST

    account = models.ForeignKey(Account, on_delete=models.PROTECT, related_name="adjustments")

    class Meta(CreditDebitNote.Meta):
        pass

    def ledger_state(self):
        return transitions.NoteState(
            counterparty_id=self.account_id,
            note_type=self.type,
            amount_usd=to_decimal(self.amount_usd),
        )


class AccountEntry(FinancialDocument):
    """Money booked straight into or out of one account."""

    subject = models.CharField(max_length=255)
    category = models.CharField(max_length=100, blank=True, default="")
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    amount_usd = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    order_number = models.CharField(max_length=50, blank=True, default="")
    check_number = models.CharField(max_length=50, blank=True, default="")
    bank_ref_number = models.CharField(max_length=50, blank=True, default="")

    class Meta(FinancialDocument.Meta):
        abstract = True

    def compute_totals(self):
        self.amount = money(self.amount)
        self.amount_usd = document_to_usd(self, self.amount)

    def ledger_state(self):
        return transitions.ChargeState(
            effective=True,
            counterparty_id=self.account_id,
            total_usd=to_decimal(self.amount_usd),
        )


class IncomeTransaction(AccountEntry):
    PREFIX = "INC"
    COUNTER_GROUP = "income_transactions"
    ledger_table = transitions.INCOME_TRANSACTION

    account = models.ForeignKey(Account, on_delete=models.PROTECT, related_name="incomes")

    class Meta(AccountEntry.Meta):
        pass


class ExpenseTransaction(AccountEntry):
    PREFIX = "EXP"
    COUNTER_GROUP = "expense_transactions"
    ledger_table = transitions.EXPENSE_TRANSACTION

    account = models.ForeignKey(Account, on_delete=models.PROTECT, related_name="expenses")

    class Meta(AccountEntry.Meta):
        pass


class CustomerStockDocument(ApprovableDocument):
    """Approval-gated customer document whose total is the sum of its lines."""

    warehouse = models.ForeignKey(Warehouse, on_delete=models.PROTECT, related_name="+")
    total = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    total_usd = models.DecimalField(max_digits=14, decimal_places=2, default=0)

    class Meta(ApprovableDocument.Meta):
        abstract = True

    def recalculate_totals(self, lines):
        for line in lines:
            line.compute_totals(self)
        self.total = money(sum((line.total for line in lines), Decimal("0")))
        self.total_usd = money(sum((line.total_usd for line in lines), Decimal("0")))

    def ledger_state(self):
        return transitions.ChargeState(
            effective=self.is_approved,
            counterparty_id=self.customer_id,
            total_usd=to_decimal(self.total_usd),
        )


class Sale(CustomerStockDocument):
    PREFIX = "INV"
    COUNTER_GROUP = "sales"
    ledger_table = transitions.SALE
    lines_relation = "items"

    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name="sales")

    class Meta(CustomerStockDocument.Meta):
        pass


class SaleItem(DocumentLine):
    stock_direction = -1

    document = models.ForeignKey(Sale, on_delete=models.CASCADE, related_name="items")

    def __str__(self):
        return f"{self.quantity} of {self.item_id} for Sale #{self.document_id}"


class CustomerReturn(CustomerStockDocument):
    """Goods a customer sends back; credits the customer once approved."""

    PREFIX = "RTN"
    COUNTER_GROUP = "customer_returns"
    ledger_table = transitions.CUSTOMER_RETURN
    lines_relation = "items"

    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name="returns")
    sale = models.ForeignKey(Sale, on_delete=models.SET_NULL, related_name="returns", null=True, blank=True)

    class Meta(CustomerStockDocument.Meta):
        pass


class CustomerReturnItem(DocumentLine):
    stock_direction = 1

    document = models.ForeignKey(CustomerReturn, on_delete=models.CASCADE, related_name="items")
