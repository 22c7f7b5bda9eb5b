from decimal import Decimal

from django.contrib.auth.models import User
from rest_framework import serializers

from .models import (
    Account,
    AccountAdjust,
    AccountTransfer,
    Activity,
    Currency,
    CurrencyRate,
    Customer,
    CustomerBalanceMonthly,
    CustomerCreditDebitNote,
    CustomerPayment,
    CustomerReturn,
    CustomerReturnItem,
    ExpenseTransaction,
    IncomeTransaction,
    Inventory,
    Item,
    ItemPriceHistory,
    Purchase,
    PurchaseItem,
    PurchaseReturn,
    PurchaseReturnItem,
    Sale,
    SaleItem,
    Supplier,
    SupplierCreditDebitNote,
    SupplierPayment,
    Warehouse,
)
from .services import documents


class CurrencySerializer(serializers.ModelSerializer):
    active_rate = serializers.DecimalField(max_digits=18, decimal_places=6, read_only=True)

    class Meta:
        model = Currency
        fields = ['id', 'code', 'name', 'calculation_type', 'active_rate', 'created_at']
        read_only_fields = ['created_at']


class CurrencyRateSerializer(serializers.ModelSerializer):
    class Meta:
        model = CurrencyRate
        fields = ['id', 'currency', 'rate', 'is_active', 'effective_date', 'created_at']
        read_only_fields = ['is_active', 'created_at']

    def validate_rate(self, value):
        if value <= 0:
            raise serializers.ValidationError('Rate must be greater than zero.')
        return value

    def create(self, validated_data):
        currency = validated_data['currency']
        return currency.set_active_rate(validated_data['rate'], validated_data.get('effective_date'))


class ActivitySerializer(serializers.ModelSerializer):
    user = serializers.StringRelatedField()

    class Meta:
        model = Activity
        fields = ['id', 'user', 'action_type', 'description', 'timestamp', 'object_id', 'object_repr']


class AccountSerializer(serializers.ModelSerializer):
    category_label = serializers.CharField(source='get_category_display', read_only=True)

    class Meta:
        model = Account
        fields = ['id', 'name', 'category', 'category_label', 'currency', 'current_balance', 'created_at']
        read_only_fields = ['current_balance', 'created_at']


class SupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = ['id', 'name', 'email', 'phone', 'currency', 'current_balance', 'created_at']
        read_only_fields = ['current_balance', 'created_at']


class CustomerSerializer(serializers.ModelSerializer):
    current_balance = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    balance_status = serializers.CharField(read_only=True)
    is_over_credit_limit = serializers.BooleanField(read_only=True)

    class Meta:
        model = Customer
        fields = [
            'id',
            'name',
            'email',
            'phone',
            'currency',
            'credit_limit',
            'current_balance',
            'balance_status',
            'is_over_credit_limit',
            'created_at',
        ]
        read_only_fields = ['created_at']


class CustomerBalanceMonthlySerializer(serializers.ModelSerializer):
    class Meta:
        model = CustomerBalanceMonthly
        exclude = ['customer']


class WarehouseSerializer(serializers.ModelSerializer):
    class Meta:
        model = Warehouse
        fields = ['id', 'name', 'location', 'is_default']


class ItemSerializer(serializers.ModelSerializer):
    price_usd = serializers.DecimalField(
        source='price.price_usd', max_digits=14, decimal_places=2, read_only=True, default=None
    )

    class Meta:
        model = Item
        fields = ['id', 'code', 'name', 'price_usd', 'created_at']
        read_only_fields = ['created_at']


class InventorySerializer(serializers.ModelSerializer):
    item_name = serializers.CharField(source='item.name', read_only=True)
    warehouse_name = serializers.CharField(source='warehouse.name', read_only=True)

    class Meta:
        model = Inventory
        fields = ['id', 'item', 'item_name', 'warehouse', 'warehouse_name', 'quantity']


class ItemPriceHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = ItemPriceHistory
        fields = [
            'id',
            'item',
            'price_usd',
            'previous_price_usd',
            'effective_date',
            'source_type',
            'source_id',
            'source_line_id',
            'note',
        ]


class DocumentSerializer(serializers.ModelSerializer):
    """Routes writes through :mod:`erp.services.documents`.

    ``approve`` is a write-only convenience flag for approval-gated
    documents: when true the requesting user is recorded as approver.
    """

    number = serializers.CharField(read_only=True)
    created_by = serializers.StringRelatedField(read_only=True)

    base_fields = [
        'id',
        'prefix',
        'code',
        'number',
        'date',
        'currency',
        'currency_rate',
        'note',
        'created_by',
        'created_at',
        'deleted_at',
    ]
    base_read_only = ['prefix', 'code', 'created_at', 'deleted_at']

    def _user(self):
        request = self.context.get('request')
        user = getattr(request, 'user', None)
        return user if isinstance(user, User) else None

    def _apply_approval(self, validated_data):
        approve = validated_data.pop('approve', None)
        if approve is True:
            validated_data['approved_by'] = self._user()
        elif approve is False:
            validated_data['approved_by'] = None

    def create(self, validated_data):
        self._apply_approval(validated_data)
        return documents.create_document(self.Meta.model, validated_data, user=self._user())

    def update(self, instance, validated_data):
        self._apply_approval(validated_data)
        return documents.update_document(self.Meta.model, instance.pk, validated_data, user=self._user())


class ApprovalFieldsMixin(serializers.Serializer):
    approve = serializers.BooleanField(write_only=True, required=False)
    approved_by = serializers.StringRelatedField(read_only=True)
    approved_at = serializers.DateTimeField(read_only=True)
    is_approved = serializers.BooleanField(read_only=True)

    approval_fields = ['approve', 'approved_by', 'approved_at', 'is_approved']


class DocumentLineSerializer(serializers.ModelSerializer):
    id = serializers.IntegerField(required=False)

    line_fields = [
        'id',
        'item',
        'warehouse',
        'quantity',
        'unit_price',
        'discount_type',
        'discount',
        'total',
        'total_usd',
    ]

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError('Quantity must be greater than zero.')
        return value

    def validate(self, attrs):
        if attrs.get('discount_type') == 'percent' and attrs.get('discount', Decimal('0')) > 100:
            raise serializers.ValidationError({'discount': 'Percent discount cannot exceed 100.'})
        return attrs


class PurchaseItemSerializer(DocumentLineSerializer):
    class Meta:
        model = PurchaseItem
        fields = DocumentLineSerializer.line_fields
        read_only_fields = ['total', 'total_usd']
        extra_kwargs = {'warehouse': {'required': False}}


class PurchaseReturnItemSerializer(DocumentLineSerializer):
    class Meta:
        model = PurchaseReturnItem
        fields = DocumentLineSerializer.line_fields
        read_only_fields = ['total', 'total_usd']
        extra_kwargs = {'warehouse': {'required': False}}


class SaleItemSerializer(DocumentLineSerializer):
    class Meta:
        model = SaleItem
        fields = DocumentLineSerializer.line_fields
        read_only_fields = ['total', 'total_usd']
        extra_kwargs = {'warehouse': {'required': False}}


class CustomerReturnItemSerializer(DocumentLineSerializer):
    class Meta:
        model = CustomerReturnItem
        fields = DocumentLineSerializer.line_fields
        read_only_fields = ['total', 'total_usd']
        extra_kwargs = {'warehouse': {'required': False}}


class PositiveAmountMixin:
    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError('Amount must be greater than zero.')
        return value


class CustomerPaymentSerializer(PositiveAmountMixin, ApprovalFieldsMixin, DocumentSerializer):
    class Meta:
        model = CustomerPayment
        fields = DocumentSerializer.base_fields + ApprovalFieldsMixin.approval_fields + [
            'customer',
            'account',
            'amount',
            'amount_usd',
        ]
        read_only_fields = DocumentSerializer.base_read_only + ['amount_usd']
        extra_kwargs = {'customer': {'required': False}}


class SupplierPaymentSerializer(PositiveAmountMixin, ApprovalFieldsMixin, DocumentSerializer):
    class Meta:
        model = SupplierPayment
        fields = DocumentSerializer.base_fields + ApprovalFieldsMixin.approval_fields + [
            'supplier',
            'account',
            'amount',
            'amount_usd',
        ]
        read_only_fields = DocumentSerializer.base_read_only + ['amount_usd']
        extra_kwargs = {'supplier': {'required': False}}


class PurchaseSerializer(ApprovalFieldsMixin, DocumentSerializer):
    items = PurchaseItemSerializer(many=True, required=False)

    class Meta:
        model = Purchase
        fields = DocumentSerializer.base_fields + ApprovalFieldsMixin.approval_fields + [
            'supplier',
            'warehouse',
            'fees',
            'tax',
            'total',
            'final_total_usd',
            'items',
        ]
        read_only_fields = DocumentSerializer.base_read_only + ['total', 'final_total_usd']


class PurchaseReturnSerializer(DocumentSerializer):
    items = PurchaseReturnItemSerializer(many=True, required=False)

    class Meta:
        model = PurchaseReturn
        fields = DocumentSerializer.base_fields + [
            'supplier',
            'purchase',
            'warehouse',
            'fees',
            'tax',
            'total',
            'final_total_usd',
            'items',
        ]
        read_only_fields = DocumentSerializer.base_read_only + ['total', 'final_total_usd']

    def validate(self, attrs):
        purchase = attrs.get('purchase')
        supplier = attrs.get('supplier') or getattr(self.instance, 'supplier', None)
        if purchase is not None and supplier is not None and purchase.supplier_id != supplier.pk:
            raise serializers.ValidationError({'purchase': 'Purchase belongs to a different supplier.'})
        return attrs


class CreditDebitNoteFieldsMixin(PositiveAmountMixin):
    note_fields = ['type', 'amount', 'amount_usd']


class CustomerCreditDebitNoteSerializer(CreditDebitNoteFieldsMixin, DocumentSerializer):
    class Meta:
        model = CustomerCreditDebitNote
        fields = DocumentSerializer.base_fields + ['customer'] + CreditDebitNoteFieldsMixin.note_fields
        read_only_fields = DocumentSerializer.base_read_only + ['amount_usd']


class SupplierCreditDebitNoteSerializer(CreditDebitNoteFieldsMixin, DocumentSerializer):
    class Meta:
        model = SupplierCreditDebitNote
        fields = DocumentSerializer.base_fields + ['supplier'] + CreditDebitNoteFieldsMixin.note_fields
        read_only_fields = DocumentSerializer.base_read_only + ['amount_usd']


class AccountTransferSerializer(DocumentSerializer):
    class Meta:
        model = AccountTransfer
        fields = DocumentSerializer.base_fields + [
            'from_account',
            'to_account',
            'sent_amount',
            'received_amount',
        ]
        read_only_fields = DocumentSerializer.base_read_only
        extra_kwargs = {'received_amount': {'required': False}}

    def validate_sent_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError('Sent amount must be greater than zero.')
        return value

    def validate(self, attrs):
        from_account = attrs.get('from_account') or getattr(self.instance, 'from_account', None)
        to_account = attrs.get('to_account') or getattr(self.instance, 'to_account', None)
        if from_account is not None and from_account == to_account:
            raise serializers.ValidationError('Cannot transfer to the same account.')
        return attrs


class SaleSerializer(ApprovalFieldsMixin, DocumentSerializer):
    items = SaleItemSerializer(many=True, required=False)

    class Meta:
        model = Sale
        fields = DocumentSerializer.base_fields + ApprovalFieldsMixin.approval_fields + [
            'customer',
            'warehouse',
            'total',
            'total_usd',
            'items',
        ]
        read_only_fields = DocumentSerializer.base_read_only + ['total', 'total_usd']


class CustomerReturnSerializer(ApprovalFieldsMixin, DocumentSerializer):
    items = CustomerReturnItemSerializer(many=True, required=False)

    class Meta:
        model = CustomerReturn
        fields = DocumentSerializer.base_fields + ApprovalFieldsMixin.approval_fields + [
            'customer',
            'sale',
            'warehouse',
            'total',
            'total_usd',
            'items',
        ]
        read_only_fields = DocumentSerializer.base_read_only + ['total', 'total_usd']

    def validate(self, attrs):
        sale = attrs.get('sale')
        customer = attrs.get('customer') or getattr(self.instance, 'customer', None)
        if sale is not None and customer is not None and sale.customer_id != customer.pk:
            raise serializers.ValidationError({'sale': 'Sale belongs to a different customer.'})
        return attrs


class AccountAdjustSerializer(CreditDebitNoteFieldsMixin, DocumentSerializer):
    class Meta:
        model = AccountAdjust
        fields = DocumentSerializer.base_fields + ['account'] + CreditDebitNoteFieldsMixin.note_fields
        read_only_fields = DocumentSerializer.base_read_only + ['amount_usd']


class AccountEntrySerializer(PositiveAmountMixin, DocumentSerializer):
    entry_fields = [
        'account',
        'subject',
        'category',
        'amount',
        'amount_usd',
        'order_number',
        'check_number',
        'bank_ref_number',
    ]


class IncomeTransactionSerializer(AccountEntrySerializer):
    class Meta:
        model = IncomeTransaction
        fields = DocumentSerializer.base_fields + AccountEntrySerializer.entry_fields
        read_only_fields = DocumentSerializer.base_read_only + ['amount_usd']


class ExpenseTransactionSerializer(AccountEntrySerializer):
    class Meta:
        model = ExpenseTransaction
        fields = DocumentSerializer.base_fields + AccountEntrySerializer.entry_fields
        read_only_fields = DocumentSerializer.base_read_only + ['amount_usd']
