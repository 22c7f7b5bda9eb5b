# backend/erp/admin.py

from django.contrib import admin
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
    ExpenseTransaction,
    IncomeTransaction,
    Inventory,
    Item,
    ItemPrice,
    ItemPriceHistory,
    Purchase,
    PurchaseReturn,
    Sale,
    Setting,
    Supplier,
    SupplierCreditDebitNote,
    SupplierPayment,
    Warehouse,
)

admin.site.register(Setting)
admin.site.register(Currency)
admin.site.register(CurrencyRate)
admin.site.register(Activity)
admin.site.register(Account)
admin.site.register(Supplier)
admin.site.register(Customer)
admin.site.register(CustomerBalanceMonthly)
admin.site.register(Warehouse)
admin.site.register(Item)
admin.site.register(Inventory)
admin.site.register(ItemPrice)
admin.site.register(ItemPriceHistory)


@admin.register(
    CustomerPayment,
    SupplierPayment,
    Purchase,
    PurchaseReturn,
    CustomerCreditDebitNote,
    SupplierCreditDebitNote,
    AccountTransfer,
    AccountAdjust,
    IncomeTransaction,
    ExpenseTransaction,
    Sale,
    CustomerReturn,
)
class DocumentAdmin(admin.ModelAdmin):
    """Read-only listing; documents change through the API so balances stay posted."""

    list_display = ('__str__', 'date', 'created_by', 'deleted_at')
    readonly_fields = ('prefix', 'code', 'created_at', 'updated_at', 'deleted_at')

    def get_queryset(self, request):
        return self.model.all_objects.all()

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
