"""Expose public API views for the application."""

from .accounts import (
    AccountAdjustViewSet,
    AccountTransferViewSet,
    AccountViewSet,
    ExpenseTransactionViewSet,
    IncomeTransactionViewSet,
)
from .activities import ActivityViewSet
from .currencies import CurrencyViewSet
from .customers import (
    CustomerCreditDebitNoteViewSet,
    CustomerPaymentViewSet,
    CustomerReturnViewSet,
    CustomerViewSet,
    SaleViewSet,
)
from .inventory import InventoryViewSet, ItemViewSet, WarehouseViewSet
from .suppliers import (
    PurchaseReturnViewSet,
    PurchaseViewSet,
    SupplierCreditDebitNoteViewSet,
    SupplierPaymentViewSet,
    SupplierViewSet,
)

__all__ = [
    'AccountAdjustViewSet',
    'AccountTransferViewSet',
    'AccountViewSet',
    'ActivityViewSet',
    'CurrencyViewSet',
    'CustomerCreditDebitNoteViewSet',
    'CustomerPaymentViewSet',
    'CustomerReturnViewSet',
    'CustomerViewSet',
    'ExpenseTransactionViewSet',
    'IncomeTransactionViewSet',
    'InventoryViewSet',
    'ItemViewSet',
    'PurchaseReturnViewSet',
    'PurchaseViewSet',
    'SaleViewSet',
    'SupplierCreditDebitNoteViewSet',
    'SupplierPaymentViewSet',
    'SupplierViewSet',
    'WarehouseViewSet',
]
