"""URL routing for the ledger API."""

from django.urls import include, path
from rest_framework.permissions import AllowAny
from rest_framework.routers import DefaultRouter
from rest_framework_nested import routers
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from .views.accounts import (
    AccountAdjustViewSet,
    AccountTransferViewSet,
    AccountViewSet,
    ExpenseTransactionViewSet,
    IncomeTransactionViewSet,
)
from .views.activities import ActivityViewSet
from .views.currencies import CurrencyViewSet
from .views.customers import (
    CustomerCreditDebitNoteViewSet,
    CustomerPaymentViewSet,
    CustomerReturnViewSet,
    CustomerViewSet,
    SaleViewSet,
)
from .views.inventory import InventoryViewSet, ItemViewSet, WarehouseViewSet
from .views.suppliers import (
    PurchaseReturnViewSet,
    PurchaseViewSet,
    SupplierCreditDebitNoteViewSet,
    SupplierPaymentViewSet,
    SupplierViewSet,
)

router = DefaultRouter()
router.register(r'activities', ActivityViewSet, basename='activity')
router.register(r'currencies', CurrencyViewSet, basename='currency')
router.register(r'accounts', AccountViewSet, basename='account')
router.register(r'account-transfers', AccountTransferViewSet, basename='account-transfer')
router.register(r'account-adjusts', AccountAdjustViewSet, basename='account-adjust')
router.register(r'incomes', IncomeTransactionViewSet, basename='income')
router.register(r'expenses', ExpenseTransactionViewSet, basename='expense')
router.register(r'customers', CustomerViewSet, basename='customer')
router.register(r'customer-notes', CustomerCreditDebitNoteViewSet, basename='customer-note')
router.register(r'sales', SaleViewSet, basename='sale')
router.register(r'customer-returns', CustomerReturnViewSet, basename='customer-return')
router.register(r'suppliers', SupplierViewSet, basename='supplier')
router.register(r'supplier-notes', SupplierCreditDebitNoteViewSet, basename='supplier-note')
router.register(r'purchases', PurchaseViewSet, basename='purchase')
router.register(r'purchase-returns', PurchaseReturnViewSet, basename='purchase-return')
router.register(r'warehouses', WarehouseViewSet, basename='warehouse')
router.register(r'items', ItemViewSet, basename='item')
router.register(r'inventory', InventoryViewSet, basename='inventory')

customers_router = routers.NestedSimpleRouter(router, r'customers', lookup='customer')
customers_router.register(r'payments', CustomerPaymentViewSet, basename='customer-payments')

suppliers_router = routers.NestedSimpleRouter(router, r'suppliers', lookup='supplier')
suppliers_router.register(r'payments', SupplierPaymentViewSet, basename='supplier-payments')

urlpatterns = [
    path(
        'token/',
        TokenObtainPairView.as_view(permission_classes=[AllowAny]),
        name='get_token',
    ),
    path(
        'token/refresh/',
        TokenRefreshView.as_view(permission_classes=[AllowAny]),
        name='refresh_token',
    ),
    path('', include(router.urls)),
    path('', include(customers_router.urls)),
    path('', include(suppliers_router.urls)),
]
