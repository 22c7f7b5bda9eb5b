"""Supplier related API views."""

from django.db import transaction
from django.db.models import ProtectedError
from rest_framework import status, viewsets
from rest_framework.filters import SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..activity_logger import log_activity
from ..models import Purchase, PurchaseReturn, Supplier, SupplierCreditDebitNote, SupplierPayment
from ..serializers import (
    PurchaseReturnSerializer,
    PurchaseSerializer,
    SupplierCreditDebitNoteSerializer,
    SupplierPaymentSerializer,
    SupplierSerializer,
)
from .documents import DocumentViewSet


class SupplierViewSet(viewsets.ModelViewSet):
    serializer_class = SupplierSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [SearchFilter]
    search_fields = ['name', 'email', 'phone']

    def get_queryset(self):
        return Supplier.objects.all().order_by('-created_at')

    def perform_create(self, serializer):
        instance = serializer.save()
        log_activity(self.request.user, 'created', instance)

    def perform_update(self, serializer):
        instance = serializer.save()
        log_activity(self.request.user, 'updated', instance)

    def destroy(self, request, *args, **kwargs):
        supplier = self.get_object()
        try:
            with transaction.atomic():
                log_activity(request.user, 'deleted', supplier)
                supplier.delete()
        except ProtectedError:
            return Response(
                {'detail': 'Cannot delete a supplier that has documents.'},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return Response(status=status.HTTP_204_NO_CONTENT)


class SupplierPaymentViewSet(DocumentViewSet):
    """Handle payments scoped to a supplier."""

    model = SupplierPayment
    serializer_class = SupplierPaymentSerializer
    parent_lookup = ('supplier', 'supplier_pk')


class PurchaseViewSet(DocumentViewSet):
    model = Purchase
    serializer_class = PurchaseSerializer

    def get_queryset(self):
        return super().get_queryset().prefetch_related('items')


class PurchaseReturnViewSet(DocumentViewSet):
    model = PurchaseReturn
    serializer_class = PurchaseReturnSerializer

    def get_queryset(self):
        return super().get_queryset().prefetch_related('items')


class SupplierCreditDebitNoteViewSet(DocumentViewSet):
    model = SupplierCreditDebitNote
    serializer_class = SupplierCreditDebitNoteSerializer
