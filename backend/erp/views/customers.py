"""Customer related API views."""

from django.db import transaction
from django.db.models import ProtectedError
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..activity_logger import log_activity
from ..models import Customer, CustomerCreditDebitNote, CustomerPayment, CustomerReturn, Sale
from ..serializers import (
    CustomerBalanceMonthlySerializer,
    CustomerCreditDebitNoteSerializer,
    CustomerPaymentSerializer,
    CustomerReturnSerializer,
    CustomerSerializer,
    SaleSerializer,
)
from ..services import customer_balance
from .documents import DocumentViewSet


class CustomerViewSet(viewsets.ModelViewSet):
    """CRUD operations for customers."""

    serializer_class = CustomerSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [SearchFilter]
    search_fields = ['name', 'email', 'phone']

    def get_queryset(self):
        return Customer.objects.all().order_by('-created_at')

    def perform_create(self, serializer):
        instance = serializer.save()
        log_activity(self.request.user, 'created', instance)

    def perform_update(self, serializer):
        instance = serializer.save()
        log_activity(self.request.user, 'updated', instance)

    def destroy(self, request, *args, **kwargs):
        customer = self.get_object()
        try:
            with transaction.atomic():
                log_activity(request.user, 'deleted', customer)
                customer.delete()
        except ProtectedError:
            return Response(
                {'detail': 'Cannot delete a customer that has documents.'},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['get'])
    def balance(self, request, pk=None):
        customer = self.get_object()
        months = customer.monthly_balances.order_by('-year', '-month')
        return Response({
            'customer': customer.pk,
            'current_balance': customer.current_balance,
            'balance_status': customer.balance_status,
            'months': CustomerBalanceMonthlySerializer(months, many=True).data,
        })

    @action(detail=True, methods=['post'], url_path='close-month')
    def close_month(self, request, pk=None):
        customer = self.get_object()
        row = customer_balance.end_of_month_calculation(customer.pk)
        if row is None:
            return Response({'detail': 'No past month left to close.'}, status=status.HTTP_400_BAD_REQUEST)
        return Response(CustomerBalanceMonthlySerializer(row).data)


class CustomerPaymentViewSet(DocumentViewSet):
    """Handle payments scoped to a customer."""

    model = CustomerPayment
    serializer_class = CustomerPaymentSerializer
    parent_lookup = ('customer', 'customer_pk')


class CustomerCreditDebitNoteViewSet(DocumentViewSet):
    model = CustomerCreditDebitNote
    serializer_class = CustomerCreditDebitNoteSerializer


class SaleViewSet(DocumentViewSet):
    model = Sale
    serializer_class = SaleSerializer

    def get_queryset(self):
        return super().get_queryset().prefetch_related('items')


class CustomerReturnViewSet(DocumentViewSet):
    model = CustomerReturn
    serializer_class = CustomerReturnSerializer

    def get_queryset(self):
        return super().get_queryset().prefetch_related('items')
