"""Ledger accounts and the documents that post to accounts only."""

from django.db import transaction
from django.db.models import ProtectedError
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..activity_logger import log_activity
from ..models import Account, AccountAdjust, AccountTransfer, ExpenseTransaction, IncomeTransaction
from ..serializers import (
    AccountAdjustSerializer,
    AccountSerializer,
    AccountTransferSerializer,
    ExpenseTransactionSerializer,
    IncomeTransactionSerializer,
)
from .documents import DocumentViewSet


class AccountViewSet(viewsets.ModelViewSet):
    """CRUD operations for ledger accounts; balances are read-only."""

    serializer_class = AccountSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return Account.objects.all().order_by('name')

    def perform_create(self, serializer):
        instance = serializer.save()
        log_activity(self.request.user, 'created', instance)

    def perform_update(self, serializer):
        instance = serializer.save()
        log_activity(self.request.user, 'updated', instance)

    def destroy(self, request, *args, **kwargs):
        account = self.get_object()
        if account.current_balance:
            return Response(
                {'detail': 'Cannot delete an account with a non-zero balance.'},
                status=status.HTTP_400_BAD_REQUEST,
            )
        try:
            return super().destroy(request, *args, **kwargs)
        except ProtectedError:
            return Response(
                {'detail': 'Cannot delete an account that has documents.'},
                status=status.HTTP_400_BAD_REQUEST,
            )

    def perform_destroy(self, instance):
        with transaction.atomic():
            log_activity(self.request.user, 'deleted', instance)
            instance.delete()

    @action(detail=True, methods=['get'])
    def transfers(self, request, pk=None):
        account = self.get_object()
        queryset = AccountTransfer.objects.filter(from_account=account) | AccountTransfer.objects.filter(
            to_account=account
        )
        serializer = AccountTransferSerializer(queryset.order_by('-date', '-id'), many=True)
        return Response(serializer.data)


class AccountTransferViewSet(DocumentViewSet):
    model = AccountTransfer
    serializer_class = AccountTransferSerializer


class AccountAdjustViewSet(DocumentViewSet):
    model = AccountAdjust
    serializer_class = AccountAdjustSerializer


class IncomeTransactionViewSet(DocumentViewSet):
    model = IncomeTransaction
    serializer_class = IncomeTransactionSerializer


class ExpenseTransactionViewSet(DocumentViewSet):
    model = ExpenseTransaction
    serializer_class = ExpenseTransactionSerializer
