"""Views for managing currencies and their rates."""

from django.conf import settings
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..exchange_rates import ExchangeRateUnavailable, refresh_currency_rate
from ..models import Currency
from ..serializers import CurrencyRateSerializer, CurrencySerializer


class CurrencyViewSet(viewsets.ModelViewSet):
    """CRUD operations for :class:`Currency` objects."""

    serializer_class = CurrencySerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return Currency.objects.all().order_by('code')

    def perform_destroy(self, instance):
        if instance.code == settings.ERP_BASE_CURRENCY:
            raise ValidationError('The base currency cannot be deleted.')
        super().perform_destroy(instance)

    @action(detail=True, methods=['get', 'post'])
    def rates(self, request, pk=None):
        currency = self.get_object()
        if request.method == 'GET':
            serializer = CurrencyRateSerializer(currency.rates.order_by('-effective_date', '-id'), many=True)
            return Response(serializer.data)
        serializer = CurrencyRateSerializer(data={**request.data, 'currency': currency.pk})
        serializer.is_valid(raise_exception=True)
        rate = serializer.save()
        return Response(CurrencyRateSerializer(rate).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def refresh_rate(self, request, pk=None):
        currency = self.get_object()
        try:
            rate = refresh_currency_rate(currency)
        except ExchangeRateUnavailable as exc:
            return Response({'detail': str(exc)}, status=status.HTTP_502_BAD_GATEWAY)
        return Response(CurrencyRateSerializer(rate).data)
