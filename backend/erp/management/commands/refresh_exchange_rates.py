from django.core.management.base import BaseCommand, CommandError

from erp.exchange_rates import ExchangeRateUnavailable, refresh_currency_rate
from erp.models import Currency


class Command(BaseCommand):
    help = 'Fetch current exchange rates and store them as the active currency rates.'

    def add_arguments(self, parser):
        parser.add_argument('codes', nargs='*', help='Currency codes to refresh (default: all).')

    def handle(self, *args, **options):
        currencies = Currency.objects.all()
        if options['codes']:
            currencies = currencies.filter(code__in=[code.upper() for code in options['codes']])

        failures = []
        for currency in currencies:
            try:
                rate = refresh_currency_rate(currency)
            except ExchangeRateUnavailable as exc:
                failures.append(currency.code)
                self.stderr.write(self.style.WARNING(f'{currency.code}: {exc}'))
                continue
            self.stdout.write(self.style.SUCCESS(f'{currency.code} rate set to {rate.rate}'))

        if failures:
            raise CommandError(f'Could not refresh: {", ".join(failures)}')
