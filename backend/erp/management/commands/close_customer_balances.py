from django.core.management.base import BaseCommand

from erp.models import Customer
from erp.services.customer_balance import end_of_month_calculation


class Command(BaseCommand):
    help = 'Close every customer month before the current one that is still open.'

    def add_arguments(self, parser):
        parser.add_argument('--customer', type=int, help='Only close this customer id.')

    def handle(self, *args, **options):
        customers = Customer.objects.all().order_by('id')
        if options.get('customer'):
            customers = customers.filter(pk=options['customer'])

        closed = 0
        for customer_id in customers.values_list('id', flat=True).iterator():
            row = end_of_month_calculation(customer_id)
            if row is None:
                continue
            closed += 1
            self.stdout.write(
                f'Customer {customer_id} closed {row.year}-{row.month:02d} at {row.closing_balance}'
            )
        self.stdout.write(self.style.SUCCESS(f'Closed {closed} customer balance(s).'))
