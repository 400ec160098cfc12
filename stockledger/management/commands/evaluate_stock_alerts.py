"""
Management command to re-evaluate low-stock alerts.

Usage:
    python manage.py evaluate_stock_alerts
    python manage.py evaluate_stock_alerts --product 42
    python manage.py evaluate_stock_alerts --dry-run
"""

from django.core.management.base import BaseCommand, CommandError

from stockledger.models import Product
from stockledger.services.alerts import AlertEngine


class Command(BaseCommand):
    """Re-evaluate stock alerts command."""

    help = 'Opens or clears low-stock alerts so they match current quantities'

    def add_arguments(self, parser):
        parser.add_argument(
            '--product',
            type=int,
            help='Only evaluate this product id',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show which products would change without writing',
        )

    def handle(self, *args, **options):
        products = Product.objects.order_by('pk')
        if options['product'] is not None:
            products = products.filter(pk=options['product'])
            if not products.exists():
                raise CommandError(f"Product {options['product']} not found")

        changed = [p for p in products if AlertEngine.would_change(p)]

        if options['dry_run']:
            for product in changed:
                state = 'open' if product.is_low_stock else 'clear'
                self.stdout.write(f'{product}: would {state} alert')
            self.stdout.write(f'{len(changed)} product(s) would change')
            return

        for product in changed:
            AlertEngine.evaluate(product.pk)

        self.stdout.write(
            self.style.SUCCESS(f'{len(changed)} product(s) updated')
        )
