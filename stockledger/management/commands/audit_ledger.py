"""
Management command to verify the ledger against stored quantities.

For every product checks that:
- each entry is balanced (after = before + delta)
- entries chain (each before = previous after)
- the last entry's after equals Product.quantity_in_stock

Usage:
    python manage.py audit_ledger
    python manage.py audit_ledger --product 42
"""

import logging

from django.core.management.base import BaseCommand, CommandError

from stockledger.models import LedgerEntry, Product

logger = logging.getLogger('stockledger')


class Command(BaseCommand):
    """Ledger consistency audit command."""

    help = 'Verifies ledger entries against current product quantities'

    def add_arguments(self, parser):
        parser.add_argument(
            '--product',
            type=int,
            help='Only audit this product id',
        )

    def handle(self, *args, **options):
        products = Product.objects.order_by('pk')
        if options['product'] is not None:
            products = products.filter(pk=options['product'])
            if not products.exists():
                raise CommandError(f"Product {options['product']} not found")

        problems = []
        for product in products:
            problems.extend(self.audit_product(product))

        for problem in problems:
            logger.warning("ledger.audit.mismatch", extra={"problem": problem})
            self.stderr.write(problem)

        if problems:
            raise CommandError(f'{len(problems)} ledger inconsistency(ies) found')

        self.stdout.write(self.style.SUCCESS(f'{products.count()} product(s) consistent'))

    def audit_product(self, product):
        problems = []
        previous = None
        for entry in LedgerEntry.objects.for_product(product.pk).order_by('created_at', 'id'):
            if entry.quantity_after != entry.quantity_before + entry.quantity_delta:
                problems.append(f'{product}: entry {entry.pk} is unbalanced')
            if previous is not None and entry.quantity_before != previous.quantity_after:
                problems.append(
                    f'{product}: entry {entry.pk} starts at {entry.quantity_before}, '
                    f'previous ended at {previous.quantity_after}'
                )
            previous = entry

        if previous is not None and previous.quantity_after != product.quantity_in_stock:
            problems.append(
                f'{product}: ledger ends at {previous.quantity_after}, '
                f'stored quantity is {product.quantity_in_stock}'
            )
        return problems
