"""
Management command to rebuild Party Summaries and product bucket caches.

Usage:
    python manage.py rebuild_summaries
    python manage.py rebuild_summaries --dry-run
"""

from django.core.management.base import BaseCommand

from ledgerman import books
from ledgerman.models import Party, Product


class Command(BaseCommand):
    """Rebuild drifted caches from the ledgers."""

    help = 'Rebuild party summaries from the ledger and product buckets from stock moves'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Report drift without correcting it'
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']

        parties = 0
        for party in Party.objects.order_by('pk').iterator():
            drift = books.rebuild_summary(party, dry_run=dry_run)
            if drift:
                parties += 1
                fields = ', '.join(f'{f}: {old} -> {new}' for f, (old, new) in drift.items())
                self.stdout.write(f'{party.name}: {fields}')

        products = 0
        for product in Product.objects.order_by('pk').iterator():
            drift = product.recalculate(dry_run=dry_run)
            if drift:
                products += 1
                self.stdout.write(f'{product.model_name}: {", ".join(drift)}')

        verb = 'would be corrected' if dry_run else 'corrected'
        self.stdout.write(
            self.style.SUCCESS(f'{parties} summary(ies), {products} product(s) {verb}')
        )
