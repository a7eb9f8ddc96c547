"""Management command to run the daily inventory aging check."""

from django.core.management.base import BaseCommand

from django_fulfillment.services import run_daily_sweep


class Command(BaseCommand):
    help = 'Warn about vendor products not ordered recently and prune expired ones'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show aging products without pruning the inventory or emailing the admin'
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        result = run_daily_sweep(dry_run=dry_run)

        if result is None:
            self.stdout.write('Inventory check disabled, nothing tracked or sweep failed')
            return

        for product_id, days in sorted(result.alerts.items()):
            self.stdout.write(f'  - {product_id}: last ordered {days} days ago')

        if dry_run:
            self.stdout.write(
                f'Would alert on {len(result.alerts)} products '
                f'and remove {len(result.expired)} expired products'
            )
        else:
            self.stdout.write(
                self.style.SUCCESS(
                    f'Alerted on {len(result.alerts)} products, '
                    f'removed {len(result.expired)} expired products'
                )
            )
