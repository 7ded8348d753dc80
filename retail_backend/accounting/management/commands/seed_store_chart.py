# accounting/management/commands/seed_store_chart.py

from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from accounting.services.chart_seeding import seed_default_chart
from store.models import Store


class Command(BaseCommand):
    help = "Seed the default retail chart of accounts for one store (or all stores)"

    def add_arguments(self, parser):
        parser.add_argument(
            "--store",
            help="Store id or code. Omit to seed every active store.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        ref = (options.get("store") or "").strip()

        if ref:
            store = Store.objects.filter(code=ref).first()
            if store is None:
                try:
                    store = Store.objects.filter(id=ref).first()
                except (ValueError, ValidationError) as exc:
                    raise CommandError(f"Invalid store reference: {ref}") from exc
            if store is None:
                raise CommandError(f"Store not found: {ref}")
            stores = [store]
        else:
            stores = list(Store.objects.filter(is_active=True))

        if not stores:
            self.stdout.write(self.style.WARNING("No stores to seed."))
            return

        for store in stores:
            created, updated = seed_default_chart(store)
            self.stdout.write(
                self.style.SUCCESS(
                    f"Chart seeded for {store} ({created} new accounts, {updated} updated)."
                )
            )
