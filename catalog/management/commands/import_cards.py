"""Import or refresh the card catalog from a CSV export.

Expected columns: id, sport, title, player, price, image, image2,
greatDeal, auto, stock. Prices are in major units. Re-running is safe;
cards are matched on their canonical id.
"""

import csv
from pathlib import Path

from catalog.services import upsert_products
from django.core.management.base import BaseCommand, CommandError


class Command(BaseCommand):
    help = "Import cards from a CSV file (upsert by canonical id)"

    def add_arguments(self, parser):
        parser.add_argument("path", help="Path to the CSV file")
        parser.add_argument(
            "--keep-stock",
            action="store_true",
            help="Do not change stock of cards that already exist",
        )

    def handle(self, *args, **options):
        path = Path(options["path"])
        if not path.exists():
            raise CommandError(f"File not found: {path}")

        with path.open(newline="", encoding="utf-8-sig") as fh:
            rows = list(csv.DictReader(fh))

        result = upsert_products(rows, keep_stock=options["keep_stock"])
        self.stdout.write(
            self.style.SUCCESS(
                f"Imported cards: {result.created} created, {result.updated} updated, {result.skipped} skipped."
            )
        )
