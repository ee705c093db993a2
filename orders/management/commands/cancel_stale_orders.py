from django.conf import settings
from django.core.management.base import BaseCommand
from orders.services import cancel_stale_pending_orders


class Command(BaseCommand):
    help = "Cancel PENDING orders older than PENDING_ORDER_TTL_HOURS (operator-run, never scheduled)"

    def add_arguments(self, parser):
        parser.add_argument("--hours", type=int, default=None, help="Override PENDING_ORDER_TTL_HOURS")

    def handle(self, *args, **options):
        hours = options["hours"] if options["hours"] is not None else settings.PENDING_ORDER_TTL_HOURS
        count = cancel_stale_pending_orders(older_than_hours=hours)
        self.stdout.write(self.style.SUCCESS(f"Cancelled {count} stale pending orders."))
