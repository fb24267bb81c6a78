from django.core.management.base import BaseCommand
from django.utils import timezone

from clinic.services.dashboard import CACHE_KEY, broadcast_refresh, refresh_summary


class Command(BaseCommand):
    help = "Rebuild the dashboard cache and broadcast a WebSocket refresh event."

    def handle(self, *args, **options):
        summary = refresh_summary()
        broadcast_refresh([CACHE_KEY])
        self.stdout.write(self.style.SUCCESS(
            f"Refreshed {CACHE_KEY} ({summary['students']} students, {summary['records']} records) at {timezone.now()}"
        ))
