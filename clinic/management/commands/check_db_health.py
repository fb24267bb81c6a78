from django.apps import apps
from django.core.management.base import BaseCommand, CommandError
from django.db import DatabaseError

from clinic.views.health import database_status


class Command(BaseCommand):
    help = "Check the database connection and print row counts for the clinic tables."

    def handle(self, *args, **options):
        db = database_status()
        if not db["connected"]:
            raise CommandError(f"Database unreachable: {db['message']}")
        self.stdout.write(self.style.SUCCESS(db["message"]))
        for model in apps.get_app_config("clinic").get_models():
            table = model._meta.db_table
            try:
                count = model.objects.count()
            except DatabaseError as e:
                self.stdout.write(self.style.ERROR(f"{table}: {e}"))
                continue
            self.stdout.write(f"{table}: {count}")
