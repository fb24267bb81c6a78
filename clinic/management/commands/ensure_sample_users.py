from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand

from clinic.models import PatientProfile, User

SAMPLE_USERS = [
    # (email, first name, last name, role)
    ("admin@example.com", "Clinic", "Admin", User.ROLE_ADMIN),
    ("jane.smith@example.com", "Jane", "Smith", User.ROLE_DOCTOR),
    ("john.doe@example.com", "John", "Doe", User.ROLE_STUDENT),
    ("alice.johnson@example.com", "Alice", "Johnson", User.ROLE_STAFF),
]


class Command(BaseCommand):
    help = "Ensure the sample accounts exist with a known password (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="password123")

    def handle(self, *args, **opts):
        password = make_password(opts["password"])
        for n, (email, first, last, role) in enumerate(SAMPLE_USERS, start=1):
            u, created = User.objects.get_or_create(
                username=email,
                defaults={
                    "email": email, "first_name": first, "last_name": last, "role": role,
                    "password": password, "is_active": True,
                },
            )
            if not created:
                u.password = password
                u.role = role
                u.is_active = True
                u.save(update_fields=["password", "role", "is_active"])
            if role == User.ROLE_STUDENT:
                PatientProfile.objects.get_or_create(user=u, defaults={"student_id": f"S-{n:04d}"})
            elif role in (User.ROLE_DOCTOR, User.ROLE_STAFF) and not u.staff_id:
                u.staff_id = f"EMP-{n:04d}"
                u.save(update_fields=["staff_id"])
            self.stdout.write(self.style.SUCCESS(f"ok: {email} ({role})"))
        self.stdout.write(self.style.SUCCESS("All sample users ensured."))
