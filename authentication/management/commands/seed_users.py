import logging
import os

from django.core.management.base import BaseCommand
from django.db.models import Q

from authentication.models import CustomUser

logger = logging.getLogger(__name__)

SEED_ACCOUNTS = (
    ('ADMIN_SEED', CustomUser.ROLE_OWNER),
    ('KITCHEN_SEED', CustomUser.ROLE_KITCHEN),
)


class Command(BaseCommand):
    help = "Create the owner and kitchen accounts described by ADMIN_SEED_* / KITCHEN_SEED_* if they are missing"

    def handle(self, *args, **options):
        for prefix, role in SEED_ACCOUNTS:
            username = os.getenv(f'{prefix}_USERNAME', '').strip()
            email = os.getenv(f'{prefix}_EMAIL', '').strip().lower()
            password = os.getenv(f'{prefix}_PASSWORD', '')

            if not username or not email or not password:
                self.stdout.write(f"{prefix}: not configured, skipped")
                continue

            if CustomUser.objects.filter(Q(username=username) | Q(email=email)).exists():
                self.stdout.write(f"{prefix}: {username} already exists")
                continue

            CustomUser.objects.create_user(username=username, email=email, password=password, role=role)
            logger.info("Seeded %s user %s", role, username)
            self.stdout.write(self.style.SUCCESS(f"{prefix}: created {role} {username}"))
