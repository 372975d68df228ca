from django.core.management.base import BaseCommand
from django.utils import timezone

from payments.ledger import release_held_earnings


class Command(BaseCommand):
    help = "Move booking credits whose hold period has ended from pending to available balance"

    def handle(self, *args, **options):
        now = timezone.now()
        released = release_held_earnings(now)

        if released:
            total = sum(release.amount for release in released)
            self.stdout.write(self.style.SUCCESS(f"Released {len(released)} credit(s), {total} in total"))
        else:
            self.stdout.write("No held earnings were due")
