"""
Management command to build installment schedules.

Usage:
    python manage.py generate_installments --lease 12
    python manage.py generate_installments --account 4
    python manage.py generate_installments --extend

Without --extend, active leases that have no installment yet get their full
schedule. With --extend, open-ended leases get the periods missing up to the
configured horizon.
"""

from django.core.management.base import BaseCommand, CommandError

from core.constants import LeaseStatus
from core.exceptions import BaseApplicationException
from installments.services import InstallmentService
from leases.models import Lease


class Command(BaseCommand):
    help = 'Generate (or extend) installment schedules for leases'

    def add_arguments(self, parser):
        parser.add_argument('--lease', type=int, help='Only process this lease')
        parser.add_argument('--account', type=int, help='Only process leases of this account')
        parser.add_argument(
            '--extend',
            action='store_true',
            help='Add the missing periods of open-ended leases instead of generating full schedules',
        )

    def handle(self, *args, **options):
        service = InstallmentService()
        leases = Lease.objects.filter(status=LeaseStatus.ACTIVE)
        if options['account']:
            leases = leases.filter(account_id=options['account'])
        if options['lease']:
            leases = Lease.objects.filter(id=options['lease'])
            if not leases.exists():
                raise CommandError(f"Lease {options['lease']} not found")
        elif options['extend']:
            leases = leases.filter(end_date__isnull=True)
        else:
            leases = leases.filter(installments__isnull=True)

        created_count = 0
        failed_count = 0
        for lease in leases.distinct().order_by('id'):
            try:
                if options['extend']:
                    created = service.extend_installments(lease.account_id, lease.id)
                else:
                    created = service.generate_installments(lease.account_id, lease.id)
            except BaseApplicationException as e:
                failed_count += 1
                self.stdout.write(self.style.ERROR(f"  ! {lease.lease_number}: {e.message}"))
                continue
            created_count += len(created)
            if created:
                self.stdout.write(self.style.SUCCESS(f"  + {lease.lease_number}: {len(created)} installments"))

        self.stdout.write(f"\n  Created: {created_count}  Failed: {failed_count}")
