"""
Management command to apply late penalties to past-due installments.
Normally run by the background scheduler once a day.

Usage:
    python manage.py calculate_penalties
    python manage.py calculate_penalties --date 2025-03-31 --account 4
    python manage.py calculate_penalties --dry-run

Can be added to crontab when the in-process scheduler is disabled:
    30 1 * * * cd /path/to/project && python manage.py calculate_penalties
"""

from datetime import datetime

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from installments.repositories import InstallmentRepository
from penalties.calculator import compute_penalty
from penalties.services import PenaltyService


class Command(BaseCommand):
    help = 'Recompute late penalties for every unpaid, past-due installment'

    def add_arguments(self, parser):
        parser.add_argument('--date', help='Evaluate as of this day (YYYY-MM-DD); defaults to today')
        parser.add_argument('--account', type=int, help='Only process this account')
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show the penalties that would be applied without saving them',
        )

    def handle(self, *args, **options):
        if options['date']:
            try:
                today = datetime.strptime(options['date'], '%Y-%m-%d').date()
            except ValueError:
                raise CommandError("--date must be formatted YYYY-MM-DD")
        else:
            today = timezone.localdate()
        account_id = options['account']

        self.stdout.write(f"\n{'='*60}")
        self.stdout.write(f"  PENALTY CALCULATION - {today.isoformat()}")
        self.stdout.write(f"{'='*60}\n")

        if options['dry_run']:
            self.stdout.write(self.style.WARNING("DRY RUN MODE - No penalties will be saved\n"))
            self._preview(today, account_id)
            return

        result = PenaltyService().calculate_penalties(today=today, account_id=account_id)

        self.stdout.write(f"  Processed: {result.processed}")
        self.stdout.write(self.style.SUCCESS(f"  Updated: {result.updated}"))
        self.stdout.write(f"  Skipped: {result.skipped}")
        for error in result.errors:
            self.stdout.write(self.style.ERROR(f"  ! {error}"))
        self.stdout.write(f"{'='*60}\n")

    def _preview(self, today, account_id):
        candidates = InstallmentRepository().penalty_candidates(today, account_id).select_related('lease')
        changes = 0
        for installment in candidates:
            computation = compute_penalty(installment, installment.lease, today)
            if computation.in_grace or computation.amount == installment.penalty_amount:
                continue
            changes += 1
            self.stdout.write(
                f"  ~ {installment} - {computation.days_late} days late: "
                f"{installment.penalty_amount} -> {computation.amount} {installment.currency}"
            )
        self.stdout.write(self.style.WARNING(f"\n  Would update: {changes}"))
