from datetime import datetime

from django.core.management.base import BaseCommand, CommandError

from apps.credit.services import accrue_late_penalties


class Command(BaseCommand):
    help = 'Accrue late penalties on overdue installments and flag defaulted plans'

    def add_arguments(self, parser):
        parser.add_argument(
            '--date',
            dest='accrual_date',
            help='Accrual date as YYYY-MM-DD (default: today)',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would change without saving',
        )

    def handle(self, *args, **options):
        raw_date = options.get('accrual_date')
        dry_run = options['dry_run']

        today = None
        if raw_date:
            try:
                today = datetime.strptime(raw_date, '%Y-%m-%d').date()
            except ValueError:
                raise CommandError(f"Invalid date '{raw_date}', expected YYYY-MM-DD")

        summary = accrue_late_penalties(today=today, dry_run=dry_run)

        self.stdout.write(f"Accrual date: {summary['date']}")
        self.stdout.write(f"  Plans checked:       {summary['plans_checked']}")
        self.stdout.write(f"  Schedules penalized: {summary['schedules_penalized']}")
        self.stdout.write(f"  Penalty added:       {summary['penalty_added']}")
        self.stdout.write(f"  Plans late:          {summary['plans_late']}")
        self.stdout.write(f"  Plans defaulted:     {summary['plans_defaulted']}")

        if dry_run:
            self.stdout.write(self.style.WARNING('\n--dry-run mode: no changes saved.'))
            return

        self.stdout.write(self.style.SUCCESS('\n✓ Late penalties accrued'))
