"""
Management command to load the default reference data.

Existing entries are updated in place, so the command can be re-run
after editing the defaults.

Usage:
    python manage.py seed_code_lists
    python manage.py seed_code_lists --type PAYMENT_METHOD
"""

from django.core.management.base import BaseCommand, CommandError

from apps.core.services import upsert_code
from apps.core.services import code_lists


DEFAULT_CODES = {
    code_lists.ORDER_STATUS: [
        ('CREATED', 'Created'),
        ('PROCESSING', 'Processing'),
        ('SHIPPED', 'Shipped'),
        ('DELIVERED', 'Delivered'),
        ('CANCELLED', 'Cancelled'),
    ],
    code_lists.PAYMENT_STATUS: [
        ('PENDING', 'Pending'),
        ('PARTIAL', 'Partially paid'),
        ('PAID', 'Paid'),
        ('REFUNDED', 'Refunded'),
    ],
    code_lists.PAYMENT_METHOD: [
        ('CASH', 'Cash on delivery'),
        ('CARD', 'Bank card'),
        ('MOBILE_MONEY', 'Mobile money'),
        ('CREDIT', 'Installment credit'),
    ],
    code_lists.CREDIT_FREQUENCY: [
        ('MONTHLY', 'Monthly', '1'),
        ('BIWEEKLY', 'Every two weeks', '2'),
        ('WEEKLY', 'Weekly', '4'),
    ],
    code_lists.PLAN_STATUS: [
        ('ACTIVE', 'Active'),
        ('LATE', 'Late'),
        ('COMPLETED', 'Completed'),
        ('DEFAULTED', 'Defaulted'),
        ('CANCELLED', 'Cancelled'),
    ],
    code_lists.TRANSACTION_STATUS: [
        ('PENDING', 'Pending'),
        ('SUCCESS', 'Successful'),
        ('FAILED', 'Failed'),
        ('REFUNDED', 'Refunded'),
    ],
    code_lists.ADDRESS_TYPE: [
        ('HOME', 'Home'),
        ('WORK', 'Work'),
        ('BILLING', 'Billing'),
        ('SHIPPING', 'Shipping'),
    ],
    code_lists.CART_STATUS: [
        ('ACTIVE', 'Active'),
        ('CONVERTED', 'Converted to order'),
        ('EXPIRED', 'Expired'),
        ('ABANDONED', 'Abandoned'),
    ],
    code_lists.NOTIFICATION_TYPE: [
        ('ORDER', 'Order update'),
        ('PAYMENT', 'Payment'),
        ('CREDIT', 'Credit'),
        ('REMINDER', 'Payment reminder'),
        ('PROMOTION', 'Promotion'),
        ('SYSTEM', 'System'),
    ],
    code_lists.USER_ROLE: [
        ('CUSTOMER', 'Customer'),
        ('SELLER', 'Seller'),
        ('ADMIN', 'Administrator'),
    ],
}


class Command(BaseCommand):
    help = 'Load default code lists (statuses, payment methods, frequencies, ...)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--type',
            dest='code_type',
            help='Only seed this code list type',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be loaded without making changes',
        )

    def handle(self, *args, **options):
        code_type = options.get('code_type')
        dry_run = options['dry_run']

        if code_type and code_type not in DEFAULT_CODES:
            raise CommandError(f"Unknown code list type '{code_type}'")

        types = [code_type] if code_type else list(DEFAULT_CODES)
        count = 0

        for list_type in types:
            self.stdout.write(f'\n{list_type}:')
            for position, entry in enumerate(DEFAULT_CODES[list_type]):
                code, label = entry[0], entry[1]
                value = entry[2] if len(entry) > 2 else code
                self.stdout.write(f'  - {code} ({label})')
                if not dry_run:
                    upsert_code(
                        type=list_type,
                        code=code,
                        label=label,
                        value=value,
                        position=position,
                    )
                count += 1

        if dry_run:
            self.stdout.write(
                self.style.WARNING(f'\n--dry-run mode: {count} entries not saved.')
            )
            return

        self.stdout.write(
            self.style.SUCCESS(f'\n✓ Loaded {count} code list entries')
        )
