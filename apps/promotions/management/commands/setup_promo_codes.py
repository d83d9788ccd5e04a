from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.utils import timezone
from apps.promotions.models import PromoCode


class Command(BaseCommand):
    help = 'Set up default promo codes for the storefront'

    def add_arguments(self, parser):
        parser.add_argument(
            '--days',
            type=int,
            default=90,
            help='Number of days the default codes stay valid',
        )

    def handle(self, *args, **options):
        valid_until = timezone.now() + timedelta(days=options['days'])
        promo_data = [
            {
                'code': 'WELCOME10',
                'description': '10% off your first cake, up to ₹100',
                'discount_type': 'percentage',
                'discount_value': Decimal('10'),
                'min_order_amount': Decimal('299'),
                'max_discount_amount': Decimal('100'),
            },
            {
                'code': 'FLAT50',
                'description': '₹50 off orders above ₹499',
                'discount_type': 'fixed',
                'discount_value': Decimal('50'),
                'min_order_amount': Decimal('499'),
            },
            {
                'code': 'BIRTHDAY15',
                'description': '15% off birthday cakes, up to ₹200',
                'discount_type': 'percentage',
                'discount_value': Decimal('15'),
                'min_order_amount': Decimal('599'),
                'max_discount_amount': Decimal('200'),
                'usage_limit': 500,
            },
        ]

        created_count = 0
        updated_count = 0

        for data in promo_data:
            data['valid_until'] = valid_until
            promo, created = PromoCode.objects.update_or_create(
                code=data['code'],
                defaults=data
            )

            if created:
                created_count += 1
                self.stdout.write(self.style.SUCCESS(f'Created promo code: {promo.code}'))
            else:
                updated_count += 1
                self.stdout.write(self.style.WARNING(f'Updated promo code: {promo.code}'))

        self.stdout.write(
            self.style.SUCCESS(
                f'Promo code setup complete. Created: {created_count}, Updated: {updated_count}'
            )
        )
