from django.core.management.base import BaseCommand
from apps.common.exceptions import NotFound
from apps.orders.services import OrderLifecycleCoordinator


class Command(BaseCommand):
    help = 'Retry failed reward side effects (cashback, referral and milestone bonuses, refunds)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--order-id',
            type=int,
            help='Replay a specific order ID only',
        )

    def handle(self, *args, **options):
        coordinator = OrderLifecycleCoordinator()
        order_id = options.get('order_id')

        if order_id:
            order_ids = [order_id]
        else:
            order_ids = sorted(set(coordinator.open_failures().values_list('order_id', flat=True)))
            self.stdout.write(f'Replaying {len(order_ids)} order(s) with open reward failures...')

        still_failing = 0
        for current_id in order_ids:
            try:
                report = coordinator.replay_side_effects(current_id)
            except NotFound:
                self.stdout.write(self.style.ERROR(f'Order with ID {current_id} not found'))
                continue

            for failure in report.failures:
                still_failing += 1
                self.stdout.write(
                    self.style.WARNING(f'Order {current_id}: {failure.step} failed again ({failure.error})')
                )

        self.stdout.write(
            self.style.SUCCESS(f'Replay complete. {still_failing} step(s) still failing')
        )
