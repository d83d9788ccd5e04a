from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from apps.wallet.services import WalletService


class Command(BaseCommand):
    help = 'Recompute cached wallet balances from the wallet ledger'

    def add_arguments(self, parser):
        parser.add_argument(
            '--user-id',
            type=int,
            help='Reconcile a specific user ID only',
        )

    def handle(self, *args, **options):
        User = get_user_model()
        user_id = options.get('user_id')

        if user_id:
            customers = User.objects.filter(id=user_id)
            if not customers.exists():
                self.stdout.write(self.style.ERROR(f'User with ID {user_id} not found'))
                return
        else:
            self.stdout.write('Reconciling wallet balances for all users...')
            customers = User.objects.all()

        adjusted = 0
        for customer in customers.iterator():
            result = WalletService.reconcile_balance(customer)
            if result['adjusted']:
                adjusted += 1
                self.stdout.write(
                    self.style.WARNING(
                        f"{customer.username}: ₹{result['cached_balance']} -> ₹{result['ledger_balance']}"
                    )
                )

        self.stdout.write(
            self.style.SUCCESS(f'Wallet reconciliation complete. Adjusted {adjusted} balance(s)')
        )
