"""
Notification senders injected into the reward services.
"""
import logging
from decimal import Decimal

logger = logging.getLogger(__name__)

WALLET_MESSAGES = {
    'welcome_bonus': ('wallet_credit', 'Welcome Bonus Credited!',
                      '₹{amount} welcome bonus has been added to your wallet.'),
    'order_cashback': ('wallet_credit', 'Cashback Earned!',
                       'You earned ₹{amount} cashback from your order.'),
    'referral_bonus': ('referral_bonus', 'Referral Bonus Credited!',
                       '₹{amount} referral bonus has been added to your wallet.'),
    'order_redemption': ('wallet_debit', 'Wallet Used for Order',
                         '₹{amount} was used from your wallet for order.'),
    'order_refund': ('wallet_credit', 'Refund Credited!',
                     '₹{amount} refund has been added to your wallet.'),
}


class NotificationSender:
    """Interface: fire-and-forget customer notifications"""

    def notify(self, customer, kind, title, message, payload=None):
        raise NotImplementedError

    def wallet_event(self, customer, category, amount, description, order=None):
        kind, title, template = WALLET_MESSAGES.get(
            category, ('wallet_credit', 'Wallet Updated', '₹{amount} wallet update.')
        )
        amount = Decimal(str(amount)).quantize(Decimal('0.01'))
        payload = {'category': category, 'amount': str(amount), 'description': description}
        if order is not None:
            payload['order_id'] = order.pk
        return self.notify(customer, kind, title, template.format(amount=amount), payload)

    def milestone_achieved(self, customer, milestone):
        return self.notify(
            customer,
            'milestone',
            f'Milestone Achieved: {milestone.name}!',
            f"Congratulations! You've earned ₹{milestone.bonus:.2f} bonus for reaching "
            f"{milestone.name} milestone.",
            {'milestone_name': milestone.name, 'bonus_amount': str(milestone.bonus)},
        )

    def scratch_card_revealed(self, customer, card):
        return self.notify(
            customer,
            'scratch_card',
            'Scratch Card Revealed!',
            f'You won ₹{card.amount} cashback! It will be credited after order delivery.',
            {'amount': card.amount, 'order_number': card.order.order_number},
        )


class DatabaseNotificationSender(NotificationSender):
    """Stores notifications as CustomerNotification rows"""

    def notify(self, customer, kind, title, message, payload=None):
        from .models import CustomerNotification
        notification = CustomerNotification.objects.create(
            customer=customer,
            kind=kind,
            title=title,
            message=message,
            payload=payload or {},
        )
        logger.debug(f"Notification {kind} queued for customer {customer.pk}")
        return notification


class NullNotificationSender(NotificationSender):

    def notify(self, customer, kind, title, message, payload=None):
        return None
