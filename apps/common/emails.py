"""
Optional email sender for referral and milestone emails.
"""
import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives

logger = logging.getLogger(__name__)


class EmailSender:
    """Interface for outbound reward emails"""

    def send_referral_email(self, to_email, referrer_name, code, link):
        raise NotImplementedError

    def send_milestone_email(self, to_email, name, milestone, total_earned):
        raise NotImplementedError


class DjangoEmailSender(EmailSender):
    """Sends plain-text mail through the configured Django email backend"""

    def __init__(self, from_email=None):
        self.from_email = from_email or settings.DEFAULT_FROM_EMAIL

    def _send(self, to_email, subject, body):
        if not to_email:
            logger.warning(f"Skipping email '{subject}': no recipient address")
            return 0
        msg = EmailMultiAlternatives(subject=subject, body=body, from_email=self.from_email, to=[to_email])
        return msg.send(fail_silently=False)

    def send_referral_email(self, to_email, referrer_name, code, link):
        subject = f'{referrer_name} invited you to order cakes'
        body = (
            f'{referrer_name} thinks you will love our cakes.\n\n'
            f'Sign up with referral code {code} and get a bonus in your wallet '
            f'after your first delivered order.\n\n{link}\n'
        )
        return self._send(to_email, subject, body)

    def send_milestone_email(self, to_email, name, milestone, total_earned):
        subject = f'Milestone unlocked: {milestone.name}'
        body = (
            f'Hi {name},\n\n'
            f'{milestone.description} We have added ₹{milestone.bonus:.2f} to your wallet.\n'
            f'Total milestone bonuses earned so far: ₹{total_earned:.2f}.\n'
        )
        return self._send(to_email, subject, body)


def get_default_email_sender():
    """None disables reward emails"""
    if getattr(settings, 'REWARD_EMAILS_ENABLED', True):
        return DjangoEmailSender()
    return None


# Marker for "use the configured sender"; an explicit None disables emails
DEFAULT_EMAIL_SENDER = object()


def resolve_email_sender(email_sender=DEFAULT_EMAIL_SENDER):
    if email_sender is DEFAULT_EMAIL_SENDER:
        return get_default_email_sender()
    return email_sender
