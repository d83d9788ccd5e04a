from django.db import models


class RewardFailure(models.Model):
    """A best-effort order side effect that failed and can be replayed"""

    STEP_CHOICES = [
        ('scratch_card_create', 'Scratch card creation'),
        ('scratch_card_credit', 'Scratch card credit'),
        ('scratch_card_expire', 'Scratch card expiry'),
        ('referral_credit', 'Referral credit'),
        ('referral_referrer_credit', 'Referrer bonus'),
        ('referral_referee_credit', 'Referee bonus'),
        ('milestone_check', 'Milestone check'),
        ('wallet_refund', 'Wallet refund'),
    ]

    order = models.ForeignKey('Order', on_delete=models.CASCADE, related_name='reward_failures')
    step = models.CharField(max_length=30, choices=STEP_CHOICES)
    error = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)
    resolved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'order_reward_failures'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['order', 'resolved_at']),
        ]

    def __str__(self):
        state = 'resolved' if self.resolved_at else 'open'
        return f"{self.order} {self.step} ({state})"
