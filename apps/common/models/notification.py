from django.db import models
from django.conf import settings


class CustomerNotification(models.Model):
    """In-app notification shown to a customer"""

    KIND_CHOICES = [
        ('wallet_credit', 'Wallet Credit'),
        ('wallet_debit', 'Wallet Debit'),
        ('referral_bonus', 'Referral Bonus'),
        ('milestone', 'Milestone'),
        ('scratch_card', 'Scratch Card'),
        ('order', 'Order Update'),
    ]

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    kind = models.CharField(max_length=20, choices=KIND_CHOICES)
    title = models.CharField(max_length=200)
    message = models.TextField()
    payload = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'customer_notifications'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['customer', 'is_read']),
            models.Index(fields=['kind', 'created_at']),
        ]

    def __str__(self):
        return f"{self.title} ({self.kind})"
