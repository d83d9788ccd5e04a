from decimal import Decimal

from django.conf import settings
from django.db import models


class Referral(models.Model):
    """Referrer/referee pair; bonuses are paid when the referee's first order is delivered"""

    STATUS_PENDING = 'pending'
    STATUS_COMPLETED = 'completed'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_COMPLETED, 'Completed'),
    ]

    referrer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='referrals_given'
    )
    # A customer can be referred only once
    referee = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='referral_received'
    )
    referral_code = models.CharField(max_length=20)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)

    referrer_bonus_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('50.00'))
    referee_bonus_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('25.00'))
    referrer_bonus_credited = models.BooleanField(default=False)
    referee_bonus_credited = models.BooleanField(default=False)
    referrer_bonus_credited_at = models.DateTimeField(null=True, blank=True)
    referee_bonus_credited_at = models.DateTimeField(null=True, blank=True)

    first_order = models.ForeignKey(
        'orders.Order',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='completed_referrals'
    )
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'referrals'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['referrer', 'status']),
        ]

    def __str__(self):
        return f"{self.referrer} -> {self.referee} ({self.status})"
