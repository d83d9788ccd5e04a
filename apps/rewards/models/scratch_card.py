from django.conf import settings
from django.db import models


class ScratchCard(models.Model):
    """Per-order cashback card: pending -> revealed -> credited, or expired"""

    STATUS_PENDING = 'pending'
    STATUS_REVEALED = 'revealed'
    STATUS_CREDITED = 'credited'
    STATUS_EXPIRED = 'expired'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_REVEALED, 'Revealed'),
        (STATUS_CREDITED, 'Credited'),
        (STATUS_EXPIRED, 'Expired'),
    ]

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='scratch_cards'
    )
    order = models.OneToOneField(
        'orders.Order',
        on_delete=models.CASCADE,
        related_name='scratch_card'
    )
    amount = models.PositiveIntegerField(help_text="Whole rupees, at least 1")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    revealed_at = models.DateTimeField(null=True, blank=True)
    credited_at = models.DateTimeField(null=True, blank=True)
    expired_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'scratch_cards'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['customer', 'status']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gte=1),
                name='scratch_card_amount_at_least_one'
            ),
        ]

    def __str__(self):
        return f"Scratch card ₹{self.amount} for {self.order_id} ({self.status})"
