from django.conf import settings
from django.db import models


class WalletTransaction(models.Model):
    """Append-only wallet ledger entry"""
    DIRECTION_CHOICES = [
        ('credit', 'Credit'),
        ('debit', 'Debit'),
    ]

    CATEGORY_CHOICES = [
        ('welcome_bonus', 'Welcome Bonus'),
        ('order_cashback', 'Order Cashback'),
        ('referral_bonus', 'Referral Bonus'),
        ('order_redemption', 'Order Redemption'),
        ('milestone', 'Milestone Bonus'),
        ('order_refund', 'Order Refund'),
    ]

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='wallet_transactions'
    )
    direction = models.CharField(max_length=10, choices=DIRECTION_CHOICES)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    category = models.CharField(max_length=30, choices=CATEGORY_CHOICES)
    order = models.ForeignKey(
        'orders.Order',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='wallet_transactions'
    )
    description = models.CharField(max_length=255, blank=True)
    balance_after = models.DecimalField(max_digits=10, decimal_places=2)  # Cached balance after this entry
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'wallet_transactions'
        ordering = ['-created_at', '-id']
        verbose_name = 'Wallet Transaction'
        verbose_name_plural = 'Wallet Transactions'
        indexes = [
            models.Index(fields=['customer', 'created_at']),
            models.Index(fields=['customer', 'category']),
            models.Index(fields=['order', 'category']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name='wallet_transaction_amount_positive'
            ),
        ]

    def __str__(self):
        sign = '+' if self.is_credit else '-'
        return f"{self.customer} {sign}₹{self.amount} ({self.get_category_display()})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Wallet transactions are immutable")
        super().save(*args, **kwargs)

    @property
    def is_credit(self):
        return self.direction == 'credit'

    @property
    def signed_amount(self):
        return self.amount if self.is_credit else -self.amount
