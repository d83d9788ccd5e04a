from decimal import Decimal

from django.contrib.auth.models import AbstractUser
from django.core.validators import MinValueValidator
from django.db import models


class User(AbstractUser):
    """Customer account with a cached wallet balance and referral identity"""
    phone = models.CharField(max_length=20, unique=True, null=True, blank=True)

    # Cached; the wallet ledger is the source of truth
    wallet_balance = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    welcome_bonus_credited = models.BooleanField(default=False)

    referral_code = models.CharField(max_length=20, unique=True, null=True, blank=True)
    referred_by = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='referred_customers'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        constraints = [
            models.CheckConstraint(
                condition=models.Q(wallet_balance__gte=0),
                name='user_wallet_balance_non_negative'
            ),
        ]

    def __str__(self):
        return self.username or self.phone or f"User {self.id}"

    @property
    def display_name(self):
        full_name = self.get_full_name()
        return full_name or self.username
