from decimal import Decimal

from django.conf import settings
from django.db import models


class Order(models.Model):
    """Customer order with every pricing intermediate persisted"""

    STATUS_PENDING = 'pending'
    STATUS_CONFIRMED = 'confirmed'
    STATUS_PREPARING = 'preparing'
    STATUS_READY = 'ready'
    STATUS_OUT_FOR_DELIVERY = 'out_for_delivery'
    STATUS_DELIVERED = 'delivered'
    STATUS_CANCELLED = 'cancelled'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_CONFIRMED, 'Confirmed'),
        (STATUS_PREPARING, 'Preparing'),
        (STATUS_READY, 'Ready'),
        (STATUS_OUT_FOR_DELIVERY, 'Out for Delivery'),
        (STATUS_DELIVERED, 'Delivered'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    # Forward progression; cancelled sits outside the sequence
    STATUS_SEQUENCE = [
        STATUS_PENDING,
        STATUS_CONFIRMED,
        STATUS_PREPARING,
        STATUS_READY,
        STATUS_OUT_FOR_DELIVERY,
        STATUS_DELIVERED,
    ]
    TERMINAL_STATUSES = (STATUS_DELIVERED, STATUS_CANCELLED)

    PAYMENT_METHODS = [
        ('cod', 'Cash on Delivery'),
        ('online', 'Online Payment'),
        ('wallet', 'Wallet'),
    ]

    order_number = models.CharField(max_length=20, unique=True)
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='orders'
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)

    # Pricing
    subtotal = models.DecimalField(max_digits=10, decimal_places=2)
    promo_code = models.CharField(max_length=50, blank=True, default='')
    promo_discount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    delivery_charge = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    wallet_amount_used = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    total_amount = models.DecimalField(max_digits=10, decimal_places=2)
    subtotal_after_promo = models.DecimalField(max_digits=10, decimal_places=2)
    subtotal_after_wallet = models.DecimalField(max_digits=10, decimal_places=2)
    final_delivery_charge = models.DecimalField(max_digits=10, decimal_places=2)

    # Delivery
    delivery_address = models.JSONField(default=dict, blank=True)
    delivery_date = models.DateField(null=True, blank=True)
    delivery_time = models.CharField(max_length=50, blank=True, default='')
    special_instructions = models.TextField(blank=True, default='')
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHODS, default='cod')

    wallet_refunded = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'orders'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['customer', 'status']),
            models.Index(fields=['status']),
            models.Index(fields=['created_at']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_amount__gte=0),
                name='order_total_amount_non_negative'
            ),
        ]

    def __str__(self):
        return f"Order {self.order_number}"

    @property
    def is_terminal(self):
        return self.status in self.TERMINAL_STATUSES

    @classmethod
    def can_transition(cls, current, new):
        """Forward along the sequence, or to cancelled from any non-terminal status"""
        if current in cls.TERMINAL_STATUSES:
            return False
        if new == cls.STATUS_CANCELLED:
            return True
        if new not in cls.STATUS_SEQUENCE:
            return False
        return cls.STATUS_SEQUENCE.index(new) > cls.STATUS_SEQUENCE.index(current)
