from django.db import models


class OrderItem(models.Model):
    """Order line with its add-on/combo lines snapshotted as JSON"""

    order = models.ForeignKey('Order', on_delete=models.CASCADE, related_name='items')
    product_id = models.IntegerField(null=True, blank=True, help_text="Catalog product reference")
    product_name = models.CharField(max_length=200)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    quantity = models.PositiveIntegerField()
    addons = models.JSONField(default=list, blank=True, help_text="[{name, unit_price, quantity}]")
    line_total = models.DecimalField(max_digits=10, decimal_places=2, help_text="Base plus add-ons")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'order_items'
        indexes = [
            models.Index(fields=['order']),
            models.Index(fields=['product_id']),
        ]

    def __str__(self):
        return f"{self.product_name} × {self.quantity}"
