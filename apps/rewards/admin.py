from django.contrib import admin
from .models import ScratchCard


@admin.register(ScratchCard)
class ScratchCardAdmin(admin.ModelAdmin):
    """Admin interface for scratch cards"""
    list_display = ['order', 'customer', 'amount', 'status', 'created_at', 'revealed_at', 'credited_at']
    list_filter = ['status', 'created_at']
    search_fields = ['order__order_number', 'customer__username', 'customer__email']
    raw_id_fields = ['customer', 'order']
    # Status moves only through ScratchCardService
    readonly_fields = ['amount', 'status', 'created_at', 'revealed_at', 'credited_at', 'expired_at']
    ordering = ['-created_at']
