from django.contrib import admin
from .models import CustomerNotification


@admin.register(CustomerNotification)
class CustomerNotificationAdmin(admin.ModelAdmin):
    """Admin interface for customer notifications"""

    list_display = ['title', 'customer', 'kind', 'is_read', 'created_at']
    list_filter = ['kind', 'is_read', 'created_at']
    search_fields = ['title', 'message', 'customer__username', 'customer__email']
    readonly_fields = ['customer', 'kind', 'title', 'message', 'payload', 'created_at']
    ordering = ['-created_at']
