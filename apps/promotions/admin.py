from django.contrib import admin
from .models import PromoCode


@admin.register(PromoCode)
class PromoCodeAdmin(admin.ModelAdmin):
    """Admin interface for promo codes"""
    list_display = [
        'code', 'discount_type', 'discount_value', 'min_order_amount',
        'used_count', 'usage_limit', 'status', 'valid_until'
    ]
    list_filter = ['status', 'discount_type', 'valid_until']
    search_fields = ['code', 'description']
    readonly_fields = ['used_count', 'created_at', 'updated_at']
    ordering = ['-created_at']

    actions = ['activate_codes', 'deactivate_codes']

    def activate_codes(self, request, queryset):
        updated = queryset.exclude(status='deleted').update(status='active')
        self.message_user(request, f'{updated} promo codes activated.')
    activate_codes.short_description = 'Activate selected promo codes'

    def deactivate_codes(self, request, queryset):
        updated = queryset.update(status='inactive')
        self.message_user(request, f'{updated} promo codes deactivated.')
    deactivate_codes.short_description = 'Deactivate selected promo codes'
