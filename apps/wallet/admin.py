from django.contrib import admin
from .models import WalletTransaction


@admin.register(WalletTransaction)
class WalletTransactionAdmin(admin.ModelAdmin):
    """Read-only view of the wallet ledger"""
    list_display = ['customer', 'direction', 'amount', 'category', 'order', 'balance_after', 'created_at']
    list_filter = ['direction', 'category', 'created_at']
    search_fields = ['customer__username', 'customer__email', 'description', 'order__order_number']
    raw_id_fields = ['customer', 'order']
    ordering = ['-created_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
