from django.contrib import admin, messages
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.urls import reverse
from django.utils.html import format_html
from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Customer admin with wallet and referral details"""
    list_display = [
        'username', 'email', 'phone', 'wallet_balance',
        'referral_code', 'referrer_link', 'is_staff', 'created_at'
    ]
    list_filter = ['is_staff', 'is_active', 'welcome_bonus_credited', 'created_at']
    search_fields = ['username', 'email', 'phone', 'referral_code']
    ordering = ['-created_at']

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Contact', {
            'fields': ('phone',)
        }),
        ('Wallet', {
            'fields': ('wallet_balance', 'welcome_bonus_credited')
        }),
        ('Referral', {
            'fields': ('referral_code', 'referred_by'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )
    # Balance changes must go through the wallet ledger
    readonly_fields = ['created_at', 'updated_at', 'wallet_balance', 'welcome_bonus_credited']
    raw_id_fields = ['referred_by']

    def referrer_link(self, obj):
        """Link to the referring customer"""
        if not obj.referred_by_id:
            return '-'
        url = reverse('admin:users_user_change', args=[obj.referred_by_id])
        return format_html('<a href="{}">{}</a>', url, obj.referred_by)
    referrer_link.short_description = 'Referred by'

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('referred_by')

    actions = ['reconcile_wallets']

    @admin.action(description='Reconcile wallet balance with the ledger')
    def reconcile_wallets(self, request, queryset):
        from apps.wallet.services import WalletService

        results = [WalletService.reconcile_balance(customer) for customer in queryset]
        drifted = [r for r in results if r['adjusted']]
        if drifted:
            self.message_user(
                request,
                f"Adjusted {len(drifted)} of {len(results)} balance(s) to the ledger total.",
                messages.WARNING,
            )
        else:
            self.message_user(request, f"All {len(results)} balance(s) match the ledger.")
