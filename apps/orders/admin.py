from django.contrib import admin
from django.urls import reverse
from django.utils.html import format_html

from apps.common.exceptions import ServiceError
from .models import Order, OrderItem, RewardFailure
from .services import OrderLifecycleCoordinator


class OrderItemInline(admin.TabularInline):
    """Inline admin for order items"""
    model = OrderItem
    extra = 0
    readonly_fields = ['product_id', 'product_name', 'unit_price', 'quantity', 'addons', 'line_total']
    fields = readonly_fields
    can_delete = False


class RewardFailureInline(admin.TabularInline):
    model = RewardFailure
    extra = 0
    readonly_fields = ['step', 'error', 'created_at', 'resolved_at']
    fields = readonly_fields
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Orders; status changes go through the lifecycle coordinator so rewards fire"""

    list_display = [
        'order_number', 'user_link', 'status_display', 'total_amount',
        'wallet_amount_used', 'promo_code', 'created_at'
    ]
    list_filter = ['status', 'payment_method', 'created_at']
    search_fields = ['order_number', 'customer__username', 'customer__phone', 'promo_code']
    ordering = ['-created_at']
    readonly_fields = [
        'order_number', 'customer', 'status', 'subtotal', 'promo_code', 'promo_discount',
        'delivery_charge', 'wallet_amount_used', 'total_amount', 'subtotal_after_promo',
        'subtotal_after_wallet', 'final_delivery_charge', 'wallet_refunded',
        'created_at', 'updated_at', 'delivered_at', 'cancelled_at'
    ]

    fieldsets = (
        ('Basic Information', {
            'fields': ('order_number', 'customer', 'status', 'payment_method')
        }),
        ('Pricing', {
            'fields': (
                'subtotal', 'promo_code', 'promo_discount', 'subtotal_after_promo',
                'wallet_amount_used', 'subtotal_after_wallet', 'delivery_charge',
                'final_delivery_charge', 'total_amount', 'wallet_refunded'
            )
        }),
        ('Delivery', {
            'fields': ('delivery_address', 'delivery_date', 'delivery_time', 'special_instructions')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at', 'delivered_at', 'cancelled_at'),
            'classes': ('collapse',)
        }),
    )

    inlines = [OrderItemInline, RewardFailureInline]

    STATUS_COLORS = {
        Order.STATUS_PENDING: '#ffc107',
        Order.STATUS_CONFIRMED: '#17a2b8',
        Order.STATUS_PREPARING: '#6f42c1',
        Order.STATUS_READY: '#20c997',
        Order.STATUS_OUT_FOR_DELIVERY: '#fd7e14',
        Order.STATUS_DELIVERED: '#28a745',
        Order.STATUS_CANCELLED: '#dc3545',
    }

    def user_link(self, obj):
        """Link to user admin page"""
        url = reverse('admin:users_user_change', args=[obj.customer_id])
        return format_html('<a href="{}">{}</a>', url, obj.customer)
    user_link.short_description = 'Customer'
    user_link.admin_order_field = 'customer__username'

    def status_display(self, obj):
        """Display order status with color coding"""
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            self.STATUS_COLORS.get(obj.status, '#000000'),
            obj.get_status_display()
        )
    status_display.short_description = 'Status'
    status_display.admin_order_field = 'status'

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('customer')

    actions = ['mark_as_delivered', 'cancel_orders', 'replay_rewards']

    def _transition(self, request, queryset, new_status, label):
        coordinator = OrderLifecycleCoordinator()
        updated_count = 0
        failed_effects = 0
        for order in queryset:
            try:
                outcome = coordinator.transition_order_status(order.pk, new_status)
            except ServiceError as exc:
                self.message_user(request, f'{order.order_number}: {exc.message}', level='warning')
                continue
            updated_count += int(outcome.changed)
            failed_effects += len(outcome.report.failures)
        self.message_user(request, f'{updated_count} orders marked as {label}.')
        if failed_effects:
            self.message_user(
                request, f'{failed_effects} reward side effects failed; see reward failures.', level='warning'
            )

    def mark_as_delivered(self, request, queryset):
        """Mark selected orders as delivered"""
        self._transition(request, queryset, Order.STATUS_DELIVERED, 'delivered')
    mark_as_delivered.short_description = 'Mark as delivered'

    def cancel_orders(self, request, queryset):
        """Cancel selected orders"""
        self._transition(request, queryset, Order.STATUS_CANCELLED, 'cancelled')
    cancel_orders.short_description = 'Cancel selected orders'

    def replay_rewards(self, request, queryset):
        """Retry failed reward side effects"""
        coordinator = OrderLifecycleCoordinator()
        still_failing = 0
        for order in queryset:
            still_failing += len(coordinator.replay_side_effects(order.pk).failures)
        self.message_user(request, f'Replayed {queryset.count()} orders; {still_failing} steps still failing.')
    replay_rewards.short_description = 'Replay reward side effects'


@admin.register(RewardFailure)
class RewardFailureAdmin(admin.ModelAdmin):
    list_display = ['order', 'step', 'created_at', 'resolved_at']
    list_filter = ['step', 'resolved_at']
    search_fields = ['order__order_number', 'error']
    readonly_fields = ['order', 'step', 'error', 'created_at', 'resolved_at']
    ordering = ['-created_at']
