from django.contrib import admin
from .models import Referral, MilestoneAward


@admin.register(Referral)
class ReferralAdmin(admin.ModelAdmin):
    """Admin interface for referrals"""
    list_display = [
        'referrer', 'referee', 'referral_code', 'status',
        'referrer_bonus_credited', 'referee_bonus_credited', 'created_at'
    ]
    list_filter = ['status', 'referrer_bonus_credited', 'referee_bonus_credited', 'created_at']
    search_fields = ['referral_code', 'referrer__username', 'referee__username']
    raw_id_fields = ['referrer', 'referee', 'first_order']
    readonly_fields = [
        'referrer_bonus_credited', 'referee_bonus_credited',
        'referrer_bonus_credited_at', 'referee_bonus_credited_at',
        'completed_at', 'created_at', 'updated_at'
    ]
    ordering = ['-created_at']


@admin.register(MilestoneAward)
class MilestoneAwardAdmin(admin.ModelAdmin):
    list_display = ['customer', 'level', 'name', 'bonus', 'awarded_at']
    list_filter = ['level']
    search_fields = ['customer__username', 'name']
    raw_id_fields = ['customer', 'transaction']
    ordering = ['-awarded_at']
