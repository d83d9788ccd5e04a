from django.urls import path
from . import views

app_name = 'referrals'

urlpatterns = [
    path('info/', views.get_referral_info, name='info'),
    path('validate/', views.validate_referral_code, name='validate'),
    path('apply/', views.apply_referral_code, name='apply'),
    path('invite/', views.send_referral_invite, name='invite'),
    path('milestones/', views.get_milestone_progress, name='milestones'),
    path('tier/', views.get_tier_progress, name='tier'),
]
