from django.urls import path
from . import views

app_name = 'wallet'

urlpatterns = [
    path('balance/', views.get_wallet_balance, name='balance'),
    path('summary/', views.get_wallet_summary, name='summary'),
    path('transactions/', views.get_wallet_transactions, name='transactions'),
    path('welcome-bonus/', views.credit_welcome_bonus, name='welcome_bonus'),
]
