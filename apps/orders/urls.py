from django.urls import path
from . import views

app_name = 'orders'

urlpatterns = [
    path('', views.OrderListCreateView.as_view(), name='list-create'),
    path('price/', views.PriceOrderView.as_view(), name='price'),
    path('<int:order_id>/', views.OrderDetailView.as_view(), name='detail'),
    path('<int:order_id>/cancel/', views.CancelOrderView.as_view(), name='cancel'),

    # Staff endpoints
    path('<int:order_id>/status/', views.AdminOrderStatusView.as_view(), name='status'),
    path('<int:order_id>/replay-rewards/', views.AdminReplayRewardsView.as_view(), name='replay-rewards'),
]
