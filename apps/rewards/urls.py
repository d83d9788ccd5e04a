from django.urls import path
from . import views

app_name = 'rewards'

urlpatterns = [
    path('', views.list_scratch_cards, name='list'),
    path('<int:card_id>/reveal/', views.reveal_scratch_card, name='reveal'),
]
