from django.urls import path
from . import views

app_name = 'wallets'

urlpatterns = [
    # POST /api/wallets/init/ - Create missing wallets for an agent
    path('init/', views.init_wallets, name='init'),
]
