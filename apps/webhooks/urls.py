from django.urls import path
from . import views

app_name = 'webhooks'

urlpatterns = [
    # POST /api/webhooks/paystack/ - Gateway events
    path('paystack/', views.paystack_webhook, name='paystack'),
]
