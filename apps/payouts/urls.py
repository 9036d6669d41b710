from django.urls import path
from . import views

app_name = 'payouts'

urlpatterns = [
    # POST /api/payouts/withdraw/                      - Request a withdrawal
    # POST /api/payouts/bank-accounts/verify/          - Verify payout bank account
    # POST /api/payouts/withdrawals/{id}/complete/     - Manual completion (staff)
    path('withdraw/', views.withdraw, name='withdraw'),
    path('bank-accounts/verify/', views.verify_bank, name='verify-bank-account'),
    path('withdrawals/<uuid:pk>/complete/', views.complete_withdrawal, name='complete-withdrawal'),
]
