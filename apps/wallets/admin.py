from django.contrib import admin
from .models import Wallet, WalletTransaction


class WalletTransactionInline(admin.TabularInline):
    model = WalletTransaction
    extra = 0
    can_delete = False
    fields = [
        'transaction_type', 'amount', 'balance_before', 'balance_after',
        'reference_type', 'reference_id', 'created_at',
    ]
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Wallet)
class WalletAdmin(admin.ModelAdmin):
    """Balances are read-only here; they only move through the ledger."""

    list_display = ['agent', 'wallet_type', 'balance', 'updated_at']
    list_filter = ['wallet_type']
    search_fields = ['agent__user__email']
    readonly_fields = ['agent', 'wallet_type', 'balance', 'created_at', 'updated_at']
    inlines = [WalletTransactionInline]


@admin.register(WalletTransaction)
class WalletTransactionAdmin(admin.ModelAdmin):
    list_display = [
        'created_at', 'agent', 'wallet_type', 'transaction_type',
        'amount', 'balance_after', 'reference_type', 'reference_id',
    ]
    list_filter = ['wallet_type', 'transaction_type', 'reference_type']
    search_fields = ['reference_id', 'agent__user__email']
    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
