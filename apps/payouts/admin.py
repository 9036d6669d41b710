from django.contrib import admin, messages
from .models import PayoutProfile, Withdrawal, WithdrawalStatus
from apps.wallets.services import WalletsServiceError
from .services import complete_withdrawal_manually, PayoutsServiceError


@admin.register(PayoutProfile)
class PayoutProfileAdmin(admin.ModelAdmin):
    list_display = ['user', 'account_name', 'bank_name', 'account_number', 'verified', 'updated_at']
    list_filter = ['verified', 'bank_name']
    search_fields = ['user__email', 'account_name', 'account_number']
    raw_id_fields = ['user']
    readonly_fields = ['recipient_code', 'created_at', 'updated_at']


@admin.register(Withdrawal)
class WithdrawalAdmin(admin.ModelAdmin):
    """
    Withdrawals are created by the payout API and settled by the gateway.

    The only manual transition is marking an in-flight withdrawal
    completed, done through the action below so the ledger stays in step.
    """

    list_display = [
        'reference',
        'agent',
        'amount',
        'type',
        'status',
        'external_transfer_code',
        'created_at',
        'processed_at',
    ]
    list_filter = ['status', 'type', 'created_at']
    search_fields = ['reference', 'external_transfer_code', 'agent__user__email']
    date_hierarchy = 'created_at'
    actions = ['mark_completed']

    readonly_fields = [
        'agent', 'amount', 'type', 'status', 'reference',
        'external_transfer_code', 'gateway_reference', 'error_message',
        'approved_by', 'approved_at', 'created_at', 'processed_at', 'updated_at',
    ]
    fieldsets = (
        ('Withdrawal', {
            'fields': ('agent', 'amount', 'type', 'status', 'reference')
        }),
        ('Gateway', {
            'fields': ('external_transfer_code', 'gateway_reference', 'error_message'),
        }),
        ('Approval', {
            'fields': ('approved_by', 'approved_at', 'admin_notes'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'processed_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.action(description='Mark selected withdrawals as completed')
    def mark_completed(self, request, queryset):
        completed = 0
        for withdrawal in queryset.exclude(status__in=[WithdrawalStatus.COMPLETED, WithdrawalStatus.FAILED]):
            try:
                complete_withdrawal_manually(
                    withdrawal_id=withdrawal.id,
                    admin=request.user,
                    admin_notes='Completed from admin',
                )
            except (PayoutsServiceError, WalletsServiceError) as e:
                self.message_user(request, f'{withdrawal.reference}: {e}', level=messages.ERROR)
            else:
                completed += 1
        self.message_user(request, f'{completed} withdrawal(s) marked as completed.')
