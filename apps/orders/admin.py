from django.contrib import admin
from .models import Order


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = [
        'order_number',
        'total',
        'seller_type',
        'delivery_agent',
        'payment_status',
        'paid_at',
        'created_at',
    ]
    list_filter = ['payment_status', 'seller_type', 'created_at']
    search_fields = ['order_number', 'payment_reference', 'seller_id']
    raw_id_fields = ['delivery_agent']
    date_hierarchy = 'created_at'

    # Settlement fields are written by the payment split only
    readonly_fields = ['payment_status', 'split_details', 'paid_at', 'created_at', 'updated_at']
