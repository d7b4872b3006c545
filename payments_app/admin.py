from django.contrib import admin
from .models import Transaction


class TransactionAdmin(admin.ModelAdmin):
    list_display = ('id', 'order', 'user', 'type', 'amount', 'status', 'gateway_reference', 'created_at')
    list_filter = ('type', 'status')
    search_fields = ('gateway_reference', 'order__order_number')
    readonly_fields = ('order', 'user', 'refund_of', 'amount', 'type', 'gateway_reference', 'created_at')

    def has_delete_permission(self, request, obj=None):
        return False


admin.site.register(Transaction, TransactionAdmin)
