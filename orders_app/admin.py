from django.contrib import admin
from .models import Order, OrderStatusHistory


class OrderStatusHistoryInline(admin.TabularInline):
    model = OrderStatusHistory
    extra = 0
    can_delete = False
    readonly_fields = ('status', 'changed_by', 'created_at')

    def has_add_permission(self, request, obj=None):
        return False


class OrderAdmin(admin.ModelAdmin):
    """
    Orders are read-only in the admin; status changes must go through the API so
    that the state machine and the history stay consistent.
    """
    list_display = ('order_number', 'title', 'client', 'freelancer', 'total_price', 'status', 'created_at')
    list_filter = ('status', 'is_urgent')
    search_fields = ('order_number', 'title')
    inlines = (OrderStatusHistoryInline,)

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


admin.site.register(Order, OrderAdmin)
