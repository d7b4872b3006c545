from django.contrib import admin
from .models import Dispute, DisputeComment


class DisputeCommentInline(admin.TabularInline):
    model = DisputeComment
    extra = 0
    readonly_fields = ('user', 'content', 'created_at')


class DisputeAdmin(admin.ModelAdmin):
    list_display = ('id', 'order', 'raised_by', 'reason', 'status', 'created_at')
    list_filter = ('status',)
    search_fields = ('reason', 'order__order_number')
    readonly_fields = ('order', 'raised_by', 'resolved_at', 'resolved_by')
    inlines = (DisputeCommentInline,)

    def has_delete_permission(self, request, obj=None):
        return False


admin.site.register(Dispute, DisputeAdmin)
