from django.contrib import admin
from .models import Notification


class NotificationAdmin(admin.ModelAdmin):
    list_display = ('user', 'type', 'priority', 'is_read', 'created_at')
    list_filter = ('type', 'priority', 'is_read')
    search_fields = ('content', 'user__username')


admin.site.register(Notification, NotificationAdmin)
