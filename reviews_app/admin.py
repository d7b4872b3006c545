from django.contrib import admin
from .models import Review


class ReviewAdmin(admin.ModelAdmin):
    list_display = ('order', 'client', 'freelancer', 'rating', 'moderation_status', 'created_at')
    list_filter = ('moderation_status', 'rating')
    search_fields = ('title', 'comment', 'order__order_number')
    readonly_fields = ('order', 'client', 'freelancer', 'moderated_at', 'moderated_by', 'responded_at')


admin.site.register(Review, ReviewAdmin)
