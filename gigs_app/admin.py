from django.contrib import admin
from .models import Gig, GigPackage


class GigPackageInline(admin.TabularInline):
    model = GigPackage
    extra = 0


class GigAdmin(admin.ModelAdmin):
    list_display = ('title', 'freelancer', 'category', 'status', 'updated_at')
    list_filter = ('status', 'category')
    search_fields = ('title', 'description')
    inlines = (GigPackageInline,)


admin.site.register(Gig, GigAdmin)
