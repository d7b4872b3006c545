from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import User
from .models import Profile, FreelancerProfile


class ProfileInline(admin.StackedInline):
    model = Profile
    can_delete = False
    verbose_name_plural = 'Profile'
    fk_name = 'user'


class CustomUserAdmin(BaseUserAdmin):
    inlines = (ProfileInline,)

    def get_profile_type(self, instance):
        return instance.profile.type
    get_profile_type.short_description = 'Type'

    list_display = ('username', 'email', 'first_name', 'last_name',
                    'is_staff', 'get_profile_type')

    search_fields = BaseUserAdmin.search_fields + ('profile__location',)


class FreelancerProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'headline', 'rating', 'review_count')
    # Aggregates are recomputed from reviews and must not be edited by hand.
    readonly_fields = ('rating', 'review_count')
    search_fields = ('user__username', 'headline')


admin.site.unregister(User)
admin.site.register(User, CustomUserAdmin)
admin.site.register(FreelancerProfile, FreelancerProfileAdmin)
