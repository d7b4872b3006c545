from django.apps import AppConfig


class PlatformStatsAppConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'platform_stats_app'
