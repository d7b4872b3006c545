from django.apps import AppConfig


class GigsAppConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'gigs_app'
