from django.apps import AppConfig


class ProfileAppConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'profile_app'

    def ready(self):
        # Registers the post_save handlers that create profiles.
        from . import signals  # noqa: F401
