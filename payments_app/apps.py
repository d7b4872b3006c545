from django.apps import AppConfig


class PaymentsAppConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'payments_app'
