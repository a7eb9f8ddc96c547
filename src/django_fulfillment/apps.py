from django.apps import AppConfig


class DjangoFulfillmentConfig(AppConfig):
    name = "django_fulfillment"
    verbose_name = "Fulfillment"
    default_auto_field = "django.db.models.BigAutoField"
