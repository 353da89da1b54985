from django.apps import AppConfig


class VillasConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "villas"
