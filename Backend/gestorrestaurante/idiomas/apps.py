from django.apps import AppConfig


class IdiomasConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'idiomas'
    verbose_name = 'Idiomas'
