from django.apps import AppConfig


class RestaurantesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'restaurantes'
    verbose_name = 'Restaurantes'
