"""
ASGI config for gestorrestaurante project.
"""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'gestorrestaurante.settings')

application = get_asgi_application()
