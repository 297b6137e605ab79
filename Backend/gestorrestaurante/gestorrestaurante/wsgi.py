"""
WSGI config for gestorrestaurante project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'gestorrestaurante.settings')

application = get_wsgi_application()
