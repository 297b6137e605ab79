"""
URL configuration for gestorrestaurante project.

A API fica em /api/v1/ com um único router; o admin do Django em /admin/.
"""
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from usuarios.views import UsuarioViewSet, AutenticacaoViewSet
from restaurantes.views import RestauranteViewSet
from idiomas.views import IdiomaViewSet

router = DefaultRouter()
router.register(r'restaurants', RestauranteViewSet, basename='restaurante')
router.register(r'languages', IdiomaViewSet, basename='idioma')
router.register(r'users', UsuarioViewSet, basename='usuario')
router.register(r'auth', AutenticacaoViewSet, basename='auth')

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/auth/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('api/v1/', include(router.urls)),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
