from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from .api import IdiomasRestauranteAPI
from .serializers import IdiomaSerializer


class IdiomaViewSet(viewsets.ViewSet):
    """Catálogo de idiomas disponíveis para os cardápios"""
    permission_classes = [AllowAny]

    @action(detail=False, methods=['get'])
    def available(self, request):
        idiomas = IdiomasRestauranteAPI().obter_idiomas_disponiveis()
        return Response(IdiomaSerializer(idiomas, many=True).data)
