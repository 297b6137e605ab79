import logging

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from gestorrestaurante.exceptions import ErroNaoEncontrado, ErroValidacao
from idiomas.api import IdiomasRestauranteAPI
from idiomas.serializers import AtualizacaoIdiomasSerializer, RestauranteIdiomaSerializer
from .permissions import IsAdminRestauranteOrReadOnly
from .serializers import (
    ConfiguracaoPagamentoSerializer,
    MidiaSerializer,
    RestauranteCriacaoSerializer,
    RestauranteDetalheSerializer,
    RestauranteSerializer,
    UnidadeSerializer
)
from .services import MENSAGEM_NAO_ENCONTRADO, RestauranteService
from .validators import mensagem_erro, validar_nome_url

logger = logging.getLogger(__name__)


class RestauranteViewSet(viewsets.ViewSet):
    """
    ViewSet para gerenciar restaurantes.

    list: Listar restaurantes (público vê apenas os ativos)
    retrieve: Detalhes de um restaurante com as unidades
    create: Cadastrar novo restaurante com as unidades iniciais
    partial_update: Atualizar o perfil (administrador do restaurante)
    destroy: Exclusão lógica (administrador do restaurante)

    As regras de negócio ficam em RestauranteService; aqui só validamos o
    formato da entrada e montamos a resposta.
    """
    permission_classes = [IsAdminRestauranteOrReadOnly]
    lookup_value_regex = r'\d+'

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.servico = RestauranteService()
        self.idiomas = self.servico.idiomas

    def _usuario(self):
        return self.request.user if self.request.user.is_authenticated else None

    def _restaurante_visivel(self, pk):
        """Restaurante não excluído que o usuário pode consultar"""
        restaurante = self.servico.obter_por_id(pk)
        if restaurante is None:
            raise ErroNaoEncontrado(MENSAGEM_NAO_ENCONTRADO)
        self.servico.validar_acesso(restaurante, self._usuario())
        return restaurante

    # Restaurantes

    def list(self, request):
        opcoes = request.query_params.dict()
        usuario = self._usuario()
        if usuario is None or not usuario.e_super_admin:
            opcoes['status'] = 'active'

        resultado = self.servico.listar_restaurantes(opcoes)
        return Response({
            'restaurants': RestauranteSerializer(resultado['restaurantes'], many=True).data,
            'pagination': resultado['paginacao'],
            'filters': resultado['filtros'],
        })

    def create(self, request):
        serializer = RestauranteCriacaoSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        restaurante = self.servico.criar_restaurante(serializer.validated_data, request.user)
        return Response(RestauranteDetalheSerializer(restaurante).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        restaurante = self._restaurante_visivel(pk)
        return Response(RestauranteDetalheSerializer(restaurante).data)

    def partial_update(self, request, pk=None):
        serializer = RestauranteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        restaurante = self.servico.atualizar_restaurante(pk, serializer.validated_data, request.user)
        return Response(RestauranteDetalheSerializer(restaurante).data)

    def destroy(self, request, pk=None):
        self.servico.excluir_restaurante(pk, request.user)
        return Response({'mensagem': 'Restaurante excluído com sucesso.'}, status=status.HTTP_200_OK)

    @action(detail=False, methods=['get'], url_path='check-url')
    def check_url(self, request):
        """Disponibilidade de um nome de URL para cadastro"""
        nome_url = (request.query_params.get('url_name') or '').strip().lower()
        erro = mensagem_erro(validar_nome_url, nome_url)
        if erro:
            raise ErroValidacao(erro, campos={'url_name': erro})

        return Response({
            'url_name': nome_url,
            'available': self.servico.verificar_disponibilidade_url(nome_url),
        })

    @action(detail=False, methods=['get'], url_path=r'by-url/(?P<nome_url>[^/.]+)')
    def by_url(self, request, nome_url=None):
        restaurante = self.servico.obter_por_url(nome_url, incluir_unidades=True)
        if restaurante is None:
            raise ErroNaoEncontrado(MENSAGEM_NAO_ENCONTRADO)
        self.servico.validar_acesso(restaurante, self._usuario())
        return Response(RestauranteDetalheSerializer(restaurante).data)

    # Unidades

    @action(detail=True, methods=['get', 'post'])
    def locations(self, request, pk=None):
        if request.method == 'GET':
            unidades = self.servico.listar_unidades(pk, self._usuario())
            return Response(UnidadeSerializer(unidades, many=True).data)

        serializer = UnidadeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        unidade = self.servico.adicionar_unidade(pk, serializer.validated_data, request.user)
        return Response(UnidadeSerializer(unidade).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['patch', 'delete'], url_path=r'locations/(?P<unidade_id>\d+)')
    def location(self, request, pk=None, unidade_id=None):
        if request.method == 'DELETE':
            self.servico.remover_unidade(pk, unidade_id, request.user)
            return Response({'mensagem': 'Unidade removida com sucesso.'}, status=status.HTTP_200_OK)

        serializer = UnidadeSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        unidade = self.servico.atualizar_unidade(pk, unidade_id, serializer.validated_data, request.user)
        return Response(UnidadeSerializer(unidade).data)

    @action(detail=True, methods=['post'], url_path=r'locations/(?P<unidade_id>\d+)/primary')
    def primary_location(self, request, pk=None, unidade_id=None):
        unidade = self.servico.definir_unidade_principal(pk, unidade_id, request.user)
        return Response(UnidadeSerializer(unidade).data)

    # Idiomas

    @action(detail=True, methods=['get', 'put'])
    def languages(self, request, pk=None):
        if request.method == 'GET':
            restaurante = self._restaurante_visivel(pk)
            idiomas = self.idiomas.obter_idiomas_restaurante(restaurante.pk)
            return Response(RestauranteIdiomaSerializer(idiomas, many=True).data)

        restaurante = self.servico.obter_por_id(pk)
        if restaurante is None:
            raise ErroNaoEncontrado(MENSAGEM_NAO_ENCONTRADO)
        self.servico.validar_propriedade(restaurante, request.user)

        serializer = AtualizacaoIdiomasSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        idiomas = self.idiomas.atualizar_idiomas_em_lote(
            restaurante.pk, serializer.para_lote(), desativar_ausentes=True
        )
        logger.info('Idiomas do restaurante %s atualizados por %s', restaurante.pk, request.user.pk)
        return Response(RestauranteIdiomaSerializer(idiomas, many=True).data)

    # Mídia

    def _midia_organizada(self, organizadas):
        contexto = {'request': self.request}
        return {
            'logo': MidiaSerializer(organizadas['logo'], context=contexto).data if organizadas['logo'] else None,
            'favicon': MidiaSerializer(organizadas['favicon'], context=contexto).data if organizadas['favicon'] else None,
            'images': MidiaSerializer(organizadas['images'], many=True, context=contexto).data,
            'videos': MidiaSerializer(organizadas['videos'], many=True, context=contexto).data,
        }

    @action(detail=True, methods=['get', 'post'])
    def media(self, request, pk=None):
        if request.method == 'GET':
            restaurante = self._restaurante_visivel(pk)
            unidade_id = request.query_params.get('location_id') or None
            organizadas = self.servico.obter_midia(restaurante.pk, unidade_id=unidade_id)
            return Response(self._midia_organizada(organizadas))

        enviadas = self.servico.enviar_midia(
            pk,
            request.FILES.getlist('files'),
            request.data.get('type'),
            request.user,
            unidade_id=request.data.get('location_id') or None,
        )
        return Response(
            MidiaSerializer(enviadas, many=True, context={'request': request}).data,
            status=status.HTTP_201_CREATED
        )

    @action(detail=True, methods=['delete'], url_path=r'media/(?P<midia_id>\d+)')
    def media_item(self, request, pk=None, midia_id=None):
        self.servico.excluir_midia(pk, midia_id, request.user)
        return Response({'mensagem': 'Mídia excluída com sucesso.'}, status=status.HTTP_200_OK)

    # Pagamento

    @action(detail=True, methods=['get', 'put'])
    def payment(self, request, pk=None):
        if request.method == 'GET':
            pagamento = self.servico.obter_pagamento(pk, request.user)
            return Response(ConfiguracaoPagamentoSerializer(pagamento).data)

        serializer = ConfiguracaoPagamentoSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        pagamento = self.servico.atualizar_pagamento(pk, serializer.validated_data, request.user)
        return Response(ConfiguracaoPagamentoSerializer(pagamento).data)
