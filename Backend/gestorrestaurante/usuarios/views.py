import logging

from rest_framework import viewsets, status, filters
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework_simplejwt.tokens import RefreshToken
from django_filters.rest_framework import DjangoFilterBackend
from gestorrestaurante.exceptions import ErroNegocio
from .models import Usuario, Papel
from .permissions import IsAdminUsuarios, pode_atribuir
from .serializers import UsuarioSerializer, PapelSerializer, LoginSerializer

logger = logging.getLogger(__name__)


class UsuarioViewSet(viewsets.ModelViewSet):
    """
    ViewSet para gerenciar a equipe dos restaurantes.

    list/retrieve/create/partial_update/destroy: apenas administradores
    me: dados do usuário autenticado
    roles: papéis que o usuário autenticado pode atribuir
    """
    queryset = Usuario.objects.select_related('restaurante').prefetch_related('papeis').all()
    serializer_class = UsuarioSerializer
    permission_classes = [IsAuthenticated, IsAdminUsuarios]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['status', 'restaurante']
    search_fields = ['nome', 'email', 'username']
    ordering_fields = ['nome', 'date_joined']
    ordering = ['nome']
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_permissions(self):
        """Define permissões específicas por ação"""
        if self.action in ['me', 'roles']:
            return [IsAuthenticated()]
        return super().get_permissions()

    def get_queryset(self):
        """
        Filtra usuários baseado no papel do usuário:
        - Super administrador: vê todos
        - Demais administradores: apenas a equipe do próprio restaurante
        """
        queryset = super().get_queryset()
        user = self.request.user

        if user.e_super_admin:
            return queryset

        if user.restaurante_id is None:
            return queryset.none()
        return queryset.filter(restaurante_id=user.restaurante_id)

    def perform_create(self, serializer):
        usuario = serializer.save()
        logger.info('Usuário %s criado por %s', usuario.pk, self.request.user.pk)

    def perform_update(self, serializer):
        usuario = serializer.save()
        logger.info('Usuário %s atualizado por %s', usuario.pk, self.request.user.pk)

    def perform_destroy(self, instance):
        if instance.pk == self.request.user.pk:
            raise ErroNegocio('Você não pode excluir o próprio usuário.')
        logger.info('Usuário %s excluído por %s', instance.pk, self.request.user.pk)
        instance.delete()

    @action(detail=False, methods=['get'])
    def me(self, request):
        """Endpoint para retornar dados do usuário autenticado"""
        serializer = self.get_serializer(request.user)
        return Response(serializer.data, status=status.HTTP_200_OK)

    @action(detail=False, methods=['get'])
    def roles(self, request):
        """Papéis que o usuário autenticado pode atribuir a outros"""
        papel_atuante = Papel.SUPERADMIN if request.user.is_superuser else request.user.papel_principal
        papeis = [papel for papel in Papel.objects.all() if pode_atribuir(papel_atuante, papel.tipo)]
        return Response(PapelSerializer(papeis, many=True).data, status=status.HTTP_200_OK)


class AutenticacaoViewSet(viewsets.ViewSet):
    """Login com geração de tokens JWT"""
    permission_classes = [AllowAny]

    @action(detail=False, methods=['post'])
    def login(self, request):
        """Endpoint para login e geração de tokens JWT"""
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        usuario = serializer.validated_data['usuario']
        refresh = RefreshToken.for_user(usuario)
        logger.info('Login do usuário %s', usuario.pk)

        return Response({
            'mensagem': 'Login realizado com sucesso!',
            'access': str(refresh.access_token),
            'refresh': str(refresh),
            'usuario': UsuarioSerializer(usuario).data,
        }, status=status.HTTP_200_OK)
