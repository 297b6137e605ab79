from rest_framework import permissions
from usuarios.models import Papel


class IsAdminRestauranteOrReadOnly(permissions.BasePermission):
    """
    Permissão customizada que permite:
    - Leitura para qualquer usuário (o serviço decide o que é visível)
    - Cadastro de restaurante para qualquer usuário autenticado
    - Demais escritas apenas para super administradores e administradores de restaurante
    """
    message = 'Apenas administradores do restaurante podem alterar estes dados.'

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True

        if not request.user or not request.user.is_authenticated:
            return False

        if getattr(view, 'action', None) == 'create':
            return True

        # A propriedade do restaurante é conferida no serviço
        return request.user.e_super_admin or request.user.tem_papel(Papel.ADMINISTRADOR_RESTAURANTE)
