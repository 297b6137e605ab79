from rest_framework import permissions


# Papéis que cada papel NÃO pode atribuir a outros usuários
PAPEIS_OCULTOS = {
    'superadmin': {'superadmin'},
    'restaurant_administrator': {'superadmin'},
    'location_administrator': {'superadmin', 'restaurant_administrator'},
}
PAPEIS_OCULTOS_DEMAIS = {'superadmin', 'restaurant_administrator', 'location_administrator'}


def pode_atribuir(tipo_atuante, tipo_papel):
    """Verifica se quem tem ``tipo_atuante`` pode conceder ``tipo_papel``"""
    return tipo_papel not in PAPEIS_OCULTOS.get(tipo_atuante, PAPEIS_OCULTOS_DEMAIS)


class IsAdminUsuarios(permissions.BasePermission):
    """
    Permissão para gerenciar a equipe:
    - Super administradores
    - Usuários com papel administrativo (admin do restaurante ou da unidade)
    """
    message = 'Apenas administradores podem gerenciar usuários.'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return request.user.e_super_admin or request.user.is_admin

    def has_object_permission(self, request, view, obj):
        if request.user.e_super_admin:
            return True
        # Administradores só mexem na equipe do próprio restaurante
        return obj.restaurante_id is not None and obj.restaurante_id == request.user.restaurante_id
