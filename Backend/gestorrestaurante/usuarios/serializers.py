from django.db import transaction
from django.db.models import Q
from rest_framework import serializers
from restaurantes.models import Restaurante, Unidade
from .models import Usuario, Papel, AtribuicaoPapel
from .permissions import pode_atribuir
from .validators import validar_forca_senha, validar_telefone_usuario

MENSAGEM_PARES_OBRIGATORIOS = 'Pelo menos uma combinação de perfil e localização é obrigatória'


class PapelSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source='tipo', read_only=True)
    display_name = serializers.CharField(source='get_tipo_display', read_only=True)
    level = serializers.IntegerField(source='nivel', read_only=True)
    is_admin_role = serializers.BooleanField(source='e_admin', read_only=True)
    description = serializers.CharField(source='descricao', read_only=True)

    class Meta:
        model = Papel
        fields = ('id', 'name', 'display_name', 'level', 'is_admin_role', 'description')


class AtribuicaoSerializer(serializers.Serializer):
    """Um par (papel, unidade) do payload de usuários"""
    role_id = serializers.PrimaryKeyRelatedField(queryset=Papel.objects.all(), source='papel')
    location_id = serializers.PrimaryKeyRelatedField(
        queryset=Unidade.objects.all(),
        source='unidade',
        required=False,
        allow_null=True
    )


class UsuarioSerializer(serializers.ModelSerializer):
    """Serializer para o modelo Usuario"""
    full_name = serializers.CharField(source='nome', max_length=150)
    phone = serializers.CharField(
        source='telefone',
        required=False,
        allow_blank=True,
        validators=[validar_telefone_usuario]
    )
    whatsapp = serializers.CharField(
        required=False,
        allow_blank=True,
        validators=[validar_telefone_usuario]
    )
    restaurant_id = serializers.PrimaryKeyRelatedField(
        source='restaurante',
        queryset=Restaurante.objects.nao_excluidos(),
        required=False,
        allow_null=True
    )
    role_location_pairs = AtribuicaoSerializer(many=True, write_only=True, required=False)
    role = serializers.CharField(source='papel_principal', read_only=True)
    is_admin = serializers.BooleanField(read_only=True)
    password = serializers.CharField(
        write_only=True,
        required=False,
        style={'input_type': 'password'},
        validators=[validar_forca_senha]
    )

    class Meta:
        model = Usuario
        fields = (
            'id', 'full_name', 'email', 'username', 'phone', 'whatsapp', 'status',
            'restaurant_id', 'role', 'is_admin', 'role_location_pairs', 'password',
            'date_joined'
        )
        read_only_fields = ('id', 'date_joined')
        extra_kwargs = {
            'email': {'required': False, 'allow_null': True},
            'username': {'required': False, 'allow_null': True},
        }

    def _usuario_atuante(self):
        request = self.context.get('request')
        return request.user if request else None

    def validate_role_location_pairs(self, pares):
        if not pares:
            raise serializers.ValidationError(MENSAGEM_PARES_OBRIGATORIOS)
        return pares

    def _validar_restaurante(self, data):
        """Só o super administrador escolhe o restaurante; os demais usam o próprio"""
        atuante = self._usuario_atuante()
        e_super_admin = atuante is not None and atuante.e_super_admin

        if 'restaurante' in data and not e_super_admin:
            atual = self.instance.restaurante_id if self.instance else getattr(atuante, 'restaurante_id', None)
            restaurante_id = data['restaurante'].pk if data['restaurante'] else None
            if restaurante_id != atual:
                raise serializers.ValidationError({
                    'restaurant_id': 'Você não pode vincular usuários a outro restaurante.'
                })

        if 'restaurante' in data:
            return data['restaurante']
        if self.instance is not None:
            return self.instance.restaurante
        return atuante.restaurante if atuante is not None else None

    def _validar_pares(self, pares, restaurante):
        """Papéis que o atuante pode conceder, em unidades do restaurante do usuário"""
        atuante = self._usuario_atuante()
        if atuante is None or atuante.is_superuser:
            papel_atuante = Papel.SUPERADMIN
        else:
            papel_atuante = atuante.papel_principal

        vistos = set()
        for par in pares:
            papel = par['papel']
            unidade = par.get('unidade')

            if not pode_atribuir(papel_atuante, papel.tipo):
                raise serializers.ValidationError({
                    'role_location_pairs': f'Você não pode atribuir o perfil {papel.get_tipo_display()}.'
                })
            if unidade is None and papel.tipo != Papel.SUPERADMIN:
                raise serializers.ValidationError({
                    'role_location_pairs': 'Todos os perfis devem ter pelo menos uma localização associada'
                })
            if unidade is not None and (restaurante is None or unidade.restaurante_id != restaurante.pk):
                raise serializers.ValidationError({
                    'role_location_pairs': 'A unidade informada não pertence ao restaurante.'
                })

            chave = (papel.pk, unidade.pk if unidade else None)
            if chave in vistos:
                raise serializers.ValidationError({
                    'role_location_pairs': 'Combinação de perfil e localização repetida.'
                })
            vistos.add(chave)

    def validate(self, data):
        """Email ou username obrigatório; senha e papéis obrigatórios na criação"""
        email = data.get('email', getattr(self.instance, 'email', None))
        username = data.get('username', getattr(self.instance, 'username', None))
        if not email and not username:
            raise serializers.ValidationError({'email': 'Informe o email ou o nome de usuário.'})

        if 'email' in data:
            data['email'] = data['email'] or None
            if data['email']:
                consulta = Usuario.objects.filter(email__iexact=data['email'])
                if self.instance is not None:
                    consulta = consulta.exclude(pk=self.instance.pk)
                if consulta.exists():
                    raise serializers.ValidationError({'email': 'Já existe um usuário com este email.'})
        if 'username' in data:
            data['username'] = data['username'] or None

        if self.instance is None:
            if not data.get('password'):
                raise serializers.ValidationError({'password': 'Senha é obrigatória.'})
            if not data.get('role_location_pairs'):
                raise serializers.ValidationError({'role_location_pairs': MENSAGEM_PARES_OBRIGATORIOS})

        restaurante = self._validar_restaurante(data)
        data['restaurante'] = restaurante
        if 'role_location_pairs' in data:
            self._validar_pares(data['role_location_pairs'], restaurante)
        return data

    def _gravar_atribuicoes(self, usuario, pares):
        AtribuicaoPapel.objects.filter(usuario=usuario).delete()
        AtribuicaoPapel.objects.bulk_create([
            AtribuicaoPapel(usuario=usuario, papel=par['papel'], unidade=par.get('unidade'))
            for par in pares
        ])

    def create(self, validated_data):
        """Criar novo usuário com a senha e as atribuições"""
        pares = validated_data.pop('role_location_pairs')
        password = validated_data.pop('password')

        with transaction.atomic():
            usuario = Usuario.objects.create_user(password=password, **validated_data)
            self._gravar_atribuicoes(usuario, pares)
        return usuario

    def update(self, instance, validated_data):
        pares = validated_data.pop('role_location_pairs', None)
        password = validated_data.pop('password', None)

        with transaction.atomic():
            for campo, valor in validated_data.items():
                setattr(instance, campo, valor)
            if password:
                instance.set_password(password)
            instance.save()
            if pares is not None:
                self._gravar_atribuicoes(instance, pares)
        return instance

    def to_representation(self, instance):
        dados = super().to_representation(instance)
        dados['role_location_pairs'] = [
            {
                'role_id': atribuicao.papel_id,
                'role_name': atribuicao.papel.tipo,
                'location_id': atribuicao.unidade_id,
                'location_name': atribuicao.unidade.nome if atribuicao.unidade_id else None,
            }
            for atribuicao in instance.atribuicoes.select_related('papel', 'unidade')
        ]
        return dados


class LoginSerializer(serializers.Serializer):
    """Serializer para login com email ou nome de usuário e senha"""
    login = serializers.CharField()
    password = serializers.CharField(write_only=True, style={'input_type': 'password'})

    def validate(self, data):
        """Autenticar o usuário"""
        login = data.get('login').strip()
        password = data.get('password')

        usuario = Usuario.objects.filter(Q(email__iexact=login) | Q(username=login)).first()
        if usuario is None or not usuario.check_password(password):
            raise serializers.ValidationError('Credenciais inválidas.')

        if not usuario.is_active or usuario.status != 'active':
            raise serializers.ValidationError('Usuário inativo ou suspenso.')

        data['usuario'] = usuario
        return data
