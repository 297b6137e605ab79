from rest_framework import serializers
from .models import ConfiguracaoPagamento, MidiaRestaurante, Restaurante, Unidade
from .validators import (
    erros_horario_funcionamento, validar_cep, validar_cidade, validar_descricao,
    validar_estado, validar_logradouro, validar_nome_restaurante, validar_nome_unidade,
    validar_nome_url, validar_nome_url_unidade, validar_numero, validar_telefone,
    validar_website, validar_whatsapp
)


class EnderecoSerializer(serializers.Serializer):
    """Endereço da unidade no formato aninhado da API"""
    address_zip_code = serializers.CharField(source='cep', validators=[validar_cep])
    address_street = serializers.CharField(source='logradouro', validators=[validar_logradouro])
    address_street_number = serializers.CharField(source='numero', validators=[validar_numero])
    address_complement = serializers.CharField(
        source='complemento', required=False, allow_blank=True, max_length=100
    )
    address_city = serializers.CharField(source='cidade', validators=[validar_cidade])
    address_state = serializers.CharField(source='estado', validators=[validar_estado])


class UnidadeSerializer(serializers.ModelSerializer):
    """Serializer para as unidades de um restaurante"""

    name = serializers.CharField(source='nome', validators=[validar_nome_unidade])
    url_name = serializers.CharField(source='nome_url', validators=[validar_nome_url_unidade])
    phone = serializers.CharField(
        source='telefone', required=False, allow_blank=True, validators=[validar_telefone]
    )
    whatsapp = serializers.CharField(required=False, allow_blank=True, validators=[validar_whatsapp])
    address = EnderecoSerializer(source='*')
    operating_hours = serializers.JSONField(source='horario_funcionamento', required=False)
    selected_features = serializers.ListField(
        source='recursos_selecionados', child=serializers.CharField(), required=False
    )
    is_primary = serializers.BooleanField(source='principal', required=False)
    restaurant_id = serializers.IntegerField(read_only=True)
    created_at = serializers.DateTimeField(source='data_criacao', read_only=True)
    updated_at = serializers.DateTimeField(source='data_atualizacao', read_only=True)

    class Meta:
        model = Unidade
        fields = [
            'id',
            'restaurant_id',
            'name',
            'url_name',
            'phone',
            'whatsapp',
            'address',
            'operating_hours',
            'selected_features',
            'is_primary',
            'status',
            'created_at',
            'updated_at'
        ]
        read_only_fields = ['id']
        # Unicidade do nome de URL por restaurante é verificada no serviço
        validators = []

    def validate_operating_hours(self, value):
        """Valida os horários de cada dia (HH:MM, abertura diferente do fechamento)"""
        if not isinstance(value, dict):
            raise serializers.ValidationError('Horários de funcionamento são obrigatórios')
        erros = erros_horario_funcionamento(value)
        if erros:
            raise serializers.ValidationError(erros)
        return value


class RestauranteSerializer(serializers.ModelSerializer):
    """Serializer para o modelo Restaurante"""

    restaurant_name = serializers.CharField(source='nome', validators=[validar_nome_restaurante])
    restaurant_url_name = serializers.CharField(source='nome_url', validators=[validar_nome_url])
    business_type = serializers.CharField(source='tipo_negocio', required=False)
    cuisine_type = serializers.CharField(
        source='tipo_cozinha', required=False, allow_blank=True, max_length=50
    )
    description = serializers.CharField(
        source='descricao', required=False, allow_blank=True, validators=[validar_descricao]
    )
    website = serializers.CharField(required=False, allow_blank=True, validators=[validar_website])
    phone = serializers.CharField(
        source='telefone', required=False, allow_blank=True, validators=[validar_telefone]
    )
    whatsapp = serializers.CharField(required=False, allow_blank=True, validators=[validar_whatsapp])
    subscription_plan = serializers.ChoiceField(
        source='plano_assinatura', choices=Restaurante.PLANOS, required=False
    )
    selected_features = serializers.ListField(
        source='recursos_selecionados', child=serializers.CharField(), required=False
    )
    created_at = serializers.DateTimeField(source='data_criacao', read_only=True)
    updated_at = serializers.DateTimeField(source='data_atualizacao', read_only=True)

    class Meta:
        model = Restaurante
        fields = [
            'id',
            'restaurant_name',
            'restaurant_url_name',
            'business_type',
            'cuisine_type',
            'description',
            'website',
            'phone',
            'whatsapp',
            'email',
            'subscription_plan',
            'selected_features',
            'status',
            'created_at',
            'updated_at'
        ]
        read_only_fields = ['id', 'status']
        # Conflito de nome de URL é tratado pelo serviço (409)
        validators = []
        extra_kwargs = {
            'email': {'required': False, 'allow_blank': True},
        }


class RestauranteDetalheSerializer(RestauranteSerializer):
    """Restaurante com as unidades"""

    locations = UnidadeSerializer(source='unidades', many=True, read_only=True)

    class Meta(RestauranteSerializer.Meta):
        fields = RestauranteSerializer.Meta.fields + ['locations']


class RestauranteCriacaoSerializer(RestauranteSerializer):
    """Cadastro de restaurante com as unidades iniciais"""

    locations = UnidadeSerializer(source='unidades', many=True, required=False)

    class Meta(RestauranteSerializer.Meta):
        fields = RestauranteSerializer.Meta.fields + ['locations']

    def validate_locations(self, value):
        nomes = [(unidade.get('nome_url') or '').lower() for unidade in value]
        if len(nomes) != len(set(nomes)):
            raise serializers.ValidationError(
                'Nome da URL da Unidade duplicado. Cada unidade deve ter uma URL única.'
            )
        return value


class MidiaSerializer(serializers.ModelSerializer):
    """Serializer para os arquivos de mídia"""

    type = serializers.CharField(source='tipo_midia', read_only=True)
    url = serializers.SerializerMethodField()
    original_name = serializers.CharField(source='nome_original', read_only=True)
    size = serializers.IntegerField(source='tamanho', read_only=True)
    mime_type = serializers.CharField(source='tipo_mime', read_only=True)
    location_id = serializers.IntegerField(source='unidade_id', read_only=True)
    created_at = serializers.DateTimeField(source='data_criacao', read_only=True)

    class Meta:
        model = MidiaRestaurante
        fields = ['id', 'type', 'url', 'original_name', 'size', 'mime_type', 'location_id', 'created_at']

    def get_url(self, obj):
        request = self.context.get('request')
        url = obj.arquivo.url if obj.arquivo else None
        if url and request is not None:
            return request.build_absolute_uri(url)
        return url


class ConfiguracaoPagamentoSerializer(serializers.ModelSerializer):
    """Serializer para a configuração de pagamento"""

    accepted_methods = serializers.ListField(
        source='metodos_aceitos', child=serializers.CharField(), required=False
    )
    delivery_fee = serializers.DecimalField(
        source='taxa_entrega_padrao', max_digits=8, decimal_places=2, min_value=0, required=False
    )
    minimum_order = serializers.DecimalField(
        source='valor_minimo_pedido', max_digits=8, decimal_places=2, min_value=0, required=False
    )
    estimated_delivery_time = serializers.IntegerField(
        source='tempo_entrega_estimado', min_value=0, required=False
    )
    service_fee_percentage = serializers.DecimalField(
        source='taxa_servico_percentual', max_digits=5, decimal_places=2,
        min_value=0, max_value=100, required=False
    )
    pix_key = serializers.CharField(source='chave_pix', required=False, allow_blank=True)
    cnpj = serializers.CharField(required=False, allow_blank=True)
    company_name = serializers.CharField(source='razao_social', required=False, allow_blank=True)
    bank_name = serializers.CharField(source='banco', required=False, allow_blank=True)
    bank_agency = serializers.CharField(source='agencia', required=False, allow_blank=True)
    bank_account = serializers.CharField(source='conta', required=False, allow_blank=True)
    account_holder = serializers.CharField(source='titular_conta', required=False, allow_blank=True)
    updated_at = serializers.DateTimeField(source='data_atualizacao', read_only=True)

    class Meta:
        model = ConfiguracaoPagamento
        fields = [
            'accepted_methods',
            'delivery_fee',
            'minimum_order',
            'estimated_delivery_time',
            'service_fee_percentage',
            'pix_key',
            'cnpj',
            'company_name',
            'bank_name',
            'bank_agency',
            'bank_account',
            'account_holder',
            'updated_at'
        ]
