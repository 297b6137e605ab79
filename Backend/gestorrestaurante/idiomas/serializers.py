from rest_framework import serializers
from .models import Idioma, RestauranteIdioma


class IdiomaSerializer(serializers.ModelSerializer):
    """Idioma do catálogo global"""

    name = serializers.CharField(source='nome', read_only=True)
    language_code = serializers.CharField(source='codigo', read_only=True)
    native_name = serializers.CharField(source='nome_nativo', read_only=True)
    flag_file = serializers.CharField(source='arquivo_bandeira', read_only=True)
    display_order = serializers.IntegerField(source='ordem_exibicao', read_only=True)

    class Meta:
        model = Idioma
        fields = ['id', 'name', 'language_code', 'native_name', 'flag_file', 'display_order']


class RestauranteIdiomaSerializer(serializers.ModelSerializer):
    """Idioma configurado em um restaurante"""

    language_id = serializers.IntegerField(source='idioma_id', read_only=True)
    language_code = serializers.CharField(source='idioma.codigo', read_only=True)
    name = serializers.CharField(source='idioma.nome', read_only=True)
    native_name = serializers.CharField(source='idioma.nome_nativo', read_only=True)
    flag_file = serializers.CharField(source='idioma.arquivo_bandeira', read_only=True)
    display_order = serializers.IntegerField(source='ordem_exibicao', read_only=True)
    is_default = serializers.BooleanField(source='padrao', read_only=True)
    is_active = serializers.BooleanField(source='ativo', read_only=True)

    class Meta:
        model = RestauranteIdioma
        fields = [
            'id', 'language_id', 'language_code', 'name', 'native_name', 'flag_file',
            'display_order', 'is_default', 'is_active'
        ]


class ItemIdiomaSerializer(serializers.Serializer):
    language_code = serializers.CharField(max_length=10)
    display_order = serializers.IntegerField(min_value=1)
    is_default = serializers.BooleanField(default=False)


class AtualizacaoIdiomasSerializer(serializers.Serializer):
    """
    Conjunto completo de idiomas de um restaurante (PUT).

    Exige ao menos um idioma, códigos sem repetição e exatamente um padrão.
    """
    languages = ItemIdiomaSerializer(many=True)

    def validate_languages(self, value):
        if not value:
            raise serializers.ValidationError('Informe pelo menos um idioma.')

        codigos = [item['language_code'] for item in value]
        if len(codigos) != len(set(codigos)):
            raise serializers.ValidationError('Cada idioma só pode aparecer uma vez.')

        padroes = [item for item in value if item['is_default']]
        if len(padroes) != 1:
            raise serializers.ValidationError('Exatamente um idioma deve ser definido como padrão.')
        return value

    def para_lote(self):
        """Converte para o formato de IdiomasRestauranteAPI.atualizar_idiomas_em_lote"""
        return [
            {
                'codigo': item['language_code'],
                'ordem': item['display_order'],
                'padrao': item['is_default'],
            }
            for item in self.validated_data['languages']
        ]
