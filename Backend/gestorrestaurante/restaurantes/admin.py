from django.contrib import admin
from .models import ConfiguracaoPagamento, MidiaRestaurante, Restaurante, Unidade


class UnidadeInline(admin.TabularInline):
    model = Unidade
    extra = 0
    fields = ('nome', 'nome_url', 'cidade', 'estado', 'principal', 'status')


class ConfiguracaoPagamentoInline(admin.StackedInline):
    model = ConfiguracaoPagamento
    can_delete = False
    extra = 0


@admin.register(Restaurante)
class RestauranteAdmin(admin.ModelAdmin):
    list_display = ('nome', 'nome_url', 'tipo_negocio', 'plano_assinatura', 'status', 'data_criacao')
    list_filter = ('status', 'tipo_negocio', 'plano_assinatura', 'data_criacao')
    search_fields = ('nome', 'nome_url', 'tipo_cozinha', 'email')
    readonly_fields = ('data_criacao', 'data_atualizacao', 'excluido_em')
    inlines = [UnidadeInline, ConfiguracaoPagamentoInline]

    fieldsets = (
        ('Informações Básicas', {
            'fields': ('nome', 'nome_url', 'tipo_negocio', 'tipo_cozinha', 'descricao', 'status')
        }),
        ('Contato', {
            'fields': ('email', 'telefone', 'whatsapp', 'website')
        }),
        ('Plano', {
            'fields': ('plano_assinatura', 'recursos_selecionados')
        }),
        ('Datas', {
            'fields': ('criado_por', 'data_criacao', 'data_atualizacao', 'excluido_em'),
            'classes': ('collapse',)
        }),
    )


@admin.register(Unidade)
class UnidadeAdmin(admin.ModelAdmin):
    list_display = ('nome', 'restaurante', 'cidade', 'estado', 'principal', 'status')
    list_filter = ('status', 'principal', 'estado')
    search_fields = ('nome', 'nome_url', 'restaurante__nome', 'cidade')
    readonly_fields = ('data_criacao', 'data_atualizacao')


@admin.register(MidiaRestaurante)
class MidiaRestauranteAdmin(admin.ModelAdmin):
    list_display = ('nome_original', 'restaurante', 'unidade', 'tipo_midia', 'tamanho', 'data_criacao')
    list_filter = ('tipo_midia', 'data_criacao')
    search_fields = ('nome_original', 'restaurante__nome')
    readonly_fields = ('data_criacao',)
