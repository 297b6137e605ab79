from django.contrib import admin
from .models import Idioma, RestauranteIdioma


@admin.register(Idioma)
class IdiomaAdmin(admin.ModelAdmin):
    list_display = ('nome', 'codigo', 'nome_nativo', 'ordem_exibicao', 'ativo')
    list_filter = ('ativo',)
    search_fields = ('nome', 'codigo', 'nome_nativo')
    ordering = ('ordem_exibicao',)


@admin.register(RestauranteIdioma)
class RestauranteIdiomaAdmin(admin.ModelAdmin):
    list_display = ('restaurante', 'idioma', 'ordem_exibicao', 'padrao', 'ativo')
    list_filter = ('padrao', 'ativo', 'idioma')
    search_fields = ('restaurante__nome', 'idioma__nome', 'idioma__codigo')
    readonly_fields = ('data_criacao', 'data_atualizacao')
