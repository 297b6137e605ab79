from django.contrib import admin
from .models import AtribuicaoPapel, Papel, Usuario


class AtribuicaoPapelInline(admin.TabularInline):
    """Inline para exibir os papéis do usuário por unidade"""
    model = AtribuicaoPapel
    fk_name = 'usuario'
    extra = 1
    readonly_fields = ['data_atribuicao']


@admin.register(Usuario)
class UsuarioAdmin(admin.ModelAdmin):
    list_display = ('nome', 'email', 'username', 'restaurante', 'status', 'is_active')
    list_filter = ('status', 'is_active', 'is_superuser', 'restaurante')
    search_fields = ('nome', 'email', 'username')
    readonly_fields = ('last_login', 'date_joined')
    ordering = ('nome',)
    inlines = [AtribuicaoPapelInline]

    fieldsets = (
        (None, {'fields': ('email', 'username')}),
        ('Dados Pessoais', {'fields': ('nome', 'telefone', 'whatsapp')}),
        ('Restaurante', {'fields': ('restaurante', 'status')}),
        ('Permissões', {'fields': ('is_active', 'is_staff', 'is_superuser')}),
        ('Datas', {'fields': ('last_login', 'date_joined'), 'classes': ('collapse',)}),
    )


@admin.register(Papel)
class PapelAdmin(admin.ModelAdmin):
    list_display = ('tipo', 'nivel', 'e_admin')
    readonly_fields = ('nivel', 'e_admin', 'data_criacao')
