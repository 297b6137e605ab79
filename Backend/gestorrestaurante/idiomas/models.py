from django.db import models


class Idioma(models.Model):
    """Catálogo global de idiomas disponíveis para os cardápios"""

    nome = models.CharField(max_length=100, verbose_name="Nome")
    codigo = models.CharField(max_length=10, unique=True, verbose_name="Código")
    nome_nativo = models.CharField(max_length=100, verbose_name="Nome Nativo")
    arquivo_bandeira = models.CharField(max_length=100, blank=True, verbose_name="Arquivo da Bandeira")
    ordem_exibicao = models.PositiveIntegerField(default=0, verbose_name="Ordem de Exibição")
    ativo = models.BooleanField(default=True, verbose_name="Ativo")
    data_criacao = models.DateTimeField(auto_now_add=True, verbose_name="Data de Criação")

    class Meta:
        verbose_name = "Idioma"
        verbose_name_plural = "Idiomas"
        ordering = ['ordem_exibicao', 'nome']

    def __str__(self):
        return f"{self.nome_nativo} ({self.codigo})"


class RestauranteIdioma(models.Model):
    """Idioma configurado para o cardápio de um restaurante"""

    restaurante = models.ForeignKey(
        'restaurantes.Restaurante',
        on_delete=models.CASCADE,
        related_name='idiomas',
        verbose_name="Restaurante"
    )
    idioma = models.ForeignKey(
        Idioma,
        on_delete=models.PROTECT,
        related_name='restaurantes',
        verbose_name="Idioma"
    )
    ordem_exibicao = models.PositiveIntegerField(default=0, verbose_name="Ordem de Exibição")
    padrao = models.BooleanField(default=False, verbose_name="Idioma Padrão")
    ativo = models.BooleanField(default=True, verbose_name="Ativo")
    data_criacao = models.DateTimeField(auto_now_add=True, verbose_name="Data de Criação")
    data_atualizacao = models.DateTimeField(auto_now=True, verbose_name="Data de Atualização")

    class Meta:
        unique_together = ('restaurante', 'idioma')
        verbose_name = "Idioma do Restaurante"
        verbose_name_plural = "Idiomas dos Restaurantes"
        ordering = ['ordem_exibicao', 'idioma__ordem_exibicao']

    def __str__(self):
        marcador = ' (padrão)' if self.padrao else ''
        return f"{self.restaurante.nome} - {self.idioma.codigo}{marcador}"
