import os

from django.conf import settings
from django.db import models
from django.utils import timezone
from .validators import RECURSO_OBRIGATORIO


def garantir_recurso_obrigatorio(recursos):
    """Devolve a lista de recursos com o menu digital sempre presente"""
    recursos = list(recursos or [])
    if RECURSO_OBRIGATORIO not in recursos:
        recursos.insert(0, RECURSO_OBRIGATORIO)
    return recursos


def recursos_padrao():
    return [RECURSO_OBRIGATORIO]


class RestauranteQuerySet(models.QuerySet):
    def nao_excluidos(self):
        return self.filter(excluido_em__isnull=True)


class Restaurante(models.Model):
    """Modelo que representa um restaurante (tenant) no sistema"""

    TIPOS_NEGOCIO = [
        ('single', 'Unidade única'),
        ('multi', 'Multiunidade'),
    ]

    PLANOS = [
        ('starter', 'Starter'),
        ('professional', 'Professional'),
        ('premium', 'Premium'),
        ('enterprise', 'Enterprise'),
    ]

    LIMITE_UNIDADES = {
        'starter': 1,
        'professional': 3,
        'premium': 10,
        'enterprise': 999,
    }

    STATUS_CHOICES = [
        ('pending', 'Pendente'),
        ('active', 'Ativo'),
        ('suspended', 'Suspenso'),
    ]

    nome = models.CharField(max_length=100, verbose_name="Nome do Restaurante")
    nome_url = models.CharField(max_length=50, unique=True, verbose_name="Nome da URL")
    tipo_negocio = models.CharField(
        max_length=10,
        choices=TIPOS_NEGOCIO,
        default='single',
        verbose_name="Tipo de Negócio"
    )
    tipo_cozinha = models.CharField(max_length=50, blank=True, verbose_name="Tipo de Cozinha")
    descricao = models.TextField(blank=True, verbose_name="Descrição")
    website = models.CharField(max_length=255, blank=True, verbose_name="Website")
    telefone = models.CharField(max_length=20, blank=True, verbose_name="Telefone")
    whatsapp = models.CharField(max_length=20, blank=True, verbose_name="WhatsApp")
    email = models.EmailField(blank=True, verbose_name="Email")
    plano_assinatura = models.CharField(
        max_length=20,
        choices=PLANOS,
        default='starter',
        verbose_name="Plano de Assinatura"
    )
    recursos_selecionados = models.JSONField(default=recursos_padrao, verbose_name="Recursos Selecionados")
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default='pending',
        verbose_name="Status"
    )
    criado_por = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='restaurantes_criados',
        verbose_name="Criado por"
    )
    excluido_em = models.DateTimeField(null=True, blank=True, verbose_name="Excluído em")
    data_criacao = models.DateTimeField(auto_now_add=True, verbose_name="Data de Criação")
    data_atualizacao = models.DateTimeField(auto_now=True, verbose_name="Data de Atualização")

    objects = RestauranteQuerySet.as_manager()

    class Meta:
        verbose_name = "Restaurante"
        verbose_name_plural = "Restaurantes"
        ordering = ['-data_criacao']

    def __str__(self):
        return f"{self.nome} ({self.nome_url})"

    def save(self, *args, **kwargs):
        self.nome_url = (self.nome_url or '').strip().lower()
        self.recursos_selecionados = garantir_recurso_obrigatorio(self.recursos_selecionados)
        super().save(*args, **kwargs)

    @property
    def limite_unidades(self):
        return self.LIMITE_UNIDADES.get(self.plano_assinatura, 1)

    @property
    def excluido(self):
        return self.excluido_em is not None

    def excluir_logicamente(self):
        self.status = 'suspended'
        self.excluido_em = timezone.now()
        self.save(update_fields=['status', 'excluido_em', 'data_atualizacao'])


def horario_padrao():
    dias = ['monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday']
    horario = {dia: {'open': '09:00', 'close': '22:00', 'closed': False} for dia in dias}
    horario['holidays'] = {'open': '10:00', 'close': '20:00', 'closed': True}
    return horario


class Unidade(models.Model):
    """Unidade (localização física) de um restaurante"""

    STATUS_CHOICES = [
        ('active', 'Ativa'),
        ('inactive', 'Inativa'),
    ]

    restaurante = models.ForeignKey(
        Restaurante,
        on_delete=models.CASCADE,
        related_name='unidades',
        verbose_name="Restaurante"
    )
    nome = models.CharField(max_length=100, verbose_name="Nome")
    nome_url = models.CharField(max_length=30, verbose_name="Nome da URL")
    telefone = models.CharField(max_length=20, blank=True, verbose_name="Telefone")
    whatsapp = models.CharField(max_length=20, blank=True, verbose_name="WhatsApp")

    cep = models.CharField(max_length=9, blank=True, verbose_name="CEP")
    logradouro = models.CharField(max_length=100, blank=True, verbose_name="Logradouro")
    numero = models.CharField(max_length=10, blank=True, verbose_name="Número")
    complemento = models.CharField(max_length=100, blank=True, verbose_name="Complemento")
    cidade = models.CharField(max_length=50, blank=True, verbose_name="Cidade")
    estado = models.CharField(max_length=2, blank=True, verbose_name="Estado")

    horario_funcionamento = models.JSONField(default=horario_padrao, verbose_name="Horário de Funcionamento")
    recursos_selecionados = models.JSONField(default=recursos_padrao, verbose_name="Recursos Selecionados")
    principal = models.BooleanField(default=False, verbose_name="Unidade Principal")
    status = models.CharField(
        max_length=10,
        choices=STATUS_CHOICES,
        default='active',
        verbose_name="Status"
    )
    criado_por = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='unidades_criadas',
        verbose_name="Criado por"
    )
    data_criacao = models.DateTimeField(auto_now_add=True, verbose_name="Data de Criação")
    data_atualizacao = models.DateTimeField(auto_now=True, verbose_name="Data de Atualização")

    class Meta:
        unique_together = ('restaurante', 'nome_url')
        verbose_name = "Unidade"
        verbose_name_plural = "Unidades"
        ordering = ['-principal', 'nome']

    def __str__(self):
        return f"{self.restaurante.nome} - {self.nome}"

    def save(self, *args, **kwargs):
        self.nome_url = (self.nome_url or '').strip().lower()
        self.recursos_selecionados = garantir_recurso_obrigatorio(self.recursos_selecionados)
        super().save(*args, **kwargs)


def caminho_midia(instancia, nome_arquivo):
    """
    Pasta de destino por tipo de mídia:
    logo/<restaurante>, favicons/<restaurante>,
    restaurant_images/<restaurante>/<unidade>, restaurant_videos/<restaurante>/<unidade>
    """
    slug = instancia.restaurante.nome_url
    if instancia.tipo_midia == 'logo':
        pasta = f'logo/{slug}'
    elif instancia.tipo_midia == 'favicon':
        pasta = f'favicons/{slug}'
    else:
        unidade = instancia.unidade.nome_url if instancia.unidade_id else 'geral'
        prefixo = 'restaurant_images' if instancia.tipo_midia == 'images' else 'restaurant_videos'
        pasta = f'{prefixo}/{slug}/{unidade}'
    return os.path.join(pasta, nome_arquivo)


class MidiaRestaurante(models.Model):
    """Arquivo de mídia (logo, favicon, imagens e vídeos) de um restaurante"""

    TIPOS_MIDIA = [
        ('logo', 'Logo'),
        ('favicon', 'Favicon'),
        ('images', 'Imagem'),
        ('videos', 'Vídeo'),
    ]

    restaurante = models.ForeignKey(
        Restaurante,
        on_delete=models.CASCADE,
        related_name='midias',
        verbose_name="Restaurante"
    )
    unidade = models.ForeignKey(
        Unidade,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='midias',
        verbose_name="Unidade"
    )
    tipo_midia = models.CharField(max_length=10, choices=TIPOS_MIDIA, verbose_name="Tipo de Mídia")
    arquivo = models.FileField(upload_to=caminho_midia, verbose_name="Arquivo")
    nome_original = models.CharField(max_length=255, verbose_name="Nome Original")
    tamanho = models.PositiveBigIntegerField(default=0, verbose_name="Tamanho (bytes)")
    tipo_mime = models.CharField(max_length=100, verbose_name="Tipo MIME")
    enviado_por = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='midias_enviadas',
        verbose_name="Enviado por"
    )
    data_criacao = models.DateTimeField(auto_now_add=True, verbose_name="Data de Envio")

    class Meta:
        verbose_name = "Mídia do Restaurante"
        verbose_name_plural = "Mídias dos Restaurantes"
        ordering = ['data_criacao']

    def __str__(self):
        return f"{self.restaurante.nome} - {self.get_tipo_midia_display()} ({self.nome_original})"


def metodos_padrao():
    return ['cash']


class ConfiguracaoPagamento(models.Model):
    """Configuração de pagamento do restaurante"""

    METODOS_PAGAMENTO = [
        ('cash', 'Dinheiro'),
        ('credit_card', 'Cartão de Crédito'),
        ('debit_card', 'Cartão de Débito'),
        ('pix', 'PIX'),
        ('bank_transfer', 'Transferência Bancária'),
        ('meal_voucher', 'Vale-Refeição'),
    ]

    restaurante = models.OneToOneField(
        Restaurante,
        on_delete=models.CASCADE,
        related_name='pagamento',
        verbose_name="Restaurante"
    )
    metodos_aceitos = models.JSONField(default=metodos_padrao, verbose_name="Métodos Aceitos")
    taxa_entrega_padrao = models.DecimalField(max_digits=8, decimal_places=2, default=0, verbose_name="Taxa de Entrega")
    valor_minimo_pedido = models.DecimalField(max_digits=8, decimal_places=2, default=0, verbose_name="Pedido Mínimo")
    tempo_entrega_estimado = models.PositiveIntegerField(default=0, verbose_name="Tempo de Entrega (min)")
    taxa_servico_percentual = models.DecimalField(max_digits=5, decimal_places=2, default=0, verbose_name="Taxa de Serviço (%)")
    chave_pix = models.CharField(max_length=100, blank=True, verbose_name="Chave PIX")
    cnpj = models.CharField(max_length=18, blank=True, verbose_name="CNPJ")
    razao_social = models.CharField(max_length=150, blank=True, verbose_name="Razão Social")
    banco = models.CharField(max_length=100, blank=True, verbose_name="Banco")
    agencia = models.CharField(max_length=10, blank=True, verbose_name="Agência")
    conta = models.CharField(max_length=30, blank=True, verbose_name="Conta")
    titular_conta = models.CharField(max_length=150, blank=True, verbose_name="Titular da Conta")
    data_atualizacao = models.DateTimeField(auto_now=True, verbose_name="Data de Atualização")

    class Meta:
        verbose_name = "Configuração de Pagamento"
        verbose_name_plural = "Configurações de Pagamento"

    def __str__(self):
        return f"Pagamento - {self.restaurante.nome}"
