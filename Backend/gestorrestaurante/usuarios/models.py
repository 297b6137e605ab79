from django.db import models
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.core.exceptions import ValidationError
from .validators import validar_username


class Papel(models.Model):
    """Define os papéis (roles) disponíveis no sistema"""

    SUPERADMIN = 'superadmin'
    ADMINISTRADOR_RESTAURANTE = 'restaurant_administrator'
    ADMINISTRADOR_UNIDADE = 'location_administrator'
    GERENTE = 'manager'

    TIPOS_PAPEL = [
        ('superadmin', 'Super Administrador'),
        ('restaurant_administrator', 'Administrador do Restaurante'),
        ('location_administrator', 'Administrador de unidade'),
        ('manager', 'Gerente'),
        ('waiter', 'Garçom'),
        ('kitchen', 'Cozinha'),
        ('cashier', 'Caixa'),
        ('food_runner', 'Corredor de Comida'),
        ('kds_operator', 'Operador KDS'),
        ('pos_operator', 'Operador POS'),
    ]

    # Quanto menor o nível, maior o privilégio
    NIVEIS = {
        'superadmin': 1,
        'restaurant_administrator': 2,
        'location_administrator': 3,
        'manager': 4,
    }
    NIVEL_OPERACIONAL = 5

    PAPEIS_ADMINISTRATIVOS = ('superadmin', 'restaurant_administrator', 'location_administrator')

    tipo = models.CharField(
        max_length=30,
        choices=TIPOS_PAPEL,
        unique=True,
        verbose_name="Tipo de Papel"
    )
    nivel = models.PositiveSmallIntegerField(default=NIVEL_OPERACIONAL, verbose_name="Nível")
    e_admin = models.BooleanField(default=False, verbose_name="Papel Administrativo")
    descricao = models.TextField(blank=True, verbose_name="Descrição")
    data_criacao = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Papel"
        verbose_name_plural = "Papéis"
        ordering = ['nivel', 'tipo']

    def __str__(self):
        return self.get_tipo_display()

    @classmethod
    def nivel_do_tipo(cls, tipo):
        return cls.NIVEIS.get(tipo, cls.NIVEL_OPERACIONAL)

    def save(self, *args, **kwargs):
        self.nivel = self.nivel_do_tipo(self.tipo)
        self.e_admin = self.tipo in self.PAPEIS_ADMINISTRATIVOS
        super().save(*args, **kwargs)


class UsuarioManager(BaseUserManager):
    """Manager que aceita cadastro por email, por username ou pelos dois"""
    use_in_migrations = True

    def _criar_usuario(self, email, username, password, **extra_fields):
        if not email and not username:
            raise ValueError('Informe o email ou o nome de usuário.')
        email = self.normalize_email(email) if email else None
        usuario = self.model(email=email, username=username or None, **extra_fields)
        usuario.set_password(password)
        usuario.save(using=self._db)
        return usuario

    def create_user(self, email=None, password=None, username=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._criar_usuario(email, username, password, **extra_fields)

    def create_superuser(self, email=None, password=None, username=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superusuário precisa ter is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superusuário precisa ter is_superuser=True.')
        return self._criar_usuario(email, username, password, **extra_fields)


class Usuario(AbstractUser):
    """
    Membro da equipe de um restaurante.

    Usuários sem restaurante são usuários da plataforma. Os papéis são
    atribuídos por unidade através de AtribuicaoPapel.
    """

    STATUS_CHOICES = [
        ('active', 'Ativo'),
        ('inactive', 'Inativo'),
        ('pending', 'Pendente'),
        ('suspended', 'Suspenso'),
    ]

    username = models.CharField(
        max_length=50,
        unique=True,
        null=True,
        blank=True,
        validators=[validar_username],
        verbose_name="Nome de Usuário"
    )
    email = models.EmailField(unique=True, null=True, blank=True, verbose_name="Email")
    nome = models.CharField(max_length=150, verbose_name="Nome")
    telefone = models.CharField(max_length=20, blank=True, verbose_name="Telefone")
    whatsapp = models.CharField(max_length=20, blank=True, verbose_name="WhatsApp")
    restaurante = models.ForeignKey(
        'restaurantes.Restaurante',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='equipe',
        verbose_name="Restaurante"
    )
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default='active',
        verbose_name="Status"
    )
    papeis = models.ManyToManyField(
        Papel,
        through='AtribuicaoPapel',
        through_fields=('usuario', 'papel'),
        verbose_name="Papéis"
    )

    objects = UsuarioManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['nome']

    class Meta:
        verbose_name = "Usuário"
        verbose_name_plural = "Usuários"
        ordering = ['-date_joined']

    def __str__(self):
        return f"{self.nome} ({self.email or self.username})"

    def clean(self):
        super().clean()
        self.email = self.email or None
        self.username = self.username or None
        if not self.email and not self.username:
            raise ValidationError('Informe o email ou o nome de usuário.')

    def tem_papel(self, tipo_papel):
        """Verifica se usuário tem um papel específico"""
        return self.papeis.filter(tipo=tipo_papel).exists()

    @property
    def papel_principal(self):
        """Papel de maior privilégio (menor nível) entre as atribuições"""
        papel = self.papeis.order_by('nivel').first()
        return papel.tipo if papel else None

    @property
    def e_super_admin(self):
        """
        Super administrador: superadmin ou administrador de restaurante sem
        restaurante vinculado.
        """
        if self.is_superuser:
            return True
        if self.restaurante_id is not None:
            return False
        return self.papeis.filter(
            tipo__in=[Papel.SUPERADMIN, Papel.ADMINISTRADOR_RESTAURANTE]
        ).exists()

    @property
    def is_admin(self):
        return self.papeis.filter(e_admin=True).exists()


class AtribuicaoPapel(models.Model):
    """Papel de um usuário em uma unidade específica"""
    usuario = models.ForeignKey(
        Usuario,
        on_delete=models.CASCADE,
        related_name='atribuicoes',
        verbose_name="Usuário"
    )
    papel = models.ForeignKey(Papel, on_delete=models.PROTECT, verbose_name="Papel")
    unidade = models.ForeignKey(
        'restaurantes.Unidade',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='atribuicoes',
        verbose_name="Unidade"
    )
    data_atribuicao = models.DateTimeField(auto_now_add=True, verbose_name="Data de Atribuição")

    class Meta:
        unique_together = ('usuario', 'papel', 'unidade')
        verbose_name = "Atribuição de Papel"
        verbose_name_plural = "Atribuições de Papéis"
        ordering = ['data_atribuicao']

    def __str__(self):
        escopo = self.unidade.nome if self.unidade_id else 'Plataforma'
        return f"{self.usuario.nome} - {self.papel.get_tipo_display()} ({escopo})"
