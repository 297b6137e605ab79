import django.db.models.deletion
import restaurantes.models
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Restaurante',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('nome', models.CharField(max_length=100, verbose_name='Nome do Restaurante')),
                ('nome_url', models.CharField(max_length=50, unique=True, verbose_name='Nome da URL')),
                ('tipo_negocio', models.CharField(choices=[('single', 'Unidade única'), ('multi', 'Multiunidade')], default='single', max_length=10, verbose_name='Tipo de Negócio')),
                ('tipo_cozinha', models.CharField(blank=True, max_length=50, verbose_name='Tipo de Cozinha')),
                ('descricao', models.TextField(blank=True, verbose_name='Descrição')),
                ('website', models.CharField(blank=True, max_length=255, verbose_name='Website')),
                ('telefone', models.CharField(blank=True, max_length=20, verbose_name='Telefone')),
                ('whatsapp', models.CharField(blank=True, max_length=20, verbose_name='WhatsApp')),
                ('email', models.EmailField(blank=True, max_length=254, verbose_name='Email')),
                ('plano_assinatura', models.CharField(choices=[('starter', 'Starter'), ('professional', 'Professional'), ('premium', 'Premium'), ('enterprise', 'Enterprise')], default='starter', max_length=20, verbose_name='Plano de Assinatura')),
                ('recursos_selecionados', models.JSONField(default=restaurantes.models.recursos_padrao, verbose_name='Recursos Selecionados')),
                ('status', models.CharField(choices=[('pending', 'Pendente'), ('active', 'Ativo'), ('suspended', 'Suspenso')], default='pending', max_length=20, verbose_name='Status')),
                ('excluido_em', models.DateTimeField(blank=True, null=True, verbose_name='Excluído em')),
                ('data_criacao', models.DateTimeField(auto_now_add=True, verbose_name='Data de Criação')),
                ('data_atualizacao', models.DateTimeField(auto_now=True, verbose_name='Data de Atualização')),
                ('criado_por', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='restaurantes_criados', to=settings.AUTH_USER_MODEL, verbose_name='Criado por')),
            ],
            options={
                'verbose_name': 'Restaurante',
                'verbose_name_plural': 'Restaurantes',
                'ordering': ['-data_criacao'],
            },
        ),
        migrations.CreateModel(
            name='Unidade',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('nome', models.CharField(max_length=100, verbose_name='Nome')),
                ('nome_url', models.CharField(max_length=30, verbose_name='Nome da URL')),
                ('telefone', models.CharField(blank=True, max_length=20, verbose_name='Telefone')),
                ('whatsapp', models.CharField(blank=True, max_length=20, verbose_name='WhatsApp')),
                ('cep', models.CharField(blank=True, max_length=9, verbose_name='CEP')),
                ('logradouro', models.CharField(blank=True, max_length=100, verbose_name='Logradouro')),
                ('numero', models.CharField(blank=True, max_length=10, verbose_name='Número')),
                ('complemento', models.CharField(blank=True, max_length=100, verbose_name='Complemento')),
                ('cidade', models.CharField(blank=True, max_length=50, verbose_name='Cidade')),
                ('estado', models.CharField(blank=True, max_length=2, verbose_name='Estado')),
                ('horario_funcionamento', models.JSONField(default=restaurantes.models.horario_padrao, verbose_name='Horário de Funcionamento')),
                ('recursos_selecionados', models.JSONField(default=restaurantes.models.recursos_padrao, verbose_name='Recursos Selecionados')),
                ('principal', models.BooleanField(default=False, verbose_name='Unidade Principal')),
                ('status', models.CharField(choices=[('active', 'Ativa'), ('inactive', 'Inativa')], default='active', max_length=10, verbose_name='Status')),
                ('data_criacao', models.DateTimeField(auto_now_add=True, verbose_name='Data de Criação')),
                ('data_atualizacao', models.DateTimeField(auto_now=True, verbose_name='Data de Atualização')),
                ('criado_por', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='unidades_criadas', to=settings.AUTH_USER_MODEL, verbose_name='Criado por')),
                ('restaurante', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='unidades', to='restaurantes.restaurante', verbose_name='Restaurante')),
            ],
            options={
                'verbose_name': 'Unidade',
                'verbose_name_plural': 'Unidades',
                'ordering': ['-principal', 'nome'],
                'unique_together': {('restaurante', 'nome_url')},
            },
        ),
        migrations.CreateModel(
            name='MidiaRestaurante',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('tipo_midia', models.CharField(choices=[('logo', 'Logo'), ('favicon', 'Favicon'), ('images', 'Imagem'), ('videos', 'Vídeo')], max_length=10, verbose_name='Tipo de Mídia')),
                ('arquivo', models.FileField(upload_to=restaurantes.models.caminho_midia, verbose_name='Arquivo')),
                ('nome_original', models.CharField(max_length=255, verbose_name='Nome Original')),
                ('tamanho', models.PositiveBigIntegerField(default=0, verbose_name='Tamanho (bytes)')),
                ('tipo_mime', models.CharField(max_length=100, verbose_name='Tipo MIME')),
                ('data_criacao', models.DateTimeField(auto_now_add=True, verbose_name='Data de Envio')),
                ('enviado_por', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='midias_enviadas', to=settings.AUTH_USER_MODEL, verbose_name='Enviado por')),
                ('restaurante', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='midias', to='restaurantes.restaurante', verbose_name='Restaurante')),
                ('unidade', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='midias', to='restaurantes.unidade', verbose_name='Unidade')),
            ],
            options={
                'verbose_name': 'Mídia do Restaurante',
                'verbose_name_plural': 'Mídias dos Restaurantes',
                'ordering': ['data_criacao'],
            },
        ),
        migrations.CreateModel(
            name='ConfiguracaoPagamento',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('metodos_aceitos', models.JSONField(default=restaurantes.models.metodos_padrao, verbose_name='Métodos Aceitos')),
                ('taxa_entrega_padrao', models.DecimalField(decimal_places=2, default=0, max_digits=8, verbose_name='Taxa de Entrega')),
                ('valor_minimo_pedido', models.DecimalField(decimal_places=2, default=0, max_digits=8, verbose_name='Pedido Mínimo')),
                ('tempo_entrega_estimado', models.PositiveIntegerField(default=0, verbose_name='Tempo de Entrega (min)')),
                ('taxa_servico_percentual', models.DecimalField(decimal_places=2, default=0, max_digits=5, verbose_name='Taxa de Serviço (%)')),
                ('chave_pix', models.CharField(blank=True, max_length=100, verbose_name='Chave PIX')),
                ('cnpj', models.CharField(blank=True, max_length=18, verbose_name='CNPJ')),
                ('razao_social', models.CharField(blank=True, max_length=150, verbose_name='Razão Social')),
                ('banco', models.CharField(blank=True, max_length=100, verbose_name='Banco')),
                ('agencia', models.CharField(blank=True, max_length=10, verbose_name='Agência')),
                ('conta', models.CharField(blank=True, max_length=30, verbose_name='Conta')),
                ('titular_conta', models.CharField(blank=True, max_length=150, verbose_name='Titular da Conta')),
                ('data_atualizacao', models.DateTimeField(auto_now=True, verbose_name='Data de Atualização')),
                ('restaurante', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='pagamento', to='restaurantes.restaurante', verbose_name='Restaurante')),
            ],
            options={
                'verbose_name': 'Configuração de Pagamento',
                'verbose_name_plural': 'Configurações de Pagamento',
            },
        ),
    ]
