import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('restaurantes', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Idioma',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('nome', models.CharField(max_length=100, verbose_name='Nome')),
                ('codigo', models.CharField(max_length=10, unique=True, verbose_name='Código')),
                ('nome_nativo', models.CharField(max_length=100, verbose_name='Nome Nativo')),
                ('arquivo_bandeira', models.CharField(blank=True, max_length=100, verbose_name='Arquivo da Bandeira')),
                ('ordem_exibicao', models.PositiveIntegerField(default=0, verbose_name='Ordem de Exibição')),
                ('ativo', models.BooleanField(default=True, verbose_name='Ativo')),
                ('data_criacao', models.DateTimeField(auto_now_add=True, verbose_name='Data de Criação')),
            ],
            options={
                'verbose_name': 'Idioma',
                'verbose_name_plural': 'Idiomas',
                'ordering': ['ordem_exibicao', 'nome'],
            },
        ),
        migrations.CreateModel(
            name='RestauranteIdioma',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('ordem_exibicao', models.PositiveIntegerField(default=0, verbose_name='Ordem de Exibição')),
                ('padrao', models.BooleanField(default=False, verbose_name='Idioma Padrão')),
                ('ativo', models.BooleanField(default=True, verbose_name='Ativo')),
                ('data_criacao', models.DateTimeField(auto_now_add=True, verbose_name='Data de Criação')),
                ('data_atualizacao', models.DateTimeField(auto_now=True, verbose_name='Data de Atualização')),
                ('idioma', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='restaurantes', to='idiomas.idioma', verbose_name='Idioma')),
                ('restaurante', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='idiomas', to='restaurantes.restaurante', verbose_name='Restaurante')),
            ],
            options={
                'verbose_name': 'Idioma do Restaurante',
                'verbose_name_plural': 'Idiomas dos Restaurantes',
                'ordering': ['ordem_exibicao', 'idioma__ordem_exibicao'],
                'unique_together': {('restaurante', 'idioma')},
            },
        ),
    ]
