import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('usuarios', '0001_initial'),
        ('restaurantes', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='usuario',
            name='restaurante',
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='equipe', to='restaurantes.restaurante', verbose_name='Restaurante'),
        ),
        migrations.CreateModel(
            name='AtribuicaoPapel',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('data_atribuicao', models.DateTimeField(auto_now_add=True, verbose_name='Data de Atribuição')),
                ('papel', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to='usuarios.papel', verbose_name='Papel')),
                ('unidade', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='atribuicoes', to='restaurantes.unidade', verbose_name='Unidade')),
                ('usuario', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='atribuicoes', to=settings.AUTH_USER_MODEL, verbose_name='Usuário')),
            ],
            options={
                'verbose_name': 'Atribuição de Papel',
                'verbose_name_plural': 'Atribuições de Papéis',
                'ordering': ['data_atribuicao'],
                'unique_together': {('usuario', 'papel', 'unidade')},
            },
        ),
        migrations.AddField(
            model_name='usuario',
            name='papeis',
            field=models.ManyToManyField(through='usuarios.AtribuicaoPapel', through_fields=('usuario', 'papel'), to='usuarios.papel', verbose_name='Papéis'),
        ),
    ]
