from django.db import migrations


PAPEIS = [
    ('superadmin', 1, True, 'Acesso total à plataforma'),
    ('restaurant_administrator', 2, True, 'Administra o restaurante e todas as unidades'),
    ('location_administrator', 3, True, 'Administra as unidades atribuídas'),
    ('manager', 4, False, 'Gerencia a operação da unidade'),
    ('waiter', 5, False, 'Atendimento às mesas'),
    ('kitchen', 5, False, 'Preparo dos pedidos'),
    ('cashier', 5, False, 'Operação do caixa'),
    ('food_runner', 5, False, 'Entrega dos pratos às mesas'),
    ('kds_operator', 5, False, 'Operação do painel da cozinha (KDS)'),
    ('pos_operator', 5, False, 'Operação do ponto de venda (POS)'),
]


def criar_papeis(apps, schema_editor):
    """Cria os papéis padrão do sistema"""
    Papel = apps.get_model('usuarios', 'Papel')

    for tipo, nivel, e_admin, descricao in PAPEIS:
        Papel.objects.get_or_create(
            tipo=tipo,
            defaults={'nivel': nivel, 'e_admin': e_admin, 'descricao': descricao}
        )


def remover_papeis(apps, schema_editor):
    """Remove os papéis se precisar fazer rollback"""
    Papel = apps.get_model('usuarios', 'Papel')
    Papel.objects.filter(tipo__in=[tipo for tipo, *_ in PAPEIS]).delete()


class Migration(migrations.Migration):

    dependencies = [
        ('usuarios', '0002_usuario_restaurante_atribuicaopapel'),
    ]

    operations = [
        migrations.RunPython(criar_papeis, remover_papeis),
    ]
