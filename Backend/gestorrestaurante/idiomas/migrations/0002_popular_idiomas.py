from django.db import migrations


IDIOMAS = [
    ('Português Brasileiro', 'pt-BR', 'Português Brasileiro', 'br.svg', 10),
    ('English', 'en', 'English', 'us.svg', 20),
    ('Español', 'es', 'Español', 'es.svg', 30),
    ('日本語', 'ja', '日本語', 'jp.svg', 40),
    ('中文', 'zh', '中文', 'cn.svg', 50),
    ('العربية', 'ar', 'العربية', 'sa.svg', 60),
    ('עברית', 'he', 'עברית', 'il.svg', 70),
    ('Türkçe', 'tr', 'Türkçe', 'tr.svg', 80),
    ('Français', 'fr', 'Français', 'fr.svg', 90),
    ('Deutsch', 'de', 'Deutsch', 'de.svg', 100),
    ('Italiano', 'it', 'Italiano', 'it.svg', 110),
    ('Русский', 'ru', 'Русский', 'ru.svg', 120),
    ('한국어', 'ko', '한국어', 'kr.svg', 130),
    ('Nederlands', 'nl', 'Nederlands', 'nl.svg', 140),
    ('Svenska', 'sv', 'Svenska', 'se.svg', 150),
]


def criar_idiomas(apps, schema_editor):
    """Popula o catálogo de idiomas disponíveis"""
    Idioma = apps.get_model('idiomas', 'Idioma')

    for nome, codigo, nome_nativo, bandeira, ordem in IDIOMAS:
        Idioma.objects.get_or_create(
            codigo=codigo,
            defaults={
                'nome': nome,
                'nome_nativo': nome_nativo,
                'arquivo_bandeira': bandeira,
                'ordem_exibicao': ordem,
            }
        )


def remover_idiomas(apps, schema_editor):
    Idioma = apps.get_model('idiomas', 'Idioma')
    Idioma.objects.filter(codigo__in=[idioma[1] for idioma in IDIOMAS]).delete()


class Migration(migrations.Migration):

    dependencies = [
        ('idiomas', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(criar_idiomas, remover_idiomas),
    ]
