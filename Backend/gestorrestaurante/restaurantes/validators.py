from django.core.exceptions import ValidationError
import re


RECURSO_OBRIGATORIO = 'digital_menu'

DIAS_SEMANA = ['monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday']

TIPOS_IMAGEM = ['image/jpeg', 'image/jpg', 'image/png', 'image/webp']
TIPOS_VIDEO = ['video/mp4', 'video/webm', 'video/ogg']
TAMANHO_MAXIMO_IMAGEM = 5 * 1024 * 1024
TAMANHO_MAXIMO_VIDEO = 50 * 1024 * 1024

REGEX_EMAIL = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
REGEX_TELEFONE = re.compile(r'^[\d\s()+-]+$')
REGEX_CEP = re.compile(r'^\d{5}-?\d{3}$')
REGEX_SLUG = re.compile(r'^[a-z0-9-]+$')
REGEX_HORARIO = re.compile(r'^([01]?[0-9]|2[0-3]):[0-5][0-9]$')
REGEX_WEBSITE = re.compile(r'^https?://.+')
REGEX_CHAVE_ALEATORIA = re.compile(
    r'^[a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12}$', re.IGNORECASE
)


def apenas_digitos(valor):
    return re.sub(r'\D', '', valor or '')


def _digitos_repetidos(digitos):
    return len(set(digitos)) == 1


def mensagem_erro(validador, valor):
    """
    Executa um validador e devolve a primeira mensagem de erro, ou None.

    Útil para validação campo a campo em formulários.
    """
    try:
        validador(valor)
    except ValidationError as erro:
        return erro.messages[0]
    return None


def validar_email(email):
    if not email:
        raise ValidationError('E-mail é obrigatório')
    if not REGEX_EMAIL.match(email):
        raise ValidationError('E-mail deve ter um formato válido')


def _validar_numero_contato(valor, rotulo):
    if not valor:
        raise ValidationError(f'{rotulo} é obrigatório')
    if not REGEX_TELEFONE.match(valor):
        raise ValidationError(f'{rotulo} deve conter apenas números e símbolos válidos')
    if len(apenas_digitos(valor)) < 10:
        raise ValidationError(f'{rotulo} deve ter pelo menos 10 dígitos')


def validar_telefone(telefone):
    _validar_numero_contato(telefone, 'Telefone')


def validar_whatsapp(whatsapp):
    _validar_numero_contato(whatsapp, 'WhatsApp')


def validar_nome_restaurante(nome):
    if not nome:
        raise ValidationError('Nome do restaurante é obrigatório')
    if len(nome) < 2:
        raise ValidationError('Nome deve ter pelo menos 2 caracteres')
    if len(nome) > 100:
        raise ValidationError('Nome deve ter no máximo 100 caracteres')


def _validar_slug(slug, minimo, maximo):
    if not REGEX_SLUG.match(slug):
        raise ValidationError('URL deve conter apenas letras minúsculas, números e hífens')
    if len(slug) < minimo:
        raise ValidationError(f'URL deve ter pelo menos {minimo} caracteres')
    if len(slug) > maximo:
        raise ValidationError(f'URL deve ter no máximo {maximo} caracteres')
    if slug.startswith('-') or slug.endswith('-'):
        raise ValidationError('URL não pode começar ou terminar com hífen')


def validar_nome_url(nome_url):
    """Valida o slug público do restaurante (3 a 50 caracteres)."""
    if not nome_url:
        raise ValidationError('URL é obrigatória')
    _validar_slug(nome_url, 3, 50)


def validar_nome_url_unidade(nome_url):
    """Valida o slug de uma unidade (2 a 30 caracteres)."""
    if not nome_url:
        raise ValidationError('URL da localização é obrigatória')
    _validar_slug(nome_url, 2, 30)


def validar_website(website):
    if website and not REGEX_WEBSITE.match(website):
        raise ValidationError('Website deve começar com http:// ou https://')


def validar_descricao(descricao):
    if descricao and len(descricao) > 500:
        raise ValidationError('Descrição deve ter no máximo 500 caracteres')


def validar_cep(cep):
    if not cep:
        raise ValidationError('CEP é obrigatório')
    if not REGEX_CEP.match(cep):
        raise ValidationError('CEP deve ter o formato 00000-000')


def validar_logradouro(logradouro):
    if not logradouro:
        raise ValidationError('Rua é obrigatória')
    if len(logradouro) < 3:
        raise ValidationError('Rua deve ter pelo menos 3 caracteres')
    if len(logradouro) > 100:
        raise ValidationError('Rua deve ter no máximo 100 caracteres')


def validar_numero(numero):
    if not numero:
        raise ValidationError('Número é obrigatório')
    if len(numero) > 10:
        raise ValidationError('Número deve ter no máximo 10 caracteres')


def validar_cidade(cidade):
    if not cidade:
        raise ValidationError('Cidade é obrigatória')
    if len(cidade) < 2:
        raise ValidationError('Cidade deve ter pelo menos 2 caracteres')
    if len(cidade) > 50:
        raise ValidationError('Cidade deve ter no máximo 50 caracteres')


def validar_estado(estado):
    if not estado:
        raise ValidationError('Estado é obrigatório')
    if len(estado) != 2:
        raise ValidationError('Estado deve ter 2 caracteres (ex: SP)')


def validar_nome_unidade(nome):
    if not nome:
        raise ValidationError('Nome da localização é obrigatório')
    if len(nome) < 3:
        raise ValidationError('Nome deve ter pelo menos 3 caracteres')
    if len(nome) > 100:
        raise ValidationError('Nome deve ter no máximo 100 caracteres')


def _minutos(horario):
    horas, minutos = horario.split(':')
    return int(horas) * 60 + int(minutos)


def erros_horario_funcionamento(horarios):
    """
    Retorna um dicionário ``{<dia>_open|<dia>_close: mensagem}`` com os
    problemas encontrados, ou None se os horários forem válidos.

    Dias ausentes são ignorados. Horário de fechamento menor que o de
    abertura é aceito (funcionamento pela madrugada); iguais não.
    """
    if not horarios:
        return {'operating_hours': 'Horários de funcionamento são obrigatórios'}

    erros = {}
    for dia in DIAS_SEMANA:
        horario_dia = horarios.get(dia)
        if not horario_dia or horario_dia.get('closed'):
            continue

        abertura = horario_dia.get('open')
        fechamento = horario_dia.get('close')

        if not abertura:
            erros[f'{dia}_open'] = 'Horário de abertura é obrigatório'
        elif not REGEX_HORARIO.match(abertura):
            erros[f'{dia}_open'] = 'Horário deve ter o formato HH:MM'

        if not fechamento:
            erros[f'{dia}_close'] = 'Horário de fechamento é obrigatório'
        elif not REGEX_HORARIO.match(fechamento):
            erros[f'{dia}_close'] = 'Horário deve ter o formato HH:MM'

        if (abertura and fechamento and REGEX_HORARIO.match(abertura)
                and REGEX_HORARIO.match(fechamento)
                and _minutos(abertura) == _minutos(fechamento)):
            erros[f'{dia}_close'] = 'Horário de fechamento deve ser diferente do horário de abertura'

    return erros or None


def validar_horario_funcionamento(horarios):
    erros = erros_horario_funcionamento(horarios)
    if erros:
        raise ValidationError(erros)


def validar_recursos_selecionados(recursos):
    if not isinstance(recursos, list):
        raise ValidationError('Recursos selecionados são obrigatórios')
    if not recursos:
        raise ValidationError('Pelo menos um recurso deve ser selecionado')
    if RECURSO_OBRIGATORIO not in recursos:
        raise ValidationError('Menu Digital é um recurso obrigatório')


def _validar_arquivo(arquivo, tipos, tamanho_maximo, mensagem_tipo, mensagem_tamanho):
    if not arquivo:
        raise ValidationError('Arquivo é obrigatório')
    if getattr(arquivo, 'content_type', None) not in tipos:
        raise ValidationError(mensagem_tipo)
    if arquivo.size > tamanho_maximo:
        raise ValidationError(mensagem_tamanho)


def validar_arquivo_imagem(arquivo):
    _validar_arquivo(
        arquivo, TIPOS_IMAGEM, TAMANHO_MAXIMO_IMAGEM,
        'Apenas arquivos JPEG, PNG e WebP são permitidos',
        'Arquivo deve ter no máximo 5MB'
    )


def validar_arquivo_video(arquivo):
    _validar_arquivo(
        arquivo, TIPOS_VIDEO, TAMANHO_MAXIMO_VIDEO,
        'Apenas arquivos MP4, WebM e OGG são permitidos',
        'Arquivo deve ter no máximo 50MB'
    )


def validar_cnpj(cnpj):
    """Valida o CNPJ pelos dois dígitos verificadores (pesos 5..2,9..2 e 6..2,9..2)."""
    if not cnpj:
        raise ValidationError('CNPJ é obrigatório')

    digitos = apenas_digitos(cnpj)
    if len(digitos) != 14:
        raise ValidationError('CNPJ deve ter 14 dígitos')
    if _digitos_repetidos(digitos):
        raise ValidationError('CNPJ inválido')

    numeros = [int(d) for d in digitos]
    for posicao, pesos in ((12, [5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]),
                           (13, [6, 5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2])):
        resto = sum(n * p for n, p in zip(numeros, pesos)) % 11
        digito = 0 if resto < 2 else 11 - resto
        if numeros[posicao] != digito:
            raise ValidationError('CNPJ inválido')


def validar_conta_bancaria(conta):
    if not conta:
        raise ValidationError('Conta bancária é obrigatória')
    limpa = re.sub(r'[^a-zA-Z0-9]', '', conta)
    if len(limpa) < 4:
        raise ValidationError('Conta deve ter pelo menos 4 caracteres')
    if len(limpa) > 20:
        raise ValidationError('Conta deve ter no máximo 20 caracteres')


def validar_chave_pix(chave):
    """
    Aceita e-mail, telefone (10 ou 11 dígitos), CPF (11 dígitos),
    CNPJ (14 dígitos) ou chave aleatória no formato UUID.
    """
    if not chave:
        raise ValidationError('Chave PIX é obrigatória')

    if REGEX_EMAIL.match(chave):
        return

    digitos = apenas_digitos(chave)
    if REGEX_TELEFONE.match(chave) and 10 <= len(digitos) <= 11:
        return
    if len(digitos) in (11, 14) and not _digitos_repetidos(digitos):
        return
    if REGEX_CHAVE_ALEATORIA.match(chave):
        return

    raise ValidationError(
        'Chave PIX deve ser um e-mail, telefone, CPF, CNPJ ou chave aleatória válida'
    )


def validar_perfil_restaurante(dados):
    """
    Valida os dados gerais do restaurante.

    Retorna ``{campo: mensagem}`` ou None quando não há erros.
    """
    regras = [
        ('restaurant_name', validar_nome_restaurante),
        ('restaurant_url_name', validar_nome_url),
        ('website', validar_website),
        ('description', validar_descricao),
        ('phone', validar_telefone),
        ('whatsapp', validar_whatsapp),
    ]
    erros = {}
    for campo, validador in regras:
        mensagem = mensagem_erro(validador, dados.get(campo))
        if mensagem:
            erros[campo] = mensagem
    return erros or None


def validar_dados_unidade(dados):
    """
    Valida uma unidade no formato da API.

    Campos de endereço usam a chave ``address.<campo>`` e os horários
    ``operating_hours.<dia>_open``/``operating_hours.<dia>_close``.
    """
    erros = {}
    for campo, validador in (
        ('name', validar_nome_unidade),
        ('url_name', validar_nome_url_unidade),
        ('phone', validar_telefone),
        ('whatsapp', validar_whatsapp),
    ):
        mensagem = mensagem_erro(validador, dados.get(campo))
        if mensagem:
            erros[campo] = mensagem

    endereco = dados.get('address')
    if endereco:
        for campo, validador in (
            ('address_zip_code', validar_cep),
            ('address_street', validar_logradouro),
            ('address_street_number', validar_numero),
            ('address_city', validar_cidade),
            ('address_state', validar_estado),
        ):
            mensagem = mensagem_erro(validador, endereco.get(campo))
            if mensagem:
                erros[f'address.{campo}'] = mensagem

    erros_horario = erros_horario_funcionamento(dados.get('operating_hours'))
    if erros_horario:
        for chave, mensagem in erros_horario.items():
            if chave == 'operating_hours':
                erros[chave] = mensagem
            else:
                erros[f'operating_hours.{chave}'] = mensagem

    mensagem = mensagem_erro(validar_recursos_selecionados, dados.get('selected_features'))
    if mensagem:
        erros['selected_features'] = mensagem

    return erros or None


def validar_dados_pagamento(dados):
    """Valida a configuração de pagamento (só os campos preenchidos)."""
    erros = {}
    for campo, validador in (
        ('cnpj', validar_cnpj),
        ('pix_key', validar_chave_pix),
        ('bank_account', validar_conta_bancaria),
    ):
        if dados.get(campo):
            mensagem = mensagem_erro(validador, dados.get(campo))
            if mensagem:
                erros[campo] = mensagem
    return erros or None
