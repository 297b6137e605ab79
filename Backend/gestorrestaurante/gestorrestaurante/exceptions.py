import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

MENSAGEM_ERRO_INTERNO = 'Erro interno do servidor. Tente novamente mais tarde.'
MENSAGEM_DADOS_INVALIDOS = 'Dados inválidos.'


class ErroAplicacao(APIException):
    """
    Base das exceções de regra de negócio do projeto.

    Carrega um código, uma mensagem legível e, opcionalmente, um mapa de
    erros por campo. O status HTTP vem de ``status_code`` da subclasse.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Não foi possível concluir a operação.'
    default_code = 'erro'

    def __init__(self, mensagem=None, campos=None, codigo=None):
        self.mensagem = mensagem or str(self.default_detail)
        self.campos = campos or {}
        self.codigo = codigo or self.default_code
        super().__init__(detail=self.mensagem, code=self.codigo)

    def __str__(self):
        return self.mensagem


class ErroValidacao(ErroAplicacao):
    default_detail = MENSAGEM_DADOS_INVALIDOS
    default_code = 'validacao'


class ErroNegocio(ErroAplicacao):
    default_detail = 'Operação não permitida pelas regras de negócio.'
    default_code = 'regra_negocio'


class ErroPermissao(ErroAplicacao):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Você não tem permissão para executar esta ação.'
    default_code = 'permissao'


class ErroNaoEncontrado(ErroAplicacao):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Recurso não encontrado.'
    default_code = 'nao_encontrado'


class ErroConflito(ErroAplicacao):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'O recurso já existe.'
    default_code = 'conflito'


def achatar_erros(erros, prefixo=''):
    """
    Converte a estrutura de erros do DRF em um mapa plano ``{campo: mensagem}``.

    Campos aninhados viram chaves com ponto (``address.address_zip_code``) e
    listas de objetos usam o índice (``locations.0.name``).
    """
    campos = {}
    if isinstance(erros, dict):
        for chave, valor in erros.items():
            nome = f'{prefixo}.{chave}' if prefixo else str(chave)
            campos.update(achatar_erros(valor, nome))
    elif isinstance(erros, list):
        if erros and all(not isinstance(item, (dict, list)) for item in erros):
            campos[prefixo] = str(erros[0])
        else:
            for indice, item in enumerate(erros):
                if item:
                    nome = f'{prefixo}.{indice}' if prefixo else str(indice)
                    campos.update(achatar_erros(item, nome))
    elif erros is not None:
        campos[prefixo] = str(erros)
    return campos


def _envelope(codigo, mensagem, campos=None):
    return {'erro': {'codigo': codigo, 'mensagem': mensagem, 'campos': campos or {}}}


def tratar_excecao(exc, context):
    """
    Handler de exceções do DRF.

    Todo erro sai no mesmo formato:
    ``{"erro": {"codigo": ..., "mensagem": ..., "campos": {...}}}``.
    """
    if isinstance(exc, DjangoValidationError):
        if hasattr(exc, 'error_dict'):
            exc = ErroValidacao(campos=achatar_erros(exc.message_dict))
        else:
            exc = ErroValidacao(mensagem=exc.messages[0])

    resposta = exception_handler(exc, context)

    if resposta is None:
        view = context.get('view')
        logger.exception(
            'Erro não tratado em %s',
            view.__class__.__name__ if view else 'view desconhecida'
        )
        return Response(
            _envelope('erro_interno', MENSAGEM_ERRO_INTERNO),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    if isinstance(exc, ErroAplicacao):
        resposta.data = _envelope(exc.codigo, exc.mensagem, exc.campos)
    elif isinstance(exc, ValidationError):
        campos = achatar_erros(resposta.data)
        mensagem = campos.pop('non_field_errors', None) or MENSAGEM_DADOS_INVALIDOS
        resposta.data = _envelope('validacao', mensagem, campos)
    else:
        detalhe = resposta.data.get('detail', '') if isinstance(resposta.data, dict) else ''
        codigo = getattr(detalhe, 'code', None) or getattr(exc, 'default_code', 'erro')
        resposta.data = _envelope(codigo, str(detalhe) or MENSAGEM_ERRO_INTERNO)

    if resposta.status_code >= 500:
        logger.error('Erro %s: %s', resposta.status_code, resposta.data['erro']['mensagem'])
    else:
        logger.info('Requisição rejeitada (%s): %s', resposta.status_code, resposta.data['erro']['mensagem'])
    return resposta
