import logging

import requests
from django.conf import settings
from .validators import apenas_digitos

logger = logging.getLogger(__name__)


class ErroConsultaCep(Exception):
    """Falha de rede ou resposta inválida do serviço de CEP"""


class CepNaoEncontrado(ErroConsultaCep):
    """O serviço respondeu, mas o CEP não existe"""


def formatar_cep(valor):
    """Aplica a máscara 00000-000 sobre o que foi digitado"""
    digitos = apenas_digitos(valor)[:8]
    if len(digitos) > 5:
        return f'{digitos[:5]}-{digitos[5:]}'
    return digitos


class ConsultaCep:
    """Cliente do ViaCEP (GET {VIACEP_URL}/{cep}/json/)"""

    def __init__(self, url_base=None, timeout=None, sessao=None):
        self.url_base = (url_base or settings.VIACEP_URL).rstrip('/')
        self.timeout = timeout or settings.API_TIMEOUT
        self.sessao = sessao or requests.Session()

    def buscar(self, cep):
        """
        Retorna o endereço no formato usado pelas unidades:
        address_zip_code, address_street, address_neighborhood,
        address_city e address_state.
        """
        digitos = apenas_digitos(cep)
        if len(digitos) != 8:
            raise ErroConsultaCep('CEP deve ter o formato 00000-000')

        try:
            resposta = self.sessao.get(f'{self.url_base}/{digitos}/json/', timeout=self.timeout)
            resposta.raise_for_status()
            dados = resposta.json()
        except (requests.RequestException, ValueError) as erro:
            logger.warning('Erro ao consultar o CEP %s: %s', digitos, erro)
            raise ErroConsultaCep('Erro ao buscar CEP') from erro

        if not isinstance(dados, dict) or dados.get('erro'):
            logger.info('CEP %s não encontrado', digitos)
            raise CepNaoEncontrado('CEP não encontrado')

        return {
            'address_zip_code': formatar_cep(dados.get('cep') or digitos),
            'address_street': dados.get('logradouro', ''),
            'address_neighborhood': dados.get('bairro', ''),
            'address_city': dados.get('localidade', ''),
            'address_state': dados.get('uf', ''),
        }
