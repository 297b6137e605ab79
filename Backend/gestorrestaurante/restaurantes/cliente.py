import logging

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

MENSAGEM_ERRO_GENERICO = 'Ocorreu um erro inesperado. Tente novamente.'
MENSAGEM_ERRO_CONEXAO = 'Não foi possível conectar ao servidor. Verifique sua conexão.'


class ErroApi(Exception):
    """
    Erro devolvido pela API, já convertido do envelope
    ``{"erro": {"codigo", "mensagem", "campos"}}``.

    ``status`` é None quando a requisição nem chegou ao servidor.
    """

    def __init__(self, status, codigo, mensagem, campos=None):
        super().__init__(mensagem)
        self.status = status
        self.codigo = codigo
        self.mensagem = mensagem
        self.campos = campos or {}

    def __repr__(self):
        return f'ErroApi(status={self.status!r}, codigo={self.codigo!r}, mensagem={self.mensagem!r})'


class ClienteApi:
    """Cliente HTTP da API v1 usado pelas telas de perfil e de usuários"""

    def __init__(self, url_base=None, token=None, timeout=None, sessao=None):
        self.url_base = (url_base or settings.API_URL).rstrip('/')
        self.token = token
        self.timeout = timeout or settings.API_TIMEOUT
        self.sessao = sessao or requests.Session()
        # nome_url -> bool, vive enquanto o cliente existir
        self._restaurantes_existentes = {}

    def _cabecalhos(self):
        cabecalhos = {'Accept': 'application/json'}
        if self.token:
            cabecalhos['Authorization'] = f'Bearer {self.token}'
        return cabecalhos

    @staticmethod
    def erro_da_resposta(resposta):
        """Converte uma resposta de erro em ErroApi"""
        try:
            corpo = resposta.json()
        except ValueError:
            corpo = None

        erro = corpo.get('erro') if isinstance(corpo, dict) else None
        if isinstance(erro, dict) and erro.get('mensagem'):
            return ErroApi(
                resposta.status_code,
                erro.get('codigo') or 'erro',
                erro['mensagem'],
                erro.get('campos') or {},
            )
        return ErroApi(resposta.status_code, 'erro', MENSAGEM_ERRO_GENERICO)

    def requisitar(self, metodo, caminho, **kwargs):
        url = f"{self.url_base}/{caminho.lstrip('/')}"
        try:
            resposta = self.sessao.request(
                metodo, url, headers=self._cabecalhos(), timeout=self.timeout, **kwargs
            )
        except requests.RequestException as erro:
            logger.warning('Falha de conexão em %s %s: %s', metodo, url, erro)
            raise ErroApi(None, 'erro_conexao', MENSAGEM_ERRO_CONEXAO) from erro

        if resposta.status_code >= 400:
            erro = self.erro_da_resposta(resposta)
            logger.info('%s %s retornou %s: %s', metodo, url, erro.status, erro.mensagem)
            raise erro

        if resposta.status_code == 204 or not resposta.content:
            return None
        return resposta.json()

    # Autenticação

    def login(self, identificador, senha):
        dados = self.requisitar('POST', 'auth/login/', json={'login': identificador, 'password': senha})
        self.token = dados['access']
        return dados

    # Restaurantes

    def obter_restaurante(self, restaurante_id):
        return self.requisitar('GET', f'restaurants/{restaurante_id}/')

    def atualizar_restaurante(self, restaurante_id, dados):
        return self.requisitar('PATCH', f'restaurants/{restaurante_id}/', json=dados)

    def verificar_url(self, nome_url):
        return self.requisitar('GET', 'restaurants/check-url/', params={'url_name': nome_url})

    def restaurante_existe(self, nome_url):
        """Consulta (com cache por instância) se há restaurante com o nome de URL"""
        if nome_url not in self._restaurantes_existentes:
            try:
                self.requisitar('GET', f'restaurants/by-url/{nome_url}/')
                existe = True
            except ErroApi as erro:
                if erro.status != 404:
                    raise
                existe = False
            self._restaurantes_existentes[nome_url] = existe
        return self._restaurantes_existentes[nome_url]

    # Unidades

    def listar_unidades(self, restaurante_id):
        return self.requisitar('GET', f'restaurants/{restaurante_id}/locations/')

    def adicionar_unidade(self, restaurante_id, dados):
        return self.requisitar('POST', f'restaurants/{restaurante_id}/locations/', json=dados)

    def atualizar_unidade(self, restaurante_id, unidade_id, dados):
        return self.requisitar('PATCH', f'restaurants/{restaurante_id}/locations/{unidade_id}/', json=dados)

    # Mídia

    def obter_midia(self, restaurante_id):
        return self.requisitar('GET', f'restaurants/{restaurante_id}/media/')

    def enviar_midia(self, restaurante_id, tipo_midia, arquivos, unidade_id=None):
        dados = {'type': tipo_midia}
        if unidade_id is not None:
            dados['location_id'] = unidade_id
        return self.requisitar(
            'POST', f'restaurants/{restaurante_id}/media/',
            data=dados, files=[('files', arquivo) for arquivo in arquivos]
        )

    def excluir_midia(self, restaurante_id, midia_id):
        return self.requisitar('DELETE', f'restaurants/{restaurante_id}/media/{midia_id}/')

    # Idiomas

    def idiomas_disponiveis(self):
        return self.requisitar('GET', 'languages/available/')

    def obter_idiomas(self, restaurante_id):
        return self.requisitar('GET', f'restaurants/{restaurante_id}/languages/')

    def atualizar_idiomas(self, restaurante_id, idiomas):
        return self.requisitar('PUT', f'restaurants/{restaurante_id}/languages/', json={'languages': idiomas})

    # Pagamento

    def obter_pagamento(self, restaurante_id):
        return self.requisitar('GET', f'restaurants/{restaurante_id}/payment/')

    def atualizar_pagamento(self, restaurante_id, dados):
        return self.requisitar('PUT', f'restaurants/{restaurante_id}/payment/', json=dados)

    # Usuários

    def listar_papeis(self):
        return self.requisitar('GET', 'users/roles/')

    def criar_usuario(self, dados):
        return self.requisitar('POST', 'users/', json=dados)

    def atualizar_usuario(self, usuario_id, dados):
        return self.requisitar('PATCH', f'users/{usuario_id}/', json=dados)
