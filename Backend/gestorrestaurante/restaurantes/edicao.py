"""
Estado da tela de perfil do restaurante.

Cada aba (general, locations, media, features, payment) tem seu próprio
buffer de edição, criado como cópia profunda dos dados canônicos. As
alterações vão só para o buffer; os dados canônicos mudam apenas quando a
API confirma um salvamento ou quando um carregamento termina.
"""
import copy
import itertools
import logging

from .cep import CepNaoEncontrado, ConsultaCep, ErroConsultaCep, formatar_cep
from .cliente import ErroApi
from .validators import (
    RECURSO_OBRIGATORIO, apenas_digitos, mensagem_erro, validar_dados_pagamento,
    validar_dados_unidade, validar_perfil_restaurante, validar_recursos_selecionados
)

logger = logging.getLogger(__name__)

ABAS = ('general', 'locations', 'media', 'features', 'payment')

CAMPO_CEP = 'address.address_zip_code'
CAMPOS_ENDERECO_CEP = ('address_street', 'address_city', 'address_state')

# Campos gerais enviados ao salvar; o nome de URL não muda pela tela de perfil
CAMPOS_GERAIS = (
    'restaurant_name', 'business_type', 'cuisine_type', 'description',
    'website', 'phone', 'whatsapp', 'email',
)


def normalizar(valor):
    """
    Forma canônica para comparação: chaves com None somem dos dicionários
    e tuplas viram listas.
    """
    if isinstance(valor, dict):
        return {
            chave: normalizar(item)
            for chave, item in valor.items()
            if item is not None
        }
    if isinstance(valor, (list, tuple)):
        return [normalizar(item) for item in valor]
    return valor


def sao_equivalentes(a, b):
    return normalizar(a) == normalizar(b)


def _segmento(chave):
    return int(chave) if chave.isdigit() else chave


def definir_caminho(dados, caminho, valor):
    """Grava ``valor`` em ``dados`` seguindo um caminho como ``0.address.address_city``"""
    chaves = [_segmento(chave) for chave in caminho.split('.')]
    atual = dados
    for chave, proxima in zip(chaves, chaves[1:]):
        if isinstance(chave, int):
            atual = atual[chave]
        else:
            if not isinstance(atual.get(chave), (dict, list)):
                atual[chave] = [] if isinstance(proxima, int) else {}
            atual = atual[chave]
    atual[chaves[-1]] = valor


def chaves_erro_unidade(campo):
    """Chaves de erro (no formato de validar_dados_unidade) afetadas por um campo"""
    if campo.startswith('operating_hours.'):
        dia = campo.split('.')[1]
        return [f'operating_hours.{dia}_open', f'operating_hours.{dia}_close']
    return [campo]


class EstadoPerfilRestaurante:
    """Máquina de estados das abas de edição do perfil do restaurante"""

    def __init__(self, restaurante=None, unidades=None, midia=None, pagamento=None, consulta_cep=None):
        self.restaurante = copy.deepcopy(restaurante) if restaurante else {}
        self.unidades = copy.deepcopy(unidades) if unidades else []
        self.midia = copy.deepcopy(midia) if midia else {'logo': None, 'favicon': None, 'images': [], 'videos': []}
        self.pagamento = copy.deepcopy(pagamento) if pagamento else {}
        self.consulta_cep = consulta_cep or ConsultaCep()

        self.aba_ativa = 'general'
        self.editando = {aba: False for aba in ABAS}
        self.dados_edicao = {aba: None for aba in ABAS}
        self.alteracoes_pendentes = {aba: False for aba in ABAS}
        self.erros_campos = {}
        self.campos_tocados = {}
        self.tentativa_envio = False
        self.erro = {'fetching': None, 'updating': None}
        self.salvando = False

        self.confirmacao_pendente = False
        self.acao_pendente = None

        self._contador = itertools.count(1)
        self._geracoes = {}

    # Dados canônicos

    def _validar_aba(self, aba):
        if aba not in ABAS:
            raise ValueError(f'Aba desconhecida: {aba}')

    def dados_canonicos(self, aba):
        self._validar_aba(aba)
        if aba == 'general':
            dados = copy.deepcopy(self.restaurante)
            dados['selected_features'] = dados.get('selected_features') or [RECURSO_OBRIGATORIO]
            dados['subscription_plan'] = dados.get('subscription_plan') or 'starter'
            return dados
        if aba == 'locations':
            return copy.deepcopy(self.unidades)
        if aba == 'features':
            return {
                'selected_features': list(self.restaurante.get('selected_features') or [RECURSO_OBRIGATORIO]),
                'subscription_plan': self.restaurante.get('subscription_plan') or 'starter',
            }
        if aba == 'media':
            return copy.deepcopy(self.midia)
        return copy.deepcopy(self.pagamento)

    def _limpar_validacao(self):
        self.erros_campos = {}
        self.campos_tocados = {}
        self.tentativa_envio = False

    # Ciclo de edição

    def iniciar_edicao(self, aba):
        self.dados_edicao[aba] = self.dados_canonicos(aba)
        self.editando[aba] = True
        self.alteracoes_pendentes[aba] = False
        self._limpar_validacao()

    def cancelar_edicao(self, aba):
        self._validar_aba(aba)
        self.editando[aba] = False
        self.dados_edicao[aba] = None
        self.alteracoes_pendentes[aba] = False
        self._limpar_validacao()

    def _exigir_edicao(self, aba):
        self._validar_aba(aba)
        if not self.editando[aba]:
            raise ValueError(f'A aba {aba} não está em edição')

    def _recalcular_alteracoes(self, aba):
        self.alteracoes_pendentes[aba] = not sao_equivalentes(
            self.dados_edicao[aba], self.dados_canonicos(aba)
        )

    def atualizar_campo(self, aba, campo, valor):
        """Grava no buffer da aba; ``campo`` aceita caminhos como ``0.operating_hours.monday.open``"""
        self._exigir_edicao(aba)
        definir_caminho(self.dados_edicao[aba], campo, valor)
        self._recalcular_alteracoes(aba)

    def possui_alteracoes(self):
        return any(self.alteracoes_pendentes.values())

    # Validação de campos

    def erro_visivel(self, campo):
        """Só mostra o erro de campos já tocados ou depois de uma tentativa de envio"""
        if self.campos_tocados.get(campo) or self.tentativa_envio:
            return self.erros_campos.get(campo)
        return None

    def _registrar_erro(self, chave, mensagem):
        if mensagem:
            self.erros_campos[chave] = mensagem
        else:
            self.erros_campos.pop(chave, None)

    def alterar_campo_geral(self, campo, valor):
        self.atualizar_campo('general', campo, valor)
        self.campos_tocados[campo] = True
        erros = validar_perfil_restaurante(self.dados_edicao['general']) or {}
        self._registrar_erro(campo, erros.get(campo))

    def alterar_campo_pagamento(self, campo, valor):
        self.atualizar_campo('payment', campo, valor)
        self.campos_tocados[campo] = True
        erros = validar_dados_pagamento(self.dados_edicao['payment']) or {}
        self._registrar_erro(campo, erros.get(campo))

    def alterar_campo_unidade(self, indice, campo, valor):
        """
        Altera um campo da unidade ``indice`` e valida na hora. Os erros ficam
        em ``location_<indice>_<campo>``. Um CEP completo dispara a consulta
        de endereço.
        """
        if campo == CAMPO_CEP:
            valor = formatar_cep(valor)
        self.atualizar_campo('locations', f'{indice}.{campo}', valor)

        erros = validar_dados_unidade(self.dados_edicao['locations'][indice]) or {}
        for chave in chaves_erro_unidade(campo):
            chave_local = f'location_{indice}_{chave}'
            self.campos_tocados[chave_local] = True
            self._registrar_erro(chave_local, erros.get(chave))

        if campo == CAMPO_CEP and len(apenas_digitos(valor)) == 8:
            self.buscar_cep(indice, valor)

    def buscar_cep(self, indice, cep):
        """
        Preenche rua, cidade e estado da unidade a partir do CEP. Em caso de
        falha, apenas registra o erro no campo do CEP.
        """
        chave = f'location_{indice}_{CAMPO_CEP}'
        recurso = f'cep_{indice}'
        token = self.iniciar_requisicao(recurso)
        try:
            endereco = self.consulta_cep.buscar(cep)
        except CepNaoEncontrado:
            self.erros_campos[chave] = 'CEP não encontrado'
            return False
        except ErroConsultaCep:
            self.erros_campos[chave] = 'Erro ao buscar CEP'
            return False

        if not self.requisicao_atual(recurso, token) or not self.editando['locations']:
            return False

        for campo in CAMPOS_ENDERECO_CEP:
            self.atualizar_campo('locations', f'{indice}.address.{campo}', endereco[campo])
            self.erros_campos.pop(f'location_{indice}_address.{campo}', None)
        self.erros_campos.pop(chave, None)
        return True

    def validar_aba(self, aba):
        """Erros da aba inteira, com as mesmas chaves usadas na validação por campo"""
        self._exigir_edicao(aba)
        dados = self.dados_edicao[aba]
        if aba == 'general':
            return validar_perfil_restaurante(dados) or {}
        if aba == 'locations':
            erros = {}
            for indice, unidade in enumerate(dados):
                for chave, mensagem in (validar_dados_unidade(unidade) or {}).items():
                    erros[f'location_{indice}_{chave}'] = mensagem
            return erros
        if aba == 'features':
            mensagem = mensagem_erro(validar_recursos_selecionados, dados.get('selected_features'))
            return {'selected_features': mensagem} if mensagem else {}
        if aba == 'payment':
            return validar_dados_pagamento(dados) or {}
        return {}

    # Confirmação de descarte

    def solicitar_troca_aba(self, aba):
        """Troca de aba; com alterações pendentes em qualquer aba, pede confirmação"""
        self._validar_aba(aba)
        if aba == self.aba_ativa:
            return True
        if self.possui_alteracoes():
            self.acao_pendente = {'tipo': 'trocar_aba', 'aba': aba}
            self.confirmacao_pendente = True
            return False
        self.aba_ativa = aba
        return True

    def solicitar_cancelamento(self, aba):
        self._validar_aba(aba)
        if self.alteracoes_pendentes[aba]:
            self.acao_pendente = {'tipo': 'cancelar', 'aba': aba}
            self.confirmacao_pendente = True
            return False
        self.cancelar_edicao(aba)
        return True

    def confirmar_descarte(self):
        acao = self.acao_pendente
        for aba in ABAS:
            if self.editando[aba]:
                self.cancelar_edicao(aba)
        if acao and acao['tipo'] == 'trocar_aba':
            self.aba_ativa = acao['aba']
        self.acao_pendente = None
        self.confirmacao_pendente = False

    def recusar_descarte(self):
        self.acao_pendente = None
        self.confirmacao_pendente = False

    # Requisições

    def iniciar_requisicao(self, recurso):
        """Gera o token da requisição mais recente para o recurso"""
        token = next(self._contador)
        self._geracoes[recurso] = token
        return token

    def requisicao_atual(self, recurso, token):
        return self._geracoes.get(recurso) == token

    def aplicar_resposta(self, recurso, token, dados):
        """
        Aplica a resposta aos dados canônicos. Respostas de requisições que
        já foram substituídas por outra mais nova são descartadas.
        """
        if not self.requisicao_atual(recurso, token):
            logger.debug('Resposta obsoleta de %s ignorada (token %s)', recurso, token)
            return False

        if recurso in ('general', 'features', 'restaurant'):
            self.restaurante = copy.deepcopy(dados)
        elif recurso == 'locations':
            self.unidades = copy.deepcopy(dados)
        elif recurso == 'media':
            self.midia = copy.deepcopy(dados)
        elif recurso == 'payment':
            self.pagamento = copy.deepcopy(dados)
        return True

    def carregar(self, cliente, restaurante_id):
        """Busca restaurante, unidades, mídia e pagamento"""
        self.erro['fetching'] = None
        chamadas = (
            ('restaurant', cliente.obter_restaurante),
            ('locations', cliente.listar_unidades),
            ('media', cliente.obter_midia),
            ('payment', cliente.obter_pagamento),
        )
        for recurso, chamada in chamadas:
            token = self.iniciar_requisicao(recurso)
            try:
                dados = chamada(restaurante_id)
            except ErroApi as erro:
                self.erro['fetching'] = erro.mensagem
                return False
            self.aplicar_resposta(recurso, token, dados)
        return True

    def _enviar(self, aba, cliente):
        restaurante_id = self.restaurante['id']
        dados = self.dados_edicao[aba]

        if aba == 'general':
            payload = {campo: dados.get(campo) for campo in CAMPOS_GERAIS if campo in dados}
            return cliente.atualizar_restaurante(restaurante_id, payload)

        if aba == 'features':
            recursos = list(dados.get('selected_features') or [])
            if RECURSO_OBRIGATORIO not in recursos:
                recursos.insert(0, RECURSO_OBRIGATORIO)
            return cliente.atualizar_restaurante(restaurante_id, {
                'selected_features': recursos,
                'subscription_plan': dados.get('subscription_plan') or 'starter',
            })

        if aba == 'locations':
            originais = {unidade['id']: unidade for unidade in self.unidades if 'id' in unidade}
            for unidade in dados:
                unidade_id = unidade.get('id')
                if unidade_id is None:
                    criada = cliente.adicionar_unidade(restaurante_id, unidade)
                    # a unidade criada passa a existir no servidor mesmo que uma chamada seguinte falhe
                    unidade['id'] = criada['id']
                    self.unidades.append(copy.deepcopy(criada))
                elif not sao_equivalentes(unidade, originais.get(unidade_id)):
                    cliente.atualizar_unidade(restaurante_id, unidade_id, unidade)
            return cliente.listar_unidades(restaurante_id)

        if aba == 'media':
            mantidas = {item['id'] for item in self._itens_midia(dados)}
            for item in self._itens_midia(self.midia):
                if item['id'] not in mantidas:
                    cliente.excluir_midia(restaurante_id, item['id'])
            return cliente.obter_midia(restaurante_id)

        return cliente.atualizar_pagamento(restaurante_id, dados)

    @staticmethod
    def _itens_midia(midia):
        itens = [midia.get('logo'), midia.get('favicon')]
        itens.extend(midia.get('images') or [])
        itens.extend(midia.get('videos') or [])
        return [item for item in itens if item]

    def salvar_aba(self, aba, cliente):
        """
        Valida e envia o buffer da aba. Sucesso: atualiza os dados canônicos
        com a resposta e encerra a edição. Falha da API: a mensagem vai para
        ``erro['updating']`` e o buffer é mantido.
        """
        self._exigir_edicao(aba)

        erros = self.validar_aba(aba)
        if erros:
            self.erros_campos.update(erros)
            self.tentativa_envio = True
            return False

        self.salvando = True
        self.erro['updating'] = None
        token = self.iniciar_requisicao(aba)
        try:
            resposta = self._enviar(aba, cliente)
        except ErroApi as erro:
            logger.info('Falha ao salvar a aba %s: %s', aba, erro.mensagem)
            self.erro['updating'] = erro.mensagem
            for campo, mensagem in erro.campos.items():
                self.erros_campos[campo] = mensagem
            return False
        finally:
            self.salvando = False

        if not self.aplicar_resposta(aba, token, resposta):
            return False

        self.editando[aba] = False
        self.dados_edicao[aba] = None
        self.alteracoes_pendentes[aba] = False
        self._limpar_validacao()
        return True
