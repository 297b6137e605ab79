import copy
import logging

from restaurantes.cliente import ErroApi
from .permissions import pode_atribuir

logger = logging.getLogger(__name__)

MENSAGEM_ULTIMO_PERFIL = (
    'Não é possível remover o último perfil. O usuário deve ter pelo menos um perfil.'
)
MENSAGEM_PARES_OBRIGATORIOS = 'Pelo menos uma combinação de perfil e localização é obrigatória'
MENSAGEM_PERFIL_SEM_UNIDADE = 'Todos os perfis devem ter pelo menos uma localização associada'
MENSAGEM_PAR_SEM_PERFIL = 'Selecione um perfil para cada combinação'
MENSAGEM_SELECIONE_PERFIL = 'Selecione pelo menos um perfil'


def novo_par(role_id=None, location_ids=None):
    return {'role_id': role_id, 'location_ids': list(location_ids or [])}


class FormularioPapeisUnidades:
    """
    Formulário de papéis por unidade de um usuário da equipe.

    Cada par é ``{role_id, location_ids}``. Com uma única unidade no
    restaurante o formulário trabalha em modo simplificado: o usuário só
    marca papéis, todos na mesma unidade.
    """

    def __init__(self, papeis, unidades, papel_atuante, pares=None):
        self.papeis = list(papeis)
        self.unidades = list(unidades)
        self.papel_atuante = papel_atuante
        if pares is not None:
            self.pares = copy.deepcopy(pares)
        elif self.unidade_unica:
            self.pares = []
        else:
            self.pares = [novo_par()]
        self._original = copy.deepcopy(self.pares)
        self.erro = None
        self.erros = {}

    @classmethod
    def de_atribuicoes(cls, atribuicoes, papeis, unidades, papel_atuante):
        """Agrupa as atribuições planas ``[{role_id, location_id}]`` por papel"""
        pares = []
        por_papel = {}
        for atribuicao in atribuicoes:
            role_id = atribuicao['role_id']
            if role_id not in por_papel:
                por_papel[role_id] = novo_par(role_id)
                pares.append(por_papel[role_id])
            location_id = atribuicao.get('location_id')
            if location_id is not None and location_id not in por_papel[role_id]['location_ids']:
                por_papel[role_id]['location_ids'].append(location_id)
        return cls(papeis, unidades, papel_atuante, pares=pares or None)

    @property
    def unidade_unica(self):
        return len(self.unidades) == 1

    # Edição dos pares

    def adicionar_par(self):
        self.pares.append(novo_par())
        self.erro = None

    def remover_par(self, indice):
        if len(self.pares) <= 1:
            self.erro = MENSAGEM_ULTIMO_PERFIL
            return False
        self.pares.pop(indice)
        self.erro = None
        return True

    def atualizar_papel(self, indice, role_id):
        self.pares[indice]['role_id'] = role_id

    def alternar_unidade(self, indice, location_id):
        unidades = self.pares[indice]['location_ids']
        if location_id in unidades:
            unidades.remove(location_id)
        else:
            unidades.append(location_id)

    def alternar_papel_unidade_unica(self, role_id):
        """Modo de unidade única: marca/desmarca o papel na única unidade"""
        unidade_id = self.unidades[0]['id']
        for indice, par in enumerate(self.pares):
            if par['role_id'] == role_id:
                self.pares.pop(indice)
                return False
        self.pares.append(novo_par(role_id, [unidade_id]))
        return True

    def papeis_disponiveis(self, indice=None):
        """
        Papéis que o usuário atuante pode conceder, sem os papéis já
        escolhidos nos outros pares.
        """
        usados = {
            par['role_id']
            for posicao, par in enumerate(self.pares)
            if posicao != indice and par['role_id'] is not None
        }
        return [
            papel for papel in self.papeis
            if pode_atribuir(self.papel_atuante, papel['name']) and papel['id'] not in usados
        ]

    # Validação e envio

    def validar(self):
        erros = {}
        com_papel = [par for par in self.pares if par['role_id'] is not None]

        if self.unidade_unica and not com_papel:
            erros['roles'] = MENSAGEM_SELECIONE_PERFIL
        elif not any(par['location_ids'] for par in com_papel):
            erros['role_location_pairs'] = MENSAGEM_PARES_OBRIGATORIOS
        elif any(not par['location_ids'] for par in com_papel):
            erros['role_location_pairs'] = MENSAGEM_PERFIL_SEM_UNIDADE
        elif len(com_papel) != len(self.pares):
            erros['role_location_pairs'] = MENSAGEM_PAR_SEM_PERFIL

        self.erros = erros
        return not erros

    def payload(self):
        """Um item ``{role_id, location_id}`` por unidade de cada papel"""
        return [
            {'role_id': par['role_id'], 'location_id': location_id}
            for par in self.pares
            if par['role_id'] is not None
            for location_id in par['location_ids']
        ]

    def enviar(self, cliente, dados_usuario, usuario_id=None):
        """
        Valida e cria (ou atualiza) o usuário pela API. Retorna a resposta ou
        None; nada é enviado se a validação falhar.
        """
        if not self.validar():
            return None

        dados = dict(dados_usuario)
        dados['role_location_pairs'] = self.payload()
        try:
            if usuario_id is None:
                resposta = cliente.criar_usuario(dados)
            else:
                resposta = cliente.atualizar_usuario(usuario_id, dados)
        except ErroApi as erro:
            logger.info('Falha ao salvar usuário: %s', erro.mensagem)
            self.erro = erro.mensagem
            self.erros.update(erro.campos)
            return None

        self._original = copy.deepcopy(self.pares)
        self.erro = None
        return resposta

    @staticmethod
    def _assinatura(pares):
        return {
            (par['role_id'], frozenset(par['location_ids']))
            for par in pares
            if par['role_id'] is not None or par['location_ids']
        }

    def possui_alteracoes(self):
        return self._assinatura(self.pares) != self._assinatura(self._original)
