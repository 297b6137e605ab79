import logging

from django.db import transaction
from gestorrestaurante.exceptions import ErroNegocio
from .models import Idioma, RestauranteIdioma

logger = logging.getLogger(__name__)

CODIGO_IDIOMA_PADRAO = 'pt-BR'


class ErroIdioma(ErroNegocio):
    """Falha em uma operação sobre os idiomas de um restaurante"""
    default_code = 'erro_idioma'


class IdiomasRestauranteAPI:
    """
    Operações sobre os idiomas configurados para o cardápio de um restaurante.

    Mantém no máximo um idioma padrão por restaurante: toda troca de padrão
    limpa os demais antes de marcar o novo, dentro da mesma transação.
    Idiomas removidos são apenas desativados.
    """

    def _falha(self, operacao, erro):
        logger.error('Falha ao %s: %s', operacao, erro)
        return ErroIdioma(f'Falha ao {operacao}: {erro}')

    def _idiomas_ativos(self, restaurante_id):
        return RestauranteIdioma.objects.select_related('idioma').filter(
            restaurante_id=restaurante_id, ativo=True
        )

    def _limpar_padrao(self, restaurante_id):
        RestauranteIdioma.objects.filter(
            restaurante_id=restaurante_id, padrao=True
        ).update(padrao=False)

    def obter_idiomas_disponiveis(self):
        """Idiomas ativos do catálogo, pela ordem de exibição"""
        try:
            return list(Idioma.objects.filter(ativo=True).order_by('ordem_exibicao', 'nome'))
        except Exception as erro:
            raise self._falha('obter idiomas disponíveis', erro) from erro

    def obter_idiomas_restaurante(self, restaurante_id):
        """Idiomas ativos do restaurante, pela ordem do restaurante e depois do catálogo"""
        try:
            return list(
                self._idiomas_ativos(restaurante_id).order_by('ordem_exibicao', 'idioma__ordem_exibicao')
            )
        except Exception as erro:
            raise self._falha('obter idiomas do restaurante', erro) from erro

    def obter_idioma_padrao(self, restaurante_id):
        try:
            return self._idiomas_ativos(restaurante_id).filter(padrao=True).first()
        except Exception as erro:
            raise self._falha('obter idioma padrão', erro) from erro

    def adicionar_idioma(self, restaurante_id, codigo, ordem=0, padrao=False):
        """
        Adiciona (ou reativa) um idioma no restaurante.

        Se ``padrao`` for verdadeiro, os demais idiomas deixam de ser padrão.
        Qualquer falha desfaz a operação inteira.
        """
        try:
            with transaction.atomic():
                idioma = Idioma.objects.filter(codigo=codigo, ativo=True).first()
                if idioma is None:
                    raise ErroIdioma(f"Idioma '{codigo}' não encontrado ou inativo")

                if padrao:
                    self._limpar_padrao(restaurante_id)

                registro, _ = RestauranteIdioma.objects.update_or_create(
                    restaurante_id=restaurante_id,
                    idioma=idioma,
                    defaults={'ordem_exibicao': ordem, 'padrao': padrao, 'ativo': True},
                )
        except Exception as erro:
            raise self._falha('adicionar idioma', erro) from erro

        logger.info('Idioma %s adicionado ao restaurante %s', codigo, restaurante_id)
        return registro

    def remover_idioma(self, restaurante_id, codigo):
        try:
            atualizados = RestauranteIdioma.objects.filter(
                restaurante_id=restaurante_id, idioma__codigo=codigo, ativo=True
            ).update(ativo=False, padrao=False)
            if not atualizados:
                raise ErroIdioma(f"Idioma '{codigo}' não encontrado para o restaurante")
        except Exception as erro:
            raise self._falha('remover idioma', erro) from erro

        logger.info('Idioma %s removido do restaurante %s', codigo, restaurante_id)
        return True

    def definir_idioma_padrao(self, restaurante_id, codigo):
        try:
            with transaction.atomic():
                self._limpar_padrao(restaurante_id)
                atualizados = RestauranteIdioma.objects.filter(
                    restaurante_id=restaurante_id, idioma__codigo=codigo, ativo=True
                ).update(padrao=True)
                if not atualizados:
                    raise ErroIdioma(
                        f"Idioma '{codigo}' não encontrado para o restaurante ou inativo"
                    )
        except Exception as erro:
            raise self._falha('definir idioma padrão', erro) from erro

        logger.info('Idioma padrão do restaurante %s alterado para %s', restaurante_id, codigo)
        return self.obter_idioma_padrao(restaurante_id)

    def atualizar_ordem_exibicao(self, restaurante_id, codigo, ordem):
        try:
            atualizados = RestauranteIdioma.objects.filter(
                restaurante_id=restaurante_id, idioma__codigo=codigo, ativo=True
            ).update(ordem_exibicao=ordem)
            if not atualizados:
                raise ErroIdioma(f"Idioma '{codigo}' não encontrado para o restaurante")
        except Exception as erro:
            raise self._falha('atualizar ordem de exibição', erro) from erro
        return True

    def atualizar_idiomas_em_lote(self, restaurante_id, idiomas, desativar_ausentes=False):
        """
        Aplica a lista de idiomas ``[{codigo, ordem, padrao}]`` ao restaurante.

        No máximo um item pode ser padrão; isso é verificado antes de qualquer
        escrita. Com ``desativar_ausentes``, os idiomas do restaurante que não
        estão na lista são desativados. A lista é aplicada em uma única
        transação: se um item falhar, nada é gravado.
        """
        try:
            padroes = [item for item in idiomas if item.get('padrao')]
            if len(padroes) > 1:
                raise ErroIdioma('Apenas um idioma pode ser definido como padrão')

            with transaction.atomic():
                self._limpar_padrao(restaurante_id)
                for item in idiomas:
                    self.adicionar_idioma(
                        restaurante_id,
                        item['codigo'],
                        item.get('ordem', 0),
                        bool(item.get('padrao')),
                    )

                if desativar_ausentes:
                    codigos = [item['codigo'] for item in idiomas]
                    RestauranteIdioma.objects.filter(
                        restaurante_id=restaurante_id
                    ).exclude(idioma__codigo__in=codigos).update(ativo=False, padrao=False)
        except Exception as erro:
            raise self._falha('atualizar idiomas em lote', erro) from erro

        logger.info('Idiomas do restaurante %s atualizados (%s itens)', restaurante_id, len(idiomas))
        return self.obter_idiomas_restaurante(restaurante_id)

    def configurar_idioma_inicial(self, restaurante_id):
        """Configura o português brasileiro como idioma padrão de um restaurante novo"""
        return self.adicionar_idioma(restaurante_id, CODIGO_IDIOMA_PADRAO, 1, True)
