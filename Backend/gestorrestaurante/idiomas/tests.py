from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase
from restaurantes.models import Restaurante
from .api import ErroIdioma, IdiomasRestauranteAPI
from .models import Idioma, RestauranteIdioma


class IdiomasRestauranteAPITest(TestCase):
    """Testes para as operações de idiomas de um restaurante"""

    def setUp(self):
        self.api = IdiomasRestauranteAPI()
        self.restaurante = Restaurante.objects.create(nome='Cantina Bella', nome_url='cantina-bella')

    def padroes(self):
        return list(
            RestauranteIdioma.objects.filter(restaurante=self.restaurante, padrao=True)
            .values_list('idioma__codigo', flat=True)
        )

    def test_catalogo_inicial(self):
        """Teste que o catálogo vem com os 15 idiomas ativos"""
        disponiveis = self.api.obter_idiomas_disponiveis()
        self.assertEqual(len(disponiveis), 15)
        self.assertEqual(disponiveis[0].codigo, 'pt-BR')

    def test_configurar_idioma_inicial(self):
        registro = self.api.configurar_idioma_inicial(self.restaurante.pk)

        self.assertTrue(registro.padrao)
        self.assertEqual(registro.ordem_exibicao, 1)
        self.assertEqual(self.api.obter_idioma_padrao(self.restaurante.pk).idioma.codigo, 'pt-BR')

    def test_apenas_um_padrao(self):
        """Adicionar um idioma como padrão rebaixa o anterior"""
        self.api.configurar_idioma_inicial(self.restaurante.pk)
        self.api.adicionar_idioma(self.restaurante.pk, 'en', 2, padrao=True)

        self.assertEqual(self.padroes(), ['en'])

        self.api.definir_idioma_padrao(self.restaurante.pk, 'pt-BR')
        self.assertEqual(self.padroes(), ['pt-BR'])

    def test_idioma_desconhecido_nao_altera_nada(self):
        self.api.configurar_idioma_inicial(self.restaurante.pk)

        with self.assertRaises(ErroIdioma):
            self.api.adicionar_idioma(self.restaurante.pk, 'xx', 2, padrao=True)
        with self.assertRaises(ErroIdioma):
            self.api.definir_idioma_padrao(self.restaurante.pk, 'xx')

        self.assertEqual(self.padroes(), ['pt-BR'])
        self.assertEqual(RestauranteIdioma.objects.filter(restaurante=self.restaurante).count(), 1)

    def test_idioma_inativo_no_catalogo(self):
        Idioma.objects.filter(codigo='ru').update(ativo=False)
        with self.assertRaises(ErroIdioma):
            self.api.adicionar_idioma(self.restaurante.pk, 'ru')

    def test_remover_idioma(self):
        """Remoção apenas desativa o registro"""
        self.api.configurar_idioma_inicial(self.restaurante.pk)
        self.api.adicionar_idioma(self.restaurante.pk, 'es', 2)

        self.api.remover_idioma(self.restaurante.pk, 'es')

        registro = RestauranteIdioma.objects.get(restaurante=self.restaurante, idioma__codigo='es')
        self.assertFalse(registro.ativo)
        self.assertEqual(
            [item.idioma.codigo for item in self.api.obter_idiomas_restaurante(self.restaurante.pk)],
            ['pt-BR']
        )
        with self.assertRaises(ErroIdioma):
            self.api.remover_idioma(self.restaurante.pk, 'es')

    def test_readicionar_reativa(self):
        self.api.adicionar_idioma(self.restaurante.pk, 'es', 2)
        self.api.remover_idioma(self.restaurante.pk, 'es')
        self.api.adicionar_idioma(self.restaurante.pk, 'es', 3)

        registros = RestauranteIdioma.objects.filter(restaurante=self.restaurante, idioma__codigo='es')
        self.assertEqual(registros.count(), 1)
        self.assertTrue(registros.get().ativo)
        self.assertEqual(registros.get().ordem_exibicao, 3)

    def test_ordem_de_exibicao(self):
        self.api.adicionar_idioma(self.restaurante.pk, 'en', 1)
        self.api.adicionar_idioma(self.restaurante.pk, 'es', 2)
        self.api.atualizar_ordem_exibicao(self.restaurante.pk, 'en', 5)

        self.assertEqual(
            [item.idioma.codigo for item in self.api.obter_idiomas_restaurante(self.restaurante.pk)],
            ['es', 'en']
        )

    def test_lote_com_dois_padroes_falha_antes_de_gravar(self):
        self.api.configurar_idioma_inicial(self.restaurante.pk)

        with self.assertRaises(ErroIdioma):
            self.api.atualizar_idiomas_em_lote(self.restaurante.pk, [
                {'codigo': 'en', 'ordem': 1, 'padrao': True},
                {'codigo': 'es', 'ordem': 2, 'padrao': True},
            ])

        self.assertEqual(self.padroes(), ['pt-BR'])
        self.assertFalse(RestauranteIdioma.objects.filter(idioma__codigo__in=['en', 'es']).exists())

    def test_lote_com_item_invalido_desfaz_tudo(self):
        self.api.configurar_idioma_inicial(self.restaurante.pk)

        with self.assertRaises(ErroIdioma):
            self.api.atualizar_idiomas_em_lote(self.restaurante.pk, [
                {'codigo': 'en', 'ordem': 1, 'padrao': True},
                {'codigo': 'xx', 'ordem': 2, 'padrao': False},
            ])

        self.assertEqual(self.padroes(), ['pt-BR'])
        self.assertFalse(RestauranteIdioma.objects.filter(idioma__codigo='en').exists())

    def test_lote_desativa_ausentes(self):
        self.api.configurar_idioma_inicial(self.restaurante.pk)
        self.api.adicionar_idioma(self.restaurante.pk, 'fr', 2)

        idiomas = self.api.atualizar_idiomas_em_lote(self.restaurante.pk, [
            {'codigo': 'en', 'ordem': 1, 'padrao': True},
            {'codigo': 'pt-BR', 'ordem': 2, 'padrao': False},
        ], desativar_ausentes=True)

        self.assertEqual([item.idioma.codigo for item in idiomas], ['en', 'pt-BR'])
        self.assertEqual(self.padroes(), ['en'])
        self.assertFalse(
            RestauranteIdioma.objects.get(restaurante=self.restaurante, idioma__codigo='fr').ativo
        )

    def test_lote_sem_desativar_mantem_os_demais(self):
        self.api.configurar_idioma_inicial(self.restaurante.pk)
        idiomas = self.api.atualizar_idiomas_em_lote(self.restaurante.pk, [
            {'codigo': 'es', 'ordem': 2, 'padrao': False},
        ])

        self.assertEqual([item.idioma.codigo for item in idiomas], ['pt-BR', 'es'])
        # o lote sempre limpa o padrão antes de aplicar os itens
        self.assertEqual(self.padroes(), [])


class IdiomaAPITest(APITestCase):
    """Testes do endpoint público de idiomas"""

    def test_idiomas_disponiveis(self):
        resposta = self.client.get('/api/v1/languages/available/')

        self.assertEqual(resposta.status_code, status.HTTP_200_OK)
        self.assertEqual(len(resposta.data), 15)
        self.assertEqual(resposta.data[0]['language_code'], 'pt-BR')
        self.assertEqual(resposta.data[0]['native_name'], 'Português Brasileiro')
