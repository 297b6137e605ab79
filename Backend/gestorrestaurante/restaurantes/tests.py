import copy
import shutil
import tempfile
from unittest.mock import Mock

import requests
from django.core.exceptions import ValidationError
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APITestCase
from gestorrestaurante.exceptions import (
    ErroConflito, ErroNegocio, ErroPermissao, ErroValidacao, achatar_erros
)
from idiomas.models import RestauranteIdioma
from usuarios.models import AtribuicaoPapel, Papel, Usuario
from .cep import CepNaoEncontrado, ConsultaCep, ErroConsultaCep, formatar_cep
from .cliente import ClienteApi, ErroApi, MENSAGEM_ERRO_GENERICO
from .edicao import EstadoPerfilRestaurante, normalizar, sao_equivalentes
from .models import ConfiguracaoPagamento, MidiaRestaurante, Restaurante, Unidade
from .services import RestauranteService
from .validators import (
    erros_horario_funcionamento, mensagem_erro, validar_cep, validar_chave_pix,
    validar_cnpj, validar_conta_bancaria, validar_dados_pagamento, validar_dados_unidade,
    validar_nome_url, validar_nome_url_unidade, validar_perfil_restaurante,
    validar_recursos_selecionados, validar_telefone, validar_website
)


def dados_unidade(nome_url='centro', **extra):
    """Unidade no formato dos campos do modelo"""
    dados = {
        'nome': f'Unidade {nome_url}',
        'nome_url': nome_url,
        'telefone': '(11) 3333-4444',
        'cep': '01310-100',
        'logradouro': 'Avenida Paulista',
        'numero': '1000',
        'cidade': 'São Paulo',
        'estado': 'SP',
    }
    dados.update(extra)
    return dados


def criar_super_admin(email='super@gestor.com'):
    return Usuario.objects.create_superuser(email=email, password='SenhaForte123', nome='Super Admin')


def criar_membro(restaurante, tipo_papel, email, unidade=None):
    """Usuário da equipe com um papel na unidade informada"""
    usuario = Usuario.objects.create_user(
        email=email, password='SenhaForte123', nome='Membro da Equipe', restaurante=restaurante
    )
    AtribuicaoPapel.objects.create(
        usuario=usuario, papel=Papel.objects.get(tipo=tipo_papel), unidade=unidade
    )
    return usuario


class ValidadoresTest(TestCase):
    """Testes para as funções de validação"""

    def test_telefone(self):
        """Telefone aceita números e símbolos, com pelo menos 10 dígitos"""
        validar_telefone('(11) 3333-4444')
        validar_telefone('+55 11 99999-8888')
        self.assertEqual(mensagem_erro(validar_telefone, ''), 'Telefone é obrigatório')
        self.assertEqual(
            mensagem_erro(validar_telefone, '11 3333'),
            'Telefone deve ter pelo menos 10 dígitos'
        )
        self.assertEqual(
            mensagem_erro(validar_telefone, '11 3333-abcd'),
            'Telefone deve conter apenas números e símbolos válidos'
        )

    def test_nome_url_restaurante(self):
        validar_nome_url('cantina-bella')
        self.assertEqual(mensagem_erro(validar_nome_url, 'ab'), 'URL deve ter pelo menos 3 caracteres')
        self.assertEqual(
            mensagem_erro(validar_nome_url, 'Cantina'),
            'URL deve conter apenas letras minúsculas, números e hífens'
        )
        self.assertEqual(
            mensagem_erro(validar_nome_url, '-cantina'),
            'URL não pode começar ou terminar com hífen'
        )
        self.assertEqual(mensagem_erro(validar_nome_url, 'a' * 51), 'URL deve ter no máximo 50 caracteres')

    def test_nome_url_unidade(self):
        """Slug da unidade tem limites próprios (2 a 30)"""
        validar_nome_url_unidade('sp')
        self.assertEqual(
            mensagem_erro(validar_nome_url_unidade, 'a' * 31),
            'URL deve ter no máximo 30 caracteres'
        )

    def test_cep_website(self):
        validar_cep('01310-100')
        validar_cep('01310100')
        self.assertEqual(mensagem_erro(validar_cep, '0131-0100'), 'CEP deve ter o formato 00000-000')
        validar_website('')
        validar_website('https://cantina.com.br')
        with self.assertRaises(ValidationError):
            validar_website('cantina.com.br')

    def test_cnpj(self):
        """CNPJ validado pelos dígitos verificadores"""
        validar_cnpj('11.222.333/0001-81')
        self.assertEqual(mensagem_erro(validar_cnpj, '11.222.333/0001-82'), 'CNPJ inválido')
        self.assertEqual(mensagem_erro(validar_cnpj, '11111111111111'), 'CNPJ inválido')
        self.assertEqual(mensagem_erro(validar_cnpj, '123'), 'CNPJ deve ter 14 dígitos')

    def test_chave_pix(self):
        for chave in ('financeiro@cantina.com', '(11) 99999-8888', '123.456.789-09',
                      '11.222.333/0001-81', '123e4567-e89b-12d3-a456-426614174000'):
            validar_chave_pix(chave)
        with self.assertRaises(ValidationError):
            validar_chave_pix('chave-qualquer')

    def test_conta_bancaria(self):
        validar_conta_bancaria('12345-6')
        self.assertEqual(mensagem_erro(validar_conta_bancaria, '12'), 'Conta deve ter pelo menos 4 caracteres')

    def test_recursos_selecionados_exige_menu_digital(self):
        validar_recursos_selecionados(['digital_menu', 'delivery'])
        self.assertEqual(
            mensagem_erro(validar_recursos_selecionados, ['delivery']),
            'Menu Digital é um recurso obrigatório'
        )
        self.assertEqual(
            mensagem_erro(validar_recursos_selecionados, []),
            'Pelo menos um recurso deve ser selecionado'
        )

    def test_horario_funcionamento(self):
        """Abertura igual ao fechamento é erro; dias fechados são ignorados"""
        self.assertIsNone(erros_horario_funcionamento({
            'monday': {'open': '18:00', 'close': '02:00', 'closed': False},
            'sunday': {'open': '', 'close': '', 'closed': True},
        }))
        erros = erros_horario_funcionamento({
            'monday': {'open': '10:00', 'close': '10:00', 'closed': False},
            'tuesday': {'open': '25:00', 'close': '', 'closed': False},
        })
        self.assertEqual(erros['monday_close'], 'Horário de fechamento deve ser diferente do horário de abertura')
        self.assertEqual(erros['tuesday_open'], 'Horário deve ter o formato HH:MM')
        self.assertEqual(erros['tuesday_close'], 'Horário de fechamento é obrigatório')
        self.assertIn('operating_hours', erros_horario_funcionamento({}))

    def test_validar_perfil_restaurante(self):
        erros = validar_perfil_restaurante({
            'restaurant_name': 'C',
            'restaurant_url_name': 'cantina',
            'website': 'ftp://cantina',
            'phone': '(11) 3333-4444',
            'whatsapp': '(11) 99999-8888',
        })
        self.assertEqual(set(erros), {'restaurant_name', 'website'})

    def test_validar_dados_unidade_usa_chaves_com_ponto(self):
        """Erros de endereço e horário usam chaves aninhadas com ponto"""
        erros = validar_dados_unidade({
            'name': 'Centro',
            'url_name': 'centro',
            'phone': '(11) 3333-4444',
            'whatsapp': '(11) 99999-8888',
            'address': {
                'address_zip_code': '123',
                'address_street': 'Avenida Paulista',
                'address_street_number': '1000',
                'address_city': 'São Paulo',
                'address_state': 'SP',
            },
            'operating_hours': {'monday': {'open': '09:00', 'close': '09:00', 'closed': False}},
            'selected_features': ['digital_menu'],
        })
        self.assertEqual(
            set(erros), {'address.address_zip_code', 'operating_hours.monday_close'}
        )

    def test_validar_dados_pagamento_ignora_vazios(self):
        self.assertIsNone(validar_dados_pagamento({'cnpj': '', 'pix_key': None}))
        erros = validar_dados_pagamento({'cnpj': '123', 'bank_account': '12345-6'})
        self.assertEqual(erros, {'cnpj': 'CNPJ deve ter 14 dígitos'})


class RestauranteModelTest(TestCase):
    """Testes para os modelos Restaurante e Unidade"""

    def test_menu_digital_sempre_presente(self):
        """Teste que o recurso digital_menu é garantido ao salvar"""
        restaurante = Restaurante.objects.create(
            nome='Cantina Bella', nome_url='Cantina-Bella', recursos_selecionados=['delivery']
        )
        self.assertEqual(restaurante.nome_url, 'cantina-bella')
        self.assertEqual(restaurante.recursos_selecionados, ['digital_menu', 'delivery'])
        self.assertEqual(restaurante.status, 'pending')
        self.assertEqual(restaurante.plano_assinatura, 'starter')

    def test_limite_unidades_por_plano(self):
        restaurante = Restaurante(nome='Cantina', nome_url='cantina')
        for plano, limite in (('starter', 1), ('professional', 3), ('premium', 10), ('enterprise', 999)):
            restaurante.plano_assinatura = plano
            self.assertEqual(restaurante.limite_unidades, limite)

    def test_exclusao_logica(self):
        restaurante = Restaurante.objects.create(nome='Cantina', nome_url='cantina', status='active')
        restaurante.excluir_logicamente()

        self.assertEqual(restaurante.status, 'suspended')
        self.assertIsNotNone(restaurante.excluido_em)
        self.assertFalse(Restaurante.objects.nao_excluidos().filter(pk=restaurante.pk).exists())

    def test_unidade_horario_padrao(self):
        restaurante = Restaurante.objects.create(nome='Cantina', nome_url='cantina')
        unidade = Unidade.objects.create(restaurante=restaurante, **dados_unidade())

        self.assertEqual(unidade.horario_funcionamento['monday']['open'], '09:00')
        self.assertTrue(unidade.horario_funcionamento['holidays']['closed'])
        self.assertEqual(str(unidade), 'Cantina - Unidade centro')


class RestauranteServiceTest(TestCase):
    """Testes para as regras de negócio de RestauranteService"""

    def setUp(self):
        self.servico = RestauranteService()
        self.super_admin = criar_super_admin()

    def criar(self, nome_url='cantina-bella', unidades=None, **extra):
        dados = {'nome': 'Cantina Bella', 'nome_url': nome_url, 'unidades': unidades or []}
        dados.update(extra)
        return self.servico.criar_restaurante(dados, self.super_admin)

    def test_criar_restaurante_completo(self):
        """Criação configura unidade principal, idioma pt-BR e pagamento"""
        restaurante = self.criar(unidades=[dados_unidade()])

        self.assertEqual(restaurante.criado_por, self.super_admin)
        self.assertEqual(restaurante.unidades.count(), 1)
        self.assertTrue(restaurante.unidades.get().principal)
        padrao = self.servico.idiomas.obter_idioma_padrao(restaurante.pk)
        self.assertEqual(padrao.idioma.codigo, 'pt-BR')
        self.assertTrue(ConfiguracaoPagamento.objects.filter(restaurante=restaurante).exists())

    def test_criar_restaurante_url_em_uso(self):
        """Nome de URL repetido (sem diferenciar maiúsculas) gera conflito 409"""
        self.criar()
        with self.assertRaises(ErroConflito) as contexto:
            self.criar(nome_url='CANTINA-BELLA')

        self.assertEqual(contexto.exception.status_code, 409)
        self.assertIn('restaurant_url_name', contexto.exception.campos)

    def test_url_de_restaurante_excluido_continua_indisponivel(self):
        restaurante = self.criar()
        restaurante.excluir_logicamente()
        self.assertFalse(self.servico.verificar_disponibilidade_url('cantina-bella'))
        self.assertTrue(self.servico.verificar_disponibilidade_url('outra-cantina'))

    def test_criar_com_urls_de_unidade_duplicadas(self):
        with self.assertRaises(ErroValidacao):
            self.criar(
                plano_assinatura='professional',
                unidades=[dados_unidade('centro'), dados_unidade('Centro')]
            )
        self.assertFalse(Restaurante.objects.filter(nome_url='cantina-bella').exists())

    def test_criar_com_falha_desfaz_tudo(self):
        """Se a configuração de idioma falhar, nada é gravado"""
        idiomas = Mock()
        idiomas.configurar_idioma_inicial.side_effect = ErroNegocio('Falha ao adicionar idioma')
        servico = RestauranteService(idiomas=idiomas)

        with self.assertRaises(ErroNegocio):
            servico.criar_restaurante(
                {'nome': 'Cantina', 'nome_url': 'cantina', 'unidades': [dados_unidade()]},
                self.super_admin
            )
        self.assertFalse(Restaurante.objects.exists())
        self.assertFalse(Unidade.objects.exists())

    def test_criador_sem_restaurante_vira_administrador(self):
        usuario = Usuario.objects.create_user(
            email='dono@cantina.com', password='SenhaForte123', nome='Dono'
        )
        restaurante = self.servico.criar_restaurante(
            {'nome': 'Cantina', 'nome_url': 'cantina', 'unidades': [dados_unidade()]}, usuario
        )

        usuario.refresh_from_db()
        self.assertEqual(usuario.restaurante, restaurante)
        self.assertTrue(usuario.tem_papel(Papel.ADMINISTRADOR_RESTAURANTE))
        self.servico.validar_propriedade(restaurante, usuario)

    def test_tipo_negocio_invalido(self):
        with self.assertRaises(ErroValidacao):
            self.criar(tipo_negocio='franquia')

    def test_unidade_principal_unica(self):
        """Marcar uma unidade como principal rebaixa as demais"""
        restaurante = self.criar(
            plano_assinatura='professional',
            unidades=[dados_unidade('centro'), dados_unidade('norte', principal=True)]
        )
        centro = restaurante.unidades.get(nome_url='centro')
        self.assertEqual(list(restaurante.unidades.filter(principal=True)), [restaurante.unidades.get(nome_url='norte')])

        self.servico.definir_unidade_principal(restaurante.pk, centro.pk, self.super_admin)
        self.assertEqual(restaurante.unidades.filter(principal=True).count(), 1)
        self.assertTrue(restaurante.unidades.get(pk=centro.pk).principal)

        sul = self.servico.adicionar_unidade(
            restaurante.pk, dados_unidade('sul', principal=True), self.super_admin
        )
        self.assertEqual(list(restaurante.unidades.filter(principal=True)), [sul])

    def test_limite_do_plano_starter(self):
        """Plano starter aceita só uma unidade; professional aceita a segunda"""
        restaurante = self.criar(unidades=[dados_unidade('centro')])

        with self.assertRaises(ErroNegocio):
            self.servico.adicionar_unidade(restaurante.pk, dados_unidade('norte'), self.super_admin)

        self.servico.atualizar_restaurante(
            restaurante.pk, {'plano_assinatura': 'professional'}, self.super_admin
        )
        unidade = self.servico.adicionar_unidade(restaurante.pk, dados_unidade('norte'), self.super_admin)
        self.assertFalse(unidade.principal)
        self.assertEqual(restaurante.unidades.count(), 2)

    def test_criar_acima_do_limite(self):
        with self.assertRaises(ErroNegocio):
            self.criar(unidades=[dados_unidade('centro'), dados_unidade('norte')])

    def test_url_de_unidade_repetida(self):
        restaurante = self.criar(plano_assinatura='professional', unidades=[dados_unidade('centro')])
        with self.assertRaises(ErroConflito):
            self.servico.adicionar_unidade(restaurante.pk, dados_unidade('centro'), self.super_admin)

    def test_primeira_unidade_adicionada_e_principal(self):
        restaurante = self.criar()
        unidade = self.servico.adicionar_unidade(restaurante.pk, dados_unidade(), self.super_admin)
        self.assertTrue(unidade.principal)

    def test_nao_remove_ultima_unidade(self):
        restaurante = self.criar(unidades=[dados_unidade()])
        unidade = restaurante.unidades.get()

        with self.assertRaises(ErroNegocio):
            self.servico.remover_unidade(restaurante.pk, unidade.pk, self.super_admin)
        self.assertTrue(Unidade.objects.filter(pk=unidade.pk).exists())

    def test_remover_principal_promove_outra(self):
        restaurante = self.criar(
            plano_assinatura='professional',
            unidades=[dados_unidade('centro'), dados_unidade('norte')]
        )
        centro = restaurante.unidades.get(nome_url='centro')
        self.servico.remover_unidade(restaurante.pk, centro.pk, self.super_admin)

        self.assertTrue(restaurante.unidades.get(nome_url='norte').principal)

    def test_desativar_principal_promove_outra(self):
        restaurante = self.criar(
            plano_assinatura='professional',
            unidades=[dados_unidade('centro'), dados_unidade('norte')]
        )
        centro = restaurante.unidades.get(nome_url='centro')
        self.servico.atualizar_unidade(restaurante.pk, centro.pk, {'status': 'inactive'}, self.super_admin)

        centro.refresh_from_db()
        self.assertFalse(centro.principal)
        self.assertTrue(restaurante.unidades.get(nome_url='norte').principal)

    def test_excluir_com_unidades_ativas(self):
        """Exclusão recusada com 400 e o restaurante fica inalterado"""
        restaurante = self.criar(unidades=[dados_unidade()])

        with self.assertRaises(ErroNegocio) as contexto:
            self.servico.excluir_restaurante(restaurante.pk, self.super_admin)

        self.assertEqual(contexto.exception.status_code, 400)
        restaurante.refresh_from_db()
        self.assertEqual(restaurante.status, 'pending')
        self.assertIsNone(restaurante.excluido_em)

    def test_excluir_sem_unidades_ativas(self):
        restaurante = self.criar()
        self.servico.excluir_restaurante(restaurante.pk, self.super_admin)

        self.assertIsNone(self.servico.obter_por_id(restaurante.pk))
        self.assertIsNone(self.servico.obter_por_url('cantina-bella'))

    def test_obter_por_url_com_unidades(self):
        self.criar(unidades=[dados_unidade()])
        restaurante = self.servico.obter_por_url('Cantina-Bella', incluir_unidades=True)
        self.assertEqual(len(restaurante.unidades.all()), 1)
        self.assertIsNone(self.servico.obter_por_id(9999))

    def test_listar_restaurantes_paginado(self):
        for indice in range(3):
            Restaurante.objects.create(
                nome=f'Restaurante {indice}', nome_url=f'restaurante-{indice}',
                tipo_cozinha='Italiana', status='active'
            )
        Restaurante.objects.create(nome='Pendente', nome_url='pendente')

        resultado = self.servico.listar_restaurantes({
            'page': 1, 'limit': 2, 'sort_by': 'restaurant_name', 'sort_order': 'asc'
        })

        self.assertEqual([r.nome for r in resultado['restaurantes']], ['Restaurante 0', 'Restaurante 1'])
        self.assertEqual(resultado['paginacao'], {
            'page': 1, 'limit': 2, 'total': 3, 'totalPages': 2, 'hasNext': True, 'hasPrev': False,
        })

        busca = self.servico.listar_restaurantes({'search': 'italiana', 'status': 'all'})
        self.assertEqual(busca['paginacao']['total'], 3)
        todos = self.servico.listar_restaurantes({'status': 'all'})
        self.assertEqual(todos['paginacao']['total'], 4)

    def test_propriedade(self):
        """Só o administrador do próprio restaurante (ou super admin) altera dados"""
        restaurante = self.criar(unidades=[dados_unidade()])
        unidade = restaurante.unidades.get()
        outro = self.criar(nome_url='outro')

        admin = criar_membro(restaurante, Papel.ADMINISTRADOR_RESTAURANTE, 'admin@cantina.com', unidade)
        garcom = criar_membro(restaurante, 'waiter', 'garcom@cantina.com', unidade)

        self.assertTrue(self.servico.validar_propriedade(restaurante, admin))
        with self.assertRaises(ErroPermissao):
            self.servico.validar_propriedade(restaurante, garcom)
        with self.assertRaises(ErroPermissao):
            self.servico.validar_propriedade(outro, admin)

    def test_acesso_de_leitura(self):
        restaurante = self.criar()
        with self.assertRaises(ErroPermissao):
            self.servico.validar_acesso(restaurante, None)

        restaurante.status = 'active'
        restaurante.save()
        self.assertTrue(self.servico.validar_acesso(restaurante, None))

    def test_pagamento(self):
        restaurante = self.criar()
        pagamento = self.servico.obter_pagamento(restaurante.pk, self.super_admin)
        self.assertEqual(pagamento.metodos_aceitos, ['cash'])

        with self.assertRaises(ErroValidacao) as contexto:
            self.servico.atualizar_pagamento(
                restaurante.pk, {'metodos_aceitos': ['cash', 'pix'], 'cnpj': '123'}, self.super_admin
            )
        self.assertEqual(set(contexto.exception.campos), {'cnpj', 'pix_key'})

        pagamento = self.servico.atualizar_pagamento(
            restaurante.pk,
            {'metodos_aceitos': ['cash', 'pix'], 'chave_pix': 'financeiro@cantina.com',
             'cnpj': '11.222.333/0001-81'},
            self.super_admin
        )
        self.assertEqual(pagamento.metodos_aceitos, ['cash', 'pix'])


class MidiaServiceTest(TestCase):
    """Testes do envio e da exclusão de mídia"""

    def setUp(self):
        self.pasta = tempfile.mkdtemp()
        self.configuracao = override_settings(MEDIA_ROOT=self.pasta)
        self.configuracao.enable()

        self.servico = RestauranteService()
        self.super_admin = criar_super_admin()
        self.restaurante = self.servico.criar_restaurante(
            {'nome': 'Cantina', 'nome_url': 'cantina', 'unidades': [dados_unidade()]}, self.super_admin
        )
        self.unidade = self.restaurante.unidades.get()

    def tearDown(self):
        self.configuracao.disable()
        shutil.rmtree(self.pasta, ignore_errors=True)

    def imagem(self, nome='logo.png'):
        return SimpleUploadedFile(nome, b'\x89PNG\r\n\x1a\n' + b'0' * 32, content_type='image/png')

    def test_logo_substitui_anterior(self):
        self.servico.enviar_midia(self.restaurante.pk, [self.imagem()], 'logo', self.super_admin)
        self.servico.enviar_midia(self.restaurante.pk, [self.imagem('novo.png')], 'logo', self.super_admin)

        midia = self.servico.obter_midia(self.restaurante.pk)
        self.assertEqual(midia['logo'].nome_original, 'novo.png')
        self.assertEqual(MidiaRestaurante.objects.filter(tipo_midia='logo').count(), 1)
        self.assertTrue(midia['logo'].arquivo.name.startswith('logo/cantina/'))

    def test_imagens_exigem_unidade(self):
        with self.assertRaises(ErroValidacao):
            self.servico.enviar_midia(self.restaurante.pk, [self.imagem()], 'images', self.super_admin)

        enviadas = self.servico.enviar_midia(
            self.restaurante.pk, [self.imagem('a.png'), self.imagem('b.png')], 'images',
            self.super_admin, unidade_id=self.unidade.pk
        )
        self.assertEqual(len(enviadas), 2)
        self.assertEqual(len(self.servico.obter_midia(self.restaurante.pk)['images']), 2)

    def test_tipo_de_arquivo_invalido(self):
        arquivo = SimpleUploadedFile('menu.pdf', b'%PDF', content_type='application/pdf')
        with self.assertRaises(ErroValidacao) as contexto:
            self.servico.enviar_midia(self.restaurante.pk, [arquivo], 'logo', self.super_admin)
        self.assertEqual(contexto.exception.campos['files'], 'Apenas arquivos JPEG, PNG e WebP são permitidos')

    def test_excluir_midia_de_outro_restaurante(self):
        outro = self.servico.criar_restaurante({'nome': 'Outro', 'nome_url': 'outro'}, self.super_admin)
        midia = self.servico.enviar_midia(outro.pk, [self.imagem()], 'favicon', self.super_admin)[0]

        with self.assertRaises(ErroPermissao):
            self.servico.excluir_midia(self.restaurante.pk, midia.pk, self.super_admin)

        self.servico.excluir_midia(outro.pk, midia.pk, self.super_admin)
        self.assertFalse(MidiaRestaurante.objects.filter(pk=midia.pk).exists())


class ConsultaCepTest(TestCase):
    """Testes para o cliente do ViaCEP"""

    def setUp(self):
        self.sessao = Mock()
        self.consulta = ConsultaCep(url_base='https://viacep.com.br/ws/', timeout=5, sessao=self.sessao)

    def test_formatar_cep(self):
        self.assertEqual(formatar_cep('01310100'), '01310-100')
        self.assertEqual(formatar_cep('0131'), '0131')
        self.assertEqual(formatar_cep('01310-1009999'), '01310-100')

    def test_buscar_cep(self):
        self.sessao.get.return_value.json.return_value = {
            'cep': '01001-000', 'logradouro': 'Praça da Sé', 'bairro': 'Sé',
            'localidade': 'São Paulo', 'uf': 'SP',
        }

        endereco = self.consulta.buscar('01001-000')

        self.sessao.get.assert_called_once_with('https://viacep.com.br/ws/01001000/json/', timeout=5)
        self.assertEqual(endereco['address_street'], 'Praça da Sé')
        self.assertEqual(endereco['address_city'], 'São Paulo')
        self.assertEqual(endereco['address_state'], 'SP')

    def test_cep_nao_encontrado(self):
        self.sessao.get.return_value.json.return_value = {'erro': True}
        with self.assertRaises(CepNaoEncontrado):
            self.consulta.buscar('99999-999')

    def test_falha_de_rede(self):
        self.sessao.get.side_effect = requests.ConnectionError('sem rede')
        with self.assertRaises(ErroConsultaCep) as contexto:
            self.consulta.buscar('01001-000')
        self.assertNotIsInstance(contexto.exception, CepNaoEncontrado)
        self.assertEqual(str(contexto.exception), 'Erro ao buscar CEP')


def resposta_http(status_code, corpo=None):
    resposta = Mock(status_code=status_code)
    if corpo is None:
        resposta.content = b''
        resposta.json.side_effect = ValueError('sem corpo')
    else:
        resposta.content = b'{}'
        resposta.json.return_value = corpo
    return resposta


class ClienteApiTest(TestCase):
    """Testes para o cliente HTTP da API"""

    def setUp(self):
        self.sessao = Mock()
        self.cliente = ClienteApi(url_base='http://api.local/api/v1/', timeout=3, sessao=self.sessao)

    def test_envelope_de_erro(self):
        self.sessao.request.return_value = resposta_http(409, {
            'erro': {
                'codigo': 'conflito',
                'mensagem': 'O nome da URL do restaurante já está em uso.',
                'campos': {'restaurant_url_name': 'O nome da URL do restaurante já está em uso.'},
            }
        })

        with self.assertRaises(ErroApi) as contexto:
            self.cliente.atualizar_restaurante(1, {'restaurant_url_name': 'cantina'})

        erro = contexto.exception
        self.assertEqual(erro.status, 409)
        self.assertEqual(erro.codigo, 'conflito')
        self.assertIn('restaurant_url_name', erro.campos)

    def test_corpo_inesperado_usa_mensagem_generica(self):
        self.sessao.request.return_value = resposta_http(502)
        with self.assertRaises(ErroApi) as contexto:
            self.cliente.obter_restaurante(1)
        self.assertEqual(contexto.exception.mensagem, MENSAGEM_ERRO_GENERICO)

    def test_falha_de_conexao(self):
        self.sessao.request.side_effect = requests.ConnectionError('recusada')
        with self.assertRaises(ErroApi) as contexto:
            self.cliente.obter_pagamento(1)
        self.assertIsNone(contexto.exception.status)
        self.assertEqual(contexto.exception.codigo, 'erro_conexao')

    def test_login_guarda_token(self):
        self.sessao.request.return_value = resposta_http(200, {'access': 'abc', 'refresh': 'def'})
        self.cliente.login('admin@cantina.com', 'SenhaForte123')

        self.sessao.request.return_value = resposta_http(204)
        self.assertIsNone(self.cliente.excluir_midia(1, 2))

        metodo, url = self.sessao.request.call_args[0]
        self.assertEqual((metodo, url), ('DELETE', 'http://api.local/api/v1/restaurants/1/media/2/'))
        self.assertEqual(self.sessao.request.call_args[1]['headers']['Authorization'], 'Bearer abc')

    def test_restaurante_existe_usa_cache(self):
        self.sessao.request.return_value = resposta_http(404, {
            'erro': {'codigo': 'nao_encontrado', 'mensagem': 'Restaurante não encontrado.', 'campos': {}}
        })

        self.assertFalse(self.cliente.restaurante_existe('cantina'))
        self.assertFalse(self.cliente.restaurante_existe('cantina'))
        self.assertEqual(self.sessao.request.call_count, 1)

        outro = ClienteApi(url_base='http://api.local/api/v1', sessao=self.sessao)
        outro.restaurante_existe('cantina')
        self.assertEqual(self.sessao.request.call_count, 2)


RESTAURANTE = {
    'id': 1,
    'restaurant_name': 'Cantina Bella',
    'restaurant_url_name': 'cantina-bella',
    'business_type': 'single',
    'cuisine_type': 'Italiana',
    'description': '',
    'website': '',
    'phone': '(11) 3333-4444',
    'whatsapp': '(11) 99999-8888',
    'email': 'contato@cantina.com',
    'subscription_plan': 'starter',
    'selected_features': ['digital_menu'],
}

UNIDADE = {
    'id': 10,
    'name': 'Centro',
    'url_name': 'centro',
    'phone': '(11) 3333-4444',
    'whatsapp': '(11) 99999-8888',
    'address': {
        'address_zip_code': '01310-100',
        'address_street': 'Avenida Paulista',
        'address_street_number': '1000',
        'address_complement': '',
        'address_city': 'São Paulo',
        'address_state': 'SP',
    },
    'operating_hours': {'monday': {'open': '09:00', 'close': '22:00', 'closed': False}},
    'selected_features': ['digital_menu'],
    'is_primary': True,
    'status': 'active',
}

CAMPO_CEP = 'address.address_zip_code'


class EstadoPerfilRestauranteTest(TestCase):
    """Testes para os buffers de edição das abas do perfil"""

    def setUp(self):
        self.consulta_cep = Mock()
        self.estado = EstadoPerfilRestaurante(
            restaurante=RESTAURANTE,
            unidades=[UNIDADE],
            midia={'logo': {'id': 1}, 'favicon': None, 'images': [{'id': 2}, {'id': 3}], 'videos': []},
            pagamento={'accepted_methods': ['cash'], 'pix_key': ''},
            consulta_cep=self.consulta_cep,
        )

    def test_normalizacao(self):
        """Ordem das chaves não importa e chave ausente equivale a None"""
        self.assertTrue(sao_equivalentes({'a': 1, 'b': None}, {'a': 1}))
        self.assertTrue(sao_equivalentes({'a': 1, 'b': 2}, {'b': 2, 'a': 1}))
        self.assertFalse(sao_equivalentes({'a': [1, 2]}, {'a': [2, 1]}))
        self.assertEqual(normalizar({'x': (1, 2), 'y': None}), {'x': [1, 2]})

    def test_editar_e_cancelar_preserva_dados(self):
        """Cancelar a edição deixa os dados canônicos iguais aos de antes"""
        antes = copy.deepcopy(self.estado.restaurante)

        self.estado.iniciar_edicao('general')
        self.assertFalse(self.estado.alteracoes_pendentes['general'])

        self.estado.alterar_campo_geral('restaurant_name', 'Outro Nome')
        self.assertTrue(self.estado.alteracoes_pendentes['general'])
        self.assertEqual(self.estado.restaurante, antes)

        self.estado.cancelar_edicao('general')
        self.assertFalse(self.estado.alteracoes_pendentes['general'])
        self.assertFalse(self.estado.editando['general'])
        self.assertIsNone(self.estado.dados_edicao['general'])
        self.assertEqual(self.estado.restaurante, antes)

    def test_voltar_ao_valor_original_limpa_alteracao(self):
        self.estado.iniciar_edicao('general')
        self.estado.atualizar_campo('general', 'restaurant_name', 'Outro')
        self.estado.atualizar_campo('general', 'restaurant_name', 'Cantina Bella')
        self.assertFalse(self.estado.alteracoes_pendentes['general'])

        self.estado.atualizar_campo('general', 'instagram', None)
        self.assertFalse(self.estado.alteracoes_pendentes['general'])

    def test_aba_sem_edicao_rejeita_alteracao(self):
        with self.assertRaises(ValueError):
            self.estado.atualizar_campo('payment', 'pix_key', 'x')

    def test_caminho_aninhado_em_unidades(self):
        self.estado.iniciar_edicao('locations')
        self.estado.atualizar_campo('locations', '0.operating_hours.monday.open', '10:00')

        self.assertEqual(self.estado.dados_edicao['locations'][0]['operating_hours']['monday']['open'], '10:00')
        self.assertEqual(self.estado.unidades[0]['operating_hours']['monday']['open'], '09:00')
        self.assertTrue(self.estado.alteracoes_pendentes['locations'])

    def test_erro_visivel_apenas_em_campo_tocado(self):
        self.estado.iniciar_edicao('locations')
        self.estado.atualizar_campo('locations', '0.phone', '')
        self.estado.alterar_campo_unidade(0, 'name', 'AB')

        self.assertEqual(self.estado.erro_visivel('location_0_name'), 'Nome deve ter pelo menos 3 caracteres')
        self.assertIsNone(self.estado.erro_visivel('location_0_phone'))

        self.assertFalse(self.estado.salvar_aba('locations', Mock()))
        self.assertTrue(self.estado.tentativa_envio)
        self.assertEqual(self.estado.erro_visivel('location_0_phone'), 'Telefone é obrigatório')

    def test_cep_completo_preenche_endereco(self):
        self.consulta_cep.buscar.return_value = {
            'address_zip_code': '01001-000',
            'address_street': 'Praça da Sé',
            'address_neighborhood': 'Sé',
            'address_city': 'São Paulo',
            'address_state': 'SP',
        }
        self.estado.iniciar_edicao('locations')
        self.estado.alterar_campo_unidade(0, CAMPO_CEP, '01001000')

        self.consulta_cep.buscar.assert_called_once_with('01001-000')
        endereco = self.estado.dados_edicao['locations'][0]['address']
        self.assertEqual(endereco['address_zip_code'], '01001-000')
        self.assertEqual(endereco['address_street'], 'Praça da Sé')
        self.assertNotIn(f'location_0_{CAMPO_CEP}', self.estado.erros_campos)

    def test_cep_incompleto_nao_consulta(self):
        self.estado.iniciar_edicao('locations')
        self.estado.alterar_campo_unidade(0, CAMPO_CEP, '0100')

        self.consulta_cep.buscar.assert_not_called()
        self.assertEqual(self.estado.dados_edicao['locations'][0]['address']['address_zip_code'], '0100')
        self.assertEqual(self.estado.erros_campos[f'location_0_{CAMPO_CEP}'], 'CEP deve ter o formato 00000-000')

    def test_cep_nao_encontrado_mantem_endereco(self):
        """ViaCEP com {erro: true}: erro no CEP e endereço intacto"""
        self.consulta_cep.buscar.side_effect = CepNaoEncontrado('CEP não encontrado')
        self.estado.iniciar_edicao('locations')
        self.estado.alterar_campo_unidade(0, CAMPO_CEP, '99999999')

        self.assertEqual(self.estado.erros_campos[f'location_0_{CAMPO_CEP}'], 'CEP não encontrado')
        endereco = self.estado.dados_edicao['locations'][0]['address']
        self.assertEqual(endereco['address_street'], 'Avenida Paulista')
        self.assertEqual(endereco['address_city'], 'São Paulo')
        self.assertEqual(endereco['address_state'], 'SP')

    def test_cep_com_falha_de_rede(self):
        self.consulta_cep.buscar.side_effect = ErroConsultaCep('Erro ao buscar CEP')
        self.estado.iniciar_edicao('locations')
        self.estado.alterar_campo_unidade(0, CAMPO_CEP, '01001000')

        self.assertEqual(self.estado.erros_campos[f'location_0_{CAMPO_CEP}'], 'Erro ao buscar CEP')
        self.assertEqual(self.estado.dados_edicao['locations'][0]['address']['address_street'], 'Avenida Paulista')

    def test_troca_de_aba_com_alteracoes_pede_confirmacao(self):
        self.estado.iniciar_edicao('general')
        self.estado.alterar_campo_geral('restaurant_name', 'Outro Nome')

        self.assertFalse(self.estado.solicitar_troca_aba('payment'))
        self.assertTrue(self.estado.confirmacao_pendente)
        self.assertEqual(self.estado.aba_ativa, 'general')

        self.estado.recusar_descarte()
        self.assertFalse(self.estado.confirmacao_pendente)
        self.assertEqual(self.estado.dados_edicao['general']['restaurant_name'], 'Outro Nome')

        self.estado.solicitar_troca_aba('payment')
        self.estado.confirmar_descarte()
        self.assertEqual(self.estado.aba_ativa, 'payment')
        self.assertFalse(self.estado.editando['general'])
        self.assertEqual(self.estado.restaurante['restaurant_name'], 'Cantina Bella')

    def test_troca_de_aba_sem_alteracoes(self):
        self.estado.iniciar_edicao('general')
        self.assertTrue(self.estado.solicitar_troca_aba('media'))
        self.assertEqual(self.estado.aba_ativa, 'media')

    def test_cancelamento_com_alteracoes(self):
        self.estado.iniciar_edicao('payment')
        self.estado.alterar_campo_pagamento('pix_key', 'financeiro@cantina.com')

        self.assertFalse(self.estado.solicitar_cancelamento('payment'))
        self.estado.confirmar_descarte()
        self.assertFalse(self.estado.editando['payment'])
        self.assertEqual(self.estado.pagamento['pix_key'], '')

    def test_salvar_aba_geral(self):
        """Salvamento confirmado atualiza os dados e encerra a edição"""
        cliente = Mock()
        cliente.atualizar_restaurante.return_value = dict(RESTAURANTE, restaurant_name='Novo Nome')

        self.estado.iniciar_edicao('general')
        self.estado.alterar_campo_geral('restaurant_name', 'Novo Nome')
        self.assertTrue(self.estado.salvar_aba('general', cliente))

        restaurante_id, payload = cliente.atualizar_restaurante.call_args[0]
        self.assertEqual(restaurante_id, 1)
        self.assertEqual(payload['restaurant_name'], 'Novo Nome')
        self.assertNotIn('restaurant_url_name', payload)
        self.assertEqual(self.estado.restaurante['restaurant_name'], 'Novo Nome')
        self.assertFalse(self.estado.editando['general'])
        self.assertFalse(self.estado.alteracoes_pendentes['general'])

    def test_salvar_invalido_nao_chama_api(self):
        cliente = Mock()
        self.estado.iniciar_edicao('general')
        self.estado.atualizar_campo('general', 'website', 'cantina.com')

        self.assertFalse(self.estado.salvar_aba('general', cliente))
        cliente.atualizar_restaurante.assert_not_called()
        self.assertTrue(self.estado.tentativa_envio)
        self.assertEqual(self.estado.erro_visivel('website'), 'Website deve começar com http:// ou https://')

    def test_salvar_com_erro_da_api_mantem_buffer(self):
        cliente = Mock()
        cliente.atualizar_pagamento.side_effect = ErroApi(
            400, 'validacao', 'Dados inválidos.', {'cnpj': 'CNPJ inválido'}
        )
        self.estado.iniciar_edicao('payment')
        self.estado.alterar_campo_pagamento('company_name', 'Cantina Ltda')

        self.assertFalse(self.estado.salvar_aba('payment', cliente))
        self.assertEqual(self.estado.erro['updating'], 'Dados inválidos.')
        self.assertEqual(self.estado.erros_campos['cnpj'], 'CNPJ inválido')
        self.assertTrue(self.estado.editando['payment'])
        self.assertEqual(self.estado.dados_edicao['payment']['company_name'], 'Cantina Ltda')
        self.assertFalse(self.estado.salvando)

    def test_salvar_recursos_sem_menu_digital(self):
        cliente = Mock()
        self.estado.iniciar_edicao('features')
        self.estado.atualizar_campo('features', 'selected_features', ['delivery'])

        self.assertFalse(self.estado.salvar_aba('features', cliente))
        self.assertEqual(self.estado.erros_campos['selected_features'], 'Menu Digital é um recurso obrigatório')
        cliente.atualizar_restaurante.assert_not_called()

    def test_salvar_recursos_envia_plano(self):
        cliente = Mock()
        cliente.atualizar_restaurante.return_value = dict(RESTAURANTE, subscription_plan='premium')

        self.estado.iniciar_edicao('features')
        self.estado.atualizar_campo('features', 'subscription_plan', 'premium')
        self.assertTrue(self.estado.alteracoes_pendentes['features'])
        self.assertTrue(self.estado.salvar_aba('features', cliente))

        payload = cliente.atualizar_restaurante.call_args[0][1]
        self.assertEqual(payload['subscription_plan'], 'premium')
        self.assertEqual(payload['selected_features'], ['digital_menu'])
        self.assertEqual(self.estado.restaurante['subscription_plan'], 'premium')

    def test_salvar_unidades(self):
        """Unidade nova é criada, unidade alterada é atualizada"""
        cliente = Mock()
        nova = dict(copy.deepcopy(UNIDADE), name='Zona Norte', url_name='norte')
        del nova['id']
        cliente.adicionar_unidade.return_value = dict(nova, id=11)
        cliente.listar_unidades.return_value = [UNIDADE, dict(nova, id=11)]

        self.estado.iniciar_edicao('locations')
        self.estado.alterar_campo_unidade(0, 'name', 'Centro Histórico')
        self.estado.dados_edicao['locations'].append(nova)

        self.assertTrue(self.estado.salvar_aba('locations', cliente))
        cliente.adicionar_unidade.assert_called_once_with(1, nova)
        self.assertEqual(cliente.atualizar_unidade.call_args[0][1], 10)
        self.assertEqual(len(self.estado.unidades), 2)

    def test_salvar_unidades_de_novo_apos_falha_parcial(self):
        """Unidade criada antes da falha não é criada outra vez"""
        cliente = Mock()
        nova = dict(copy.deepcopy(UNIDADE), name='Zona Norte', url_name='norte', is_primary=False)
        del nova['id']
        cliente.adicionar_unidade.return_value = dict(nova, id=11)
        cliente.atualizar_unidade.side_effect = ErroApi(400, 'validacao', 'Dados inválidos.', {})

        self.estado.iniciar_edicao('locations')
        self.estado.dados_edicao['locations'].insert(0, nova)
        self.estado.alterar_campo_unidade(1, 'name', 'Centro Histórico')

        self.assertFalse(self.estado.salvar_aba('locations', cliente))
        self.assertEqual(self.estado.dados_edicao['locations'][0]['id'], 11)

        cliente.atualizar_unidade.side_effect = None
        cliente.listar_unidades.return_value = [UNIDADE, dict(nova, id=11)]
        self.assertTrue(self.estado.salvar_aba('locations', cliente))

        cliente.adicionar_unidade.assert_called_once()
        self.assertEqual(len(self.estado.unidades), 2)

    def test_salvar_midia_exclui_removidas(self):
        cliente = Mock()
        cliente.obter_midia.return_value = {'logo': {'id': 1}, 'favicon': None, 'images': [{'id': 3}], 'videos': []}

        self.estado.iniciar_edicao('media')
        self.estado.atualizar_campo('media', 'images', [{'id': 3}])
        self.assertTrue(self.estado.salvar_aba('media', cliente))

        cliente.excluir_midia.assert_called_once_with(1, 2)
        self.assertEqual(self.estado.midia['images'], [{'id': 3}])

    def test_resposta_obsoleta_e_ignorada(self):
        primeiro = self.estado.iniciar_requisicao('payment')
        segundo = self.estado.iniciar_requisicao('payment')

        self.assertFalse(self.estado.aplicar_resposta('payment', primeiro, {'accepted_methods': ['pix']}))
        self.assertEqual(self.estado.pagamento['accepted_methods'], ['cash'])
        self.assertTrue(self.estado.aplicar_resposta('payment', segundo, {'accepted_methods': ['debit_card']}))
        self.assertEqual(self.estado.pagamento['accepted_methods'], ['debit_card'])

    def test_carregar(self):
        cliente = Mock()
        cliente.obter_restaurante.return_value = dict(RESTAURANTE, restaurant_name='Carregado')
        cliente.listar_unidades.return_value = []
        cliente.obter_midia.return_value = {'logo': None, 'favicon': None, 'images': [], 'videos': []}
        cliente.obter_pagamento.side_effect = ErroApi(403, 'permissao', 'Sem permissão.')

        self.assertFalse(self.estado.carregar(cliente, 1))
        self.assertEqual(self.estado.erro['fetching'], 'Sem permissão.')
        self.assertEqual(self.estado.restaurante['restaurant_name'], 'Carregado')


class RestauranteAPITest(APITestCase):
    """Testes dos endpoints de restaurantes"""

    def setUp(self):
        self.super_admin = criar_super_admin()
        self.payload = {
            'restaurant_name': 'Cantina Bella',
            'restaurant_url_name': 'cantina-bella',
            'phone': '(11) 3333-4444',
            'cuisine_type': 'Italiana',
            'locations': [{
                'name': 'Centro',
                'url_name': 'centro',
                'address': {
                    'address_zip_code': '01310-100',
                    'address_street': 'Avenida Paulista',
                    'address_street_number': '1000',
                    'address_city': 'São Paulo',
                    'address_state': 'SP',
                },
            }],
        }

    def criar_restaurante(self):
        self.client.force_authenticate(user=self.super_admin)
        resposta = self.client.post('/api/v1/restaurants/', self.payload, format='json')
        self.assertEqual(resposta.status_code, status.HTTP_201_CREATED)
        return Restaurante.objects.get(pk=resposta.data['id'])

    def test_criar_restaurante(self):
        self.client.force_authenticate(user=self.super_admin)
        resposta = self.client.post('/api/v1/restaurants/', self.payload, format='json')

        self.assertEqual(resposta.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resposta.data['restaurant_url_name'], 'cantina-bella')
        self.assertEqual(resposta.data['selected_features'], ['digital_menu'])
        self.assertEqual(len(resposta.data['locations']), 1)
        self.assertTrue(resposta.data['locations'][0]['is_primary'])
        self.assertEqual(resposta.data['locations'][0]['address']['address_city'], 'São Paulo')
        self.assertTrue(RestauranteIdioma.objects.filter(
            restaurante_id=resposta.data['id'], idioma__codigo='pt-BR', padrao=True
        ).exists())

    def test_criar_sem_autenticacao(self):
        resposta = self.client.post('/api/v1/restaurants/', self.payload, format='json')
        self.assertEqual(resposta.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertIn('erro', resposta.data)

    def test_conflito_usa_envelope(self):
        self.criar_restaurante()
        resposta = self.client.post('/api/v1/restaurants/', self.payload, format='json')

        self.assertEqual(resposta.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(resposta.data['erro']['codigo'], 'conflito')
        self.assertIn('restaurant_url_name', resposta.data['erro']['campos'])

    def test_erros_de_validacao_por_campo(self):
        self.client.force_authenticate(user=self.super_admin)
        self.payload['phone'] = '123'
        self.payload['locations'][0]['operating_hours'] = {
            'monday': {'open': '25:00', 'close': '22:00', 'closed': False}
        }

        resposta = self.client.post('/api/v1/restaurants/', self.payload, format='json')

        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)
        campos = resposta.data['erro']['campos']
        self.assertEqual(resposta.data['erro']['codigo'], 'validacao')
        self.assertEqual(campos['phone'], 'Telefone deve ter pelo menos 10 dígitos')
        self.assertEqual(campos['locations.0.operating_hours.monday_open'], 'Horário deve ter o formato HH:MM')

    def test_listagem_publica_mostra_apenas_ativos(self):
        restaurante = self.criar_restaurante()
        Restaurante.objects.filter(pk=restaurante.pk).update(status='active')
        Restaurante.objects.create(nome='Pendente', nome_url='pendente')

        self.client.force_authenticate(user=None)
        resposta = self.client.get('/api/v1/restaurants/', {'status': 'all'})

        self.assertEqual(resposta.status_code, status.HTTP_200_OK)
        self.assertEqual(resposta.data['pagination']['total'], 1)
        self.assertEqual(resposta.data['restaurants'][0]['restaurant_url_name'], 'cantina-bella')

    def test_verificar_url(self):
        self.criar_restaurante()

        resposta = self.client.get('/api/v1/restaurants/check-url/', {'url_name': 'cantina-bella'})
        self.assertFalse(resposta.data['available'])
        resposta = self.client.get('/api/v1/restaurants/check-url/', {'url_name': 'nova-cantina'})
        self.assertTrue(resposta.data['available'])
        resposta = self.client.get('/api/v1/restaurants/check-url/', {'url_name': 'a'})
        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)

    def test_buscar_por_url_inexistente(self):
        resposta = self.client.get('/api/v1/restaurants/by-url/nao-existe/')
        self.assertEqual(resposta.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resposta.data['erro']['codigo'], 'nao_encontrado')

    def test_excluir_com_unidades_ativas(self):
        restaurante = self.criar_restaurante()
        resposta = self.client.delete(f'/api/v1/restaurants/{restaurante.pk}/')

        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resposta.data['erro']['codigo'], 'regra_negocio')
        restaurante.refresh_from_db()
        self.assertEqual(restaurante.status, 'pending')

    def test_adicionar_unidade_acima_do_limite(self):
        restaurante = self.criar_restaurante()
        unidade = dict(self.payload['locations'][0], url_name='norte', name='Zona Norte')

        resposta = self.client.post(f'/api/v1/restaurants/{restaurante.pk}/locations/', unidade, format='json')
        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)

        restaurante.plano_assinatura = 'professional'
        restaurante.save()
        resposta = self.client.post(f'/api/v1/restaurants/{restaurante.pk}/locations/', unidade, format='json')
        self.assertEqual(resposta.status_code, status.HTTP_201_CREATED)
        self.assertFalse(resposta.data['is_primary'])

        resposta = self.client.post(
            f"/api/v1/restaurants/{restaurante.pk}/locations/{resposta.data['id']}/primary/"
        )
        self.assertTrue(resposta.data['is_primary'])
        self.assertEqual(restaurante.unidades.filter(principal=True).count(), 1)

    def test_atualizar_idiomas(self):
        restaurante = self.criar_restaurante()
        url = f'/api/v1/restaurants/{restaurante.pk}/languages/'

        resposta = self.client.put(url, {'languages': [
            {'language_code': 'pt-BR', 'display_order': 1, 'is_default': True},
            {'language_code': 'en', 'display_order': 2, 'is_default': True},
        ]}, format='json')
        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)

        resposta = self.client.put(url, {'languages': [
            {'language_code': 'en', 'display_order': 1, 'is_default': True},
            {'language_code': 'es', 'display_order': 2, 'is_default': False},
        ]}, format='json')
        self.assertEqual(resposta.status_code, status.HTTP_200_OK)
        self.assertEqual([item['language_code'] for item in resposta.data], ['en', 'es'])
        self.assertTrue(resposta.data[0]['is_default'])
        self.assertFalse(RestauranteIdioma.objects.get(
            restaurante=restaurante, idioma__codigo='pt-BR'
        ).ativo)

    def test_garcom_nao_altera_restaurante(self):
        restaurante = self.criar_restaurante()
        garcom = criar_membro(restaurante, 'waiter', 'garcom@cantina.com', restaurante.unidades.get())

        self.client.force_authenticate(user=garcom)
        resposta = self.client.patch(
            f'/api/v1/restaurants/{restaurante.pk}/', {'restaurant_name': 'Outro'}, format='json'
        )
        self.assertEqual(resposta.status_code, status.HTTP_403_FORBIDDEN)

    def test_pagamento(self):
        restaurante = self.criar_restaurante()
        url = f'/api/v1/restaurants/{restaurante.pk}/payment/'

        resposta = self.client.get(url)
        self.assertEqual(resposta.data['accepted_methods'], ['cash'])

        resposta = self.client.put(url, {'accepted_methods': ['cash', 'pix'], 'pix_key': ''}, format='json')
        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resposta.data['erro']['campos']['pix_key'], 'Chave PIX é obrigatória')


class AchatarErrosTest(TestCase):
    """Testes do formato plano de erros do envelope"""

    def test_achatar(self):
        erros = {
            'phone': ['Telefone é obrigatório'],
            'locations': [{}, {'address': {'address_city': ['Cidade é obrigatória']}}],
        }
        self.assertEqual(achatar_erros(erros), {
            'phone': 'Telefone é obrigatório',
            'locations.1.address.address_city': 'Cidade é obrigatória',
        })
