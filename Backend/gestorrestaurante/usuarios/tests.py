from unittest.mock import Mock

from django.test import TestCase
from django.db import IntegrityError
from django.contrib.auth import authenticate
from django.core.exceptions import ValidationError
from rest_framework import status
from rest_framework.test import APITestCase
from restaurantes.cliente import ErroApi
from restaurantes.models import Restaurante, Unidade
from .formularios import (
    FormularioPapeisUnidades, MENSAGEM_PARES_OBRIGATORIOS, MENSAGEM_PERFIL_SEM_UNIDADE,
    MENSAGEM_SELECIONE_PERFIL, MENSAGEM_ULTIMO_PERFIL
)
from .models import AtribuicaoPapel, Papel, Usuario
from .permissions import pode_atribuir
from .validators import validar_forca_senha, validar_telefone_usuario, validar_username


def criar_restaurante(nome_url='cantina', unidades=('centro',)):
    restaurante = Restaurante.objects.create(nome='Cantina', nome_url=nome_url, status='active')
    for indice, nome_url_unidade in enumerate(unidades):
        Unidade.objects.create(
            restaurante=restaurante, nome=f'Unidade {nome_url_unidade}',
            nome_url=nome_url_unidade, principal=indice == 0
        )
    return restaurante


class PapelModelTest(TestCase):
    """Testes para o modelo Papel"""

    def test_papeis_padrao(self):
        """Teste que os papéis padrão existem com nível e flag de admin"""
        self.assertEqual(Papel.objects.count(), 10)

        superadmin = Papel.objects.get(tipo=Papel.SUPERADMIN)
        self.assertEqual(superadmin.nivel, 1)
        self.assertTrue(superadmin.e_admin)

        garcom = Papel.objects.get(tipo='waiter')
        self.assertEqual(garcom.nivel, Papel.NIVEL_OPERACIONAL)
        self.assertFalse(garcom.e_admin)

    def test_tipo_papel_unico(self):
        """Teste que tipo de papel deve ser único"""
        with self.assertRaises(IntegrityError):
            Papel.objects.create(tipo='manager')

    def test_nivel_calculado_ao_salvar(self):
        papel = Papel.objects.get(tipo=Papel.GERENTE)
        papel.nivel = 1
        papel.e_admin = True
        papel.save()

        papel.refresh_from_db()
        self.assertEqual(papel.nivel, 4)
        self.assertFalse(papel.e_admin)

    def test_papel_str(self):
        self.assertEqual(str(Papel.objects.get(tipo='kitchen')), 'Cozinha')


class UsuarioModelTest(TestCase):
    """Testes para o modelo Usuario"""

    def setUp(self):
        self.restaurante = criar_restaurante()
        self.unidade = self.restaurante.unidades.get()

    def test_criar_usuario_com_email(self):
        usuario = Usuario.objects.create_user(
            email='joao@example.com', nome='João Silva', password='SenhaForte123'
        )

        self.assertEqual(usuario.email, 'joao@example.com')
        self.assertIsNone(usuario.username)
        self.assertTrue(usuario.check_password('SenhaForte123'))
        self.assertEqual(authenticate(email='joao@example.com', password='SenhaForte123'), usuario)

    def test_criar_usuario_so_com_username(self):
        """Email é opcional quando há nome de usuário"""
        usuario = Usuario.objects.create_user(username='joao_silva', nome='João', password='SenhaForte123')
        outro = Usuario.objects.create_user(username='maria', nome='Maria', password='SenhaForte123')

        self.assertIsNone(usuario.email)
        self.assertIsNone(outro.email)
        self.assertEqual(str(usuario), 'João (joao_silva)')

    def test_usuario_sem_email_e_username(self):
        with self.assertRaises(ValueError):
            Usuario.objects.create_user(nome='Sem Login', password='SenhaForte123')

        usuario = Usuario(nome='Sem Login', email='', username='')
        with self.assertRaises(ValidationError):
            usuario.clean()

    def test_email_usuario_unico(self):
        Usuario.objects.create_user(email='unico@example.com', nome='Usuario 1', password='SenhaForte123')
        with self.assertRaises(IntegrityError):
            Usuario.objects.create_user(email='unico@example.com', nome='Usuario 2', password='SenhaForte123')

    def test_papel_principal(self):
        """O papel principal é o de menor nível"""
        usuario = Usuario.objects.create_user(
            email='equipe@example.com', nome='Equipe', password='SenhaForte123', restaurante=self.restaurante
        )
        self.assertIsNone(usuario.papel_principal)

        AtribuicaoPapel.objects.create(usuario=usuario, papel=Papel.objects.get(tipo='waiter'), unidade=self.unidade)
        AtribuicaoPapel.objects.create(usuario=usuario, papel=Papel.objects.get(tipo='manager'), unidade=self.unidade)

        self.assertEqual(usuario.papel_principal, 'manager')
        self.assertTrue(usuario.tem_papel('waiter'))
        self.assertFalse(usuario.tem_papel('cashier'))
        self.assertFalse(usuario.is_admin)

    def test_super_admin(self):
        superusuario = Usuario.objects.create_superuser(email='root@example.com', nome='Root', password='SenhaForte123')
        self.assertTrue(superusuario.e_super_admin)

        administrador = Usuario.objects.create_user(email='adm@example.com', nome='Adm', password='SenhaForte123')
        AtribuicaoPapel.objects.create(
            usuario=administrador, papel=Papel.objects.get(tipo=Papel.ADMINISTRADOR_RESTAURANTE)
        )
        self.assertTrue(administrador.e_super_admin)

        administrador.restaurante = self.restaurante
        administrador.save()
        self.assertFalse(administrador.e_super_admin)
        self.assertTrue(administrador.is_admin)

    def test_atribuicao_unica(self):
        usuario = Usuario.objects.create_user(email='u@example.com', nome='U', password='SenhaForte123')
        papel = Papel.objects.get(tipo='waiter')
        AtribuicaoPapel.objects.create(usuario=usuario, papel=papel, unidade=self.unidade)

        with self.assertRaises(IntegrityError):
            AtribuicaoPapel.objects.create(usuario=usuario, papel=papel, unidade=self.unidade)

    def test_cascata_delecao_unidade(self):
        usuario = Usuario.objects.create_user(email='u@example.com', nome='U', password='SenhaForte123')
        AtribuicaoPapel.objects.create(usuario=usuario, papel=Papel.objects.get(tipo='waiter'), unidade=self.unidade)

        self.unidade.delete()
        self.assertFalse(AtribuicaoPapel.objects.filter(usuario=usuario).exists())


class ValidadoresUsuarioTest(TestCase):
    """Testes para os validadores de usuário"""

    def test_senha(self):
        validar_forca_senha('SenhaForte123')
        with self.assertRaises(ValidationError):
            validar_forca_senha('curta')

    def test_username(self):
        validar_username('joao_silva')
        with self.assertRaises(ValidationError):
            validar_username('jo')
        with self.assertRaises(ValidationError):
            validar_username('joao.silva')

    def test_telefone(self):
        validar_telefone_usuario('(11) 99999-8888')
        validar_telefone_usuario('(11) 3333-4444')
        with self.assertRaises(ValidationError):
            validar_telefone_usuario('11999998888')


class PodeAtribuirTest(TestCase):
    """Testes da hierarquia de papéis atribuíveis"""

    def test_hierarquia(self):
        self.assertTrue(pode_atribuir('superadmin', 'restaurant_administrator'))
        self.assertFalse(pode_atribuir('superadmin', 'superadmin'))
        self.assertTrue(pode_atribuir('restaurant_administrator', 'location_administrator'))
        self.assertFalse(pode_atribuir('location_administrator', 'restaurant_administrator'))
        self.assertTrue(pode_atribuir('location_administrator', 'manager'))
        self.assertFalse(pode_atribuir('manager', 'location_administrator'))
        self.assertTrue(pode_atribuir('manager', 'waiter'))


PAPEIS = [
    {'id': 1, 'name': 'superadmin'},
    {'id': 2, 'name': 'restaurant_administrator'},
    {'id': 3, 'name': 'location_administrator'},
    {'id': 4, 'name': 'manager'},
    {'id': 5, 'name': 'waiter'},
]
UNIDADES = [{'id': 10, 'name': 'Centro'}, {'id': 11, 'name': 'Zona Norte'}]


class FormularioPapeisUnidadesTest(TestCase):
    """Testes para o formulário de papéis por unidade"""

    def setUp(self):
        self.formulario = FormularioPapeisUnidades(PAPEIS, UNIDADES, 'restaurant_administrator')

    def test_comeca_com_um_par_vazio(self):
        self.assertEqual(self.formulario.pares, [{'role_id': None, 'location_ids': []}])
        self.assertFalse(self.formulario.possui_alteracoes())

    def test_nao_remove_ultimo_par(self):
        """Remover o último par é recusado com mensagem"""
        self.assertFalse(self.formulario.remover_par(0))
        self.assertEqual(self.formulario.erro, MENSAGEM_ULTIMO_PERFIL)
        self.assertEqual(len(self.formulario.pares), 1)

        self.formulario.adicionar_par()
        self.assertIsNone(self.formulario.erro)
        self.assertTrue(self.formulario.remover_par(1))
        self.assertEqual(len(self.formulario.pares), 1)

    def test_papeis_disponiveis_por_nivel(self):
        nomes = [papel['name'] for papel in self.formulario.papeis_disponiveis(0)]
        self.assertEqual(nomes, ['restaurant_administrator', 'location_administrator', 'manager', 'waiter'])

        gerente = FormularioPapeisUnidades(PAPEIS, UNIDADES, 'manager')
        self.assertEqual([papel['name'] for papel in gerente.papeis_disponiveis(0)], ['manager', 'waiter'])

    def test_papeis_disponiveis_sem_repetidos(self):
        self.formulario.atualizar_papel(0, 4)
        self.formulario.adicionar_par()

        ids = [papel['id'] for papel in self.formulario.papeis_disponiveis(1)]
        self.assertNotIn(4, ids)
        self.assertIn(4, [papel['id'] for papel in self.formulario.papeis_disponiveis(0)])

    def test_par_incompleto_nao_chama_api(self):
        """Papel sem unidade é rejeitado antes de qualquer chamada"""
        cliente = Mock()
        self.formulario.atualizar_papel(0, 5)

        self.assertIsNone(self.formulario.enviar(cliente, {'full_name': 'Ana', 'email': 'ana@example.com'}))
        self.assertEqual(self.formulario.erros['role_location_pairs'], MENSAGEM_PARES_OBRIGATORIOS)
        cliente.criar_usuario.assert_not_called()

        self.formulario.alternar_unidade(0, 10)
        self.formulario.adicionar_par()
        self.formulario.atualizar_papel(1, 4)
        self.assertFalse(self.formulario.validar())
        self.assertEqual(self.formulario.erros['role_location_pairs'], MENSAGEM_PERFIL_SEM_UNIDADE)
        cliente.criar_usuario.assert_not_called()

    def test_payload_uma_linha_por_unidade(self):
        self.formulario.atualizar_papel(0, 4)
        self.formulario.alternar_unidade(0, 10)
        self.formulario.alternar_unidade(0, 11)
        self.formulario.adicionar_par()
        self.formulario.atualizar_papel(1, 5)
        self.formulario.alternar_unidade(1, 11)

        self.assertEqual(self.formulario.payload(), [
            {'role_id': 4, 'location_id': 10},
            {'role_id': 4, 'location_id': 11},
            {'role_id': 5, 'location_id': 11},
        ])

    def test_enviar_cria_usuario(self):
        cliente = Mock()
        cliente.criar_usuario.return_value = {'id': 7}
        self.formulario.atualizar_papel(0, 5)
        self.formulario.alternar_unidade(0, 10)

        resposta = self.formulario.enviar(cliente, {'full_name': 'Ana', 'email': 'ana@example.com'})

        self.assertEqual(resposta, {'id': 7})
        dados = cliente.criar_usuario.call_args[0][0]
        self.assertEqual(dados['role_location_pairs'], [{'role_id': 5, 'location_id': 10}])
        self.assertFalse(self.formulario.possui_alteracoes())

    def test_enviar_com_erro_da_api(self):
        cliente = Mock()
        cliente.atualizar_usuario.side_effect = ErroApi(
            400, 'validacao', 'Dados inválidos.', {'email': 'Já existe um usuário com este email.'}
        )
        self.formulario.atualizar_papel(0, 5)
        self.formulario.alternar_unidade(0, 10)

        self.assertIsNone(self.formulario.enviar(cliente, {'email': 'ana@example.com'}, usuario_id=7))
        self.assertEqual(self.formulario.erro, 'Dados inválidos.')
        self.assertIn('email', self.formulario.erros)
        self.assertTrue(self.formulario.possui_alteracoes())

    def test_de_atribuicoes_agrupa_por_papel(self):
        formulario = FormularioPapeisUnidades.de_atribuicoes(
            [
                {'role_id': 4, 'location_id': 10},
                {'role_id': 5, 'location_id': 10},
                {'role_id': 4, 'location_id': 11},
            ],
            PAPEIS, UNIDADES, 'restaurant_administrator'
        )

        self.assertEqual(formulario.pares, [
            {'role_id': 4, 'location_ids': [10, 11]},
            {'role_id': 5, 'location_ids': [10]},
        ])
        self.assertFalse(formulario.possui_alteracoes())

        formulario.alternar_unidade(0, 11)
        formulario.alternar_unidade(0, 11)
        self.assertFalse(formulario.possui_alteracoes())
        formulario.alternar_unidade(1, 11)
        self.assertTrue(formulario.possui_alteracoes())

    def test_modo_unidade_unica(self):
        formulario = FormularioPapeisUnidades(PAPEIS, UNIDADES[:1], 'restaurant_administrator')
        self.assertEqual(formulario.pares, [])

        self.assertFalse(formulario.validar())
        self.assertEqual(formulario.erros['roles'], MENSAGEM_SELECIONE_PERFIL)

        self.assertTrue(formulario.alternar_papel_unidade_unica(5))
        self.assertTrue(formulario.alternar_papel_unidade_unica(4))
        self.assertFalse(formulario.alternar_papel_unidade_unica(5))
        self.assertTrue(formulario.validar())
        self.assertEqual(formulario.payload(), [{'role_id': 4, 'location_id': 10}])


class UsuarioAPITest(APITestCase):
    """Testes dos endpoints de usuários"""

    def setUp(self):
        self.restaurante = criar_restaurante(unidades=('centro', 'norte'))
        self.centro = self.restaurante.unidades.get(nome_url='centro')
        self.outro_restaurante = criar_restaurante('outro', unidades=('sul',))

        self.administrador = Usuario.objects.create_user(
            email='admin@cantina.com', nome='Admin', password='SenhaForte123', restaurante=self.restaurante
        )
        AtribuicaoPapel.objects.create(
            usuario=self.administrador,
            papel=Papel.objects.get(tipo=Papel.ADMINISTRADOR_RESTAURANTE),
            unidade=self.centro
        )
        self.garcom = Papel.objects.get(tipo='waiter')

    def payload(self, unidade=None, **extra):
        dados = {
            'full_name': 'Ana Souza',
            'email': 'ana@cantina.com',
            'password': 'SenhaForte123',
            'role_location_pairs': [{'role_id': self.garcom.pk, 'location_id': (unidade or self.centro).pk}],
        }
        dados.update(extra)
        return dados

    def test_criar_usuario_com_pares(self):
        self.client.force_authenticate(user=self.administrador)
        resposta = self.client.post('/api/v1/users/', self.payload(), format='json')

        self.assertEqual(resposta.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resposta.data['restaurant_id'], self.restaurante.pk)
        self.assertEqual(resposta.data['role'], 'waiter')
        self.assertEqual(resposta.data['role_location_pairs'][0]['location_id'], self.centro.pk)
        self.assertNotIn('password', resposta.data)

    def test_criar_usuario_so_com_username(self):
        self.client.force_authenticate(user=self.administrador)
        resposta = self.client.post(
            '/api/v1/users/', self.payload(email=None, username='ana_souza'), format='json'
        )
        self.assertEqual(resposta.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(resposta.data['email'])

    def test_criar_usuario_sem_pares(self):
        self.client.force_authenticate(user=self.administrador)
        resposta = self.client.post('/api/v1/users/', self.payload(role_location_pairs=[]), format='json')

        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resposta.data['erro']['campos']['role_location_pairs'], MENSAGEM_PARES_OBRIGATORIOS)

    def test_unidade_de_outro_restaurante(self):
        self.client.force_authenticate(user=self.administrador)
        unidade = self.outro_restaurante.unidades.get()
        resposta = self.client.post('/api/v1/users/', self.payload(unidade=unidade), format='json')

        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('role_location_pairs', resposta.data['erro']['campos'])

    def test_nao_atribui_papel_superior(self):
        self.client.force_authenticate(user=self.administrador)
        superadmin = Papel.objects.get(tipo=Papel.SUPERADMIN)
        dados = self.payload()
        dados['role_location_pairs'] = [{'role_id': superadmin.pk, 'location_id': self.centro.pk}]

        resposta = self.client.post('/api/v1/users/', dados, format='json')
        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)

    def test_funcionario_nao_gerencia_usuarios(self):
        funcionario = Usuario.objects.create_user(
            email='garcom@cantina.com', nome='Garçom', password='SenhaForte123', restaurante=self.restaurante
        )
        AtribuicaoPapel.objects.create(usuario=funcionario, papel=self.garcom, unidade=self.centro)

        self.client.force_authenticate(user=funcionario)
        resposta = self.client.get('/api/v1/users/')
        self.assertEqual(resposta.status_code, status.HTTP_403_FORBIDDEN)

        resposta = self.client.get('/api/v1/users/me/')
        self.assertEqual(resposta.status_code, status.HTTP_200_OK)
        self.assertEqual(resposta.data['email'], 'garcom@cantina.com')

    def test_listagem_restrita_ao_restaurante(self):
        Usuario.objects.create_user(
            email='fora@outro.com', nome='Fora', password='SenhaForte123', restaurante=self.outro_restaurante
        )
        self.client.force_authenticate(user=self.administrador)
        resposta = self.client.get('/api/v1/users/')

        emails = [usuario['email'] for usuario in resposta.data]
        self.assertEqual(emails, ['admin@cantina.com'])

    def test_papeis_atribuiveis(self):
        self.client.force_authenticate(user=self.administrador)
        resposta = self.client.get('/api/v1/users/roles/')

        nomes = [papel['name'] for papel in resposta.data]
        self.assertNotIn('superadmin', nomes)
        self.assertIn('restaurant_administrator', nomes)
        self.assertIn('waiter', nomes)

    def test_atualizar_pares(self):
        self.client.force_authenticate(user=self.administrador)
        criado = self.client.post('/api/v1/users/', self.payload(), format='json').data
        norte = self.restaurante.unidades.get(nome_url='norte')

        resposta = self.client.patch(f"/api/v1/users/{criado['id']}/", {
            'role_location_pairs': [
                {'role_id': self.garcom.pk, 'location_id': self.centro.pk},
                {'role_id': self.garcom.pk, 'location_id': norte.pk},
            ]
        }, format='json')

        self.assertEqual(resposta.status_code, status.HTTP_200_OK)
        self.assertEqual(AtribuicaoPapel.objects.filter(usuario_id=criado['id']).count(), 2)

    def test_nao_exclui_a_si_mesmo(self):
        self.client.force_authenticate(user=self.administrador)
        resposta = self.client.delete(f'/api/v1/users/{self.administrador.pk}/')
        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resposta.data['erro']['codigo'], 'regra_negocio')


class AutenticacaoAPITest(APITestCase):
    """Testes do login com JWT"""

    def setUp(self):
        self.usuario = Usuario.objects.create_user(
            email='ana@cantina.com', username='ana_souza', nome='Ana', password='SenhaForte123'
        )

    def test_login_com_email(self):
        resposta = self.client.post(
            '/api/v1/auth/login/', {'login': 'ANA@cantina.com', 'password': 'SenhaForte123'}, format='json'
        )

        self.assertEqual(resposta.status_code, status.HTTP_200_OK)
        self.assertIn('access', resposta.data)
        self.assertIn('refresh', resposta.data)
        self.assertEqual(resposta.data['usuario']['email'], 'ana@cantina.com')

    def test_login_com_username(self):
        resposta = self.client.post(
            '/api/v1/auth/login/', {'login': 'ana_souza', 'password': 'SenhaForte123'}, format='json'
        )
        self.assertEqual(resposta.status_code, status.HTTP_200_OK)

    def test_login_senha_errada(self):
        resposta = self.client.post(
            '/api/v1/auth/login/', {'login': 'ana@cantina.com', 'password': 'errada123'}, format='json'
        )
        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resposta.data['erro']['mensagem'], 'Credenciais inválidas.')

    def test_login_usuario_suspenso(self):
        self.usuario.status = 'suspended'
        self.usuario.save()
        resposta = self.client.post(
            '/api/v1/auth/login/', {'login': 'ana@cantina.com', 'password': 'SenhaForte123'}, format='json'
        )
        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)

    def test_token_autentica_requisicoes(self):
        login = self.client.post(
            '/api/v1/auth/login/', {'login': 'ana@cantina.com', 'password': 'SenhaForte123'}, format='json'
        )
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['access']}")

        resposta = self.client.get('/api/v1/users/me/')
        self.assertEqual(resposta.data['full_name'], 'Ana')
