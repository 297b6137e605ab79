import logging
import math

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import Q
from gestorrestaurante.exceptions import (
    ErroConflito, ErroNaoEncontrado, ErroNegocio, ErroPermissao, ErroValidacao
)
from idiomas.api import IdiomasRestauranteAPI
from usuarios.models import AtribuicaoPapel, Papel
from .models import ConfiguracaoPagamento, MidiaRestaurante, Restaurante, Unidade
from .validators import (
    validar_arquivo_imagem, validar_arquivo_video, validar_dados_pagamento
)

logger = logging.getLogger(__name__)

MENSAGEM_URL_EM_USO = 'O nome da URL do restaurante já está em uso.'
MENSAGEM_URL_UNIDADE_DUPLICADA = 'Nome da URL da Unidade duplicado. Cada unidade deve ter uma URL única.'
MENSAGEM_SEM_PERMISSAO = 'Permissões insuficientes para acessar este restaurante.'
MENSAGEM_NAO_ENCONTRADO = 'Restaurante não encontrado.'
MENSAGEM_UNIDADE_NAO_ENCONTRADA = 'Unidade não encontrada.'
MENSAGEM_LIMITE_UNIDADES = 'Limite de unidades atingido para o plano de assinatura.'

CAMPOS_ORDENACAO = {
    'created_at': 'data_criacao',
    'updated_at': 'data_atualizacao',
    'restaurant_name': 'nome',
    'restaurant_url_name': 'nome_url',
    'cuisine_type': 'tipo_cozinha',
    'status': 'status',
}

# Chaves da API para os campos da configuração de pagamento
CAMPOS_PAGAMENTO = {
    'cnpj': 'cnpj',
    'pix_key': 'chave_pix',
    'bank_account': 'conta',
}


class RestauranteService:
    """
    Regras de negócio dos restaurantes, unidades, mídias e pagamento.

    As views validam o formato da entrada e delegam para cá; erros de
    negócio sobem como exceções do DRF com o status HTTP adequado.
    """

    def __init__(self, idiomas=None):
        self.idiomas = idiomas or IdiomasRestauranteAPI()

    # Permissões

    def validar_propriedade(self, restaurante, usuario):
        """
        Permite alterações ao super administrador e ao administrador do
        próprio restaurante.
        """
        if usuario is None or not usuario.is_authenticated:
            raise ErroPermissao(MENSAGEM_SEM_PERMISSAO)
        if usuario.e_super_admin:
            return True
        if (usuario.restaurante_id == restaurante.pk
                and usuario.tem_papel(Papel.ADMINISTRADOR_RESTAURANTE)):
            return True
        logger.warning(
            'Acesso negado ao restaurante %s para o usuário %s', restaurante.pk, usuario.pk
        )
        raise ErroPermissao(MENSAGEM_SEM_PERMISSAO)

    def validar_acesso(self, restaurante, usuario):
        """Leitura: super administrador, equipe do restaurante ou restaurante ativo"""
        if usuario is not None and usuario.is_authenticated:
            if usuario.e_super_admin or usuario.restaurante_id == restaurante.pk:
                return True
        if restaurante.status == 'active':
            return True
        raise ErroPermissao(MENSAGEM_SEM_PERMISSAO)

    def _obter_ou_404(self, restaurante_id):
        restaurante = Restaurante.objects.nao_excluidos().filter(pk=restaurante_id).first()
        if restaurante is None:
            raise ErroNaoEncontrado(MENSAGEM_NAO_ENCONTRADO)
        return restaurante

    def _obter_unidade_ou_404(self, restaurante, unidade_id):
        unidade = restaurante.unidades.filter(pk=unidade_id).first()
        if unidade is None:
            raise ErroNaoEncontrado(MENSAGEM_UNIDADE_NAO_ENCONTRADA)
        return unidade

    def _validar_tipo_negocio(self, tipo_negocio):
        if tipo_negocio not in dict(Restaurante.TIPOS_NEGOCIO):
            mensagem = 'Tipo de negócio inválido. Valores permitidos: single, multi.'
            raise ErroValidacao(mensagem, campos={'business_type': mensagem})

    # Restaurantes

    def verificar_disponibilidade_url(self, nome_url, excluir_id=None):
        """True se nenhum restaurante (inclusive excluído) usa o nome de URL"""
        consulta = Restaurante.objects.filter(nome_url__iexact=(nome_url or '').strip())
        if excluir_id is not None:
            consulta = consulta.exclude(pk=excluir_id)
        return not consulta.exists()

    def criar_restaurante(self, dados, usuario):
        """
        Cria o restaurante com suas unidades, o idioma padrão (pt-BR) e uma
        configuração de pagamento vazia. Tudo ou nada.
        """
        dados = dict(dados)
        unidades = [dict(unidade) for unidade in dados.pop('unidades', [])]
        dados['nome_url'] = (dados.get('nome_url') or '').strip().lower()
        self._validar_tipo_negocio(dados.get('tipo_negocio', 'single'))

        if not self.verificar_disponibilidade_url(dados['nome_url']):
            raise ErroConflito(MENSAGEM_URL_EM_USO, campos={'restaurant_url_name': MENSAGEM_URL_EM_USO})

        slugs = [(unidade.get('nome_url') or '').strip().lower() for unidade in unidades]
        if len(slugs) != len(set(slugs)):
            raise ErroValidacao(MENSAGEM_URL_UNIDADE_DUPLICADA)

        limite = Restaurante.LIMITE_UNIDADES.get(dados.get('plano_assinatura', 'starter'), 1)
        if len(unidades) > limite:
            raise ErroNegocio(MENSAGEM_LIMITE_UNIDADES)

        criado_por = usuario if usuario is not None and usuario.is_authenticated else None
        indice_principal = next(
            (indice for indice, unidade in enumerate(unidades) if unidade.get('principal')), 0
        )

        try:
            with transaction.atomic():
                restaurante = Restaurante.objects.create(criado_por=criado_por, **dados)
                principal = None
                for indice, unidade in enumerate(unidades):
                    unidade['principal'] = indice == indice_principal
                    criada = Unidade.objects.create(restaurante=restaurante, criado_por=criado_por, **unidade)
                    if criada.principal:
                        principal = criada
                self.idiomas.configurar_idioma_inicial(restaurante.pk)
                ConfiguracaoPagamento.objects.create(restaurante=restaurante)
                self._vincular_criador(restaurante, criado_por, principal)
        except IntegrityError as erro:
            logger.warning('Conflito ao criar restaurante %s: %s', dados['nome_url'], erro)
            raise ErroConflito(MENSAGEM_URL_EM_USO) from erro

        logger.info(
            'Restaurante %s (%s) criado com %s unidade(s)',
            restaurante.pk, restaurante.nome_url, len(unidades)
        )
        return restaurante

    def _vincular_criador(self, restaurante, usuario, unidade_principal):
        """Quem cadastra o próprio restaurante vira o administrador dele"""
        if usuario is None or usuario.e_super_admin or usuario.restaurante_id is not None:
            return
        usuario.restaurante = restaurante
        usuario.save(update_fields=['restaurante'])
        papel = Papel.objects.get(tipo=Papel.ADMINISTRADOR_RESTAURANTE)
        AtribuicaoPapel.objects.get_or_create(usuario=usuario, papel=papel, unidade=unidade_principal)

    def obter_por_id(self, restaurante_id, incluir_unidades=False):
        """Retorna o restaurante ou None"""
        consulta = Restaurante.objects.nao_excluidos().filter(pk=restaurante_id)
        if incluir_unidades:
            consulta = consulta.prefetch_related('unidades')
        return consulta.first()

    def obter_por_url(self, nome_url, incluir_unidades=False):
        """Retorna o restaurante pelo nome de URL ou None"""
        consulta = Restaurante.objects.nao_excluidos().filter(nome_url__iexact=(nome_url or '').strip())
        if incluir_unidades:
            consulta = consulta.prefetch_related('unidades')
        return consulta.first()

    def listar_restaurantes(self, opcoes=None):
        """
        Lista paginada de restaurantes.

        Opções: page, limit, status (padrão ``active``; ``all`` não filtra),
        cuisine_type, business_type, search, sort_by e sort_order.
        """
        opcoes = opcoes or {}
        try:
            pagina = max(int(opcoes.get('page') or 1), 1)
            limite = min(max(int(opcoes.get('limit') or 20), 1), 100)
        except (TypeError, ValueError) as erro:
            raise ErroValidacao('Parâmetros de paginação inválidos.') from erro

        status = opcoes.get('status', 'active')
        tipo_cozinha = opcoes.get('cuisine_type')
        tipo_negocio = opcoes.get('business_type')
        busca = (opcoes.get('search') or '').strip()
        ordenar_por = opcoes.get('sort_by') or 'created_at'
        ordem = (opcoes.get('sort_order') or 'desc').lower()

        consulta = Restaurante.objects.nao_excluidos()
        if status and status != 'all':
            consulta = consulta.filter(status=status)
        if tipo_cozinha:
            consulta = consulta.filter(tipo_cozinha__iexact=tipo_cozinha)
        if tipo_negocio:
            consulta = consulta.filter(tipo_negocio=tipo_negocio)
        if busca:
            consulta = consulta.filter(
                Q(nome__icontains=busca)
                | Q(descricao__icontains=busca)
                | Q(tipo_cozinha__icontains=busca)
            )

        campo = CAMPOS_ORDENACAO.get(ordenar_por, 'data_criacao')
        consulta = consulta.order_by(campo if ordem == 'asc' else f'-{campo}', 'pk')

        total = consulta.count()
        total_paginas = math.ceil(total / limite) if total else 0
        inicio = (pagina - 1) * limite

        return {
            'restaurantes': list(consulta[inicio:inicio + limite]),
            'paginacao': {
                'page': pagina,
                'limit': limite,
                'total': total,
                'totalPages': total_paginas,
                'hasNext': pagina < total_paginas,
                'hasPrev': pagina > 1,
            },
            'filtros': {
                'status': status,
                'cuisine_type': tipo_cozinha,
                'business_type': tipo_negocio,
                'search': busca or None,
                'sort_by': ordenar_por,
                'sort_order': ordem,
            },
        }

    def atualizar_restaurante(self, restaurante_id, dados, usuario):
        restaurante = self._obter_ou_404(restaurante_id)
        self.validar_propriedade(restaurante, usuario)

        dados = dict(dados)
        dados.pop('unidades', None)
        if 'nome_url' in dados:
            dados['nome_url'] = (dados['nome_url'] or '').strip().lower()
            if (dados['nome_url'] != restaurante.nome_url
                    and not self.verificar_disponibilidade_url(dados['nome_url'], excluir_id=restaurante.pk)):
                raise ErroConflito(MENSAGEM_URL_EM_USO, campos={'restaurant_url_name': MENSAGEM_URL_EM_USO})
        if 'tipo_negocio' in dados:
            self._validar_tipo_negocio(dados['tipo_negocio'])

        for campo, valor in dados.items():
            setattr(restaurante, campo, valor)
        restaurante.save()

        logger.info('Restaurante %s atualizado por %s', restaurante.pk, usuario.pk)
        return restaurante

    def excluir_restaurante(self, restaurante_id, usuario):
        """Exclusão lógica; recusada enquanto houver unidades ativas"""
        restaurante = self._obter_ou_404(restaurante_id)
        self.validar_propriedade(restaurante, usuario)

        if restaurante.unidades.filter(status='active').exists():
            raise ErroNegocio('Não é possível excluir o restaurante com unidades ativas.')

        restaurante.excluir_logicamente()
        logger.info('Restaurante %s excluído por %s', restaurante.pk, usuario.pk)
        return restaurante

    # Unidades

    def listar_unidades(self, restaurante_id, usuario=None):
        restaurante = self._obter_ou_404(restaurante_id)
        self.validar_acesso(restaurante, usuario)

        unidades = restaurante.unidades.all()
        e_equipe = usuario is not None and usuario.is_authenticated and (
            usuario.e_super_admin or usuario.restaurante_id == restaurante.pk
        )
        if not e_equipe:
            unidades = unidades.filter(status='active')
        return list(unidades)

    def _rebaixar_principais(self, restaurante, exceto=None):
        consulta = restaurante.unidades.filter(principal=True)
        if exceto is not None:
            consulta = consulta.exclude(pk=exceto.pk)
        consulta.update(principal=False)

    def _promover_substituta(self, restaurante, removida):
        substituta = (
            restaurante.unidades.filter(status='active')
            .exclude(pk=removida.pk)
            .order_by('data_criacao', 'pk')
            .first()
        )
        if substituta is not None:
            substituta.principal = True
            substituta.save(update_fields=['principal', 'data_atualizacao'])
            logger.info('Unidade %s promovida a principal', substituta.pk)
        return substituta

    def adicionar_unidade(self, restaurante_id, dados, usuario):
        """
        Adiciona uma unidade respeitando o limite do plano. A primeira
        unidade é sempre a principal.
        """
        restaurante = self._obter_ou_404(restaurante_id)
        self.validar_propriedade(restaurante, usuario)

        ativas = restaurante.unidades.filter(status='active')
        total_ativas = ativas.count()
        if total_ativas >= restaurante.limite_unidades:
            logger.info(
                'Limite de unidades do plano %s atingido no restaurante %s',
                restaurante.plano_assinatura, restaurante.pk
            )
            raise ErroNegocio(MENSAGEM_LIMITE_UNIDADES)

        dados = dict(dados)
        dados['nome_url'] = (dados.get('nome_url') or '').strip().lower()
        if restaurante.unidades.filter(nome_url=dados['nome_url']).exists():
            raise ErroConflito(MENSAGEM_URL_UNIDADE_DUPLICADA, campos={'url_name': MENSAGEM_URL_UNIDADE_DUPLICADA})

        principal = bool(dados.pop('principal', False)) or total_ativas == 0
        with transaction.atomic():
            if principal:
                self._rebaixar_principais(restaurante)
            unidade = Unidade.objects.create(
                restaurante=restaurante, criado_por=usuario, principal=principal, **dados
            )

        logger.info('Unidade %s adicionada ao restaurante %s', unidade.pk, restaurante.pk)
        return unidade

    def atualizar_unidade(self, restaurante_id, unidade_id, dados, usuario):
        restaurante = self._obter_ou_404(restaurante_id)
        self.validar_propriedade(restaurante, usuario)
        unidade = self._obter_unidade_ou_404(restaurante, unidade_id)

        dados = dict(dados)
        if 'nome_url' in dados:
            dados['nome_url'] = (dados['nome_url'] or '').strip().lower()
            if restaurante.unidades.filter(nome_url=dados['nome_url']).exclude(pk=unidade.pk).exists():
                raise ErroConflito(MENSAGEM_URL_UNIDADE_DUPLICADA, campos={'url_name': MENSAGEM_URL_UNIDADE_DUPLICADA})

        tornar_principal = dados.pop('principal', None)
        desativando = dados.get('status') == 'inactive' and unidade.status == 'active'
        if desativando and restaurante.unidades.filter(status='active').count() <= 1:
            raise ErroNegocio('Não é possível desativar a única unidade ativa do restaurante.')

        with transaction.atomic():
            for campo, valor in dados.items():
                setattr(unidade, campo, valor)

            if tornar_principal and unidade.status == 'active':
                self._rebaixar_principais(restaurante, exceto=unidade)
                unidade.principal = True

            perdeu_principal = desativando and unidade.principal
            if perdeu_principal:
                unidade.principal = False
            unidade.save()
            if perdeu_principal:
                self._promover_substituta(restaurante, unidade)

        logger.info('Unidade %s atualizada', unidade.pk)
        return unidade

    def definir_unidade_principal(self, restaurante_id, unidade_id, usuario):
        restaurante = self._obter_ou_404(restaurante_id)
        self.validar_propriedade(restaurante, usuario)
        unidade = self._obter_unidade_ou_404(restaurante, unidade_id)

        if unidade.status != 'active':
            raise ErroNegocio('Apenas unidades ativas podem ser a unidade principal.')

        with transaction.atomic():
            self._rebaixar_principais(restaurante, exceto=unidade)
            unidade.principal = True
            unidade.save(update_fields=['principal', 'data_atualizacao'])

        logger.info('Unidade %s definida como principal do restaurante %s', unidade.pk, restaurante.pk)
        return unidade

    def remover_unidade(self, restaurante_id, unidade_id, usuario):
        """Remove a unidade; a última unidade ativa não pode ser removida"""
        restaurante = self._obter_ou_404(restaurante_id)
        self.validar_propriedade(restaurante, usuario)
        unidade = self._obter_unidade_ou_404(restaurante, unidade_id)

        if unidade.status == 'active' and restaurante.unidades.filter(status='active').count() <= 1:
            raise ErroNegocio('Não é possível remover a única unidade do restaurante.')

        with transaction.atomic():
            if unidade.principal:
                self._promover_substituta(restaurante, unidade)
            unidade.delete()

        logger.info('Unidade %s removida do restaurante %s', unidade_id, restaurante.pk)
        return True

    # Mídia

    def obter_midia(self, restaurante_id, unidade_id=None):
        """Mídias organizadas em ``{logo, favicon, images, videos}``"""
        restaurante = self._obter_ou_404(restaurante_id)
        midias = restaurante.midias.all()
        if unidade_id is not None:
            midias = midias.filter(Q(unidade_id=unidade_id) | Q(unidade__isnull=True))

        organizadas = {'logo': None, 'favicon': None, 'images': [], 'videos': []}
        for midia in midias:
            if midia.tipo_midia in ('logo', 'favicon'):
                organizadas[midia.tipo_midia] = midia
            else:
                organizadas[midia.tipo_midia].append(midia)
        return organizadas

    def enviar_midia(self, restaurante_id, arquivos, tipo_midia, usuario, unidade_id=None):
        """
        Grava arquivos de mídia. Logo e favicon substituem o arquivo anterior;
        imagens e vídeos pertencem a uma unidade do restaurante.
        """
        restaurante = self._obter_ou_404(restaurante_id)
        self.validar_propriedade(restaurante, usuario)

        if tipo_midia not in dict(MidiaRestaurante.TIPOS_MIDIA):
            raise ErroValidacao('Tipo de mídia inválido.', campos={'type': 'Tipo de mídia inválido.'})
        if not arquivos:
            raise ErroValidacao('Nenhum arquivo enviado.', campos={'files': 'Arquivo é obrigatório'})

        unidade = None
        if tipo_midia in ('images', 'videos'):
            if not unidade_id:
                mensagem = 'Unidade é obrigatória para imagens e vídeos.'
                raise ErroValidacao(mensagem, campos={'location_id': mensagem})
            unidade = self._obter_unidade_ou_404(restaurante, unidade_id)
        else:
            arquivos = arquivos[:1]

        validador = validar_arquivo_video if tipo_midia == 'videos' else validar_arquivo_imagem
        for arquivo in arquivos:
            try:
                validador(arquivo)
            except ValidationError as erro:
                raise ErroValidacao(erro.messages[0], campos={'files': erro.messages[0]}) from erro

        with transaction.atomic():
            if tipo_midia in ('logo', 'favicon'):
                for anterior in restaurante.midias.filter(tipo_midia=tipo_midia):
                    anterior.arquivo.delete(save=False)
                    anterior.delete()

            enviadas = []
            for arquivo in arquivos:
                midia = MidiaRestaurante(
                    restaurante=restaurante,
                    unidade=unidade,
                    tipo_midia=tipo_midia,
                    nome_original=arquivo.name,
                    tamanho=arquivo.size,
                    tipo_mime=arquivo.content_type,
                    enviado_por=usuario,
                )
                midia.arquivo.save(arquivo.name, arquivo, save=False)
                midia.save()
                enviadas.append(midia)

        logger.info(
            '%s arquivo(s) de %s enviados para o restaurante %s',
            len(enviadas), tipo_midia, restaurante.pk
        )
        return enviadas

    def excluir_midia(self, restaurante_id, midia_id, usuario):
        restaurante = self._obter_ou_404(restaurante_id)
        self.validar_propriedade(restaurante, usuario)

        midia = MidiaRestaurante.objects.filter(pk=midia_id).first()
        if midia is None:
            raise ErroNaoEncontrado('Mídia não encontrada.')
        if midia.restaurante_id != restaurante.pk:
            raise ErroPermissao('A mídia não pertence a este restaurante.')

        midia.arquivo.delete(save=False)
        midia.delete()
        logger.info('Mídia %s excluída do restaurante %s', midia_id, restaurante.pk)
        return True

    # Pagamento

    def obter_pagamento(self, restaurante_id, usuario):
        restaurante = self._obter_ou_404(restaurante_id)
        self.validar_propriedade(restaurante, usuario)
        pagamento, _ = ConfiguracaoPagamento.objects.get_or_create(restaurante=restaurante)
        return pagamento

    def atualizar_pagamento(self, restaurante_id, dados, usuario):
        restaurante = self._obter_ou_404(restaurante_id)
        self.validar_propriedade(restaurante, usuario)
        pagamento, _ = ConfiguracaoPagamento.objects.get_or_create(restaurante=restaurante)

        dados = dict(dados)
        erros = validar_dados_pagamento({
            chave_api: dados.get(campo) for chave_api, campo in CAMPOS_PAGAMENTO.items()
        }) or {}

        metodos = dados.get('metodos_aceitos', pagamento.metodos_aceitos)
        metodos_validos = dict(ConfiguracaoPagamento.METODOS_PAGAMENTO)
        invalidos = [metodo for metodo in metodos if metodo not in metodos_validos]
        if invalidos:
            erros['accepted_methods'] = f"Métodos de pagamento inválidos: {', '.join(invalidos)}"
        elif not metodos:
            erros['accepted_methods'] = 'Selecione pelo menos um método de pagamento'
        if 'pix' in metodos and not dados.get('chave_pix', pagamento.chave_pix):
            erros.setdefault('pix_key', 'Chave PIX é obrigatória')

        if erros:
            raise ErroValidacao(campos=erros)

        for campo, valor in dados.items():
            setattr(pagamento, campo, valor)
        pagamento.save()

        logger.info('Configuração de pagamento do restaurante %s atualizada', restaurante.pk)
        return pagamento
