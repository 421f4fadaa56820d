# app/services/request_service.py
"""
Solicitações do trader e respostas do admin

Toda solicitação ligada a um plano adquirido gera uma entrada no histórico.
A resposta do admin atualiza a solicitação e grava a entrada de histórico
correspondente, com todos os campos, no mesmo commit.
"""
import logging
from datetime import datetime, timedelta
from app import db
from app.models import Solicitacao, HistoricoObservacao, PlanoAdquirido
from app.models.solicitacao import (
    REQUEST_TYPES, STATUSES, STATUS_PENDENTE,
    TIPO_SAQUE, TIPO_SEGUNDA_CHANCE, TIPO_SAQUE_QUINZENAL, TIPO_OUTRO,
    get_tipo_label,
)
from app.models.historico import (
    ORIGEM_ADMIN, ORIGEM_SISTEMA, EVENTO_RESPOSTA_ADMIN, EVENTO_APROVACAO_SOLICITADA,
    EVENTO_SAQUE_SOLICITADO, EVENTO_SEGUNDA_CHANCE_SOLICITADA, EVENTO_SAQUE_QUINZENAL_SOLICITADO,
)
from app.services.storage_service import get_storage, StorageError
from app.services.document_service import upload_comprovante
from app.utils.format_utils import format_currency, format_date
from app.utils.security import mask_sensitive_data
from app.utils.validators import ValidationError, parse_valor, validar_cpf, only_digits

logger = logging.getLogger(__name__)

# tipo de solicitação -> (tipo de evento no histórico, observação)
REQUEST_EVENTS = {
    TIPO_SAQUE: (EVENTO_SAQUE_SOLICITADO, ''),
    TIPO_SEGUNDA_CHANCE: (EVENTO_SEGUNDA_CHANCE_SOLICITADA, 'Segunda chance solicitada'),
    TIPO_SAQUE_QUINZENAL: (EVENTO_SAQUE_QUINZENAL_SOLICITADO, 'Mudança para saque quinzenal solicitada'),
    TIPO_OUTRO: (EVENTO_APROVACAO_SOLICITADA, ''),
}

DEFAULT_DESCRIPTIONS = {
    TIPO_SEGUNDA_CHANCE: 'Solicitação de segunda chance no teste',
    TIPO_SAQUE_QUINZENAL: 'Solicitação de mudança para saque quinzenal',
    TIPO_OUTRO: 'Solicitação de aprovação no teste',
}


def _withdrawal_fields(data):
    nome = (data.get('nome_completo') or '').strip()
    cpf = only_digits(data.get('cpf'))
    valor = parse_valor(data.get('valor'), 'valor')

    if not nome:
        raise ValidationError('Nome completo é obrigatório', 'nome_completo')
    if not validar_cpf(cpf):
        raise ValidationError('CPF inválido', 'cpf')
    if not valor:
        raise ValidationError('Informe o valor do saque', 'valor')

    descricao = f"Solicitação de saque - Nome: {nome}, CPF: {cpf}, Valor: {format_currency(valor)}"
    logger.info(f"Saque de {format_currency(valor)} solicitado (CPF {mask_sensitive_data(cpf)})")
    return descricao, valor


def create_request(user, tipo, plano_adquirido_id=None, data=None):
    """
    Cria uma solicitação do trader

    Args:
        user: Profile do trader
        tipo: saque, segunda_chance, saque_quinzenal ou outro
        plano_adquirido_id: plano ao qual a solicitação se refere
        data: campos extras (saque: nome_completo, cpf, valor; outros: descricao)

    Returns:
        Solicitacao criada
    """
    data = data or {}
    if tipo not in REQUEST_TYPES:
        raise ValidationError('Tipo de solicitação inválido', 'tipo_solicitacao')

    plano_adquirido = None
    if plano_adquirido_id:
        plano_adquirido = PlanoAdquirido.query.filter_by(
            id=plano_adquirido_id, cliente_id=user.id
        ).first()
        if plano_adquirido is None:
            raise ValidationError('Plano não encontrado', 'plano_adquirido_id')

    valor = None
    if tipo == TIPO_SAQUE:
        descricao, valor = _withdrawal_fields(data)
    else:
        descricao = (data.get('descricao') or '').strip() or DEFAULT_DESCRIPTIONS[tipo]

    try:
        solicitacao = Solicitacao(
            user_id=user.id,
            plano_adquirido_id=plano_adquirido.id if plano_adquirido else None,
            tipo_solicitacao=tipo,
            descricao=descricao,
            status=STATUS_PENDENTE,
        )
        db.session.add(solicitacao)
        db.session.flush()

        if plano_adquirido:
            tipo_evento, observacao = REQUEST_EVENTS[tipo]
            db.session.add(HistoricoObservacao(
                plano_adquirido_id=plano_adquirido.id,
                solicitacao_id=solicitacao.id,
                tipo_evento=tipo_evento,
                observacao=observacao,
                valor_solicitado=valor,
                status_evento=STATUS_PENDENTE,
                origem=ORIGEM_SISTEMA,
            ))

        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info(f"Solicitação {solicitacao.id} ({tipo}) criada por {user.id}")
    return solicitacao


def respond_to_request(solicitacao, admin, status, resposta=None, valor_final=None, comprovante=None):
    """
    Resposta do admin a uma solicitação

    Atualiza status e resposta e grava a entrada de histórico (origem admin)
    no mesmo commit. O comprovante é opcional: se o upload falhar, a resposta
    é gravada sem ele e o retorno traz um aviso.

    Returns:
        dict com solicitacao, historico (ou None) e warning (ou None)
    """
    if status not in STATUSES:
        raise ValidationError('Status inválido', 'status')
    valor_final = parse_valor(valor_final, 'valor_final')
    resposta = (resposta or '').strip()

    warning = None
    comprovante_path = None
    if comprovante is not None:
        try:
            comprovante_path = upload_comprovante(comprovante)
        except ValidationError as e:
            warning = f'Comprovante não anexado: {e.message}'
        except StorageError as e:
            logger.error(f"Erro ao enviar comprovante da solicitação {solicitacao.id}: {e}")
            warning = 'Comprovante não anexado: erro no envio do arquivo. Anexe novamente pela linha do tempo.'

    resposta_admin = resposta or (f"Valor final: {format_currency(valor_final)}" if valor_final else None)
    old_status = solicitacao.status

    historico = None
    try:
        solicitacao.status = status
        solicitacao.resposta_admin = resposta_admin
        solicitacao.atendida_em = datetime.utcnow()
        solicitacao.atendida_por = admin.id

        if solicitacao.plano_adquirido_id:
            historico = HistoricoObservacao(
                plano_adquirido_id=solicitacao.plano_adquirido_id,
                solicitacao_id=solicitacao.id,
                tipo_evento=EVENTO_RESPOSTA_ADMIN,
                observacao=resposta_admin or '',
                valor_final=valor_final,
                comprovante_url=comprovante_path,
                status_evento=status,
                origem=ORIGEM_ADMIN,
            )
            db.session.add(historico)

        db.session.commit()
    except Exception:
        db.session.rollback()
        if comprovante_path:
            _discard_upload(comprovante_path)
        raise

    logger.info(f"Solicitação {solicitacao.id}: {old_status} -> {status}")
    return {
        'solicitacao': solicitacao,
        'historico': historico,
        'old_status': old_status,
        'warning': warning,
    }


def _discard_upload(path):
    try:
        get_storage().remove([path])
    except StorageError as e:
        logger.error(f"Comprovante órfão não removido ({path}): {e}")


def filter_requests(solicitacoes, tipo=None, search=None, start_date=None, end_date=None):
    """Filtros da lista de solicitações do admin (tipo, busca e período)"""
    if tipo and tipo != 'all':
        solicitacoes = [s for s in solicitacoes if s.tipo_solicitacao == tipo]

    if search:
        query = search.lower()
        solicitacoes = [
            s for s in solicitacoes
            if (s.user and (query in s.user.nome.lower() or query in s.user.email.lower()))
            or query in get_tipo_label(s.tipo_solicitacao).lower()
        ]

    if start_date:
        solicitacoes = [s for s in solicitacoes if s.created_at >= start_date]
    if end_date:
        # Data final inclusiva (até 23:59:59.999)
        limit = end_date + timedelta(days=1)
        solicitacoes = [s for s in solicitacoes if s.created_at < limit]

    return solicitacoes


def group_by_date(solicitacoes):
    """Agrupa por dia (dd/mm/aaaa), mantendo a ordem recebida"""
    grouped = {}
    for solicitacao in solicitacoes:
        grouped.setdefault(format_date(solicitacao.created_at), []).append(solicitacao)
    return grouped
