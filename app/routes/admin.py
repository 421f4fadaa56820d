from flask import Blueprint, jsonify, request, abort
from flask_login import login_required, current_user
from app import db
from app.models import (
    Profile, UserRole, Plano, PlanoAdquirido, Solicitacao,
    HistoricoObservacao, UserDocument, PlatformConfig, SystemLog,
)
from app.models.platform import CONFIG_KEYS
from app.models.profile import ROLE_CLIENTE
from app.models.historico import ORIGEM_ADMIN, EVENTO_MANUAL_ADMIN, EVENTO_COMENTARIO
from app.models.solicitacao import STATUS_PENDENTE, STATUSES
from app.services.activity_logger import ActivityLogger, AuditLogger
from app.services.account_service import create_admin_account
from app.services.attachment_service import resolve_attachment
from app.services.document_service import set_document_status, upload_comprovante
from app.services.plan_service import (
    create_acquired_plan, update_acquired_plan, delete_acquired_plan, filter_and_sort,
)
from app.services.request_service import respond_to_request, filter_requests, group_by_date
from app.services.storage_service import StorageError
from app.services.timeline_service import TimelineService
from app.utils.decorators import admin_required, super_admin_required
from app.utils.format_utils import format_currency
from app.utils.http import get_payload, json_error, parse_date_arg
from app.utils.validators import ValidationError, parse_valor
from datetime import datetime
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
import logging

bp = Blueprint('admin', __name__, url_prefix='/admin')
logger = logging.getLogger(__name__)

TRADERS_PER_PAGE = 20


@bp.route('/')
@login_required
@admin_required
def index():
    """Painel administrativo principal"""
    stats = {
        'total_traders': Profile.query.join(UserRole).filter(UserRole.role == ROLE_CLIENTE).count(),
        'traders_ativos': Profile.query.filter_by(pagamento_ativo=True).count(),
        'planos_adquiridos': PlanoAdquirido.query.count(),
        'solicitacoes_pendentes': Solicitacao.query.filter_by(status=STATUS_PENDENTE).count(),
        'documentos_pendentes': UserDocument.query.filter_by(status='pendente').count(),
    }

    recent_requests = Solicitacao.query.filter_by(
        status=STATUS_PENDENTE
    ).order_by(
        Solicitacao.created_at.desc()
    ).limit(10).all()

    return jsonify({
        'stats': stats,
        'solicitacoes_pendentes': [s.to_dict() for s in recent_requests],
        'is_super_admin': current_user.is_super_admin,
    })


# Catálogo de planos

def _plano_fields(data):
    nome = (data.get('nome_plano') or '').strip()
    if not nome:
        raise ValidationError('Nome do plano é obrigatório', 'nome_plano')
    preco = parse_valor(data.get('preco'), 'preco')
    if preco is None:
        raise ValidationError('Preço é obrigatório', 'preco')
    return {
        'nome_plano': nome,
        'descricao': (data.get('descricao') or '').strip() or None,
        'preco': preco,
    }


@bp.route('/planos')
@login_required
@admin_required
def planos():
    items = Plano.query.order_by(Plano.nome_plano.asc()).all()
    return jsonify({'planos': [p.to_dict() for p in items]})


@bp.route('/planos', methods=['POST'])
@login_required
@admin_required
def create_plano():
    try:
        fields = _plano_fields(get_payload())
    except ValidationError as e:
        return json_error(e.message, 400, field=e.field)

    try:
        plano = Plano(**fields)
        db.session.add(plano)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Erro ao criar plano: {e}")
        return json_error('Erro ao criar plano', 500)

    ActivityLogger.log('plano_catalogo.created', 'planos', {'id': plano.id, 'nome': plano.nome_plano})
    return jsonify({'message': 'Plano criado com sucesso!', 'plano': plano.to_dict()}), 201


@bp.route('/planos/<plano_id>', methods=['PUT', 'POST'])
@login_required
@admin_required
def update_plano(plano_id):
    plano = db.get_or_404(Plano, plano_id)

    if plano.aquisicoes.count() > 0:
        return json_error('Não é possível alterar um plano com clientes vinculados', 400)

    try:
        fields = _plano_fields(get_payload())
    except ValidationError as e:
        return json_error(e.message, 400, field=e.field)

    try:
        for key, value in fields.items():
            setattr(plano, key, value)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Erro ao atualizar plano {plano_id}: {e}")
        return json_error('Erro ao atualizar plano', 500)

    ActivityLogger.log('plano_catalogo.updated', 'planos', {'id': plano.id})
    return jsonify({'message': 'Plano atualizado com sucesso!', 'plano': plano.to_dict()})


@bp.route('/planos/<plano_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_plano(plano_id):
    plano = db.get_or_404(Plano, plano_id)

    if plano.aquisicoes.count() > 0:
        return json_error('Não é possível excluir um plano com clientes vinculados', 400)

    try:
        db.session.delete(plano)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Erro ao excluir plano {plano_id}: {e}")
        return json_error('Erro ao excluir plano', 500)

    ActivityLogger.log('plano_catalogo.deleted', 'planos', {'id': plano_id})
    return jsonify({'message': 'Plano excluído com sucesso!'})


# Planos adquiridos

@bp.route('/planos-adquiridos')
@login_required
@admin_required
def planos_adquiridos():
    """Lista com filtro de status e ordenação"""
    items = filter_and_sort(
        PlanoAdquirido.query.all(),
        status=request.args.get('status'),
        sort_by=request.args.get('sort_by', 'id_carteira'),
        order=request.args.get('order', 'asc'),
    )
    return jsonify({'planos_adquiridos': [p.to_dict() for p in items]})


@bp.route('/planos-adquiridos', methods=['POST'])
@login_required
@admin_required
def create_plano_adquirido():
    data = get_payload()
    try:
        plano_adquirido = create_acquired_plan(
            data.get('cliente_id'),
            data.get('plano_id'),
            status_plano=data.get('status_plano') or 'ativo',
            tipo_saque=data.get('tipo_saque') or 'mensal',
        )
    except ValidationError as e:
        return json_error(e.message, 400, field=e.field)
    except SQLAlchemyError as e:
        logger.error(f"Erro ao criar plano adquirido: {e}")
        return json_error('Erro ao adicionar plano ao cliente', 500)

    ActivityLogger.log_plano_created(plano_adquirido.to_dict())
    return jsonify({
        'message': f'Plano adicionado com sucesso! ID da carteira: {plano_adquirido.id_carteira}',
        'plano_adquirido': plano_adquirido.to_dict(),
    }), 201


@bp.route('/planos-adquiridos/<plano_id>', methods=['PUT', 'POST'])
@login_required
@admin_required
def update_plano_adquirido(plano_id):
    plano_adquirido = db.get_or_404(PlanoAdquirido, plano_id)
    data = get_payload()
    try:
        old_status = update_acquired_plan(
            plano_adquirido,
            plano_id=data.get('plano_id'),
            status_plano=data.get('status_plano'),
            tipo_saque=data.get('tipo_saque'),
        )
    except ValidationError as e:
        db.session.rollback()
        return json_error(e.message, 400, field=e.field)
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Erro ao atualizar plano adquirido {plano_id}: {e}")
        return json_error('Erro ao atualizar plano', 500)

    ActivityLogger.log_plano_updated(plano_adquirido.id, {
        'status_plano': plano_adquirido.status_plano,
        'tipo_saque': plano_adquirido.tipo_saque,
    })
    if old_status != plano_adquirido.status_plano:
        AuditLogger.log_plan_status_change(plano_adquirido.id, old_status, plano_adquirido.status_plano)

    return jsonify({'message': 'Plano atualizado com sucesso!', 'plano_adquirido': plano_adquirido.to_dict()})


@bp.route('/planos-adquiridos/<plano_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_plano_adquirido(plano_id):
    """Exclui o plano adquirido e todo o seu histórico"""
    plano_adquirido = db.get_or_404(PlanoAdquirido, plano_id)
    try:
        delete_acquired_plan(plano_adquirido)
    except SQLAlchemyError as e:
        logger.error(f"Erro ao excluir plano adquirido {plano_id}: {e}")
        return json_error('Erro ao excluir plano', 500)

    ActivityLogger.log_plano_deleted(plano_id)
    AuditLogger.log_plan_deleted(plano_id, current_user.id)
    return jsonify({'message': 'Plano excluído com sucesso!'})


# Solicitações

@bp.route('/solicitacoes')
@login_required
@admin_required
def solicitacoes():
    """Solicitações com filtros, agrupadas por dia"""
    items = Solicitacao.query.order_by(Solicitacao.created_at.desc()).all()
    items = filter_requests(
        items,
        tipo=request.args.get('tipo'),
        search=request.args.get('search'),
        start_date=parse_date_arg('start_date'),
        end_date=parse_date_arg('end_date'),
    )

    grouped = group_by_date(items)
    return jsonify({
        'total': len(items),
        'grupos': [
            {'data': day, 'solicitacoes': [s.to_dict() for s in group]}
            for day, group in grouped.items()
        ],
    })


@bp.route('/solicitacoes/<solicitacao_id>/responder', methods=['POST'])
@login_required
@admin_required
def respond(solicitacao_id):
    """Resposta do admin: status, mensagem, valor final e comprovante opcional"""
    solicitacao = db.get_or_404(Solicitacao, solicitacao_id)
    data = get_payload()
    comprovante = request.files.get('comprovante')
    if comprovante is not None and not comprovante.filename:
        comprovante = None

    try:
        result = respond_to_request(
            solicitacao,
            current_user,
            data.get('status'),
            resposta=data.get('resposta_admin'),
            valor_final=data.get('valor_final'),
            comprovante=comprovante,
        )
    except ValidationError as e:
        return json_error(e.message, 400, field=e.field)
    except SQLAlchemyError as e:
        logger.error(f"Erro ao responder solicitação {solicitacao_id}: {e}")
        return json_error('Erro ao enviar resposta', 500)

    AuditLogger.log_request_status_change(solicitacao.id, result['old_status'], solicitacao.status)
    ActivityLogger.log_solicitacao_updated(solicitacao.id, solicitacao.status)

    response = {
        'message': 'Resposta enviada com sucesso!',
        'solicitacao': solicitacao.to_dict(),
    }
    if result['historico'] is not None:
        response['historico'] = TimelineService.serialize_entry(result['historico'])
    if result['warning']:
        response['warning'] = result['warning']
    return jsonify(response)


# Linha do tempo

def _optional_comprovante():
    """Upload do comprovante, se enviado. Retorna (caminho, aviso)."""
    file = request.files.get('comprovante')
    if file is None or not file.filename:
        return None, None
    try:
        return upload_comprovante(file), None
    except ValidationError as e:
        return None, f'Comprovante não anexado: {e.message}'
    except StorageError as e:
        logger.error(f"Erro ao enviar comprovante: {e}")
        return None, 'Comprovante não anexado: erro no envio do arquivo.'


@bp.route('/planos-adquiridos/<plano_id>/timeline')
@login_required
@admin_required
def timeline(plano_id):
    plano_adquirido = db.get_or_404(PlanoAdquirido, plano_id)
    return jsonify({
        'plano_adquirido': plano_adquirido.to_dict(),
        'timeline': TimelineService.get_feed(plano_adquirido.id),
    })


@bp.route('/planos-adquiridos/<plano_id>/timeline', methods=['POST'])
@login_required
@admin_required
def add_timeline_entry(plano_id):
    """Observação manual do admin na linha do tempo"""
    plano_adquirido = db.get_or_404(PlanoAdquirido, plano_id)
    data = get_payload()

    observacao = (data.get('observacao') or '').strip()
    if not observacao:
        return json_error('A observação é obrigatória', 400, field='observacao')

    status = data.get('status_evento') or STATUS_PENDENTE
    if status not in STATUSES:
        return json_error('Status inválido', 400, field='status_evento')

    try:
        valor_final = parse_valor(data.get('valor_final'), 'valor_final')
    except ValidationError as e:
        return json_error(e.message, 400, field=e.field)

    comprovante_path, warning = _optional_comprovante()

    try:
        entry = HistoricoObservacao(
            plano_adquirido_id=plano_adquirido.id,
            tipo_evento=EVENTO_MANUAL_ADMIN,
            observacao=observacao,
            valor_final=valor_final,
            comprovante_url=comprovante_path,
            status_evento=status,
            origem=ORIGEM_ADMIN,
        )
        db.session.add(entry)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Erro ao adicionar observação ao plano {plano_id}: {e}")
        return json_error('Erro ao adicionar observação', 500)

    ActivityLogger.log('historico.created', 'historico_observacoes', {'plano_adquirido_id': plano_adquirido.id})
    response = {'message': 'Observação adicionada!', 'entry': TimelineService.serialize_entry(entry)}
    if warning:
        response['warning'] = warning
    return jsonify(response), 201


@bp.route('/historico/<entry_id>', methods=['PUT', 'POST'])
@login_required
@admin_required
def update_timeline_entry(entry_id):
    """
    Atualiza valor final, status e comprovante de uma entrada

    Quando a entrada está ligada a uma solicitação, o status e o valor final
    são repassados para ela.
    """
    entry = db.get_or_404(HistoricoObservacao, entry_id)
    data = get_payload()

    status = data.get('status_evento') or entry.status_evento
    if status not in STATUSES:
        return json_error('Status inválido', 400, field='status_evento')

    try:
        valor_final = parse_valor(data.get('valor_final'), 'valor_final')
    except ValidationError as e:
        return json_error(e.message, 400, field=e.field)

    comprovante_path, warning = _optional_comprovante()

    try:
        entry.status_evento = status
        if valor_final is not None:
            entry.valor_final = valor_final
        if comprovante_path:
            entry.comprovante_url = comprovante_path

        solicitacao = entry.solicitacao
        if solicitacao is not None:
            solicitacao.status = status
            if valor_final is not None:
                solicitacao.resposta_admin = f"Valor final: {format_currency(valor_final)}"
            solicitacao.atendida_em = datetime.utcnow()
            solicitacao.atendida_por = current_user.id

        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Erro ao atualizar entrada {entry_id}: {e}")
        return json_error('Erro ao atualizar entrada', 500)

    ActivityLogger.log('historico.updated', 'historico_observacoes', {'id': entry.id, 'status': status})
    response = {'message': 'Entrada atualizada!', 'entry': TimelineService.serialize_entry(entry)}
    if warning:
        response['warning'] = warning
    return jsonify(response)


@bp.route('/historico/<entry_id>/comprovante')
@login_required
@admin_required
def open_comprovante(entry_id):
    entry = db.get_or_404(HistoricoObservacao, entry_id)
    if not entry.comprovante_url:
        abort(404)
    return jsonify(resolve_attachment(entry.comprovante_url))


# Traders

@bp.route('/traders')
@login_required
@admin_required
def traders():
    """Lista de traders com busca, filtro de pagamento e paginação"""
    page = request.args.get('page', 1, type=int)
    search = (request.args.get('search') or '').strip()
    pagamento = request.args.get('pagamento', 'all')

    query = Profile.query.join(UserRole).filter(UserRole.role == ROLE_CLIENTE)

    if search:
        like = f'%{search}%'
        query = query.filter(or_(Profile.nome.ilike(like), Profile.email.ilike(like)))

    if pagamento == 'ativo':
        query = query.filter(Profile.pagamento_ativo.is_(True))
    elif pagamento == 'inativo':
        query = query.filter(or_(Profile.pagamento_ativo.is_(False), Profile.pagamento_ativo.is_(None)))

    pagination = query.order_by(Profile.created_at.desc()).paginate(
        page=page, per_page=TRADERS_PER_PAGE, error_out=False
    )

    return jsonify({
        'traders': [t.to_dict() for t in pagination.items],
        'page': pagination.page,
        'pages': pagination.pages,
        'total': pagination.total,
    })


@bp.route('/traders/<trader_id>')
@login_required
@admin_required
def trader_details(trader_id):
    trader = db.get_or_404(Profile, trader_id)

    planos = trader.planos_adquiridos.order_by(PlanoAdquirido.id_carteira.asc()).all()
    documents = trader.documents.order_by(UserDocument.created_at.desc()).all()

    planos_data = []
    for plano in planos:
        data = plano.to_dict()
        data['timeline'] = TimelineService.get_feed(plano.id)
        planos_data.append(data)

    return jsonify({
        'trader': trader.to_dict(),
        'informacoes_personalizadas': trader.informacoes_personalizadas,
        'documents': [d.to_dict() for d in documents],
        'planos': planos_data,
    })


@bp.route('/traders/<trader_id>/pagamento', methods=['POST'])
@login_required
@admin_required
def toggle_payment(trader_id):
    trader = db.get_or_404(Profile, trader_id)
    try:
        trader.pagamento_ativo = not trader.pagamento_ativo
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Erro ao alterar pagamento de {trader_id}: {e}")
        return json_error('Erro ao atualizar status de pagamento', 500)

    ActivityLogger.log_payment_status_changed(trader.id, trader.pagamento_ativo)
    status = 'ativado' if trader.pagamento_ativo else 'desativado'
    return jsonify({'message': f'Pagamento {status}!', 'pagamento_ativo': trader.pagamento_ativo})


@bp.route('/traders/<trader_id>/comentario', methods=['POST'])
@login_required
@admin_required
def comment(trader_id):
    """Comentário do admin na linha do tempo de um plano do trader"""
    trader = db.get_or_404(Profile, trader_id)
    data = get_payload()

    observacao = (data.get('observacao') or '').strip()
    if not observacao:
        return json_error('Escreva um comentário', 400, field='observacao')

    plano_adquirido = trader.planos_adquiridos.filter_by(id=data.get('plano_adquirido_id')).first()
    if plano_adquirido is None:
        return json_error('Selecione um plano do trader', 400, field='plano_adquirido_id')

    try:
        entry = HistoricoObservacao(
            plano_adquirido_id=plano_adquirido.id,
            tipo_evento=EVENTO_COMENTARIO,
            observacao=observacao,
            origem=ORIGEM_ADMIN,
        )
        db.session.add(entry)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Erro ao comentar no plano {plano_adquirido.id}: {e}")
        return json_error('Erro ao adicionar comentário', 500)

    return jsonify({'message': 'Comentário adicionado!', 'entry': TimelineService.serialize_entry(entry)}), 201


@bp.route('/documents/<document_id>/status', methods=['POST'])
@login_required
@admin_required
def document_status(document_id):
    document = db.get_or_404(UserDocument, document_id)
    try:
        set_document_status(document, get_payload().get('status'))
    except ValidationError as e:
        return json_error(e.message, 400, field=e.field)
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Erro ao atualizar documento {document_id}: {e}")
        return json_error('Erro ao atualizar documento', 500)

    ActivityLogger.log('document.status_changed', 'user_documents', {'id': document.id, 'status': document.status})
    return jsonify({
        'message': 'Status do documento atualizado!',
        'document': document.to_dict(),
        'documentos_completos': bool(document.user.documentos_completos),
    })


@bp.route('/documents/<document_id>/view')
@login_required
@admin_required
def view_document(document_id):
    document = db.get_or_404(UserDocument, document_id)
    return jsonify(resolve_attachment(document.arquivo_url))


# Configurações e backup

@bp.route('/config')
@login_required
@admin_required
def platform_config():
    values = PlatformConfig.get_all()
    return jsonify({'config': {key: values.get(key, '') for key in CONFIG_KEYS}})


@bp.route('/config', methods=['POST'])
@login_required
@admin_required
def save_platform_config():
    """Salva links e preços da plataforma (apenas as chaves conhecidas)"""
    data = get_payload()
    try:
        for key in CONFIG_KEYS:
            if key not in data:
                continue
            value = str(data.get(key) or '').strip()
            config = PlatformConfig.query.filter_by(config_key=key).first()
            if config:
                config.config_value = value
            else:
                db.session.add(PlatformConfig(config_key=key, config_value=value))
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Erro ao salvar configurações: {e}")
        return json_error('Erro ao salvar configurações', 500)

    ActivityLogger.log('config.updated', 'platform_config', {'keys': [k for k in CONFIG_KEYS if k in data]})
    return jsonify({'message': 'Configurações salvas com sucesso!', 'config': PlatformConfig.get_all()})


@bp.route('/backup')
@login_required
@admin_required
def backup():
    """Exportação em JSON de perfis, planos adquiridos e configurações"""
    ActivityLogger.log('backup.exported', 'system')
    response = jsonify({
        'exported_at': datetime.utcnow().isoformat(),
        'profiles': [p.to_dict() for p in Profile.query.all()],
        'planos_adquiridos': [p.to_dict() for p in PlanoAdquirido.query.all()],
        'platform_config': PlatformConfig.get_all(),
    })
    filename = f"backup-{datetime.utcnow().strftime('%Y-%m-%d')}.json"
    response.headers['Content-Disposition'] = f'attachment; filename={filename}'
    return response


# Super admin

@bp.route('/logs')
@login_required
@super_admin_required
def system_logs():
    limit = min(request.args.get('limit', 100, type=int), 500)
    logs = SystemLog.query.order_by(SystemLog.created_at.desc()).limit(limit).all()
    return jsonify({'logs': [log.to_dict() for log in logs]})


@bp.route('/admins', methods=['POST'])
@login_required
@super_admin_required
def create_admin():
    """Cria uma conta de administrador"""
    data = get_payload()
    try:
        admin = create_admin_account(data.get('email'), data.get('password'), data.get('nome'))
    except ValidationError as e:
        return json_error(e.message, 400, field=e.field)
    except SQLAlchemyError as e:
        logger.error(f"Erro ao criar admin: {e}")
        return json_error('Erro ao criar administrador', 500)

    AuditLogger.log('admin.created', 'profiles', resource_id=admin.id, severity='warning',
                    metadata={'email': admin.email})
    return jsonify({'message': 'Administrador criado com sucesso!', 'user': admin.to_dict()}), 201
