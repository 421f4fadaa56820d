# app/routes/dashboard.py
import logging
from datetime import datetime
from flask import Blueprint, jsonify, request, current_app, abort
from flask_login import login_required, current_user
from sqlalchemy.exc import SQLAlchemyError
from app import db
from app.models import Profile, PlanoAdquirido, HistoricoObservacao, UserDocument, Solicitacao, PlatformConfig
from app.models.solicitacao import TIPO_SAQUE, TIPO_SAQUE_QUINZENAL, TIPO_SEGUNDA_CHANCE
from app.services.activity_logger import ActivityLogger, AuditLogger
from app.services.attachment_service import resolve_attachment
from app.services.document_service import upload_document, delete_document, upload_profile_photo
from app.services.request_service import create_request
from app.services.storage_service import StorageError
from app.services.timeline_service import TimelineService
from app.utils.http import get_payload, json_error
from app.utils.validators import ValidationError, parse_valor, validate_personal_info

bp = Blueprint('dashboard', __name__, url_prefix='/dashboard')
logger = logging.getLogger(__name__)


def _own_plano(plano_id):
    return PlanoAdquirido.query.filter_by(id=plano_id, cliente_id=current_user.id).first_or_404()


def _serialize_plano(plano):
    data = plano.to_dict()
    data['timeline'] = TimelineService.get_feed(plano.id)
    return data


@bp.route('/')
@login_required
def index():
    """Dados do trader: perfil, planos com linha do tempo e documentos"""
    planos = PlanoAdquirido.query.filter_by(
        cliente_id=current_user.id
    ).order_by(
        PlanoAdquirido.id_carteira.asc()
    ).all()

    documents = UserDocument.query.filter_by(
        user_id=current_user.id
    ).order_by(
        UserDocument.created_at.desc()
    ).all()

    return jsonify({
        'profile': current_user.to_dict(),
        'planos': [_serialize_plano(p) for p in planos],
        'documents': [d.to_dict() for d in documents],
        'links': PlatformConfig.get_all(),
        # O cliente recarrega estes dados periodicamente, fora de edições
        'refresh_interval': current_app.config.get('DASHBOARD_REFRESH_INTERVAL', 30),
    })


@bp.route('/planos/<plano_id>/timeline')
@login_required
def timeline(plano_id):
    plano = _own_plano(plano_id)
    return jsonify({'plano': plano.to_dict(), 'timeline': TimelineService.get_feed(plano.id)})


@bp.route('/historico/<entry_id>/comprovante')
@login_required
def open_comprovante(entry_id):
    """Resolve o comprovante de uma única entrada, quando aberto pelo trader"""
    entry = HistoricoObservacao.query.join(PlanoAdquirido).filter(
        HistoricoObservacao.id == entry_id,
        PlanoAdquirido.cliente_id == current_user.id,
    ).first_or_404()

    if not entry.comprovante_url:
        abort(404)

    return jsonify(resolve_attachment(entry.comprovante_url))


@bp.route('/profile', methods=['POST'])
@login_required
def update_profile():
    """Atualizar dados pessoais"""
    try:
        fields = validate_personal_info(get_payload())
    except ValidationError as e:
        return json_error(e.message, 400, field=e.field)

    try:
        fields['data_nascimento'] = datetime.strptime(fields['data_nascimento'], '%Y-%m-%d').date()
    except ValueError:
        return json_error('Data de nascimento inválida', 400, field='data_nascimento')

    if fields['email'] != current_user.email and Profile.query.filter_by(email=fields['email']).first():
        return json_error('Email já cadastrado!', 400, field='email')

    try:
        for key, value in fields.items():
            setattr(current_user, key, value)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Erro ao atualizar perfil {current_user.id}: {e}")
        return json_error('Erro ao salvar dados pessoais', 500)

    ActivityLogger.log_profile_updated({k: str(v) for k, v in fields.items() if k != 'cpf'})
    return jsonify({'message': 'Dados atualizados com sucesso!', 'profile': current_user.to_dict()})


@bp.route('/profile/foto', methods=['POST'])
@login_required
def upload_foto():
    """Enviar foto de perfil"""
    try:
        path = upload_profile_photo(current_user, request.files.get('file'))
    except ValidationError as e:
        return json_error(e.message, 400, field=e.field)
    except (StorageError, SQLAlchemyError) as e:
        logger.error(f"Erro ao enviar foto de perfil de {current_user.id}: {e}")
        return json_error('Erro ao enviar foto de perfil', 500)

    ActivityLogger.log_profile_updated({'foto_perfil': path})
    return jsonify({
        'message': 'Foto de perfil atualizada!',
        'foto': resolve_attachment(path),
    })


@bp.route('/profile/foto')
@login_required
def view_foto():
    if not current_user.foto_perfil:
        abort(404)
    return jsonify(resolve_attachment(current_user.foto_perfil))


@bp.route('/documents')
@login_required
def documents():
    docs = UserDocument.query.filter_by(user_id=current_user.id).order_by(UserDocument.created_at.desc()).all()
    return jsonify({'documents': [d.to_dict() for d in docs]})


@bp.route('/documents', methods=['POST'])
@login_required
def upload():
    """Enviar documento (CNH ou selfie com documento)"""
    tipo = request.form.get('tipo_documento')
    try:
        document = upload_document(current_user, tipo, request.files.get('file'))
    except ValidationError as e:
        return json_error(e.message, 400, field=e.field)
    except (StorageError, SQLAlchemyError) as e:
        logger.error(f"Erro ao enviar documento de {current_user.id}: {e}")
        return json_error(f'Erro ao enviar documento: {e}', 500)

    ActivityLogger.log_document_uploaded(tipo)
    return jsonify({'message': 'Documento enviado com sucesso!', 'document': document.to_dict()}), 201


@bp.route('/documents/<document_id>/view')
@login_required
def view_document(document_id):
    document = UserDocument.query.filter_by(id=document_id, user_id=current_user.id).first_or_404()
    return jsonify(resolve_attachment(document.arquivo_url))


@bp.route('/documents/<document_id>', methods=['DELETE'])
@login_required
def remove_document(document_id):
    document = UserDocument.query.filter_by(id=document_id, user_id=current_user.id).first_or_404()
    try:
        delete_document(document)
    except (StorageError, SQLAlchemyError) as e:
        db.session.rollback()
        logger.error(f"Erro ao excluir documento {document_id}: {e}")
        return json_error(f'Erro ao excluir documento: {e}', 500)

    ActivityLogger.log_document_deleted(document_id)
    return jsonify({'message': 'Documento excluído com sucesso!'})


@bp.route('/solicitacoes')
@login_required
def solicitacoes():
    items = Solicitacao.query.filter_by(
        user_id=current_user.id
    ).order_by(
        Solicitacao.created_at.desc()
    ).all()
    return jsonify({'solicitacoes': [s.to_dict() for s in items]})


@bp.route('/solicitacoes', methods=['POST'])
@login_required
def new_solicitacao():
    """Saque, segunda chance, mudança para quinzenal ou aprovação"""
    data = get_payload()
    tipo = data.get('tipo_solicitacao')
    try:
        solicitacao = create_request(current_user, tipo, data.get('plano_adquirido_id'), data)
    except ValidationError as e:
        return json_error(e.message, 400, field=e.field)
    except SQLAlchemyError as e:
        logger.error(f"Erro ao criar solicitação de {current_user.id}: {e}")
        return json_error(f'Erro ao enviar solicitação: {e}', 500)

    ActivityLogger.log_solicitacao_created(tipo, {'id': solicitacao.id})
    if tipo == TIPO_SAQUE:
        AuditLogger.log_withdrawal_request(parse_valor(data.get('valor')))
    elif tipo == TIPO_SAQUE_QUINZENAL:
        AuditLogger.log_biweekly_withdrawal_request()
    elif tipo == TIPO_SEGUNDA_CHANCE:
        AuditLogger.log_second_chance_request()

    return jsonify({'message': 'Solicitação enviada com sucesso!', 'solicitacao': solicitacao.to_dict()}), 201
