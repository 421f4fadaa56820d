# app/routes/functions.py
"""
Funções privilegiadas (RPC em JSON)

Autenticação por 'Authorization: Bearer <token>' emitido em /token.
"""
import logging
from datetime import datetime
from flask import Blueprint, jsonify, g
from sqlalchemy.exc import SQLAlchemyError
from app.models import Solicitacao, PlanoAdquirido, UserRole, SystemLog
from app.services.account_service import create_admin_account
from app.services.activity_logger import ActivityLogger, AuditLogger, SEVERITY_LEVELS
from app.utils.decorators import bearer_token_required
from app.utils.http import get_payload, json_error
from app.utils.validators import ValidationError

bp = Blueprint('functions', __name__, url_prefix='/functions/v1')
logger = logging.getLogger(__name__)

RECENT_LIMIT = 50


@bp.route('/create-admin', methods=['POST'])
@bearer_token_required(role='admin')
def create_admin():
    data = get_payload()
    try:
        admin = create_admin_account(data.get('email'), data.get('password'))
    except ValidationError as e:
        return json_error(e.message, 400, field=e.field)
    except SQLAlchemyError as e:
        logger.error(f"Erro ao criar admin via função: {e}")
        return json_error('Erro ao criar administrador', 500)

    AuditLogger.log('admin.created', 'profiles', resource_id=admin.id, severity='warning',
                    metadata={'email': admin.email}, user=g.api_user)
    return jsonify({
        'message': 'Admin criado com sucesso!',
        'email': admin.email,
        'userId': admin.id,
    })


@bp.route('/audit-log', methods=['POST'])
@bearer_token_required()
def audit_log():
    payload = get_payload()
    if not payload.get('action') or not payload.get('resource_type'):
        return json_error('Dados inválidos', 400)

    severity = payload.get('severity') or 'info'
    if severity not in SEVERITY_LEVELS:
        return json_error('Dados inválidos', 400, field='severity')

    AuditLogger.log(
        payload['action'],
        payload['resource_type'],
        resource_id=payload.get('resource_id'),
        old_value=payload.get('old_value'),
        new_value=payload.get('new_value'),
        severity=severity,
        metadata=payload.get('metadata'),
        user=g.api_user,
    )
    return jsonify({'success': True})


@bp.route('/log-activity', methods=['POST'])
@bearer_token_required()
def log_activity():
    """Log interno de uma ação do usuário, sem gravação em tabela"""
    payload = get_payload()
    action = payload.get('action')
    if not action or not isinstance(action, str) or len(action) > 100:
        return json_error('Dados inválidos', 400)

    logger.info(f"[ACTIVITY] user={g.api_user.id} action={action} details={payload.get('details') or {}}")
    if any(word in action for word in ('admin', 'delete', 'update')):
        logger.warning(f"[ACTIVITY] Ação sensível: {action} (usuário: {g.api_user.email})")
    return jsonify({'success': True})


@bp.route('/log-all-activity', methods=['POST'])
@bearer_token_required()
def log_all_activity():
    """Grava a atividade em system_logs (expira após alguns dias)"""
    payload = get_payload()
    if not payload.get('action'):
        return json_error('Dados inválidos', 400)

    ActivityLogger.log(
        payload['action'],
        payload.get('resource') or 'unknown',
        payload.get('details'),
        user=g.api_user,
    )
    return jsonify({'success': True})


def _role_dict(role):
    return {
        'id': role.id,
        'user_id': role.user_id,
        'role': role.role,
        'created_at': role.created_at.isoformat() if role.created_at else None,
        'profiles': {'nome': role.user.nome, 'email': role.user.email} if role.user else None,
    }


@bp.route('/get-system-logs', methods=['GET', 'POST'])
@bearer_token_required(role='admin')
def get_system_logs():
    """Visão geral da atividade recente: solicitações, planos e papéis"""
    solicitacoes = Solicitacao.query.order_by(Solicitacao.created_at.desc()).limit(RECENT_LIMIT).all()
    planos = PlanoAdquirido.query.order_by(PlanoAdquirido.created_at.desc()).limit(RECENT_LIMIT).all()
    roles = UserRole.query.order_by(UserRole.created_at.desc()).limit(RECENT_LIMIT).all()
    system_logs = SystemLog.query.order_by(SystemLog.created_at.desc()).limit(RECENT_LIMIT).all()

    return jsonify({
        'logs': {
            'solicitacoes': [s.to_dict() for s in solicitacoes],
            'planos': [p.to_dict() for p in planos],
            'roles': [_role_dict(r) for r in roles],
            'system_logs': [log.to_dict() for log in system_logs],
            'timestamp': datetime.utcnow().isoformat(),
        },
        'message': 'Logs recuperados com sucesso',
    })
