"""
Registro de atividades e auditoria

Falhas de log nunca podem quebrar a operação principal: todo erro é
registrado no logger e descartado.
"""
import json
import re
import logging
from datetime import datetime, timedelta
from flask import current_app, has_request_context, request
from flask_login import current_user
from app import db

logger = logging.getLogger(__name__)


def _request_info():
    if not has_request_context():
        return 'Unknown', 'Unknown'
    ip = request.headers.get('X-Forwarded-For') or request.remote_addr or 'Unknown'
    return ip, request.headers.get('User-Agent') or 'Unknown'


def _resolve_user(user):
    if user is not None:
        return user
    if has_request_context() and current_user and current_user.is_authenticated:
        return current_user
    return None


class ActivityLogger:
    """Grava eventos na tabela system_logs (expira após alguns dias)"""

    @staticmethod
    def log(action, resource, details=None, user=None):
        """
        Grava uma linha em system_logs com commit próprio

        Deve ser chamado depois do commit da operação principal. Se a sessão
        ainda tiver alterações pendentes, o registro é descartado para não
        gravar nem desfazer o trabalho de quem chamou.
        """
        try:
            from app.models.platform import SystemLog

            if db.session.new or db.session.dirty or db.session.deleted:
                logger.warning(f"Atividade {action} não registrada: sessão com alterações pendentes")
                return False

            user = _resolve_user(user)
            ip, user_agent = _request_info()
            now = datetime.utcnow()
            retention = current_app.config.get('SYSTEM_LOG_RETENTION_DAYS', 2)

            log_entry = {
                'timestamp': now.isoformat(),
                'user': {
                    'id': user.id if user else None,
                    'name': user.nome if user else 'Unknown',
                    'email': user.email if user else 'Unknown',
                },
                'action': action,
                'resource': resource,
                'details': details or {},
                'ip': ip,
                'user_agent': user_agent,
            }

            db.session.add(SystemLog(
                log_data=log_entry,
                created_at=now,
                expires_at=now + timedelta(days=retention),
            ))
            db.session.commit()

            logger.info(f"[SYSTEM_LOG] {json.dumps(log_entry, default=str)}")
            return True
        except Exception as e:
            db.session.rollback()
            logger.error(f"Erro ao registrar atividade {action}: {e}")
            return False

    # Atalhos para as ações comuns
    @staticmethod
    def log_login(user=None):
        return ActivityLogger.log('user.login', 'auth', user=user)

    @staticmethod
    def log_logout(user=None):
        return ActivityLogger.log('user.logout', 'auth', user=user)

    @staticmethod
    def log_plano_created(plano_data):
        return ActivityLogger.log('plano.created', 'planos_adquiridos', plano_data)

    @staticmethod
    def log_plano_updated(plano_id, changes):
        return ActivityLogger.log('plano.updated', 'planos_adquiridos', {'id': plano_id, 'changes': changes})

    @staticmethod
    def log_plano_deleted(plano_id):
        return ActivityLogger.log('plano.deleted', 'planos_adquiridos', {'id': plano_id})

    @staticmethod
    def log_solicitacao_created(tipo, details=None):
        return ActivityLogger.log('solicitacao.created', 'solicitacoes', {'tipo': tipo, **(details or {})})

    @staticmethod
    def log_solicitacao_updated(solicitacao_id, status):
        return ActivityLogger.log('solicitacao.updated', 'solicitacoes', {'id': solicitacao_id, 'status': status})

    @staticmethod
    def log_profile_updated(changes):
        return ActivityLogger.log('profile.updated', 'profiles', changes)

    @staticmethod
    def log_document_uploaded(tipo):
        return ActivityLogger.log('document.uploaded', 'user_documents', {'tipo': tipo})

    @staticmethod
    def log_document_deleted(document_id):
        return ActivityLogger.log('document.deleted', 'user_documents', {'id': document_id})

    @staticmethod
    def log_payment_status_changed(trader_id, new_status):
        return ActivityLogger.log('trader.payment_status_changed', 'profiles', {
            'traderId': trader_id,
            'newStatus': 'active' if new_status else 'inactive',
        })


SUSPICIOUS_PATTERNS = [
    'SELECT', 'DROP', 'DELETE', 'UPDATE', 'INSERT',
    '<script', 'javascript:', 'onerror=', 'onload=',
    '../', '..\\', '/etc/', 'cmd.exe', 'powershell',
]
_suspicious_re = re.compile('|'.join(re.escape(p) for p in SUSPICIOUS_PATTERNS), re.IGNORECASE)

SEVERITY_LEVELS = {
    'info': logging.INFO,
    'warning': logging.WARNING,
    'critical': logging.CRITICAL,
}


def find_suspicious_pattern(payload):
    """Retorna o primeiro padrão suspeito encontrado no payload, ou None"""
    match = _suspicious_re.search(json.dumps(payload, default=str))
    return match.group(0) if match else None


class AuditLogger:
    """Log estruturado de auditoria por severidade"""

    @staticmethod
    def log(action, resource_type, resource_id=None, old_value=None, new_value=None,
            severity='info', metadata=None, user=None):
        try:
            user = _resolve_user(user)
            ip, user_agent = _request_info()
            severity = severity if severity in SEVERITY_LEVELS else 'info'

            message = {
                'timestamp': datetime.utcnow().isoformat(),
                'user': {
                    'id': user.id if user else None,
                    'email': user.email if user else 'unknown',
                    'ip': ip,
                },
                'action': action,
                'resource': {'type': resource_type, 'id': resource_id},
                'changes': {'old': old_value, 'new': new_value},
                'context': {'user_agent': user_agent, 'metadata': metadata},
            }

            logger.log(SEVERITY_LEVELS[severity],
                       f"[AUDIT:{severity.upper()}] {json.dumps(message, default=str)}")

            # A ação em si ('...deleted', '...updated') fica fora da busca
            pattern = find_suspicious_pattern({
                'old': old_value, 'new': new_value, 'metadata': metadata,
            })
            if pattern:
                logger.error(f"[AUDIT] PADRÃO SUSPEITO DETECTADO: {pattern} "
                             f"(usuário: {message['user']['email']})")
            return message
        except Exception as e:
            logger.error(f"Erro ao registrar auditoria {action}: {e}")
            return None

    @staticmethod
    def log_withdrawal_request(amount=None):
        return AuditLogger.log('solicitacao.saque.created', 'solicitacoes',
                               new_value={'amount': float(amount) if amount is not None else None})

    @staticmethod
    def log_biweekly_withdrawal_request():
        return AuditLogger.log('solicitacao.quinzenal.created', 'solicitacoes')

    @staticmethod
    def log_second_chance_request():
        return AuditLogger.log('solicitacao.segunda_chance.created', 'solicitacoes')

    @staticmethod
    def log_request_status_change(request_id, old_status, new_status):
        return AuditLogger.log('solicitacao.status.changed', 'solicitacoes', resource_id=request_id,
                               old_value={'status': old_status}, new_value={'status': new_status},
                               severity='warning')

    @staticmethod
    def log_plan_status_change(plan_id, old_status, new_status):
        return AuditLogger.log('plano_adquirido.status.changed', 'planos_adquiridos', resource_id=plan_id,
                               old_value={'status': old_status}, new_value={'status': new_status},
                               severity='warning')

    @staticmethod
    def log_plan_deleted(plan_id, deleted_by):
        return AuditLogger.log('plano_adquirido.deleted', 'planos_adquiridos', resource_id=plan_id,
                               metadata={'deleted_by': deleted_by}, severity='critical')

    @staticmethod
    def log_failed_login(email, reason='Invalid credentials'):
        return AuditLogger.log('user.login.failed', 'auth', metadata={'email': email, 'reason': reason},
                               severity='warning')
