# tests/test_activity_logger.py
"""
Testes do registro de atividades e da auditoria
"""
import logging
from decimal import Decimal
from datetime import timedelta
from unittest.mock import patch
from app.models import SystemLog, Plano
from app.services.activity_logger import ActivityLogger, AuditLogger, find_suspicious_pattern


class TestActivityLogger:

    def test_writes_system_log(self, db, trader):
        assert ActivityLogger.log_plano_deleted('pa-1') is True

        log = SystemLog.query.one()
        assert log.log_data['action'] == 'plano.deleted'
        assert log.log_data['resource'] == 'planos_adquiridos'
        assert log.log_data['details'] == {'id': 'pa-1'}
        assert log.expires_at - log.created_at == timedelta(days=2)

    def test_explicit_user(self, db, trader):
        ActivityLogger.log_login(trader)
        assert SystemLog.query.one().log_data['user']['email'] == 'trader@test.com'

    def test_failure_is_swallowed(self, db, caplog):
        with patch.object(db.session, 'commit', side_effect=RuntimeError('banco fora')):
            assert ActivityLogger.log('x.y', 'z') is False
        assert 'Erro ao registrar atividade' in caplog.text

    def test_pending_changes_are_left_alone(self, db, caplog):
        plano = Plano(nome_plano='Pendente', preco=Decimal('10.00'))
        db.session.add(plano)

        assert ActivityLogger.log('x.y', 'z') is False

        assert plano in db.session.new
        assert 'sessão com alterações pendentes' in caplog.text
        db.session.rollback()
        assert SystemLog.query.count() == 0
        assert Plano.query.count() == 0


class TestAuditLogger:

    def test_severity_sets_level(self, db, caplog):
        with caplog.at_level(logging.INFO):
            AuditLogger.log_plan_deleted('pa-1', 'admin-1')
        record = [r for r in caplog.records if '[AUDIT:CRITICAL]' in r.getMessage()][0]
        assert record.levelno == logging.CRITICAL

    def test_action_name_is_not_suspicious(self, db, caplog):
        AuditLogger.log_request_status_change('s-1', 'pendente', 'aprovado')
        assert 'PADRÃO SUSPEITO' not in caplog.text

    def test_detects_patterns(self):
        assert find_suspicious_pattern({'x': "1; DROP TABLE profiles"}) == 'DROP'
        assert find_suspicious_pattern({'path': '../../etc/passwd'}) == '../'
        assert find_suspicious_pattern({'nome': 'Maria'}) is None
