# tests/test_commands.py
"""
Testes dos comandos de CLI
"""
from datetime import datetime, timedelta
from app.models import Profile, SystemLog


class TestCreateAdminCommand:

    def test_creates_first_admin(self, app, db):
        runner = app.test_cli_runner()
        result = runner.invoke(args=['create-admin', '--email', 'root@test.com', '--password', 'Senha@1234'])

        assert result.exit_code == 0
        assert 'Admin criado com sucesso' in result.output
        assert Profile.query.filter_by(email='root@test.com').one().is_admin

    def test_idempotent(self, app, db, admin_user):
        runner = app.test_cli_runner()
        result = runner.invoke(args=['create-admin', '--email', 'root@test.com', '--password', 'Senha@1234'])

        assert 'Admin já existe' in result.output
        assert Profile.query.filter_by(email='root@test.com').first() is None

    def test_super_admin_flag(self, app, db):
        runner = app.test_cli_runner()
        runner.invoke(args=['create-admin', '--email', 'root@test.com', '--password', 'Senha@1234', '--super'])
        assert Profile.query.filter_by(email='root@test.com').one().is_super_admin


class TestPurgeLogs:

    def test_removes_only_expired(self, app, db):
        now = datetime.utcnow()
        db.session.add(SystemLog(log_data={'action': 'old'}, created_at=now - timedelta(days=3),
                                 expires_at=now - timedelta(days=1)))
        db.session.add(SystemLog(log_data={'action': 'new'}, created_at=now,
                                 expires_at=now + timedelta(days=2)))
        db.session.commit()

        result = app.test_cli_runner().invoke(args=['purge-logs'])

        assert result.exit_code == 0
        assert [log.log_data['action'] for log in SystemLog.query.all()] == ['new']
