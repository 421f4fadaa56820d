# tests/test_functions.py
"""
Testes das funções privilegiadas (/functions/v1)
"""
from app.models import Profile, SystemLog
from tests.conftest import bearer


class TestAuthentication:

    def test_missing_token(self, client):
        resp = client.post('/functions/v1/audit-log', json={'action': 'x', 'resource_type': 'y'})
        assert resp.status_code == 401
        assert resp.get_json()['error'] == 'Não autenticado'

    def test_invalid_token(self, client):
        resp = client.post('/functions/v1/audit-log', json={'action': 'x', 'resource_type': 'y'},
                           headers={'Authorization': 'Bearer invalido'})
        assert resp.status_code == 401


class TestCreateAdmin:

    def test_admin_creates_admin(self, client, admin_user):
        resp = client.post('/functions/v1/create-admin', headers=bearer(admin_user), json={
            'email': 'segundo.admin@test.com',
            'password': 'Senha@1234',
        })
        assert resp.status_code == 200
        data = resp.get_json()
        assert data['email'] == 'segundo.admin@test.com'

        admin = Profile.query.filter_by(email='segundo.admin@test.com').one()
        assert admin.nome == 'Administrador'
        assert admin.is_admin

    def test_non_admin_forbidden(self, client, trader):
        resp = client.post('/functions/v1/create-admin', headers=bearer(trader), json={
            'email': 'x@test.com', 'password': 'Senha@1234',
        })
        assert resp.status_code == 403
        assert Profile.query.filter_by(email='x@test.com').first() is None

    def test_short_password(self, client, admin_user):
        resp = client.post('/functions/v1/create-admin', headers=bearer(admin_user), json={
            'email': 'x@test.com', 'password': '1234567',
        })
        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'A senha deve ter pelo menos 8 caracteres'

    def test_missing_fields(self, client, admin_user):
        resp = client.post('/functions/v1/create-admin', headers=bearer(admin_user), json={})
        assert resp.status_code == 400


class TestAuditLog:

    def test_requires_action_and_resource(self, client, trader):
        resp = client.post('/functions/v1/audit-log', headers=bearer(trader), json={'action': 'x'})
        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'Dados inválidos'

    def test_accepts_event(self, client, trader):
        resp = client.post('/functions/v1/audit-log', headers=bearer(trader), json={
            'action': 'profile.viewed',
            'resource_type': 'profiles',
            'severity': 'info',
        })
        assert resp.status_code == 200
        assert resp.get_json()['success'] is True

    def test_suspicious_payload_is_flagged(self, client, trader, caplog):
        resp = client.post('/functions/v1/audit-log', headers=bearer(trader), json={
            'action': 'profile.updated',
            'resource_type': 'profiles',
            'new_value': {'nome': '<script>alert(1)</script>'},
        })
        assert resp.status_code == 200
        assert 'PADRÃO SUSPEITO' in caplog.text


class TestActivity:

    def test_log_activity_validates_action(self, client, trader):
        resp = client.post('/functions/v1/log-activity', headers=bearer(trader), json={'action': 'x' * 101})
        assert resp.status_code == 400

    def test_log_all_activity_persists(self, client, trader):
        resp = client.post('/functions/v1/log-all-activity', headers=bearer(trader), json={
            'action': 'page.viewed',
            'resource': 'dashboard',
            'details': {'page': 'planos'},
        })
        assert resp.status_code == 200

        log = SystemLog.query.one()
        assert log.log_data['action'] == 'page.viewed'
        assert log.log_data['user']['email'] == 'trader@test.com'
        assert log.expires_at > log.created_at


class TestGetSystemLogs:

    def test_admin_overview(self, client, admin_user, solicitacao):
        resp = client.get('/functions/v1/get-system-logs', headers=bearer(admin_user))
        assert resp.status_code == 200
        logs = resp.get_json()['logs']
        assert len(logs['solicitacoes']) == 1
        assert len(logs['planos']) == 1
        assert {r['role'] for r in logs['roles']} == {'admin', 'cliente'}

    def test_non_admin_forbidden(self, client, trader):
        resp = client.get('/functions/v1/get-system-logs', headers=bearer(trader))
        assert resp.status_code == 403
