# tests/test_dashboard.py
"""
Testes da área do trader
"""
from decimal import Decimal
from app.models import Solicitacao, HistoricoObservacao, UserDocument
from tests.conftest import login, upload_file, VALID_CPF, PNG_BYTES, PDF_BYTES


def _login_trader(client):
    return login(client, 'trader@test.com', 'TraderPass123')


class TestDashboardAccess:

    def test_requires_login(self, client):
        resp = client.get('/dashboard/')
        assert resp.status_code == 302
        assert 'login' in resp.headers.get('Location', '').lower()

    def test_index(self, client, trader, plano_adquirido, solicitacao):
        _login_trader(client)
        resp = client.get('/dashboard/')
        assert resp.status_code == 200

        data = resp.get_json()
        assert data['profile']['email'] == 'trader@test.com'
        assert data['refresh_interval'] == 30
        assert len(data['planos']) == 1
        timeline = data['planos'][0]['timeline']
        assert timeline[0]['valor_solicitado_fmt'] == 'R$ 500,00'


class TestTimeline:

    def test_other_trader_plan_is_404(self, client, second_trader, plano_adquirido):
        login(client, 'outro@test.com', 'OutroPass123')
        resp = client.get(f'/dashboard/planos/{plano_adquirido.id}/timeline')
        assert resp.status_code == 404

    def test_comprovante_resolved_on_demand(self, client, db, trader, plano_adquirido, storage):
        storage.upload('comprovantes/abc.pdf', b'%PDF-1.4', 'application/pdf')
        entry = HistoricoObservacao(
            plano_adquirido_id=plano_adquirido.id,
            tipo_evento='resposta_admin',
            observacao='Pago',
            comprovante_url='comprovantes/abc.pdf',
            status_evento='efetuado',
            origem='admin',
        )
        db.session.add(entry)
        db.session.commit()

        _login_trader(client)
        feed = client.get(f'/dashboard/planos/{plano_adquirido.id}/timeline').get_json()['timeline']
        assert feed[0]['has_comprovante'] is True
        assert 'url' not in feed[0]

        resp = client.get(f'/dashboard/historico/{entry.id}/comprovante')
        data = resp.get_json()
        assert data['source'] == 'signed'
        assert data['render'] == 'link'


class TestProfile:

    def test_update_profile(self, client, trader):
        _login_trader(client)
        resp = client.post('/dashboard/profile', json={
            'nome': 'Trader Atualizado',
            'data_nascimento': '1990-05-20',
            'telefone': '11999998888',
            'email': 'trader@test.com',
            'cpf': VALID_CPF,
            'rua_bairro': 'Rua das Flores, Centro',
            'numero_residencial': '10',
            'cep': '01001000',
            'cidade': 'São Paulo',
            'estado': 'SP',
        })
        assert resp.status_code == 200
        assert trader.nome == 'Trader Atualizado'
        assert trader.estado == 'SP'

    def test_invalid_profile(self, client, trader):
        _login_trader(client)
        resp = client.post('/dashboard/profile', json={'nome': 'AB'})
        assert resp.status_code == 400
        assert resp.get_json()['field'] == 'nome'



class TestProfilePhoto:
    """Foto de perfil do trader"""

    def _send(self, client, *args):
        return client.post('/dashboard/profile/foto', data={'file': upload_file(*args)},
                           content_type='multipart/form-data')

    def test_upload(self, client, trader, storage):
        _login_trader(client)
        resp = self._send(client, PNG_BYTES, 'foto.png', 'image/png')

        assert resp.status_code == 200
        assert trader.foto_perfil.startswith(f'{trader.id}/perfil_')
        assert storage.exists(trader.foto_perfil)
        foto = resp.get_json()['foto']
        assert foto['source'] == 'signed'
        assert foto['kind'] == 'image'

    def test_rejects_pdf(self, client, trader):
        _login_trader(client)
        resp = self._send(client, PDF_BYTES, 'foto.pdf', 'application/pdf')

        assert resp.status_code == 400
        assert resp.get_json()['field'] == 'file'
        assert trader.foto_perfil is None

    def test_rejects_large_photo(self, client, trader):
        _login_trader(client)
        resp = self._send(client, PNG_BYTES + b'\x00' * (5 * 1024 * 1024), 'foto.png', 'image/png')

        assert resp.status_code == 400
        assert 'muito grande' in resp.get_json()['error']
        assert trader.foto_perfil is None

    def test_replace_removes_previous(self, client, trader, storage):
        _login_trader(client)
        self._send(client, PNG_BYTES, 'foto.png', 'image/png')
        first = trader.foto_perfil

        resp = self._send(client, PNG_BYTES, 'foto.jpg', 'image/jpeg')

        assert resp.status_code == 200
        assert trader.foto_perfil != first
        assert not storage.exists(first)
        assert storage.exists(trader.foto_perfil)

    def test_view(self, client, trader, storage):
        _login_trader(client)
        assert client.get('/dashboard/profile/foto').status_code == 404

        self._send(client, PNG_BYTES, 'foto.webp', 'image/webp')
        resp = client.get('/dashboard/profile/foto')

        assert resp.status_code == 200
        assert resp.get_json()['path'] == trader.foto_perfil


class TestDocuments:

    def test_upload(self, client, trader, storage):
        _login_trader(client)
        resp = client.post('/dashboard/documents', data={
            'tipo_documento': 'cnh',
            'file': upload_file(),
        }, content_type='multipart/form-data')
        assert resp.status_code == 201
        assert storage.exists(resp.get_json()['document']['arquivo_url'])

    def test_rejects_text_file(self, client, trader):
        _login_trader(client)
        resp = client.post('/dashboard/documents', data={
            'tipo_documento': 'cnh',
            'file': upload_file(b'ola', 'nota.txt', 'text/plain'),
        }, content_type='multipart/form-data')
        assert resp.status_code == 400
        assert UserDocument.query.count() == 0

    def test_view_and_delete(self, client, trader, storage):
        _login_trader(client)
        resp = client.post('/dashboard/documents', data={
            'tipo_documento': 'selfie_rg',
            'file': upload_file(),
        }, content_type='multipart/form-data')
        document_id = resp.get_json()['document']['id']

        view = client.get(f'/dashboard/documents/{document_id}/view').get_json()
        assert view['source'] == 'signed'
        assert view['kind'] == 'image'

        resp = client.delete(f'/dashboard/documents/{document_id}')
        assert resp.status_code == 200
        assert UserDocument.query.count() == 0


class TestSolicitacoes:

    def test_withdrawal(self, client, trader, plano_adquirido):
        _login_trader(client)
        resp = client.post('/dashboard/solicitacoes', json={
            'tipo_solicitacao': 'saque',
            'plano_adquirido_id': plano_adquirido.id,
            'nome_completo': 'Trader Teste',
            'cpf': VALID_CPF,
            'valor': '750,50',
        })
        assert resp.status_code == 201

        entry = HistoricoObservacao.query.filter_by(tipo_evento='saque_solicitado').one()
        assert entry.valor_solicitado == Decimal('750.50')

    def test_invalid_withdrawal(self, client, trader, plano_adquirido):
        _login_trader(client)
        resp = client.post('/dashboard/solicitacoes', json={
            'tipo_solicitacao': 'saque',
            'plano_adquirido_id': plano_adquirido.id,
            'nome_completo': '',
            'cpf': VALID_CPF,
            'valor': '100',
        })
        assert resp.status_code == 400
        assert Solicitacao.query.count() == 0

    def test_list_only_own(self, client, trader, second_trader, solicitacao):
        login(client, 'outro@test.com', 'OutroPass123')
        resp = client.get('/dashboard/solicitacoes')
        assert resp.get_json()['solicitacoes'] == []
