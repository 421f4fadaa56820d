# tests/test_models.py
"""
Testes dos models
"""
from decimal import Decimal
from app.models import Profile, UserRole, PlanoAdquirido, HistoricoObservacao, Solicitacao
from app.models.profile import ROLE_SUPER_ADMIN
from app.models.solicitacao import STATUS_BADGES, STATUSES, get_tipo_label
from tests.conftest import VALID_CPF


class TestProfile:
    """Testes do perfil (usuário do sistema)"""

    def test_password_hash(self, db, trader):
        assert trader.password_hash != 'TraderPass123'
        assert trader.check_password('TraderPass123')
        assert not trader.check_password('senha-errada')

    def test_check_password_without_hash(self, db):
        user = Profile(nome='Sem Senha', email='semsenha@test.com')
        assert not user.check_password('qualquer')

    def test_cpf_encrypted_at_rest(self, db, trader):
        assert trader.cpf == VALID_CPF
        assert trader._cpf_encrypted != VALID_CPF

    def test_cpf_none(self, db, second_trader):
        assert second_trader.cpf is None

    def test_roles(self, db, trader, admin_user, super_admin):
        assert not trader.is_admin
        assert admin_user.is_admin
        assert not admin_user.is_super_admin
        assert super_admin.is_admin
        assert super_admin.is_super_admin

    def test_to_dict(self, db, trader):
        data = trader.to_dict()
        assert data['email'] == 'trader@test.com'
        assert data['pagamento_ativo'] is False
        assert data['documentos_completos'] is False
        assert 'password_hash' not in data

    def test_delete_profile_removes_roles(self, db, super_admin):
        user_id = super_admin.id
        db.session.delete(super_admin)
        db.session.commit()
        assert UserRole.query.filter_by(user_id=user_id, role=ROLE_SUPER_ADMIN).count() == 0


class TestPlanoAdquirido:
    """Testes do plano adquirido"""

    def test_to_dict(self, db, plano_adquirido):
        data = plano_adquirido.to_dict()
        assert data['id_carteira'] == '001'
        assert data['nome_plano'] == 'Profit One'
        assert data['cliente_email'] == 'trader@test.com'

    def test_delete_cascades_history(self, db, plano_adquirido, solicitacao):
        plano_id = plano_adquirido.id
        assert HistoricoObservacao.query.filter_by(plano_adquirido_id=plano_id).count() == 1

        db.session.delete(plano_adquirido)
        db.session.commit()

        assert db.session.get(PlanoAdquirido, plano_id) is None
        assert HistoricoObservacao.query.filter_by(plano_adquirido_id=plano_id).count() == 0
        assert db.session.get(Solicitacao, solicitacao.id) is not None


class TestSolicitacao:
    """Testes do vocabulário de status e rótulos"""

    def test_every_status_has_badge(self):
        for status in STATUSES:
            assert status in STATUS_BADGES

    def test_unknown_status_falls_back_to_pendente(self, db, solicitacao):
        solicitacao.status = 'desconhecido'
        assert solicitacao.to_dict()['status_label'] == 'Pendente'

    def test_tipo_label(self):
        assert get_tipo_label('saque') == 'Solicitação de Saque'
        assert get_tipo_label('novo_tipo') == 'novo_tipo'

    def test_history_backref(self, db, solicitacao):
        entries = solicitacao.historico.all()
        assert len(entries) == 1
        assert entries[0].valor_solicitado == Decimal('500.00')
