# tests/conftest.py
"""
Fixtures compartilhados para todos os testes do TraderHub
"""
import io
import os
import pytest
from decimal import Decimal

# Forçar variáveis de ambiente ANTES de importar a app
os.environ['DATABASE_URL'] = 'sqlite:///:memory:'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing'

from app import create_app, db as _db
from app.models import Profile, UserRole, Plano, PlanoAdquirido, Solicitacao, HistoricoObservacao
from app.models.profile import ROLE_ADMIN, ROLE_CLIENTE, ROLE_SUPER_ADMIN
from app.utils.security import generate_api_token

# CPF com dígitos verificadores válidos
VALID_CPF = '52998224725'

PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 32
PDF_BYTES = b'%PDF-1.4\n%test\n'


@pytest.fixture(scope='function')
def app(tmp_path):
    """Cria a aplicação Flask para testes"""
    app = create_app()
    app.config.update({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SERVER_NAME': 'localhost',
        'SECRET_KEY': 'test-secret-key-for-testing',
        'STORAGE_ROOT': str(tmp_path / 'storage'),
        'STORAGE_PUBLIC': False,
    })
    return app


@pytest.fixture(scope='function')
def db(app):
    """Cria e limpa o banco de dados para cada teste"""
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.rollback()
        _db.drop_all()


@pytest.fixture
def client(app, db):
    """Cliente de teste HTTP"""
    with app.test_client() as client:
        yield client


@pytest.fixture
def app_context(app, db):
    """Contexto da aplicação"""
    yield app


def _make_profile(db, nome, email, password, role):
    user = Profile(nome=nome, email=email, telefone='11999998888')
    user.set_password(password)
    db.session.add(user)
    db.session.flush()
    db.session.add(UserRole(user_id=user.id, role=role))
    db.session.commit()
    return user


@pytest.fixture
def trader(db):
    """Cria um trader (papel cliente)"""
    user = _make_profile(db, 'Trader Teste', 'trader@test.com', 'TraderPass123', ROLE_CLIENTE)
    user.cpf = VALID_CPF
    db.session.commit()
    return user


@pytest.fixture
def second_trader(db):
    return _make_profile(db, 'Outro Trader', 'outro@test.com', 'OutroPass123', ROLE_CLIENTE)


@pytest.fixture
def admin_user(db):
    """Cria um admin de teste"""
    return _make_profile(db, 'Admin User', 'admin@test.com', 'AdminPass123', ROLE_ADMIN)


@pytest.fixture
def super_admin(db):
    return _make_profile(db, 'Super Admin', 'super@test.com', 'SuperPass123', ROLE_SUPER_ADMIN)


@pytest.fixture
def plano(db):
    """Plano do catálogo"""
    p = Plano(nome_plano='Profit One', descricao='Plano de teste', preco=Decimal('297.00'))
    db.session.add(p)
    db.session.commit()
    return p


@pytest.fixture
def plano_adquirido(db, trader, plano):
    """Plano adquirido pelo trader, carteira 001"""
    pa = PlanoAdquirido(
        cliente_id=trader.id,
        plano_id=plano.id,
        id_carteira='001',
        status_plano='ativo',
        tipo_saque='mensal',
    )
    db.session.add(pa)
    db.session.commit()
    return pa


@pytest.fixture
def solicitacao(db, trader, plano_adquirido):
    """Solicitação de saque pendente, com a entrada do histórico"""
    s = Solicitacao(
        user_id=trader.id,
        plano_adquirido_id=plano_adquirido.id,
        tipo_solicitacao='saque',
        descricao='Solicitação de saque - teste',
        status='pendente',
    )
    db.session.add(s)
    db.session.flush()
    db.session.add(HistoricoObservacao(
        plano_adquirido_id=plano_adquirido.id,
        solicitacao_id=s.id,
        tipo_evento='saque_solicitado',
        observacao='',
        valor_solicitado=Decimal('500.00'),
        status_evento='pendente',
        origem='sistema',
    ))
    db.session.commit()
    return s


@pytest.fixture
def storage(app, db):
    """Storage local apontando para o diretório temporário"""
    from app.services.storage_service import get_storage
    return get_storage()


def upload_file(data=PNG_BYTES, filename='doc.png', content_type='image/png'):
    """FileStorage-like para enviar em requisições multipart"""
    return (io.BytesIO(data), filename, content_type)


def bearer(user):
    """Header de autorização para as funções privilegiadas"""
    return {'Authorization': f'Bearer {generate_api_token(user.id)}'}


def login(client, email, password):
    """Helper para fazer login nos testes"""
    return client.post('/login', data={
        'email': email,
        'password': password,
    })


def logout(client):
    """Helper para fazer logout"""
    return client.get('/logout')
