# tests/test_security.py
"""
Testes das funções de segurança
"""
import time
from app.utils.security import (
    create_token, decode_token,
    generate_api_token, verify_api_token,
    generate_storage_token, verify_storage_token,
    encrypt_data, decrypt_data,
    sanitize_filename, mask_sensitive_data,
)


class TestApiToken:
    """Testes do token bearer das funções privilegiadas"""

    def test_generate_and_verify(self, app_context):
        token = generate_api_token('user-123')
        assert isinstance(token, str)
        assert verify_api_token(token) == 'user-123'

    def test_expired_token(self, app_context):
        token = generate_api_token('user-123', expires_in=0)
        time.sleep(1)
        assert verify_api_token(token) is None

    def test_invalid_token(self, app_context):
        assert verify_api_token('invalid.token.here') is None
        assert verify_api_token('') is None

    def test_wrong_purpose(self, app_context):
        """Token de storage não serve como token de API"""
        token = generate_storage_token('documentos', 'a/b.png')
        assert verify_api_token(token) is None


class TestStorageToken:
    """Testes do token das URLs assinadas"""

    def test_bound_to_object(self, app_context):
        token = generate_storage_token('documentos', 'user/cnh.png')
        assert verify_storage_token(token, 'documentos', 'user/cnh.png')
        assert not verify_storage_token(token, 'documentos', 'user/outro.png')
        assert not verify_storage_token(token, 'outro-bucket', 'user/cnh.png')

    def test_expired(self, app_context):
        token = generate_storage_token('documentos', 'user/cnh.png', expires_in=0)
        time.sleep(1)
        assert not verify_storage_token(token, 'documentos', 'user/cnh.png')


class TestGenericToken:

    def test_purpose_check(self, app_context):
        token = create_token({'purpose': 'a', 'x': 1})
        assert decode_token(token)['x'] == 1
        assert decode_token(token, purpose='a')['x'] == 1
        assert decode_token(token, purpose='b') is None

    def test_other_secret_rejected(self, app):
        with app.app_context():
            token = create_token({'x': 1})
        app.config['SECRET_KEY'] = 'outra-chave'
        with app.app_context():
            assert decode_token(token) is None


class TestEncryption:

    def test_roundtrip(self, app_context):
        encrypted = encrypt_data('52998224725')
        assert encrypted != '52998224725'
        assert decrypt_data(encrypted) == '52998224725'

    def test_wrong_key(self, app_context):
        encrypted = encrypt_data('segredo', key='chave-um')
        assert decrypt_data(encrypted, key='chave-dois') is None

    def test_garbage(self, app_context):
        assert decrypt_data('nao-criptografado') is None


class TestSanitize:

    def test_sanitize_filename(self):
        assert sanitize_filename('Meu Comprovante (1).PDF') == 'meu-comprovante-1.pdf'
        assert '/' not in sanitize_filename('../../etc/passwd')

    def test_mask(self):
        assert mask_sensitive_data('52998224725') == '*******4725'
        assert mask_sensitive_data('123') == '***'
