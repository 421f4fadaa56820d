import os
import re
import jwt
import base64
from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from flask import current_app, has_app_context


def _secret_key() -> str:
    if has_app_context():
        return current_app.config.get('SECRET_KEY') or 'dev-key-change-in-production'
    return os.getenv('SECRET_KEY', 'dev-key-change-in-production')


def create_token(payload: Dict[Any, Any], expires_in: int = 3600) -> str:
    """
    Criar token JWT genérico

    Args:
        payload: Dados do token
        expires_in: Tempo de expiração em segundos

    Returns:
        Token JWT
    """
    payload = dict(payload)
    payload['iat'] = datetime.utcnow()
    payload['exp'] = datetime.utcnow() + timedelta(seconds=expires_in)

    return jwt.encode(payload, _secret_key(), algorithm='HS256')


def decode_token(token: str, purpose: str = None) -> Optional[Dict[Any, Any]]:
    """
    Decodificar token JWT genérico

    Args:
        token: Token JWT
        purpose: Propósito esperado (opcional)

    Returns:
        Payload se válido, None caso contrário
    """
    if not token:
        return None

    try:
        payload = jwt.decode(token, _secret_key(), algorithms=['HS256'])
    except jwt.ExpiredSignatureError:
        # Token expirado
        return None
    except jwt.InvalidTokenError:
        # Token inválido
        return None

    # Verificar propósito se fornecido
    if purpose and payload.get('purpose') != purpose:
        return None

    return payload


def generate_api_token(user_id: str, expires_in: int = 86400) -> str:
    """
    Gerar token de sessão (bearer) para as funções privilegiadas

    Args:
        user_id: ID do usuário
        expires_in: Tempo de expiração em segundos (padrão: 24 horas)
    """
    return create_token({'user_id': user_id, 'purpose': 'api_access'}, expires_in)


def verify_api_token(token: str) -> Optional[str]:
    """
    Verificar token de sessão

    Returns:
        user_id se válido, None se inválido/expirado
    """
    payload = decode_token(token, purpose='api_access')
    if not payload:
        return None
    return payload.get('user_id')


def generate_storage_token(bucket: str, path: str, expires_in: int = 1800) -> str:
    """
    Gerar token de acesso temporário a um objeto do storage

    Args:
        bucket: Nome do bucket
        path: Caminho do objeto dentro do bucket
        expires_in: Tempo de expiração em segundos (padrão: 30 minutos)
    """
    return create_token({'bucket': bucket, 'path': path, 'purpose': 'storage_access'}, expires_in)


def verify_storage_token(token: str, bucket: str, path: str) -> bool:
    """Verifica se o token dá acesso exatamente a este objeto"""
    payload = decode_token(token, purpose='storage_access')
    if not payload:
        return False
    return payload.get('bucket') == bucket and payload.get('path') == path


def _fernet(key: Optional[str] = None):
    from cryptography.fernet import Fernet

    if not key:
        key = _secret_key()

    # Gerar chave Fernet a partir da secret key
    key_bytes = key.encode('utf-8')[:32].ljust(32, b'0')
    return Fernet(base64.urlsafe_b64encode(key_bytes))


def encrypt_data(data: str, key: Optional[str] = None) -> str:
    """
    Criptografar dados sensíveis (ex: CPF)

    Args:
        data: Dados para criptografar
        key: Chave de criptografia (usa SECRET_KEY se não fornecida)

    Returns:
        Dados criptografados em base64
    """
    encrypted = _fernet(key).encrypt(data.encode('utf-8'))
    return encrypted.decode('utf-8')


def decrypt_data(encrypted_data: str, key: Optional[str] = None) -> Optional[str]:
    """
    Descriptografar dados

    Returns:
        Dados descriptografados ou None se falhar
    """
    from cryptography.fernet import InvalidToken

    try:
        decrypted = _fernet(key).decrypt(encrypted_data.encode('utf-8'))
        return decrypted.decode('utf-8')
    except (InvalidToken, ValueError):
        return None


def sanitize_filename(filename: str) -> str:
    """
    Sanitizar nome de arquivo para upload seguro

    Args:
        filename: Nome original do arquivo

    Returns:
        Nome sanitizado
    """
    # Remove caracteres perigosos
    filename = re.sub(r'[^\w\s\-\.]', '', filename)
    # Remove espaços múltiplos
    filename = re.sub(r'\s+', '-', filename)
    # Limita tamanho
    name, ext = os.path.splitext(filename)
    if len(name) > 50:
        name = name[:50]
    return f"{name}{ext}".lower()


def mask_sensitive_data(data: str, visible_chars: int = 4) -> str:
    """
    Mascarar dados sensíveis (ex: CPF, tokens)

    Args:
        data: Dados para mascarar
        visible_chars: Número de caracteres visíveis no final
    """
    if len(data) <= visible_chars:
        return '*' * len(data)

    masked_length = len(data) - visible_chars
    return '*' * masked_length + data[-visible_chars:]
