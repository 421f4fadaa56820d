import os
from dotenv import load_dotenv

load_dotenv()

# Diretório base do projeto
basedir = os.path.abspath(os.path.dirname(__file__))


def _env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() in ['true', '1', 'on', 'yes']


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-key-change-in-production'

    # Database - Usar caminho absoluto
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'instance', 'traderhub.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Storage de arquivos (bucket privado por padrão)
    STORAGE_ROOT = os.environ.get('STORAGE_ROOT') or os.path.join(basedir, 'instance', 'storage')
    STORAGE_BUCKET = os.environ.get('STORAGE_BUCKET', 'documentos')
    STORAGE_PUBLIC = _env_bool('STORAGE_PUBLIC', False)
    SIGNED_URL_TTL = int(os.environ.get('SIGNED_URL_TTL', '1800'))  # 30 minutos

    # Uploads
    MAX_UPLOAD_SIZE = 10 * 1024 * 1024  # 10MB
    ALLOWED_DOCUMENT_TYPES = ['image/jpeg', 'image/png', 'image/webp', 'application/pdf']

    # Tokens de API (funções privilegiadas)
    API_TOKEN_TTL = int(os.environ.get('API_TOKEN_TTL', '86400'))

    # Logs do sistema expiram após 2 dias
    SYSTEM_LOG_RETENTION_DAYS = 2

    # Dashboard do trader faz polling a cada 30 segundos
    DASHBOARD_REFRESH_INTERVAL = 30

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Admin inicial (comando create-admin)
    DEFAULT_ADMIN_EMAIL = os.environ.get('DEFAULT_ADMIN_EMAIL', 'admin@sistema.com')
    DEFAULT_ADMIN_PASSWORD = os.environ.get('DEFAULT_ADMIN_PASSWORD')
