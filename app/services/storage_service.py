"""
Storage de arquivos (documentos e comprovantes)

Implementação em disco com a mesma interface do storage hospedado:
upload, URL pública e URL assinada com validade.
"""
import os
import logging
from urllib.parse import quote
from flask import current_app
from app.utils.security import generate_storage_token, verify_storage_token

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Falha de acesso ao storage (objeto inexistente, bucket privado, disco)"""


class LocalStorage:
    """Bucket de objetos em um diretório local"""

    def __init__(self, root, bucket='documentos', public=False, base_url=''):
        self.root = root
        self.bucket = bucket
        self.public = public
        self.base_url = base_url.rstrip('/')

    def _full_path(self, path):
        if not path or path.startswith('/') or '..' in path.split('/'):
            raise StorageError(f'Caminho inválido: {path!r}')
        return os.path.join(self.root, self.bucket, *path.split('/'))

    def exists(self, path):
        try:
            return os.path.isfile(self._full_path(path))
        except StorageError:
            return False

    def upload(self, path, data, content_type=None):
        """Grava o objeto. Falha se o caminho já existir."""
        full_path = self._full_path(path)
        if os.path.exists(full_path):
            raise StorageError(f'O objeto já existe: {path}')

        try:
            os.makedirs(os.path.dirname(full_path), exist_ok=True)
            with open(full_path, 'wb') as f:
                f.write(data)
        except OSError as e:
            raise StorageError(f'Erro ao gravar objeto {path}: {e}') from e

        logger.info(f"Objeto enviado: {self.bucket}/{path} ({len(data)} bytes, {content_type})")
        return path

    def remove(self, paths):
        for path in paths:
            full_path = self._full_path(path)
            try:
                os.remove(full_path)
            except FileNotFoundError:
                logger.warning(f"Objeto já removido: {self.bucket}/{path}")
            except OSError as e:
                raise StorageError(f'Erro ao remover objeto {path}: {e}') from e

    def get_public_url(self, path):
        """URL pública, só funciona quando o bucket é público"""
        if not self.public:
            raise StorageError(f'Bucket {self.bucket} é privado')
        self._full_path(path)
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{quote(path)}"

    def create_signed_url(self, path, expires_in=1800):
        """URL assinada com validade de expires_in segundos"""
        if not self.exists(path):
            raise StorageError(f'Objeto não encontrado: {path}')
        token = generate_storage_token(self.bucket, path, expires_in)
        return f"{self.base_url}/storage/v1/object/sign/{self.bucket}/{quote(path)}?token={token}"

    def open_signed(self, path, token):
        """Resolve o arquivo de uma URL assinada; None se o token não vale"""
        if not verify_storage_token(token, self.bucket, path) or not self.exists(path):
            return None
        return self._full_path(path)

    def open_public(self, path):
        if not self.public or not self.exists(path):
            return None
        return self._full_path(path)


def get_storage():
    """Storage configurado para a aplicação atual"""
    storage = current_app.extensions.get('storage')
    if storage is None:
        storage = LocalStorage(
            root=current_app.config['STORAGE_ROOT'],
            bucket=current_app.config.get('STORAGE_BUCKET', 'documentos'),
            public=current_app.config.get('STORAGE_PUBLIC', False),
            base_url=current_app.config.get('STORAGE_BASE_URL', ''),
        )
        current_app.extensions['storage'] = storage
    return storage
