# app/services/document_service.py
"""
Upload de documentos do trader e de comprovantes do admin

O bucket é privado: no banco fica só o caminho do objeto, nunca uma URL.
"""
import os
import time
import uuid
import logging
from flask import current_app
from app import db
from app.models import UserDocument
from app.models.document import DOCUMENT_TYPES, DOCUMENT_STATUSES
from app.services.storage_service import get_storage, StorageError
from app.services.attachment_service import normalize_path
from app.utils.security import sanitize_filename
from app.utils.validators import ValidationError

logger = logging.getLogger(__name__)

MIME_NAMES = {
    'image/jpeg': 'JPG',
    'image/png': 'PNG',
    'image/webp': 'WEBP',
    'application/pdf': 'PDF',
}

PHOTO_TYPES = ['image/jpeg', 'image/png', 'image/webp']
PHOTO_MAX_SIZE = 5 * 1024 * 1024


def _extension(filename):
    ext = os.path.splitext(sanitize_filename(filename or ''))[1].lstrip('.')
    return ext or 'bin'


def read_upload(file, allowed=None, max_size=None):
    """
    Valida tipo e tamanho do arquivo enviado, antes de qualquer gravação

    Args:
        file: werkzeug FileStorage
        allowed: tipos MIME aceitos (padrão: ALLOWED_DOCUMENT_TYPES)
        max_size: tamanho máximo em bytes (padrão: MAX_UPLOAD_SIZE)

    Returns:
        bytes do arquivo
    """
    if file is None or not file.filename:
        raise ValidationError('Nenhum arquivo enviado', 'file')

    if allowed is None:
        allowed = current_app.config.get('ALLOWED_DOCUMENT_TYPES', [])
    if file.mimetype not in allowed:
        names = [MIME_NAMES.get(t, t) for t in allowed]
        if len(names) > 1:
            names = [', '.join(names[:-1]), names[-1]]
        names = ' ou '.join(names)
        raise ValidationError(f'Formato inválido. Use {names}', 'file')

    if max_size is None:
        max_size = current_app.config.get('MAX_UPLOAD_SIZE', 10 * 1024 * 1024)
    data = file.read(max_size + 1)
    if len(data) > max_size:
        raise ValidationError(f'Arquivo muito grande. Tamanho máximo: {max_size // (1024 * 1024)}MB', 'file')
    if not data:
        raise ValidationError('Arquivo vazio', 'file')

    return data


def upload_document(user, tipo, file):
    """Envia um documento do trader (vários por tipo são permitidos)"""
    if tipo not in DOCUMENT_TYPES:
        raise ValidationError('Tipo de documento inválido', 'tipo_documento')

    data = read_upload(file)
    path = f"{user.id}/{tipo}_{int(time.time() * 1000)}.{_extension(file.filename)}"

    storage = get_storage()
    storage.upload(path, data, file.mimetype)

    try:
        document = UserDocument(
            user_id=user.id,
            tipo_documento=tipo,
            arquivo_url=path,
            status='pendente',
        )
        db.session.add(document)
        db.session.commit()
    except Exception:
        db.session.rollback()
        try:
            storage.remove([path])
        except StorageError as e:
            logger.error(f"Documento órfão não removido ({path}): {e}")
        raise

    logger.info(f"Documento {tipo} enviado por {user.id}: {path}")
    return document


def delete_document(document):
    """Remove o arquivo do storage e depois o registro"""
    bucket = current_app.config.get('STORAGE_BUCKET', 'documentos')
    get_storage().remove([normalize_path(document.arquivo_url, bucket)])

    db.session.delete(document)
    db.session.commit()


def set_document_status(document, status):
    """Atualiza o status e recalcula documentos_completos do trader"""
    if status not in DOCUMENT_STATUSES:
        raise ValidationError('Status de documento inválido', 'status')

    document.status = status
    profile = document.user
    approved = {
        d.tipo_documento
        for d in profile.documents.filter_by(status='aprovado').all()
    }
    if status == 'aprovado':
        approved.add(document.tipo_documento)
    profile.documentos_completos = set(DOCUMENT_TYPES).issubset(approved)

    db.session.commit()
    return document


def upload_comprovante(file):
    """Envia um comprovante do admin e retorna o caminho no bucket"""
    data = read_upload(file)
    path = f"comprovantes/{uuid.uuid4().hex}.{_extension(file.filename)}"
    get_storage().upload(path, data, file.mimetype)
    return path


def upload_profile_photo(user, file):
    """
    Envia a foto de perfil do trader (JPG, PNG ou WEBP, até 5MB)

    Grava o caminho do objeto em foto_perfil; a foto anterior é removida
    do storage depois do commit.
    """
    data = read_upload(file, allowed=PHOTO_TYPES, max_size=PHOTO_MAX_SIZE)
    path = f"{user.id}/perfil_{int(time.time() * 1000)}.{_extension(file.filename)}"

    storage = get_storage()
    storage.upload(path, data, file.mimetype)

    previous = user.foto_perfil
    try:
        user.foto_perfil = path
        db.session.commit()
    except Exception:
        db.session.rollback()
        try:
            storage.remove([path])
        except StorageError as e:
            logger.error(f"Foto órfã não removida ({path}): {e}")
        raise

    if previous and previous != path:
        bucket = current_app.config.get('STORAGE_BUCKET', 'documentos')
        try:
            storage.remove([normalize_path(previous, bucket)])
        except StorageError as e:
            logger.warning(f"Foto anterior não removida ({previous}): {e}")

    logger.info(f"Foto de perfil atualizada por {user.id}: {path}")
    return path
