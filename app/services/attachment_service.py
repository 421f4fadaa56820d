"""
Resolução de anexos (documentos e comprovantes) em uma URL exibível

Uma referência salva pode ser:
    - o caminho no bucket ("<user_id>/cnh_1700000000000.png")
    - uma URL antiga contendo "/public/documentos/<caminho>"
    - uma URL antiga contendo "/documentos/<caminho>"

A URL assinada é sempre preferida. Em caso de falha, URLs absolutas antigas
são devolvidas como estão; caminhos tentam a URL pública do bucket.
"""
import time
import logging
from flask import current_app
from app.services.storage_service import get_storage, StorageError
from app.services.activity_logger import ActivityLogger

logger = logging.getLogger(__name__)

KIND_PDF = 'pdf'
KIND_IMAGE = 'image'


def _bucket():
    return current_app.config.get('STORAGE_BUCKET', 'documentos')


def normalize_path(reference, bucket='documentos'):
    """Extrai o caminho do objeto no bucket a partir da referência salva"""
    if not reference:
        return ''
    for prefix in (f'/public/{bucket}/', f'/{bucket}/'):
        if prefix in reference:
            return reference.split(prefix, 1)[1]
    return reference


def is_absolute_url(reference):
    return bool(reference) and reference.lower().startswith(('http://', 'https://'))


def is_pdf(reference, bucket='documentos'):
    return normalize_path(reference, bucket).lower().endswith('.pdf')


def get_kind(reference, bucket='documentos'):
    """PDF abre como link em nova guia; o resto é exibido como imagem"""
    return KIND_PDF if is_pdf(reference, bucket) else KIND_IMAGE


def resolve_attachment(reference, expires_in=None):
    """
    Resolve uma referência de anexo para uma URL

    Args:
        reference: caminho no bucket ou URL antiga
        expires_in: validade da URL assinada (padrão: SIGNED_URL_TTL)

    Returns:
        dict com url (None se indisponível), path, kind, render e source
    """
    bucket = _bucket()
    path = normalize_path(reference, bucket)
    kind = get_kind(reference, bucket)
    expires_in = expires_in or current_app.config.get('SIGNED_URL_TTL', 1800)
    started = time.monotonic()

    url = None
    source = 'unavailable'

    if path:
        storage = get_storage()
        try:
            url = storage.create_signed_url(path, expires_in)
            source = 'signed'
        except StorageError as e:
            logger.warning(f"Falha ao assinar URL de {path}: {e}")
            if is_absolute_url(reference):
                url = reference
                source = 'original'
            else:
                try:
                    url = storage.get_public_url(path)
                    source = 'public'
                except StorageError as public_error:
                    logger.warning(f"URL pública indisponível para {path}: {public_error}")

    result = {
        'url': url,
        'path': path,
        'kind': kind,
        'render': 'link' if kind == KIND_PDF else 'image',
        'source': source,
    }

    _record_resolution(result, time.monotonic() - started)
    return result


def _record_resolution(result, duration):
    try:
        ActivityLogger.log('attachment.resolved', 'storage', {
            'path': result['path'],
            'kind': result['kind'],
            'outcome': result['source'],
            'duration_ms': round(duration * 1000, 2),
        })
    except Exception as e:
        logger.error(f"Erro ao registrar resolução de anexo: {e}")
