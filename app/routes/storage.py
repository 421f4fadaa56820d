from flask import Blueprint, abort, request, send_file
from app.services.storage_service import get_storage

bp = Blueprint('storage', __name__, url_prefix='/storage/v1/object')


@bp.route('/sign/<bucket>/<path:object_path>')
def signed_object(bucket, object_path):
    """Download de um objeto por URL assinada"""
    storage = get_storage()
    if bucket != storage.bucket:
        abort(404)

    token = request.args.get('token')
    if not token:
        abort(400)

    full_path = storage.open_signed(object_path, token)
    if full_path is None:
        abort(404)
    return send_file(full_path)


@bp.route('/public/<bucket>/<path:object_path>')
def public_object(bucket, object_path):
    storage = get_storage()
    if bucket != storage.bucket:
        abort(404)

    full_path = storage.open_public(object_path)
    if full_path is None:
        abort(404)
    return send_file(full_path)
