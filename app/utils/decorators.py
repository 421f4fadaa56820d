from functools import wraps
from flask import abort, g, jsonify, request
from flask_login import current_user
from app import db
from app.utils.security import verify_api_token


def admin_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        # 404 para não-admins, sem revelar a existência da rota
        if not current_user.is_authenticated or not current_user.is_admin:
            abort(404)
        return f(*args, **kwargs)
    return decorated_function


def super_admin_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated or not current_user.is_super_admin:
            abort(404)
        return f(*args, **kwargs)
    return decorated_function


def bearer_token_required(role=None):
    """
    Decorator para as funções privilegiadas: exige 'Authorization: Bearer <token>'
    e, opcionalmente, um papel (admin/super_admin). O usuário fica em g.api_user.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            from app.models.profile import Profile

            auth_header = request.headers.get('Authorization', '')
            token = auth_header.replace('Bearer ', '', 1).strip() if auth_header.startswith('Bearer ') else ''
            user_id = verify_api_token(token)
            user = db.session.get(Profile, user_id) if user_id else None

            if not user:
                return jsonify({'error': 'Não autenticado'}), 401

            if role == 'admin' and not user.is_admin:
                return jsonify({'error': 'Acesso negado: apenas administradores'}), 403
            if role == 'super_admin' and not user.is_super_admin:
                return jsonify({'error': 'Acesso negado: apenas super administradores'}), 403

            g.api_user = user
            return f(*args, **kwargs)
        return decorated_function
    return decorator
