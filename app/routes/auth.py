import logging
from flask import Blueprint, jsonify, redirect, request, url_for, current_app
from flask_login import login_user, logout_user, current_user, login_required
from app import db
from app.models import Profile, UserRole
from app.models.profile import ROLE_CLIENTE
from app.services.activity_logger import ActivityLogger, AuditLogger
from app.utils.http import get_payload, json_error
from app.utils.security import generate_api_token
from app.utils.validators import ValidationError, validate_registration

bp = Blueprint('auth', __name__)
logger = logging.getLogger(__name__)


def _home_for(user):
    return url_for('admin.index') if user.is_admin else url_for('dashboard.index')


@bp.route('/')
def index():
    """Página inicial - redireciona para login ou para a área do usuário"""
    if current_user.is_authenticated:
        return redirect(_home_for(current_user))
    return redirect(url_for('auth.login'))


@bp.route('/login', methods=['GET', 'POST'])
def login():
    if request.method == 'GET':
        if current_user.is_authenticated:
            return redirect(_home_for(current_user))
        return jsonify({'message': 'Informe email e senha via POST'})

    data = get_payload()
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''

    user = Profile.query.filter_by(email=email).first()
    if not user or not user.check_password(password):
        AuditLogger.log_failed_login(email)
        return json_error('Email ou senha incorretos', 401)

    login_user(user, remember=True)
    ActivityLogger.log_login(user)

    return jsonify({
        'message': 'Login realizado com sucesso',
        'user': user.to_dict(),
        'is_admin': user.is_admin,
        'redirect': _home_for(user),
    })


@bp.route('/register', methods=['POST'])
def register():
    data = get_payload()
    try:
        fields = validate_registration(data)
    except ValidationError as e:
        return json_error(e.message, 400, field=e.field)

    if Profile.query.filter_by(email=fields['email']).first():
        return json_error('Email já cadastrado!', 400, field='email')

    try:
        user = Profile(
            nome=fields['nome'],
            email=fields['email'],
            telefone=fields['telefone'],
            cep=fields['cep'],
        )
        user.cpf = fields['cpf']
        user.set_password(fields['password'])
        db.session.add(user)
        db.session.flush()

        db.session.add(UserRole(user_id=user.id, role=ROLE_CLIENTE))
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"Erro ao criar conta: {e}")
        return json_error('Erro ao criar conta', 500)

    login_user(user)
    ActivityLogger.log('user.registered', 'auth', user=user)
    return jsonify({'message': 'Conta criada com sucesso!', 'user': user.to_dict()}), 201


@bp.route('/token', methods=['POST'])
def token():
    """Token de sessão (bearer) para as funções privilegiadas"""
    data = get_payload()
    email = (data.get('email') or '').strip().lower()
    user = Profile.query.filter_by(email=email).first()
    if not user or not user.check_password(data.get('password') or ''):
        AuditLogger.log_failed_login(email)
        return json_error('Email ou senha incorretos', 401)

    expires_in = current_app.config.get('API_TOKEN_TTL', 86400)
    return jsonify({
        'access_token': generate_api_token(user.id, expires_in),
        'token_type': 'bearer',
        'expires_in': expires_in,
    })


@bp.route('/logout')
@login_required
def logout():
    ActivityLogger.log_logout(current_user)
    logout_user()
    return jsonify({'message': 'Você saiu da sua conta.'})
