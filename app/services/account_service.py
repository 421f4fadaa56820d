# app/services/account_service.py
import logging
from app import db
from app.models import Profile, UserRole
from app.models.profile import ROLE_ADMIN
from app.utils.validators import ValidationError

logger = logging.getLogger(__name__)

MIN_ADMIN_PASSWORD = 8


def create_admin_account(email, password, nome=None, role=ROLE_ADMIN):
    """
    Cria uma conta de administrador com o papel informado

    Usado pelo super admin, pela função create-admin e pelo comando de CLI.
    """
    email = (email or '').strip().lower()
    if not email or not password:
        raise ValidationError('Email e senha são obrigatórios', 'email' if not email else 'password')
    if len(password) < MIN_ADMIN_PASSWORD:
        raise ValidationError('A senha deve ter pelo menos 8 caracteres', 'password')
    if Profile.query.filter_by(email=email).first():
        raise ValidationError('Email já cadastrado!', 'email')

    try:
        admin = Profile(email=email, nome=(nome or '').strip() or 'Administrador')
        admin.set_password(password)
        db.session.add(admin)
        db.session.flush()
        db.session.add(UserRole(user_id=admin.id, role=role))
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info(f"Administrador criado: {email} ({role})")
    return admin
