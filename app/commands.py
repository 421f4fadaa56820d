"""
Comandos de manutenção
Execute: flask --app run create-admin | flask --app run purge-logs
"""
import logging
from datetime import datetime
import click
from flask import current_app
from app import db
from app.models import UserRole, SystemLog
from app.models.profile import ROLE_ADMIN, ROLE_SUPER_ADMIN
from app.services.account_service import create_admin_account
from app.utils.validators import ValidationError

logger = logging.getLogger(__name__)


def purge_expired_logs(now=None):
    """Remove os logs do sistema já expirados. Retorna quantos foram apagados."""
    now = now or datetime.utcnow()
    deleted = SystemLog.query.filter(SystemLog.expires_at < now).delete(synchronize_session=False)
    db.session.commit()
    logger.info(f"{deleted} logs expirados removidos")
    return deleted


def register_commands(app):

    @app.cli.command('create-admin')
    @click.option('--email', default=None, help='Email do administrador')
    @click.option('--password', default=None, help='Senha (mínimo 8 caracteres)')
    @click.option('--super', 'is_super', is_flag=True, help='Criar como super admin')
    def create_admin(email, password, is_super):
        """Cria o administrador inicial, se ainda não existir"""
        existing = UserRole.query.filter(UserRole.role.in_([ROLE_ADMIN, ROLE_SUPER_ADMIN])).first()
        if existing:
            click.echo('⚠️  Admin já existe no sistema')
            return

        email = email or current_app.config.get('DEFAULT_ADMIN_EMAIL')
        password = password or current_app.config.get('DEFAULT_ADMIN_PASSWORD')
        if not password:
            raise click.UsageError('Informe --password ou DEFAULT_ADMIN_PASSWORD')

        try:
            admin = create_admin_account(email, password,
                                         role=ROLE_SUPER_ADMIN if is_super else ROLE_ADMIN)
        except ValidationError as e:
            raise click.ClickException(e.message)

        click.echo('✅ Admin criado com sucesso!')
        click.echo(f'📧 Email: {admin.email}')

    @app.cli.command('purge-logs')
    def purge_logs():
        """Apaga os logs do sistema expirados"""
        deleted = purge_expired_logs()
        click.echo(f'🧹 {deleted} logs expirados removidos')
