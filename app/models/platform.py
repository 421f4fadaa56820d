from app import db
from datetime import datetime
from app.models.profile import new_uuid

# Links e preços exibidos na plataforma
CONFIG_KEYS = [
    'profit_one_link',
    'profit_pro_link',
    'comprar_plano_link',
    'contatar_suporte_link',
    'voltar_site_link',
    'saque_quinzenal_link',
    'profit_one_preco',
    'profit_pro_preco',
]


class PlatformConfig(db.Model):
    __tablename__ = 'platform_config'

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    config_key = db.Column(db.String(100), unique=True, nullable=False)
    config_value = db.Column(db.Text, nullable=False, default='')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @staticmethod
    def get_all():
        """Retorna as configurações como dict chave -> valor"""
        return {c.config_key: c.config_value for c in PlatformConfig.query.all()}

    def to_dict(self):
        return {
            'config_key': self.config_key,
            'config_value': self.config_value,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<PlatformConfig {self.config_key}>'


class SystemLog(db.Model):
    __tablename__ = 'system_logs'

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    log_data = db.Column(db.JSON, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    expires_at = db.Column(db.DateTime, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'log_data': self.log_data,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'expires_at': self.expires_at.isoformat() if self.expires_at else None,
        }

    def __repr__(self):
        return f'<SystemLog {self.id}>'
