import uuid
from app import db
from flask_login import UserMixin
from datetime import datetime
import bcrypt
from app.utils.security import encrypt_data, decrypt_data

ROLE_ADMIN = 'admin'
ROLE_CLIENTE = 'cliente'
ROLE_SUPER_ADMIN = 'super_admin'
ROLES = [ROLE_ADMIN, ROLE_CLIENTE, ROLE_SUPER_ADMIN]


def new_uuid():
    return str(uuid.uuid4())


class Profile(UserMixin, db.Model):
    __tablename__ = 'profiles'

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    email = db.Column(db.String(120), unique=True, nullable=False)
    nome = db.Column(db.String(150), nullable=False)
    password_hash = db.Column(db.String(128))
    telefone = db.Column(db.String(20))
    _cpf_encrypted = db.Column('cpf', db.String(255))
    data_nascimento = db.Column(db.Date)
    rua_bairro = db.Column(db.String(200))
    numero_residencial = db.Column(db.String(20))
    cep = db.Column(db.String(8))
    cidade = db.Column(db.String(100))
    estado = db.Column(db.String(2))
    foto_perfil = db.Column(db.String(500))
    informacoes_personalizadas = db.Column(db.Text)
    pagamento_ativo = db.Column(db.Boolean, default=False)
    status_plataforma = db.Column(db.String(50))
    documentos_completos = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relacionamentos
    roles = db.relationship('UserRole', backref='user', lazy='dynamic', cascade='all, delete-orphan')
    planos_adquiridos = db.relationship('PlanoAdquirido', backref='cliente', lazy='dynamic',
                                        cascade='all, delete-orphan')
    documents = db.relationship('UserDocument', backref='user', lazy='dynamic', cascade='all, delete-orphan')

    @property
    def cpf(self):
        if not self._cpf_encrypted:
            return None
        return decrypt_data(self._cpf_encrypted)

    @cpf.setter
    def cpf(self, value):
        self._cpf_encrypted = encrypt_data(value) if value else None

    def set_password(self, password):
        self.password_hash = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')

    def check_password(self, password):
        if not self.password_hash or not password:
            return False
        try:
            return bcrypt.checkpw(password.encode('utf-8'), self.password_hash.encode('utf-8'))
        except ValueError:
            return False

    def has_role(self, role):
        return self.roles.filter_by(role=role).first() is not None

    @property
    def is_admin(self):
        return self.has_role(ROLE_ADMIN) or self.has_role(ROLE_SUPER_ADMIN)

    @property
    def is_super_admin(self):
        return self.has_role(ROLE_SUPER_ADMIN)

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'nome': self.nome,
            'telefone': self.telefone,
            'cpf': self.cpf,
            'data_nascimento': self.data_nascimento.isoformat() if self.data_nascimento else None,
            'rua_bairro': self.rua_bairro,
            'numero_residencial': self.numero_residencial,
            'cep': self.cep,
            'cidade': self.cidade,
            'estado': self.estado,
            'foto_perfil': self.foto_perfil,
            'pagamento_ativo': bool(self.pagamento_ativo),
            'status_plataforma': self.status_plataforma,
            'documentos_completos': bool(self.documentos_completos),
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Profile {self.email}>'


class UserRole(db.Model):
    __tablename__ = 'user_roles'

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    user_id = db.Column(db.String(36), db.ForeignKey('profiles.id'), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=ROLE_CLIENTE)  # admin, cliente, super_admin
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f'<UserRole {self.user_id} - {self.role}>'
