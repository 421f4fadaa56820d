from app import db
from datetime import datetime
from app.models.profile import new_uuid

PLAN_STATUSES = [
    'ativo', 'eliminado', 'pausado', 'segunda_chance',
    'teste_1', 'teste_2', 'sim_rem', 'teste_1_sc', 'teste_2_sc',
]
WITHDRAWAL_TYPES = ['mensal', 'quinzenal']


class Plano(db.Model):
    __tablename__ = 'planos'

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    nome_plano = db.Column(db.String(100), nullable=False)
    descricao = db.Column(db.Text)
    preco = db.Column(db.Numeric(10, 2), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    aquisicoes = db.relationship('PlanoAdquirido', backref='plano', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'nome_plano': self.nome_plano,
            'descricao': self.descricao,
            'preco': float(self.preco) if self.preco is not None else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Plano {self.nome_plano} - R${self.preco}>'


class PlanoAdquirido(db.Model):
    __tablename__ = 'planos_adquiridos'
    __table_args__ = (
        db.UniqueConstraint('cliente_id', 'id_carteira', name='uq_planos_adquiridos_cliente_carteira'),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    cliente_id = db.Column(db.String(36), db.ForeignKey('profiles.id'), nullable=False)
    plano_id = db.Column(db.String(36), db.ForeignKey('planos.id'), nullable=False)
    id_carteira = db.Column(db.String(10), nullable=False)
    status_plano = db.Column(db.String(20), default='ativo')
    tipo_saque = db.Column(db.String(20), nullable=False, default='mensal')  # mensal, quinzenal
    data_aquisicao = db.Column(db.DateTime, default=datetime.utcnow)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Histórico é apagado junto com o plano adquirido
    historico = db.relationship('HistoricoObservacao', backref='plano_adquirido', lazy='dynamic',
                                cascade='all, delete-orphan')
    solicitacoes = db.relationship('Solicitacao', backref='plano_adquirido', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'cliente_id': self.cliente_id,
            'cliente_nome': self.cliente.nome if self.cliente else None,
            'cliente_email': self.cliente.email if self.cliente else None,
            'plano_id': self.plano_id,
            'nome_plano': self.plano.nome_plano if self.plano else None,
            'id_carteira': self.id_carteira,
            'status_plano': self.status_plano,
            'tipo_saque': self.tipo_saque,
            'data_aquisicao': self.data_aquisicao.isoformat() if self.data_aquisicao else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<PlanoAdquirido {self.id_carteira} - {self.status_plano}>'


class WalletCounter(db.Model):
    """Contador de carteiras por cliente"""
    __tablename__ = 'wallet_counters'

    cliente_id = db.Column(db.String(36), db.ForeignKey('profiles.id'), primary_key=True)
    last_value = db.Column(db.Integer, nullable=False, default=0)

    def __repr__(self):
        return f'<WalletCounter {self.cliente_id} = {self.last_value}>'
