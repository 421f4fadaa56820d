from app import db
from datetime import datetime
from app.models.profile import new_uuid

# Vocabulário único de status, compartilhado por solicitações e histórico.
# 'atendida' e 'rejeitada' são respostas genéricas; 'recusado' e 'negado'
# são as negativas específicas de saque (fora do ciclo / sem saldo).
STATUS_PENDENTE = 'pendente'
STATUS_APROVADO = 'aprovado'
STATUS_EFETUADO = 'efetuado'
STATUS_RECUSADO = 'recusado'
STATUS_NEGADO = 'negado'
STATUS_ATENDIDA = 'atendida'
STATUS_REJEITADA = 'rejeitada'

STATUSES = [
    STATUS_PENDENTE, STATUS_APROVADO, STATUS_EFETUADO, STATUS_RECUSADO,
    STATUS_NEGADO, STATUS_ATENDIDA, STATUS_REJEITADA,
]

STATUS_BADGES = {
    STATUS_PENDENTE: 'Pendente',
    STATUS_ATENDIDA: 'Atendida',
    STATUS_REJEITADA: 'Rejeitada',
    STATUS_APROVADO: 'Aprovado',
    STATUS_EFETUADO: 'Efetuado',
    STATUS_RECUSADO: 'Recusado',
    STATUS_NEGADO: 'Negado',
}

TIPO_SAQUE = 'saque'
TIPO_SEGUNDA_CHANCE = 'segunda_chance'
TIPO_SAQUE_QUINZENAL = 'saque_quinzenal'
TIPO_OUTRO = 'outro'

REQUEST_TYPES = {
    TIPO_SAQUE_QUINZENAL: 'Mudança de Saque Quinzenal',
    TIPO_SEGUNDA_CHANCE: 'Segunda Chance no Teste',
    TIPO_OUTRO: 'Outras Solicitações',
    TIPO_SAQUE: 'Solicitação de Saque',
}


def get_tipo_label(tipo):
    return REQUEST_TYPES.get(tipo, tipo)


class Solicitacao(db.Model):
    __tablename__ = 'solicitacoes'

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    user_id = db.Column(db.String(36), db.ForeignKey('profiles.id'), nullable=False)
    plano_adquirido_id = db.Column(db.String(36), db.ForeignKey('planos_adquiridos.id'))
    tipo_solicitacao = db.Column(db.String(30), nullable=False)
    descricao = db.Column(db.Text)
    status = db.Column(db.String(20), nullable=False, default=STATUS_PENDENTE)
    resposta_admin = db.Column(db.Text)
    atendida_em = db.Column(db.DateTime)
    atendida_por = db.Column(db.String(36), db.ForeignKey('profiles.id'))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = db.relationship('Profile', foreign_keys=[user_id], backref=db.backref('solicitacoes', lazy='dynamic'))
    admin = db.relationship('Profile', foreign_keys=[atendida_por])

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'nome': self.user.nome if self.user else None,
            'email': self.user.email if self.user else None,
            'plano_adquirido_id': self.plano_adquirido_id,
            'tipo_solicitacao': self.tipo_solicitacao,
            'tipo_label': get_tipo_label(self.tipo_solicitacao),
            'descricao': self.descricao,
            'status': self.status,
            'status_label': STATUS_BADGES.get(self.status, STATUS_BADGES[STATUS_PENDENTE]),
            'resposta_admin': self.resposta_admin,
            'atendida_em': self.atendida_em.isoformat() if self.atendida_em else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Solicitacao {self.tipo_solicitacao} - {self.status}>'
