from app import db
from datetime import datetime
from app.models.profile import new_uuid

ORIGEM_ADMIN = 'admin'
ORIGEM_SISTEMA = 'sistema'

EVENTO_MANUAL_ADMIN = 'manual_admin'
EVENTO_RESPOSTA_ADMIN = 'resposta_admin'
EVENTO_COMENTARIO = 'comentario'
EVENTO_APROVACAO_SOLICITADA = 'aprovacao_solicitada'
EVENTO_SAQUE_SOLICITADO = 'saque_solicitado'
EVENTO_SEGUNDA_CHANCE_SOLICITADA = 'segunda_chance_solicitada'
EVENTO_SAQUE_QUINZENAL_SOLICITADO = 'saque_quinzenal_solicitado'


class HistoricoObservacao(db.Model):
    __tablename__ = 'historico_observacoes'

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    plano_adquirido_id = db.Column(db.String(36), db.ForeignKey('planos_adquiridos.id'), nullable=False)
    solicitacao_id = db.Column(db.String(36), db.ForeignKey('solicitacoes.id'))
    tipo_evento = db.Column(db.String(50))
    observacao = db.Column(db.Text, nullable=False, default='')
    valor_solicitado = db.Column(db.Numeric(12, 2))
    valor_final = db.Column(db.Numeric(12, 2))
    comprovante_url = db.Column(db.String(500))
    status_evento = db.Column(db.String(20), default='pendente')
    origem = db.Column(db.String(20), default=ORIGEM_SISTEMA)  # admin, sistema
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    solicitacao = db.relationship('Solicitacao', backref=db.backref('historico', lazy='dynamic'))

    def __repr__(self):
        return f'<HistoricoObservacao {self.tipo_evento} - {self.status_evento}>'
