from app import db
from datetime import datetime
from app.models.profile import new_uuid

DOCUMENT_TYPES = {
    'cnh': 'CNH / Documento de identidade',
    'selfie_rg': 'Selfie com documento',
}
DOCUMENT_STATUSES = ['pendente', 'aprovado', 'rejeitado']


class UserDocument(db.Model):
    __tablename__ = 'user_documents'

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    user_id = db.Column(db.String(36), db.ForeignKey('profiles.id'), nullable=False)
    tipo_documento = db.Column(db.String(20), nullable=False)  # cnh, selfie_rg
    arquivo_url = db.Column(db.String(500), nullable=False)  # caminho no storage, não URL
    status = db.Column(db.String(20), nullable=False, default='pendente')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'tipo_documento': self.tipo_documento,
            'tipo_label': DOCUMENT_TYPES.get(self.tipo_documento, self.tipo_documento),
            'arquivo_url': self.arquivo_url,
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<UserDocument {self.tipo_documento} - {self.status}>'
