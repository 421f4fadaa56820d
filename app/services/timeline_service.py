# app/services/timeline_service.py
"""
Linha do tempo de um plano adquirido

Junta as observações lançadas pelo admin e as geradas pelas solicitações do
trader em um único feed, do mais recente para o mais antigo.
"""
from datetime import datetime
from app.models.historico import HistoricoObservacao, ORIGEM_ADMIN
from app.utils.format_utils import format_currency, format_date

STATUS_LABELS = {
    'pendente': 'Pendente',
    'aprovado': 'Aprovado',
    'efetuado': 'Efetuado',
    'recusado': 'Negado - Fora do ciclo',
    'negado': 'Negado - Sem saldo',
}

EVENT_LABELS = {
    'aprovacao_solicitada': 'Aprovação solicitada',
}


class TimelineService:
    """Montagem do feed de histórico por plano adquirido"""

    @staticmethod
    def get_status_label(status):
        return STATUS_LABELS.get(status, status)

    @staticmethod
    def get_event_label(tipo_evento):
        return EVENT_LABELS.get(tipo_evento)

    @staticmethod
    def get_display_text(entry):
        """Observação livre; na falta dela, o rótulo do tipo de evento"""
        return entry.observacao or TimelineService.get_event_label(entry.tipo_evento)

    @staticmethod
    def is_displayable(entry):
        """Entradas sem texto, sem valores e sem comprovante não aparecem no feed"""
        return bool(
            TimelineService.get_display_text(entry)
            or entry.valor_solicitado
            or entry.valor_final
            or entry.comprovante_url
        )

    @staticmethod
    def get_entries(plano_adquirido_id):
        return HistoricoObservacao.query.filter_by(
            plano_adquirido_id=plano_adquirido_id
        ).order_by(
            HistoricoObservacao.created_at.desc()
        ).all()

    @staticmethod
    def serialize_entry(entry):
        return {
            'id': entry.id,
            'created_at': entry.created_at.isoformat() if entry.created_at else None,
            'data': format_date(entry.created_at),
            'tipo_evento': entry.tipo_evento,
            'display_text': TimelineService.get_display_text(entry),
            'is_admin': entry.origem == ORIGEM_ADMIN,
            'origem': entry.origem,
            'valor_solicitado': float(entry.valor_solicitado) if entry.valor_solicitado else None,
            'valor_solicitado_fmt': format_currency(entry.valor_solicitado),
            'valor_final': float(entry.valor_final) if entry.valor_final else None,
            'valor_final_fmt': format_currency(entry.valor_final),
            'status': entry.status_evento,
            'status_label': TimelineService.get_status_label(entry.status_evento),
            'solicitacao_id': entry.solicitacao_id,
            # O comprovante só é resolvido quando aberto
            'has_comprovante': bool(entry.comprovante_url),
        }

    @staticmethod
    def build_feed(entries):
        """
        Monta o feed a partir de entradas já carregadas

        Reordena por created_at decrescente (estável para empates) e remove
        as entradas sem conteúdo.
        """
        ordered = sorted(
            entries,
            key=lambda e: e.created_at or datetime.min,
            reverse=True,
        )
        return [
            TimelineService.serialize_entry(entry)
            for entry in ordered
            if TimelineService.is_displayable(entry)
        ]

    @staticmethod
    def get_feed(plano_adquirido_id):
        return TimelineService.build_feed(TimelineService.get_entries(plano_adquirido_id))
