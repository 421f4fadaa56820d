# tests/test_timeline_service.py
"""
Testes da linha do tempo do plano adquirido
"""
from decimal import Decimal
from datetime import datetime, timedelta
from app.models import HistoricoObservacao
from app.services.timeline_service import TimelineService


def _entry(**kwargs):
    defaults = {
        'plano_adquirido_id': 'pa-1',
        'tipo_evento': 'manual_admin',
        'observacao': '',
        'status_evento': 'pendente',
        'origem': 'admin',
        'created_at': datetime(2025, 1, 10, 12, 0),
    }
    defaults.update(kwargs)
    return HistoricoObservacao(**defaults)


class TestDisplay:
    """Texto e rótulos das entradas"""

    def test_observacao_is_display_text(self):
        assert TimelineService.get_display_text(_entry(observacao='Pagamento feito')) == 'Pagamento feito'

    def test_approval_request_label(self):
        entry = _entry(tipo_evento='aprovacao_solicitada', observacao='')
        assert TimelineService.get_display_text(entry) == 'Aprovação solicitada'

    def test_status_labels(self):
        assert TimelineService.get_status_label('recusado') == 'Negado - Fora do ciclo'
        assert TimelineService.get_status_label('negado') == 'Negado - Sem saldo'
        assert TimelineService.get_status_label('efetuado') == 'Efetuado'

    def test_unknown_status_passes_through(self):
        assert TimelineService.get_status_label('atendida') == 'atendida'


class TestFeed:
    """Montagem do feed"""

    def test_empty_entries_are_hidden(self):
        entries = [
            _entry(observacao=''),
            _entry(observacao='Visível'),
        ]
        feed = TimelineService.build_feed(entries)
        assert [e['display_text'] for e in feed] == ['Visível']

    def test_entry_with_only_amount_is_shown(self):
        feed = TimelineService.build_feed([_entry(tipo_evento='saque_solicitado',
                                                  valor_solicitado=Decimal('250.00'))])
        assert len(feed) == 1
        assert feed[0]['display_text'] is None
        assert feed[0]['valor_solicitado_fmt'] == 'R$ 250,00'
        assert feed[0]['valor_final_fmt'] == '—'

    def test_entry_with_only_comprovante_is_shown(self):
        feed = TimelineService.build_feed([_entry(comprovante_url='comprovantes/x.pdf')])
        assert feed[0]['has_comprovante'] is True
        assert 'comprovante_url' not in feed[0]

    def test_newest_first(self):
        base = datetime(2025, 1, 10, 12, 0)
        entries = [
            _entry(observacao='antiga', created_at=base),
            _entry(observacao='nova', created_at=base + timedelta(days=2)),
            _entry(observacao='meio', created_at=base + timedelta(days=1)),
        ]
        feed = TimelineService.build_feed(entries)
        assert [e['display_text'] for e in feed] == ['nova', 'meio', 'antiga']

    def test_origin_flag(self):
        feed = TimelineService.build_feed([
            _entry(observacao='admin', origem='admin'),
            _entry(observacao='sistema', origem='sistema'),
        ])
        flags = {e['display_text']: e['is_admin'] for e in feed}
        assert flags == {'admin': True, 'sistema': False}

    def test_get_feed_from_database(self, db, plano_adquirido, solicitacao):
        db.session.add(HistoricoObservacao(
            plano_adquirido_id=plano_adquirido.id,
            tipo_evento='manual_admin',
            observacao='Nota do admin',
            origem='admin',
            status_evento='aprovado',
            created_at=datetime.utcnow() + timedelta(minutes=5),
        ))
        db.session.commit()

        feed = TimelineService.get_feed(plano_adquirido.id)

        assert len(feed) == 2
        assert feed[0]['display_text'] == 'Nota do admin'
        assert feed[0]['status_label'] == 'Aprovado'
        assert feed[1]['valor_solicitado'] == 500.0
