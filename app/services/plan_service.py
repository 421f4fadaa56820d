# app/services/plan_service.py
"""
Planos adquiridos: atribuição do ID de carteira, criação e listagem do admin
"""
import logging
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from app import db
from app.models import Profile, Plano, PlanoAdquirido, WalletCounter
from app.models.plan import PLAN_STATUSES, WITHDRAWAL_TYPES
from app.utils.validators import ValidationError

logger = logging.getLogger(__name__)

SORT_FIELDS = ['id_carteira', 'status_plano', 'created_at']


def _parse_wallet_id(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _max_wallet_id(cliente_id):
    """Maior ID de carteira numérico do cliente (0 se não houver)"""
    existing = db.session.execute(
        select(PlanoAdquirido.id_carteira).where(PlanoAdquirido.cliente_id == cliente_id)
    ).scalars().all()
    parsed = [n for n in (_parse_wallet_id(v) for v in existing) if n is not None]
    return max(parsed, default=0)


def _seed_counter(cliente_id):
    """Cria o contador do cliente a partir das carteiras já existentes"""
    try:
        with db.session.begin_nested():
            db.session.add(WalletCounter(cliente_id=cliente_id, last_value=_max_wallet_id(cliente_id)))
    except IntegrityError:
        # Outra transação criou o contador primeiro
        logger.info(f"Contador de carteira já existente para {cliente_id}")


def next_wallet_id(cliente_id):
    """
    Próximo ID de carteira do cliente, com 3 dígitos ("001", "002", ...)

    O incremento é um UPDATE atômico no contador do cliente, dentro da
    transação atual; duas atribuições simultâneas nunca leem o mesmo valor.
    """
    exists = db.session.execute(
        select(WalletCounter.cliente_id).where(WalletCounter.cliente_id == cliente_id)
    ).first()
    if not exists:
        _seed_counter(cliente_id)

    db.session.execute(
        update(WalletCounter)
        .where(WalletCounter.cliente_id == cliente_id)
        .values(last_value=WalletCounter.last_value + 1)
    )
    value = db.session.execute(
        select(WalletCounter.last_value).where(WalletCounter.cliente_id == cliente_id)
    ).scalar_one()
    return str(value).zfill(3)


def _validate_plan_fields(status_plano, tipo_saque):
    if status_plano not in PLAN_STATUSES:
        raise ValidationError('Status de plano inválido', 'status_plano')
    if tipo_saque not in WITHDRAWAL_TYPES:
        raise ValidationError('Tipo de saque inválido', 'tipo_saque')


def create_acquired_plan(cliente_id, plano_id, status_plano='ativo', tipo_saque='mensal'):
    """Atribui um plano a um cliente com o próximo ID de carteira"""
    if not cliente_id:
        raise ValidationError('Selecione um cliente', 'cliente_id')
    if not plano_id:
        raise ValidationError('Selecione um plano', 'plano_id')
    _validate_plan_fields(status_plano, tipo_saque)

    if db.session.get(Profile, cliente_id) is None:
        raise ValidationError('Cliente não encontrado', 'cliente_id')
    if db.session.get(Plano, plano_id) is None:
        raise ValidationError('Plano não encontrado', 'plano_id')

    try:
        plano_adquirido = PlanoAdquirido(
            cliente_id=cliente_id,
            plano_id=plano_id,
            status_plano=status_plano,
            tipo_saque=tipo_saque,
            id_carteira=next_wallet_id(cliente_id),
        )
        db.session.add(plano_adquirido)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info(f"Plano adquirido criado: cliente={cliente_id} carteira={plano_adquirido.id_carteira}")
    return plano_adquirido


def update_acquired_plan(plano_adquirido, plano_id=None, status_plano=None, tipo_saque=None):
    """Atualiza plano, status e tipo de saque. Retorna o status anterior."""
    old_status = plano_adquirido.status_plano
    status_plano = status_plano or plano_adquirido.status_plano
    tipo_saque = tipo_saque or plano_adquirido.tipo_saque
    _validate_plan_fields(status_plano, tipo_saque)

    if plano_id and plano_id != plano_adquirido.plano_id:
        if db.session.get(Plano, plano_id) is None:
            raise ValidationError('Plano não encontrado', 'plano_id')
        plano_adquirido.plano_id = plano_id

    plano_adquirido.status_plano = status_plano
    plano_adquirido.tipo_saque = tipo_saque
    db.session.commit()
    return old_status


def filter_and_sort(planos, status=None, sort_by='id_carteira', order='asc'):
    """Filtro por status e ordenação da lista do admin"""
    if status and status != 'all':
        planos = [p for p in planos if p.status_plano == status]

    if sort_by not in SORT_FIELDS:
        sort_by = 'id_carteira'

    def sort_key(plano):
        value = getattr(plano, sort_by)
        return value if value is not None else ''

    return sorted(planos, key=sort_key, reverse=(order == 'desc'))


def delete_acquired_plan(plano_adquirido):
    """
    Exclui o plano adquirido (e o histórico dele)

    Na mesma transação, o contador do cliente volta para a maior carteira
    que restou, de modo que a próxima atribuição continue sendo máximo + 1.
    """
    cliente_id = plano_adquirido.cliente_id
    id_carteira = plano_adquirido.id_carteira
    try:
        db.session.delete(plano_adquirido)
        db.session.flush()
        db.session.execute(
            update(WalletCounter)
            .where(WalletCounter.cliente_id == cliente_id)
            .values(last_value=_max_wallet_id(cliente_id))
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info(f"Plano adquirido excluído: cliente={cliente_id} carteira={id_carteira}")
