"""initial schema

Revision ID: 3f1a9c2e7b10
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f1a9c2e7b10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'profiles',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=False),
        sa.Column('nome', sa.String(length=150), nullable=False),
        sa.Column('password_hash', sa.String(length=128), nullable=True),
        sa.Column('telefone', sa.String(length=20), nullable=True),
        sa.Column('cpf', sa.String(length=255), nullable=True),
        sa.Column('data_nascimento', sa.Date(), nullable=True),
        sa.Column('rua_bairro', sa.String(length=200), nullable=True),
        sa.Column('numero_residencial', sa.String(length=20), nullable=True),
        sa.Column('cep', sa.String(length=8), nullable=True),
        sa.Column('cidade', sa.String(length=100), nullable=True),
        sa.Column('estado', sa.String(length=2), nullable=True),
        sa.Column('foto_perfil', sa.String(length=500), nullable=True),
        sa.Column('informacoes_personalizadas', sa.Text(), nullable=True),
        sa.Column('pagamento_ativo', sa.Boolean(), nullable=True),
        sa.Column('status_plataforma', sa.String(length=50), nullable=True),
        sa.Column('documentos_completos', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_table(
        'user_roles',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'planos',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('nome_plano', sa.String(length=100), nullable=False),
        sa.Column('descricao', sa.Text(), nullable=True),
        sa.Column('preco', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'planos_adquiridos',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('cliente_id', sa.String(length=36), nullable=False),
        sa.Column('plano_id', sa.String(length=36), nullable=False),
        sa.Column('id_carteira', sa.String(length=10), nullable=False),
        sa.Column('status_plano', sa.String(length=20), nullable=True),
        sa.Column('tipo_saque', sa.String(length=20), nullable=False),
        sa.Column('data_aquisicao', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['cliente_id'], ['profiles.id']),
        sa.ForeignKeyConstraint(['plano_id'], ['planos.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('cliente_id', 'id_carteira', name='uq_planos_adquiridos_cliente_carteira'),
    )
    op.create_table(
        'wallet_counters',
        sa.Column('cliente_id', sa.String(length=36), nullable=False),
        sa.Column('last_value', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['cliente_id'], ['profiles.id']),
        sa.PrimaryKeyConstraint('cliente_id'),
    )
    op.create_table(
        'solicitacoes',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('plano_adquirido_id', sa.String(length=36), nullable=True),
        sa.Column('tipo_solicitacao', sa.String(length=30), nullable=False),
        sa.Column('descricao', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('resposta_admin', sa.Text(), nullable=True),
        sa.Column('atendida_em', sa.DateTime(), nullable=True),
        sa.Column('atendida_por', sa.String(length=36), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['atendida_por'], ['profiles.id']),
        sa.ForeignKeyConstraint(['plano_adquirido_id'], ['planos_adquiridos.id']),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'historico_observacoes',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('plano_adquirido_id', sa.String(length=36), nullable=False),
        sa.Column('solicitacao_id', sa.String(length=36), nullable=True),
        sa.Column('tipo_evento', sa.String(length=50), nullable=True),
        sa.Column('observacao', sa.Text(), nullable=False),
        sa.Column('valor_solicitado', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('valor_final', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('comprovante_url', sa.String(length=500), nullable=True),
        sa.Column('status_evento', sa.String(length=20), nullable=True),
        sa.Column('origem', sa.String(length=20), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['plano_adquirido_id'], ['planos_adquiridos.id']),
        sa.ForeignKeyConstraint(['solicitacao_id'], ['solicitacoes.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('historico_observacoes', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_historico_observacoes_created_at'), ['created_at'], unique=False)

    op.create_table(
        'user_documents',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('tipo_documento', sa.String(length=20), nullable=False),
        sa.Column('arquivo_url', sa.String(length=500), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'platform_config',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('config_key', sa.String(length=100), nullable=False),
        sa.Column('config_value', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('config_key'),
    )
    op.create_table(
        'system_logs',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('log_data', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('system_logs', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_system_logs_created_at'), ['created_at'], unique=False)


def downgrade():
    with op.batch_alter_table('system_logs', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_system_logs_created_at'))
    op.drop_table('system_logs')
    op.drop_table('platform_config')
    op.drop_table('user_documents')
    with op.batch_alter_table('historico_observacoes', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_historico_observacoes_created_at'))
    op.drop_table('historico_observacoes')
    op.drop_table('solicitacoes')
    op.drop_table('wallet_counters')
    op.drop_table('planos_adquiridos')
    op.drop_table('planos')
    op.drop_table('user_roles')
    op.drop_table('profiles')
