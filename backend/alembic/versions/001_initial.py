"""Initial migration

Revision ID: 001
Revises: 
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Usuários
    op.create_table(
        'usuarios',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('nome', sa.String(255), nullable=False),
        sa.Column('email', sa.String(120), nullable=False),
        sa.Column('senha_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.String(5), nullable=False, server_default='user'),
        sa.Column('ativo', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('pode_lote', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('criado_em', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_usuarios_email'), 'usuarios', ['email'], unique=True)
    op.create_index(op.f('ix_usuarios_id'), 'usuarios', ['id'], unique=False)

    # Consultas salvas (cache RADAR + ReceitaWS)
    op.create_table(
        'consultas_radar',
        sa.Column('id', sa.BigInteger(), nullable=False),
        sa.Column('cnpj', sa.String(14), nullable=False),
        sa.Column('data_consulta', sa.Date(), nullable=False),
        sa.Column('contribuinte', sa.Text(), nullable=True),
        sa.Column('situacao', sa.Text(), nullable=True),
        sa.Column('data_situacao', sa.Text(), nullable=True),
        sa.Column('submodalidade', sa.Text(), nullable=True),
        sa.Column('razao_social', sa.Text(), nullable=True),
        sa.Column('nome_fantasia', sa.Text(), nullable=True),
        sa.Column('municipio', sa.Text(), nullable=True),
        sa.Column('uf', sa.String(2), nullable=True),
        sa.Column('data_constituicao', sa.Text(), nullable=True),
        sa.Column('regime_tributario', sa.Text(), nullable=True),
        sa.Column('data_opcao_simples', sa.Text(), nullable=True),
        sa.Column('capital_social', sa.Text(), nullable=True),
        sa.Column('exportado_por', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_consultas_radar_cnpj_data', 'consultas_radar', ['cnpj', 'data_consulta'], unique=False)

    # Log de auditoria das consultas
    op.create_table(
        'consultas_log',
        sa.Column('id', sa.BigInteger(), nullable=False),
        sa.Column('usuario_id', sa.Integer(), nullable=False),
        sa.Column('cnpj', sa.String(14), nullable=False),
        sa.Column('data_hora', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('origem', sa.String(20), nullable=False),
        sa.Column('sucesso', sa.Boolean(), nullable=False),
        sa.Column('mensagem', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['usuario_id'], ['usuarios.id']),
        sa.PrimaryKeyConstraint('id')
    )


def downgrade() -> None:
    op.drop_table('consultas_log')
    op.drop_index('idx_consultas_radar_cnpj_data', table_name='consultas_radar')
    op.drop_table('consultas_radar')
    op.drop_index(op.f('ix_usuarios_id'), table_name='usuarios')
    op.drop_index(op.f('ix_usuarios_email'), table_name='usuarios')
    op.drop_table('usuarios')
