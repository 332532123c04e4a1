"""initial_fleet_schema

Revision ID: a1f0c3d2e4b5
Revises:
Create Date: 2026-10-19 09:00:00.000000

초기 스키마:
1. 인증: users, profiles, user_roles, refresh_tokens
2. 차량: vehicles, vehicle_documents
3. 점검: checklist_templates, checklist_template_items, checklists, checklist_responses
4. 결함: defects
5. get_current_user_role(uuid) 함수 — 역할 조회 빠른 경로
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID, JSONB


# revision identifiers, used by Alembic.
revision: str = 'a1f0c3d2e4b5'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(with_updated: bool = True) -> list[sa.Column]:
    columns = [sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now())]
    if with_updated:
        columns.append(sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()))
    return columns


def upgrade() -> None:
    # ── 1. 인증 (Auth) ──
    op.create_table(
        'users',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        'profiles',
        sa.Column('id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        'user_roles',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('role', sa.String(20), server_default='motorista', nullable=False),
        *_timestamps(with_updated=False),
        sa.CheckConstraint("role IN ('motorista', 'gestor', 'administrador')", name='ck_user_roles_role'),
    )
    op.create_table(
        'refresh_tokens',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('token', sa.String(512), nullable=False, unique=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('issued_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_refresh_tokens_user_id', 'refresh_tokens', ['user_id'])

    # ── 2. 차량 (Vehicles) ──
    op.create_table(
        'vehicles',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('plate', sa.String(20), nullable=False, unique=True),
        sa.Column('model', sa.String(255), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('chassis', sa.String(50), nullable=True),
        sa.Column('current_mileage', sa.Integer(), server_default=sa.text('0'), nullable=False),
        sa.Column('photo_url', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        'vehicle_documents',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('vehicle_id', UUID(as_uuid=True), sa.ForeignKey('vehicles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('doc_type', sa.String(100), nullable=False),
        sa.Column('file_url', sa.Text(), nullable=False),
        sa.Column('expires_on', sa.Date(), nullable=True),
        *_timestamps(with_updated=False),
    )

    # ── 3. 점검 (Inspections) ──
    op.create_table(
        'checklist_templates',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        'checklist_template_items',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('template_id', UUID(as_uuid=True), sa.ForeignKey('checklist_templates.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(500), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('sort_order', sa.Integer(), server_default=sa.text('0'), nullable=False),
        *_timestamps(with_updated=False),
    )
    op.create_table(
        'checklists',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('vehicle_id', UUID(as_uuid=True), sa.ForeignKey('vehicles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('template_id', UUID(as_uuid=True), sa.ForeignKey('checklist_templates.id'), nullable=False),
        sa.Column('operator_id', UUID(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('operator_name', sa.String(255), nullable=True),
        sa.Column('operator_function', sa.String(255), nullable=True),
        sa.Column('operator_badge', sa.String(100), nullable=True),
        sa.Column('operator_contract', sa.String(100), nullable=True),
        sa.Column('odometer_start', sa.Integer(), nullable=False),
        sa.Column('odometer_end', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(20), server_default='pendente', nullable=False),
        sa.Column('inspection_mode', sa.String(20), server_default='sections', nullable=False),
        sa.Column('comments', sa.Text(), nullable=True),
        sa.Column('photo_urls', JSONB, server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('sections', JSONB, server_default=sa.text("'{}'::jsonb"), nullable=False),
        sa.Column('signed', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('signed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("status IN ('ok', 'com_defeito', 'pendente', 'concluido')", name='ck_checklists_status'),
    )
    op.create_index('ix_checklists_vehicle_created', 'checklists', ['vehicle_id', 'created_at'])
    op.create_index('ix_checklists_operator_id', 'checklists', ['operator_id'])
    op.create_table(
        'checklist_responses',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('checklist_id', UUID(as_uuid=True), sa.ForeignKey('checklists.id', ondelete='CASCADE'), nullable=False),
        sa.Column('item_id', UUID(as_uuid=True), sa.ForeignKey('checklist_template_items.id', ondelete='CASCADE'), nullable=False),
        sa.Column('is_conforming', sa.Boolean(), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('photo_urls', JSONB, server_default=sa.text("'[]'::jsonb"), nullable=False),
        *_timestamps(with_updated=False),
        sa.UniqueConstraint('checklist_id', 'item_id', name='uq_response_checklist_item'),
    )

    # ── 4. 결함 (Defects) ──
    op.create_table(
        'defects',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('vehicle_id', UUID(as_uuid=True), sa.ForeignKey('vehicles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('checklist_id', UUID(as_uuid=True), sa.ForeignKey('checklists.id', ondelete='SET NULL'), nullable=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('severity', sa.String(20), server_default='leve', nullable=False),
        sa.Column('status', sa.String(20), server_default='aberto', nullable=False),
        sa.Column('photo_url', sa.Text(), nullable=True),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('resolved_by', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("severity IN ('leve', 'moderado', 'critico')", name='ck_defects_severity'),
        sa.CheckConstraint("status IN ('aberto', 'em_analise', 'resolvido')", name='ck_defects_status'),
    )
    op.create_index('ix_defects_status_created', 'defects', ['status', 'created_at'])

    # ── 5. 역할 조회 함수 (Role lookup function) ──
    op.execute(
        """
        CREATE OR REPLACE FUNCTION get_current_user_role(_user_id uuid)
        RETURNS varchar
        LANGUAGE plpgsql
        STABLE
        SECURITY DEFINER
        AS $$
        BEGIN
            RETURN (SELECT role FROM user_roles WHERE user_id = _user_id LIMIT 1);
        END;
        $$;
        """
    )


def downgrade() -> None:
    op.execute("DROP FUNCTION IF EXISTS get_current_user_role(uuid)")
    op.drop_index('ix_defects_status_created', table_name='defects')
    op.drop_table('defects')
    op.drop_table('checklist_responses')
    op.drop_index('ix_checklists_operator_id', table_name='checklists')
    op.drop_index('ix_checklists_vehicle_created', table_name='checklists')
    op.drop_table('checklists')
    op.drop_table('checklist_template_items')
    op.drop_table('checklist_templates')
    op.drop_table('vehicle_documents')
    op.drop_table('vehicles')
    op.drop_index('ix_refresh_tokens_user_id', table_name='refresh_tokens')
    op.drop_table('refresh_tokens')
    op.drop_table('user_roles')
    op.drop_table('profiles')
    op.drop_table('users')
