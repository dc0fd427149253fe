"""create_custom_fields_tables

Revision ID: 3f2a9c1d7e4b
Revises:
Create Date: 2026-10-19 10:12:44.318207

"""
from alembic import op
import sqlalchemy as sa

from app.core.config import DB_SCHEMA

revision = '3f2a9c1d7e4b'
down_revision = None
branch_labels = None
depends_on = None


def _schema():
    # SQLite has no schemas
    return None if op.get_bind().dialect.name == 'sqlite' else DB_SCHEMA


def _fk(schema, table):
    return f'{schema}.{table}.id' if schema else f'{table}.id'


def upgrade() -> None:
    schema = _schema()

    op.create_table(
        'field_group',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('key', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('location', sa.JSON(), nullable=True),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        schema=schema
    )
    op.create_index(op.f('ix_field_group_id'), 'field_group', ['id'], unique=False, schema=schema)
    op.create_index(op.f('ix_field_group_key'), 'field_group', ['key'], unique=True, schema=schema)

    op.create_table(
        'custom_field',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('field_group_id', sa.Integer(), nullable=False),
        sa.Column('label', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('key', sa.String(length=255), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('instructions', sa.Text(), nullable=True),
        sa.Column('required', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('default_value', sa.JSON(), nullable=True),
        sa.Column('placeholder', sa.String(length=255), nullable=True),
        sa.Column('choices', sa.JSON(), nullable=True),
        sa.Column('multiple', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('model_type', sa.String(length=100), nullable=True),
        sa.Column('conditional_logic', sa.JSON(), nullable=True),
        sa.Column('wrapper', sa.JSON(), nullable=True),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['field_group_id'], [_fk(schema, 'field_group')], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        schema=schema
    )
    op.create_index(op.f('ix_custom_field_id'), 'custom_field', ['id'], unique=False, schema=schema)
    op.create_index(op.f('ix_custom_field_key'), 'custom_field', ['key'], unique=True, schema=schema)
    op.create_index(op.f('ix_custom_field_field_group_id'), 'custom_field', ['field_group_id'], unique=False, schema=schema)

    op.create_table(
        'field_value',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('custom_field_id', sa.Integer(), nullable=False),
        sa.Column('entity_type', sa.String(length=100), nullable=False),
        sa.Column('entity_id', sa.String(length=64), nullable=False),
        sa.Column('value', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['custom_field_id'], [_fk(schema, 'custom_field')], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('custom_field_id', 'entity_type', 'entity_id', name='uq_field_value_field_entity'),
        schema=schema
    )
    op.create_index(op.f('ix_field_value_id'), 'field_value', ['id'], unique=False, schema=schema)
    op.create_index('ix_field_value_entity', 'field_value', ['entity_type', 'entity_id'], unique=False, schema=schema)

    op.create_table(
        'form_submission',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('field_group_id', sa.Integer(), nullable=False),
        sa.Column('data', sa.JSON(), nullable=False),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.ForeignKeyConstraint(['field_group_id'], [_fk(schema, 'field_group')], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        schema=schema
    )
    op.create_index(op.f('ix_form_submission_id'), 'form_submission', ['id'], unique=False, schema=schema)
    op.create_index(op.f('ix_form_submission_field_group_id'), 'form_submission', ['field_group_id'], unique=False, schema=schema)
    op.create_index(op.f('ix_form_submission_created_at'), 'form_submission', ['created_at'], unique=False, schema=schema)

    op.create_table(
        'activity_log',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('actor', sa.String(), nullable=True),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('entity_type', sa.String(), nullable=False),
        sa.Column('entity_id', sa.String(), nullable=True),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('ip_address', sa.String(), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        schema=schema
    )
    op.create_index(op.f('ix_activity_log_id'), 'activity_log', ['id'], unique=False, schema=schema)
    op.create_index(op.f('ix_activity_log_action'), 'activity_log', ['action'], unique=False, schema=schema)
    op.create_index(op.f('ix_activity_log_entity_type'), 'activity_log', ['entity_type'], unique=False, schema=schema)
    op.create_index(op.f('ix_activity_log_created_at'), 'activity_log', ['created_at'], unique=False, schema=schema)

    # demo entities used by model fields and the value API
    for table, extra in (
        ('category', [
            sa.Column('slug', sa.String(length=255), nullable=True, unique=True),
            sa.Column('description', sa.Text(), nullable=True),
        ]),
        ('brand', [
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('website', sa.String(length=255), nullable=True),
        ]),
        ('school', [
            sa.Column('code', sa.String(length=50), nullable=True),
            sa.Column('city', sa.String(length=100), nullable=True),
        ]),
    ):
        op.create_table(
            table,
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=255), nullable=False),
            *extra,
            sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
            sa.PrimaryKeyConstraint('id'),
            schema=schema
        )
        op.create_index(op.f(f'ix_{table}_id'), table, ['id'], unique=False, schema=schema)


def downgrade() -> None:
    schema = _schema()
    for table in ('school', 'brand', 'category', 'activity_log', 'form_submission', 'field_value', 'custom_field', 'field_group'):
        op.drop_table(table, schema=schema)
