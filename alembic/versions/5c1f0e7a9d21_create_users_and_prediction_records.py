"""Create users and prediction records

Revision ID: 5c1f0e7a9d21
Revises:
Create Date: 2026-10-17 10:12:44.301552

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5c1f0e7a9d21'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=30), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('hashed_password', sa.LargeBinary(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('birth_date', sa.Date(), nullable=True),
        sa.Column('birth_time', sa.String(length=5), nullable=True),
        sa.Column('birth_place', sa.String(length=100), nullable=True),
        sa.Column('gender', sa.String(length=10), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table(
        'prediction_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('service_type', sa.String(length=20), nullable=False),
        sa.Column('input_data', sa.JSON(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('summary', sa.String(length=500), nullable=False),
        sa.Column('advice', sa.JSON(), nullable=False),
        sa.Column('imagery', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_prediction_records_id'), 'prediction_records', ['id'], unique=False)
    op.create_index(op.f('ix_prediction_records_user_id'), 'prediction_records', ['user_id'], unique=False)
    op.create_index(op.f('ix_prediction_records_service_type'), 'prediction_records', ['service_type'], unique=False)
    op.create_index(op.f('ix_prediction_records_created_at'), 'prediction_records', ['created_at'], unique=False)
    op.create_index('ix_prediction_records_user_created', 'prediction_records', ['user_id', 'created_at'], unique=False)
    op.create_index('ix_prediction_records_user_service', 'prediction_records', ['user_id', 'service_type'], unique=False)
    op.create_index(
        'ix_prediction_records_user_service_created',
        'prediction_records',
        ['user_id', 'service_type', 'created_at'],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index('ix_prediction_records_user_service_created', table_name='prediction_records')
    op.drop_index('ix_prediction_records_user_service', table_name='prediction_records')
    op.drop_index('ix_prediction_records_user_created', table_name='prediction_records')
    op.drop_index(op.f('ix_prediction_records_created_at'), table_name='prediction_records')
    op.drop_index(op.f('ix_prediction_records_service_type'), table_name='prediction_records')
    op.drop_index(op.f('ix_prediction_records_user_id'), table_name='prediction_records')
    op.drop_index(op.f('ix_prediction_records_id'), table_name='prediction_records')
    op.drop_table('prediction_records')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_index(op.f('ix_users_username'), table_name='users')
    op.drop_index(op.f('ix_users_id'), table_name='users')
    op.drop_table('users')
