"""initial schema: users, games, players, squads, infections, maps, points of interest

Revision ID: 1a7c0e9b2f10
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '1a7c0e9b2f10'
down_revision = None
branch_labels = None
depends_on = None


def _poi_columns():
    return [
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(length=20), nullable=False),
        sa.Column('description', sa.String(length=300), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('radius', sa.Integer(), nullable=False),
        sa.Column('human_visible', sa.Boolean(), nullable=False),
        sa.Column('zombie_visible', sa.Boolean(), nullable=False),
        sa.Column('begin_time', sa.DateTime(), nullable=True),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('map_id', sa.Integer(), sa.ForeignKey('map.id'), nullable=False),
    ]


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
    )
    op.create_index('ix_user_username', 'user', ['username'], unique=True)

    op.create_table(
        'game',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(length=50), nullable=False),
        sa.Column('description', sa.String(length=300), nullable=True),
        sa.Column('begin_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('phase', sa.String(length=16), nullable=False),
        sa.Column('admin_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
    )

    op.create_table(
        'squad',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('game_id', sa.Integer(), sa.ForeignKey('game.id'), nullable=False),
    )

    op.create_table(
        'player',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('game_id', sa.Integer(), sa.ForeignKey('game.id'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('squad_id', sa.Integer(), sa.ForeignKey('squad.id', ondelete='SET NULL'), nullable=True),
        sa.Column('faction', sa.String(length=16), nullable=False),
        sa.Column('is_patient_zero', sa.Boolean(), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('bite_code', sa.String(length=64), nullable=True),
        sa.UniqueConstraint('game_id', 'user_id', name='uq_player_game_user'),
        sa.UniqueConstraint('game_id', 'bite_code', name='uq_player_game_bite_code'),
    )

    op.create_table(
        'infection',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('game_id', sa.Integer(), sa.ForeignKey('game.id'), nullable=False),
        sa.Column('victim_id', sa.Integer(), sa.ForeignKey('player.id', ondelete='CASCADE'), nullable=False),
        sa.Column('occurred_at', sa.DateTime(), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
    )

    op.create_table(
        'map',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('description', sa.String(length=300), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('radius', sa.Integer(), nullable=False),
        sa.Column('game_id', sa.Integer(), sa.ForeignKey('game.id'), nullable=False),
    )

    op.create_table(
        'supply',
        *_poi_columns(),
        sa.Column('drop_kind', sa.String(length=16), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
    )
    op.create_table('safezone', *_poi_columns())
    op.create_table('mission', *_poi_columns())


def downgrade():
    for table in ('mission', 'safezone', 'supply', 'map', 'infection', 'player', 'squad', 'game'):
        op.drop_table(table)
    op.drop_index('ix_user_username', table_name='user')
    op.drop_table('user')
