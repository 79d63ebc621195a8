"""initial lead, referral, email feedback and compose schema

Revision ID: 001
Revises: 
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _base_columns():
    return [
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _sequence_type():
    return sa.BigInteger().with_variant(sa.Integer(), 'sqlite')


def upgrade() -> None:
    """Upgrade schema."""
    # Create users table
    op.create_table(
        'users',
        *_base_columns(),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False),
        sa.Column('referral_code', sa.String(12), nullable=True),
        sa.Column('referred_by_id', sa.String(), nullable=True),
        sa.Column('subscription_status', sa.String(20), nullable=False),
        sa.Column('subscription_end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('total_referrals', sa.Integer(), nullable=False),
        sa.Column('active_referrals', sa.Integer(), nullable=False),
        sa.Column('total_earnings', sa.Numeric(12, 2), nullable=False),
        sa.ForeignKeyConstraint(['referred_by_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_referral_code'), 'users', ['referral_code'], unique=True)

    # Create referral_entries table
    op.create_table(
        'referral_entries',
        *_base_columns(),
        sa.Column('referrer_id', sa.String(), nullable=False),
        sa.Column('referred_user_id', sa.String(), nullable=False),
        sa.Column('joined_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('subscription_status', sa.String(20), nullable=False),
        sa.ForeignKeyConstraint(['referrer_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['referred_user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('referrer_id', 'referred_user_id', name='uq_referrer_referred_user'),
    )
    op.create_index(op.f('ix_referral_entries_id'), 'referral_entries', ['id'], unique=False)
    op.create_index(op.f('ix_referral_entries_referrer_id'), 'referral_entries', ['referrer_id'], unique=False)
    op.create_index('idx_referral_entries_referred', 'referral_entries', ['referred_user_id'], unique=False)

    # Create leads table
    op.create_table(
        'leads',
        *_base_columns(),
        sa.Column('lead_id', sa.String(100), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('category', sa.String(255), nullable=True),
        sa.Column('city', sa.String(255), nullable=True),
        sa.Column('country', sa.String(255), nullable=True),
        sa.Column('address_street', sa.String(512), nullable=True),
        sa.Column('linkedin', sa.String(512), nullable=True),
        sa.Column('facebook_link', sa.String(512), nullable=True),
        sa.Column('website_link', sa.String(512), nullable=True),
        sa.Column('google_map_link', sa.String(1024), nullable=True),
        sa.Column('instagram', sa.String(512), nullable=True),
        sa.Column('last_verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('upload_sequence', _sequence_type(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_leads_id'), 'leads', ['id'], unique=False)
    op.create_index(op.f('ix_leads_lead_id'), 'leads', ['lead_id'], unique=True)
    op.create_index(op.f('ix_leads_email'), 'leads', ['email'], unique=False)
    op.create_index(op.f('ix_leads_category'), 'leads', ['category'], unique=False)
    op.create_index(op.f('ix_leads_city'), 'leads', ['city'], unique=False)
    op.create_index(op.f('ix_leads_country'), 'leads', ['country'], unique=False)
    op.create_index('idx_leads_upload_sequence_created', 'leads', ['upload_sequence', 'created_at'], unique=False)

    # Create lead_sequences table
    op.create_table(
        'lead_sequences',
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('value', _sequence_type(), nullable=False),
        sa.PrimaryKeyConstraint('name'),
    )

    # Create email_feedback table
    op.create_table(
        'email_feedback',
        *_base_columns(),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('subject', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column(
            'email_type',
            sa.Enum('bulk', 'category', 'city', 'country', 'selected', name='email_type'),
            nullable=False,
        ),
        sa.Column('filter_category', sa.String(255), nullable=True),
        sa.Column('filter_city', sa.String(255), nullable=True),
        sa.Column('filter_country', sa.String(255), nullable=True),
        sa.Column('total_recipients', sa.Integer(), nullable=False),
        sa.Column('success_count', sa.Integer(), nullable=False),
        sa.Column('failed_count', sa.Integer(), nullable=False),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_email_feedback_id'), 'email_feedback', ['id'], unique=False)
    op.create_index(op.f('ix_email_feedback_email_type'), 'email_feedback', ['email_type'], unique=False)
    op.create_index('idx_email_feedback_user_sent', 'email_feedback', ['user_id', 'sent_at'], unique=False)

    # Create email_feedback_recipients table
    op.create_table(
        'email_feedback_recipients',
        *_base_columns(),
        sa.Column('feedback_id', sa.String(), nullable=False),
        sa.Column('lead_id', sa.String(), nullable=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('status', sa.Enum('sent', 'failed', name='recipient_status'), nullable=False),
        sa.Column('error', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['feedback_id'], ['email_feedback.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['lead_id'], ['leads.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_email_feedback_recipients_id'), 'email_feedback_recipients', ['id'], unique=False)
    op.create_index(
        op.f('ix_email_feedback_recipients_feedback_id'), 'email_feedback_recipients', ['feedback_id'], unique=False
    )

    # Create compose_responses table
    op.create_table(
        'compose_responses',
        *_base_columns(),
        sa.Column('channel', sa.String(50), nullable=False),
        sa.Column('prompt', sa.Text(), nullable=False),
        sa.Column('ai_text', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_compose_responses_id'), 'compose_responses', ['id'], unique=False)
    op.create_index(op.f('ix_compose_responses_channel'), 'compose_responses', ['channel'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('compose_responses')
    op.drop_table('email_feedback_recipients')
    op.drop_table('email_feedback')
    op.drop_table('lead_sequences')
    op.drop_table('leads')
    op.drop_table('referral_entries')
    op.drop_table('users')
    sa.Enum(name='recipient_status').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='email_type').drop(op.get_bind(), checkfirst=True)
