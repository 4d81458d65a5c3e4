from alembic import op
import sqlalchemy as sa

revision = '0002_add_workflows'
down_revision = '0001_init'
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'resupply_requests',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('entry_id', sa.Integer, sa.ForeignKey('inventory_entries.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('requested_by', sa.String(64), nullable=False, index=True),
        sa.Column('quantity_requested', sa.Integer, nullable=False),
        sa.Column('urgency', sa.String(10), nullable=False, server_default='normal'),
        sa.Column('reason', sa.Text, nullable=True),
        sa.Column('preferred_delivery_date', sa.Date, nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING', index=True),
        sa.Column('reviewed_by', sa.String(64), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('review_notes', sa.Text, nullable=True),
        sa.Column('fulfilled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False)
    )
    op.create_table(
        'donation_offers',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('entry_id', sa.Integer, sa.ForeignKey('inventory_entries.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('offered_by', sa.String(64), nullable=False, index=True),
        sa.Column('donor_name', sa.String(200), nullable=False),
        sa.Column('donor_contact', sa.String(200), nullable=False),
        sa.Column('quantity_offered', sa.Integer, nullable=False),
        sa.Column('condition', sa.String(10), nullable=False, server_default='NEW'),
        sa.Column('available_date', sa.Date, nullable=True),
        sa.Column('delivery_method', sa.String(200), nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='OFFERED', index=True),
        sa.Column('reviewed_by', sa.String(64), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('delivered_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False)
    )

def downgrade():
    op.drop_table('donation_offers')
    op.drop_table('resupply_requests')
