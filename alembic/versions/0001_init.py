from alembic import op
import sqlalchemy as sa

revision = '0001_init'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'item_types',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('category', sa.String(30), nullable=False, index=True),
        sa.Column('subcategory', sa.String(100), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('unit', sa.String(30), nullable=False, server_default='pieces'),
        sa.Column('is_perishable', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('shelf_life_days', sa.Integer, nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('sort_order', sa.Integer, nullable=False, server_default='0')
    )
    op.create_table(
        'locations',
        sa.Column('code', sa.String(20), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('level', sa.String(10), nullable=False),
        sa.Column('parent_code', sa.String(20), nullable=True, index=True)
    )
    op.create_table(
        'inventory_entries',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('provider_id', sa.String(64), nullable=False, index=True),
        sa.Column('item_type_id', sa.Integer, sa.ForeignKey('item_types.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('district_code', sa.String(20), nullable=False, index=True),
        sa.Column('tehsil_code', sa.String(20), nullable=False, index=True),
        sa.Column('village_code', sa.String(20), nullable=True, index=True),
        sa.Column('quantity_total', sa.Integer, nullable=False),
        sa.Column('quantity_available', sa.Integer, nullable=False),
        sa.Column('condition', sa.String(10), nullable=False, server_default='NEW'),
        sa.Column('status', sa.String(20), nullable=False, server_default='AVAILABLE', index=True),
        sa.Column('availability_mode', sa.String(20), nullable=False, server_default='IMMEDIATE'),
        sa.Column('available_from', sa.DateTime(timezone=True), nullable=True),
        sa.Column('available_until', sa.DateTime(timezone=True), nullable=True),
        sa.Column('response_hours', sa.Integer, nullable=True),
        sa.Column('batch_number', sa.String(100), nullable=True),
        sa.Column('expiry_date', sa.Date, nullable=True),
        sa.Column('storage_location', sa.String(200), nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('evidence_urls', sa.JSON, nullable=True),
        sa.Column('visibility', sa.String(20), nullable=False, server_default='PUBLIC'),
        sa.Column('is_verified', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('version', sa.Integer, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, index=True),
        sa.CheckConstraint('quantity_available >= 0 AND quantity_available <= quantity_total',
                           name='ck_inventory_entries_quantities')
    )

def downgrade():
    op.drop_table('inventory_entries')
    op.drop_table('locations')
    op.drop_table('item_types')
