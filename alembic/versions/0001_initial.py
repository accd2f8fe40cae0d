"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2025-01-06 09:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None

company_status = sa.Enum('ACTIVE', 'INACTIVE', name='companystatus')
user_role = sa.Enum('ADMIN', 'TECHNICIAN', 'OFFICE', name='userrole')
job_status = sa.Enum('PENDING', 'IN_PROGRESS', 'COMPLETED', 'DELIVERED', 'UNDER_WARRANTY', name='jobstatus')
job_priority = sa.Enum('LOW', 'NORMAL', 'HIGH', 'URGENT', name='jobpriority')
invoice_status = sa.Enum('DRAFT', 'SENT', 'PAID', 'OVERDUE', 'CANCELLED', name='invoicestatus')
warranty_status = sa.Enum('ACTIVE', 'EXPIRED', 'CLAIMED', 'EXTENDED', name='warrantystatus')
claim_status = sa.Enum('NONE', 'PENDING', 'APPROVED', 'DENIED', name='claimstatus')
extension_reason = sa.Enum(
    'ADDITIONAL_WORK', 'CUSTOMER_REQUEST', 'QUALITY_ASSURANCE', 'PREMIUM_SERVICE', name='extensionreason'
)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


def upgrade():
    op.create_table(
        'companies',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('contact_name', sa.String(length=255), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', company_status, nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_companies_id'), 'companies', ['id'], unique=False)
    op.create_index(op.f('ix_companies_name'), 'companies', ['name'], unique=False)

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('role', user_role, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table(
        'motors',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('motor_id', sa.String(length=50), nullable=False),
        sa.Column('company_id', sa.Integer(), nullable=False),
        sa.Column('manufacturer', sa.String(length=255), nullable=True),
        sa.Column('model', sa.String(length=255), nullable=True),
        sa.Column('serial_number', sa.String(length=255), nullable=True),
        sa.Column('type', sa.String(length=100), nullable=True),
        sa.Column('horsepower', sa.Float(), nullable=True),
        sa.Column('voltage', sa.Integer(), nullable=True),
        sa.Column('rpm', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_motors_id'), 'motors', ['id'], unique=False)
    op.create_index(op.f('ix_motors_motor_id'), 'motors', ['motor_id'], unique=False)
    op.create_index(op.f('ix_motors_company_id'), 'motors', ['company_id'], unique=False)
    op.create_index(op.f('ix_motors_serial_number'), 'motors', ['serial_number'], unique=False)
    op.create_index(op.f('ix_motors_type'), 'motors', ['type'], unique=False)

    op.create_table(
        'jobs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('job_number', sa.String(length=50), nullable=False),
        sa.Column('company_id', sa.Integer(), nullable=False),
        sa.Column('motor_id', sa.Integer(), nullable=True),
        sa.Column('technician_id', sa.Integer(), nullable=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', job_status, nullable=False),
        sa.Column('priority', job_priority, nullable=False),
        sa.Column('progress_percentage', sa.Integer(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('completed_date', sa.Date(), nullable=True),
        sa.Column('labor_hours', sa.Numeric(precision=8, scale=2), nullable=True),
        sa.Column('labor_rate', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('parts_cost', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('estimated_cost', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('actual_cost', sa.Numeric(precision=12, scale=2), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.ForeignKeyConstraint(['motor_id'], ['motors.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['technician_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_jobs_id'), 'jobs', ['id'], unique=False)
    op.create_index(op.f('ix_jobs_job_number'), 'jobs', ['job_number'], unique=True)
    op.create_index(op.f('ix_jobs_company_id'), 'jobs', ['company_id'], unique=False)
    op.create_index(op.f('ix_jobs_motor_id'), 'jobs', ['motor_id'], unique=False)
    op.create_index(op.f('ix_jobs_status'), 'jobs', ['status'], unique=False)

    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('invoice_number', sa.String(length=50), nullable=False),
        sa.Column('job_id', sa.Integer(), nullable=True),
        sa.Column('company_id', sa.Integer(), nullable=False),
        sa.Column('subtotal', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('tax_amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('total_amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('status', invoice_status, nullable=False),
        sa.Column('issue_date', sa.Date(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('paid_date', sa.Date(), nullable=True),
        sa.Column('payment_terms', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_invoices_id'), 'invoices', ['id'], unique=False)
    op.create_index(op.f('ix_invoices_invoice_number'), 'invoices', ['invoice_number'], unique=True)
    op.create_index(op.f('ix_invoices_job_id'), 'invoices', ['job_id'], unique=False)
    op.create_index(op.f('ix_invoices_company_id'), 'invoices', ['company_id'], unique=False)
    op.create_index(op.f('ix_invoices_status'), 'invoices', ['status'], unique=False)

    op.create_table(
        'invoice_line_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('invoice_id', sa.Integer(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('quantity', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('rate', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.ForeignKeyConstraint(['invoice_id'], ['invoices.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_invoice_line_items_id'), 'invoice_line_items', ['id'], unique=False)
    op.create_index(op.f('ix_invoice_line_items_invoice_id'), 'invoice_line_items', ['invoice_id'], unique=False)

    op.create_table(
        'warranties',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('job_id', sa.Integer(), nullable=True),
        sa.Column('motor_id', sa.Integer(), nullable=True),
        sa.Column('company_id', sa.Integer(), nullable=False),
        sa.Column('status', warranty_status, nullable=False),
        sa.Column('warranty_start', sa.Date(), nullable=False),
        sa.Column('warranty_period', sa.Integer(), nullable=False),
        sa.Column('warranty_end', sa.Date(), nullable=False),
        sa.Column('work_description', sa.Text(), nullable=True),
        sa.Column('original_end_date', sa.Date(), nullable=True),
        sa.Column('extension_months', sa.Integer(), nullable=False),
        sa.Column('extension_reason', extension_reason, nullable=True),
        sa.Column('claim_status', claim_status, nullable=False),
        sa.Column('last_inspection', sa.Date(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['motor_id'], ['motors.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_warranties_id'), 'warranties', ['id'], unique=False)
    op.create_index(op.f('ix_warranties_job_id'), 'warranties', ['job_id'], unique=False)
    op.create_index(op.f('ix_warranties_motor_id'), 'warranties', ['motor_id'], unique=False)
    op.create_index(op.f('ix_warranties_company_id'), 'warranties', ['company_id'], unique=False)
    op.create_index(op.f('ix_warranties_status'), 'warranties', ['status'], unique=False)
    op.create_index(op.f('ix_warranties_warranty_end'), 'warranties', ['warranty_end'], unique=False)

    op.create_table(
        'document_sequences',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('doc_type', sa.String(length=20), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('last_value', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('doc_type', 'year', name='uq_document_sequences_type_year'),
    )
    op.create_index(op.f('ix_document_sequences_id'), 'document_sequences', ['id'], unique=False)


def downgrade():
    op.drop_table('document_sequences')
    op.drop_table('warranties')
    op.drop_table('invoice_line_items')
    op.drop_table('invoices')
    op.drop_table('jobs')
    op.drop_table('motors')
    op.drop_table('users')
    op.drop_table('companies')

    bind = op.get_bind()
    for enum_type in (
        extension_reason, claim_status, warranty_status, invoice_status,
        job_priority, job_status, user_role, company_status,
    ):
        enum_type.drop(bind, checkfirst=True)
