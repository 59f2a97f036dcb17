"""initial schema: organization, employees, assignments, approvals

Revision ID: 3c1f0a9d2b7e
Revises:
Create Date: 2026-10-18 09:12:44.318207
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = '3c1f0a9d2b7e'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ENUMS = {
    "userrole": ("ADMIN", "MANAGER", "EMPLOYEE"),
    "employmenttype": ("FULL_TIME", "PART_TIME", "CONTRACT", "INTERN"),
    "documentstatus": ("DRAFT", "PENDING", "IN_PROGRESS", "APPROVED", "REJECTED"),
    "approvallinestatus": ("PENDING", "APPROVE", "REJECT"),
    "approvalhistoryaction": ("DRAFT", "APPROVE", "REJECT"),
}


def _enum(name: str) -> sa.Enum:
    # types are created once up front, tables only reference them
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _audit_columns():
    return [
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_deleted', sa.Boolean(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    for name in ENUMS:
        postgresql.ENUM(*ENUMS[name], name=name).create(bind, checkfirst=True)

    # region organization
    op.create_table(
        'companies',
        *_audit_columns(),
        sa.Column('company_code', sa.String(length=20), nullable=False),
        sa.Column('company_name', sa.String(length=100), nullable=False),
        sa.Column('company_name_eng', sa.String(length=100), nullable=True),
        sa.Column('business_number', sa.String(length=20), nullable=True),
        sa.Column('ceo_name', sa.String(length=50), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('phone_number', sa.String(length=20), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
    )
    op.create_index('ix_companies_id', 'companies', ['id'])
    op.create_index('ix_companies_company_code', 'companies', ['company_code'], unique=True)

    op.create_table(
        'sub_companies',
        *_audit_columns(),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False),
        sa.Column('sub_company_code', sa.String(length=20), nullable=False),
        sa.Column('sub_company_name', sa.String(length=100), nullable=False),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('is_headquarters', sa.Boolean(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.UniqueConstraint('company_id', 'sub_company_code', name='uq_sub_company_code'),
    )
    op.create_index('ix_sub_companies_id', 'sub_companies', ['id'])
    op.create_index('ix_sub_companies_company_id', 'sub_companies', ['company_id'])

    op.create_table(
        'departments',
        *_audit_columns(),
        sa.Column('sub_company_id', sa.Integer(), sa.ForeignKey('sub_companies.id'), nullable=False),
        sa.Column('parent_department_id', sa.Integer(), sa.ForeignKey('departments.id'), nullable=True),
        sa.Column('dept_code', sa.String(length=20), nullable=False),
        sa.Column('dept_name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.UniqueConstraint('sub_company_id', 'dept_code', name='uq_department_code'),
    )
    op.create_index('ix_departments_id', 'departments', ['id'])
    op.create_index('ix_departments_sub_company_id', 'departments', ['sub_company_id'])

    op.create_table(
        'positions',
        *_audit_columns(),
        sa.Column('department_id', sa.Integer(), sa.ForeignKey('departments.id'), nullable=False),
        sa.Column('pos_code', sa.String(length=20), nullable=False),
        sa.Column('pos_name', sa.String(length=100), nullable=False),
        sa.Column('pos_grade', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.UniqueConstraint('department_id', 'pos_code', name='uq_position_code'),
    )
    op.create_index('ix_positions_id', 'positions', ['id'])
    op.create_index('ix_positions_department_id', 'positions', ['department_id'])
    # endregion

    # region employees
    op.create_table(
        'employees',
        *_audit_columns(),
        sa.Column('employee_code', sa.String(length=20), nullable=False),
        sa.Column('email', sa.String(length=100), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=50), nullable=False),
        sa.Column('last_name', sa.String(length=50), nullable=False),
        sa.Column('name_eng', sa.String(length=100), nullable=True),
        sa.Column('birth_date', sa.Date(), nullable=True),
        sa.Column('phone_number', sa.String(length=20), nullable=True),
        sa.Column('hire_date', sa.Date(), nullable=False),
        sa.Column('retire_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('employment_type', _enum('employmenttype'), nullable=True),
        sa.Column('current_salary', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('user_role', _enum('userrole'), nullable=False),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False),
        sa.Column('sub_company_id', sa.Integer(), sa.ForeignKey('sub_companies.id'), nullable=False),
        sa.Column('department_id', sa.Integer(), sa.ForeignKey('departments.id'), nullable=False),
        sa.Column('position_id', sa.Integer(), sa.ForeignKey('positions.id'), nullable=False),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('login_fail_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('account_locked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('password_changed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
    )
    op.create_index('ix_employees_id', 'employees', ['id'])
    op.create_index('ix_employees_employee_code', 'employees', ['employee_code'], unique=True)
    op.create_index('ix_employees_email', 'employees', ['email'], unique=True)
    for column in ('company_id', 'sub_company_id', 'department_id', 'position_id'):
        op.create_index(f'ix_employees_{column}', 'employees', [column])

    op.create_table(
        'employee_assignments',
        *_audit_columns(),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id'), nullable=False),
        sa.Column('previous_company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=True),
        sa.Column('previous_sub_company_id', sa.Integer(), sa.ForeignKey('sub_companies.id'), nullable=True),
        sa.Column('previous_department_id', sa.Integer(), sa.ForeignKey('departments.id'), nullable=True),
        sa.Column('previous_position_id', sa.Integer(), sa.ForeignKey('positions.id'), nullable=True),
        sa.Column('new_company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False),
        sa.Column('new_sub_company_id', sa.Integer(), sa.ForeignKey('sub_companies.id'), nullable=False),
        sa.Column('new_department_id', sa.Integer(), sa.ForeignKey('departments.id'), nullable=False),
        sa.Column('new_position_id', sa.Integer(), sa.ForeignKey('positions.id'), nullable=False),
        sa.Column('assignment_type', sa.String(length=50), nullable=False),
        sa.Column('change_count', sa.Integer(), nullable=False),
        sa.Column('effective_date', sa.Date(), nullable=False),
        sa.Column('assignment_reason', sa.Text(), nullable=True),
        sa.Column('assigned_by', sa.Integer(), sa.ForeignKey('employees.id'), nullable=False),
    )
    op.create_index('ix_employee_assignments_id', 'employee_assignments', ['id'])
    op.create_index('ix_employee_assignments_employee_id', 'employee_assignments', ['employee_id'])
    # endregion

    # region approvals
    op.create_table(
        'approval_forms',
        *_audit_columns(),
        sa.Column('form_code', sa.String(length=50), nullable=False),
        sa.Column('form_name', sa.String(length=100), nullable=False),
        sa.Column('form_name_eng', sa.String(length=100), nullable=True),
        sa.Column('category_code', sa.String(length=50), nullable=True),
        sa.Column('category_name', sa.String(length=100), nullable=True),
        sa.Column('form_template', sa.JSON(), nullable=True),
        sa.Column('required_fields', sa.Text(), nullable=True),
        sa.Column('auto_approval_line', sa.Text(), nullable=False),
        sa.Column('max_approval_level', sa.Integer(), nullable=False),
        sa.Column('display_order', sa.Integer(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
    )
    op.create_index('ix_approval_forms_id', 'approval_forms', ['id'])
    op.create_index('ix_approval_forms_form_code', 'approval_forms', ['form_code'], unique=True)

    op.create_table(
        'approval_documents',
        *_audit_columns(),
        sa.Column('document_no', sa.String(length=50), nullable=False),
        sa.Column('form_id', sa.Integer(), sa.ForeignKey('approval_forms.id'), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('content', sa.JSON(), nullable=False),
        sa.Column('requester_id', sa.Integer(), sa.ForeignKey('employees.id'), nullable=False),
        sa.Column('requester_department_id', sa.Integer(), sa.ForeignKey('departments.id'), nullable=True),
        sa.Column('current_status', _enum('documentstatus'), nullable=False),
        sa.Column('current_level', sa.Integer(), nullable=False),
        sa.Column('total_level', sa.Integer(), nullable=False),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_approval_documents_id', 'approval_documents', ['id'])
    op.create_index('ix_approval_documents_document_no', 'approval_documents', ['document_no'], unique=True)
    op.create_index('ix_approval_documents_form_id', 'approval_documents', ['form_id'])
    op.create_index('ix_approval_documents_requester_id', 'approval_documents', ['requester_id'])

    op.create_table(
        'approval_lines',
        *_audit_columns(),
        sa.Column('document_id', sa.Integer(), sa.ForeignKey('approval_documents.id'), nullable=False),
        sa.Column('approval_level', sa.Integer(), nullable=False),
        sa.Column('approver_role', sa.String(length=50), nullable=False),
        sa.Column('approver_employee_id', sa.Integer(), sa.ForeignKey('employees.id'), nullable=False),
        sa.Column('status', _enum('approvallinestatus'), nullable=False),
        sa.Column('approval_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('approval_comment', sa.Text(), nullable=True),
        sa.UniqueConstraint('document_id', 'approval_level', name='uq_approval_line_level'),
    )
    op.create_index('ix_approval_lines_id', 'approval_lines', ['id'])
    op.create_index('ix_approval_lines_document_id', 'approval_lines', ['document_id'])
    op.create_index('ix_approval_lines_approver_employee_id', 'approval_lines', ['approver_employee_id'])

    op.create_table(
        'approval_histories',
        *_audit_columns(),
        sa.Column('document_id', sa.Integer(), sa.ForeignKey('approval_documents.id'), nullable=False),
        sa.Column('line_id', sa.Integer(), sa.ForeignKey('approval_lines.id'), nullable=True),
        sa.Column('approval_level', sa.Integer(), nullable=False),
        sa.Column('action_type', _enum('approvalhistoryaction'), nullable=False),
        sa.Column('action_by', sa.Integer(), sa.ForeignKey('employees.id'), nullable=False),
        sa.Column('action_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('previous_status', _enum('documentstatus'), nullable=True),
        sa.Column('new_status', _enum('documentstatus'), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('ip_address', sa.String(length=50), nullable=True),
        sa.Column('user_agent', sa.String(length=500), nullable=True),
    )
    op.create_index('ix_approval_histories_id', 'approval_histories', ['id'])
    op.create_index('ix_approval_histories_document_id', 'approval_histories', ['document_id'])

    op.create_table(
        'approval_members',
        *_audit_columns(),
        sa.Column('role_code', sa.String(length=50), nullable=False),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id'), nullable=False),
        sa.Column('department_id', sa.Integer(), sa.ForeignKey('departments.id'), nullable=True),
        sa.Column('added_by', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
    )
    op.create_index('ix_approval_members_id', 'approval_members', ['id'])
    op.create_index('ix_approval_members_role_code', 'approval_members', ['role_code'])
    # endregion


def downgrade() -> None:
    for table in (
        'approval_members', 'approval_histories', 'approval_lines', 'approval_documents', 'approval_forms',
        'employee_assignments', 'employees', 'positions', 'departments', 'sub_companies', 'companies',
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for name in reversed(list(ENUMS)):
        postgresql.ENUM(name=name).drop(bind, checkfirst=True)
