"""initial schema: users, projects, project_materials, applications

Revision ID: 3b1f0c9a7d21
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '3b1f0c9a7d21'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('department', sa.String(length=120), nullable=False),
        sa.Column('bio', sa.String(length=500)),
        sa.Column('skills', sa.JSON()),
        sa.Column('interests', sa.JSON()),
        sa.Column('avatar', sa.String(length=500)),
        sa.Column('gpa', sa.Float()),
        sa.Column('year', sa.String(length=16)),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'], unique=False)

    op.create_table(
        'projects',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('professor_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('department', sa.String(length=120), nullable=False),
        sa.Column('skills', sa.JSON()),
        sa.Column('tags', sa.JSON()),
        sa.Column('req_gpa', sa.Float()),
        sa.Column('req_years', sa.JSON()),
        sa.Column('prerequisites', sa.JSON()),
        sa.Column('duration', sa.String(length=120), nullable=False),
        sa.Column('time_commitment', sa.String(length=120), nullable=False),
        sa.Column('compensation', sa.String(length=20), nullable=False),
        sa.Column('compensation_amount', sa.String(length=80)),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('max_students', sa.Integer(), nullable=False),
        sa.Column('current_students', sa.Integer(), nullable=False),
        sa.Column('application_deadline', sa.DateTime()),
        sa.Column('start_date', sa.DateTime()),
        sa.Column('end_date', sa.DateTime()),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
        sa.CheckConstraint('max_students >= 1', name='ck_project_max_students'),
        sa.CheckConstraint(
            'current_students >= 0 AND current_students <= max_students',
            name='ck_project_capacity',
        ),
    )
    op.create_index('ix_projects_professor_id', 'projects', ['professor_id'], unique=False)
    op.create_index('ix_projects_department', 'projects', ['department'], unique=False)
    op.create_index('ix_projects_status', 'projects', ['status'], unique=False)
    op.create_index('ix_projects_created_at', 'projects', ['created_at'], unique=False)

    op.create_table(
        'project_materials',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('project_id', sa.Integer(), sa.ForeignKey('projects.id'), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('url', sa.String(length=500), nullable=False),
        sa.Column('description', sa.String(length=500)),
    )
    op.create_index('ix_project_materials_project_id', 'project_materials', ['project_id'], unique=False)

    op.create_table(
        'applications',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('project_id', sa.Integer(), sa.ForeignKey('projects.id'), nullable=False),
        sa.Column('professor_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('cover_letter', sa.String(length=1000), nullable=False),
        sa.Column('relevant_experience', sa.String(length=1000)),
        sa.Column('motivation', sa.String(length=1000), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('professor_notes', sa.String(length=1000)),
        sa.Column('application_date', sa.DateTime(), nullable=False),
        sa.Column('response_date', sa.DateTime()),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
        # one application per (student, project), whatever its status
        sa.UniqueConstraint('student_id', 'project_id', name='uq_application_student_project'),
    )
    op.create_index('ix_applications_student_id', 'applications', ['student_id'], unique=False)
    op.create_index('ix_applications_project_id', 'applications', ['project_id'], unique=False)
    op.create_index('ix_applications_professor_id', 'applications', ['professor_id'], unique=False)
    op.create_index('ix_applications_status', 'applications', ['status'], unique=False)
    op.create_index('ix_applications_application_date', 'applications', ['application_date'], unique=False)


def downgrade():
    op.drop_table('applications')
    op.drop_table('project_materials')
    op.drop_table('projects')
    op.drop_table('users')
