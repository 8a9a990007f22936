"""create academic entities

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


subject_type_enum = sa.Enum("lecture", "lab", "workshop", "free", "lunch", name="subject_type")
faculty_status_enum = sa.Enum("active", "inactive", name="faculty_status")
room_type_enum = sa.Enum("lecture", "lab", name="room_type")
room_status_enum = sa.Enum("active", "inactive", name="room_status")


def upgrade() -> None:
    op.create_table(
        "departments",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False, unique=True),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_departments_code", "departments", ["code"], unique=True)

    op.create_table(
        "courses",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("department_id", sa.String(length=36), nullable=False),
        sa.Column("total_semesters", sa.Integer(), nullable=False, server_default="8"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_courses_code", "courses", ["code"], unique=True)
    op.create_index("ix_courses_department_id", "courses", ["department_id"])

    op.create_table(
        "subjects",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("course_id", sa.String(length=36), nullable=False),
        sa.Column("semester", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("type", subject_type_enum, nullable=False),
        sa.Column("credits", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_subjects_code", "subjects", ["code"], unique=True)
    op.create_index("ix_subjects_course_id", "subjects", ["course_id"])

    op.create_table(
        "faculty",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("department_id", sa.String(length=36), nullable=False),
        sa.Column("status", faculty_status_enum, nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_faculty_email", "faculty", ["email"], unique=True)
    op.create_index("ix_faculty_department_id", "faculty", ["department_id"])

    op.create_table(
        "rooms",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("type", room_type_enum, nullable=False),
        sa.Column("building", sa.String(length=200), nullable=False),
        sa.Column("floor", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("status", room_status_enum, nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_rooms_name", "rooms", ["name"], unique=True)

    for table_name, owner in (("faculty_subject_assignments", "subject"), ("faculty_course_assignments", "course")):
        op.create_table(
            table_name,
            sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
            sa.Column("faculty_id", sa.String(length=36), nullable=False),
            sa.Column(f"{owner}_id", sa.String(length=36), nullable=False),
            sa.Column("assigned_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
            sa.UniqueConstraint("faculty_id", f"{owner}_id", name=f"uq_{table_name}_faculty_{owner}"),
        )
        op.create_index(f"ix_{table_name}_faculty_id", table_name, ["faculty_id"])
        op.create_index(f"ix_{table_name}_{owner}_id", table_name, [f"{owner}_id"])


def downgrade() -> None:
    for table_name in (
        "faculty_course_assignments",
        "faculty_subject_assignments",
        "rooms",
        "faculty",
        "subjects",
        "courses",
        "departments",
    ):
        op.drop_table(table_name)
    bind = op.get_bind()
    for enum in (room_status_enum, room_type_enum, faculty_status_enum, subject_type_enum):
        enum.drop(bind, checkfirst=True)
