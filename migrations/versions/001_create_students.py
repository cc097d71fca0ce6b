"""Create students and student_courses tables."""

from typing import Sequence
from typing import Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_create_students"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create student and course tables keyed by raw 16-byte identifiers."""
    op.create_table(
        "students",
        sa.Column("student_id", sa.LargeBinary(length=16), nullable=False),
        sa.Column("full_name", sa.String(length=100), nullable=False),
        sa.Column("furigana", sa.String(length=100), nullable=False),
        sa.Column("nickname", sa.String(length=50), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("location", sa.String(length=100), nullable=True),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column("gender", sa.String(length=20), nullable=False),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("deleted_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.CheckConstraint("age >= 0", name="ck_students_age"),
        sa.PrimaryKeyConstraint("student_id", name="pk_students"),
        sa.UniqueConstraint("email", name="uq_students_email"),
    )

    op.create_table(
        "student_courses",
        sa.Column("course_id", sa.LargeBinary(length=16), nullable=False),
        sa.Column("student_id", sa.LargeBinary(length=16), nullable=False),
        sa.Column("course_name", sa.String(length=255), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.ForeignKeyConstraint(
            ["student_id"],
            ["students.student_id"],
            name="fk_student_courses_student_id_students",
            ondelete="RESTRICT",
        ),
        sa.PrimaryKeyConstraint("course_id", name="pk_student_courses"),
    )
    op.create_index("ix_student_courses_student_id", "student_courses", ["student_id"])


def downgrade() -> None:
    """Drop student and course tables."""
    op.drop_index("ix_student_courses_student_id", table_name="student_courses")
    op.drop_table("student_courses")
    op.drop_table("students")
