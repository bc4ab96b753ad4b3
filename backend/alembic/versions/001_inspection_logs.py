from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_inspection_logs"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "inspection_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("employee_id", sa.Text(), nullable=False),
        sa.Column("substation_name", sa.Text(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("gps_lat", sa.Float(), nullable=True),
        sa.Column("gps_lng", sa.Float(), nullable=True),
        sa.Column("folder_id", sa.Text(), nullable=True),
        sa.Column("status", sa.Text(), nullable=False, server_default="completed"),
    )

    op.create_index("ix_inspection_logs_timestamp", "inspection_logs", ["timestamp"])
    op.create_index("ix_inspection_logs_substation_name", "inspection_logs", ["substation_name"])


def downgrade() -> None:
    op.drop_index("ix_inspection_logs_substation_name", table_name="inspection_logs")
    op.drop_index("ix_inspection_logs_timestamp", table_name="inspection_logs")
    op.drop_table("inspection_logs")
