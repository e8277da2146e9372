"""initial studio schema

Revision ID: 3f1c2a7d9b10
Revises:
Create Date: 2026-10-19 09:12:44.381205

Clients with their interaction log, properties and projects, published quotes
(form snapshot plus suggested and final calculations as JSON) and invoices.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a7d9b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# SQLAlchemy Enum columns store member names
QUOTE_STATUS = sa.Enum("DRAFT", "SENT", "APPROVED", "REJECTED", "ARCHIVED", name="quotestatus")
INVOICE_STATUS = sa.Enum("DRAFT", "SENT", "PAID", "OVERDUE", "CANCELLED", name="invoicestatus")
INTERACTION_TYPE = sa.Enum("CALL", "EMAIL", "MEETING", "MESSAGE", name="interactiontype")


def upgrade() -> None:
    op.create_table(
        "clients",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=True),
        sa.Column("responsiveness", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_clients_id", "clients", ["id"])

    op.create_table(
        "interactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("client_id", sa.Integer(), sa.ForeignKey("clients.id"), nullable=False),
        sa.Column("type", INTERACTION_TYPE, nullable=False),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.Column("timestamp", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_interactions_id", "interactions", ["id"])

    op.create_table(
        "properties",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("property_type", sa.String(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("client_id", sa.Integer(), sa.ForeignKey("clients.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_properties_id", "properties", ["id"])

    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("client_id", sa.Integer(), sa.ForeignKey("clients.id"), nullable=False),
        sa.Column("property_id", sa.Integer(), sa.ForeignKey("properties.id", ondelete="SET NULL"), nullable=True),
        sa.Column("scope", sa.Text(), nullable=True),
        sa.Column("timeline", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=True),
        sa.Column("project_type", sa.String(), nullable=True),
        sa.Column("services", sa.Text(), nullable=True),
        sa.Column("room_count", sa.Integer(), nullable=True),
        sa.Column("other_spaces", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_projects_id", "projects", ["id"])

    op.create_table(
        "quotes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("quote_number", sa.String(), nullable=False, unique=True),
        sa.Column("client_id", sa.Integer(), sa.ForeignKey("clients.id"), nullable=False),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id", ondelete="SET NULL"), nullable=True),
        sa.Column("status", QUOTE_STATUS, nullable=True),
        sa.Column("form_values", sa.JSON(), nullable=False),
        sa.Column("allocations", sa.JSON(), nullable=False),
        sa.Column("calculations", sa.JSON(), nullable=False),
        sa.Column("suggested_calculations", sa.JSON(), nullable=False),
        sa.Column("timestamp", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_quotes_id", "quotes", ["id"])

    op.create_table(
        "invoices",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("invoice_number", sa.String(), nullable=False, unique=True),
        sa.Column("amount", sa.Float(), nullable=True),
        sa.Column("status", INVOICE_STATUS, nullable=True),
        sa.Column("due_date", sa.DateTime(), nullable=False),
        sa.Column("client_id", sa.Integer(), sa.ForeignKey("clients.id"), nullable=False),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id", ondelete="SET NULL"), nullable=True),
        sa.Column("quote_id", sa.Integer(), sa.ForeignKey("quotes.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_invoices_id", "invoices", ["id"])


def downgrade() -> None:
    for table in ("invoices", "quotes", "projects", "properties", "interactions", "clients"):
        op.drop_index(f"ix_{table}_id", table_name=table)
        op.drop_table(table)
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        for enum_type in (QUOTE_STATUS, INVOICE_STATUS, INTERACTION_TYPE):
            enum_type.drop(bind, checkfirst=True)
