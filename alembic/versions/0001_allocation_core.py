from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_allocation_core"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "listings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("rental_object_code", sa.String(length=50), nullable=False),
        sa.Column("address", sa.String(length=200), nullable=True),
        sa.Column("monthly_rent", sa.Numeric(10, 2), nullable=True),

        sa.Column("district_code", sa.String(length=20), nullable=True),
        sa.Column("district_caption", sa.String(length=120), nullable=True),
        sa.Column("block_code", sa.String(length=20), nullable=True),
        sa.Column("block_caption", sa.String(length=120), nullable=True),

        sa.Column("status", sa.String(length=30), nullable=False, server_default="Active"),
        sa.Column("published_from", sa.DateTime(timezone=True), nullable=False),
        sa.Column("published_to", sa.DateTime(timezone=True), nullable=False),
        sa.Column("vacant_from", sa.DateTime(timezone=True), nullable=True),
        sa.Column("waiting_list_type", sa.String(length=60), nullable=True),
        sa.Column("rental_rule", sa.String(length=60), nullable=True),

        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_listings_rental_object_code", "listings", ["rental_object_code"])
    op.create_index(
        "uq_listings_active_rental_object_code",
        "listings",
        ["rental_object_code"],
        unique=True,
        postgresql_where=sa.text("status = 'Active'"),
    )

    op.create_table(
        "applicants",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=200), nullable=True),
        sa.Column("contact_code", sa.String(length=20), nullable=False),
        sa.Column("national_registration_number", sa.String(length=20), nullable=True),
        sa.Column("application_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("application_type", sa.String(length=20), nullable=True),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="Active"),
        sa.Column("listing_id", sa.Integer(), sa.ForeignKey("listings.id"), nullable=False),

        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),

        sa.UniqueConstraint("contact_code", "listing_id", name="uq_applicant_contact_listing"),
    )
    op.create_index("ix_applicants_listing_id", "applicants", ["listing_id"])

    op.create_table(
        "offers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("listing_id", sa.Integer(), sa.ForeignKey("listings.id"), nullable=False),
        sa.Column("applicant_id", sa.Integer(), sa.ForeignKey("applicants.id"), nullable=False),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="Active"),
        sa.Column(
            "selection_snapshot",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("answered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_offers_listing_id", "offers", ["listing_id"])
    op.create_index("ix_offers_status_expires_at", "offers", ["status", "expires_at"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("action", sa.String(length=120), nullable=False),
        sa.Column("target_type", sa.String(length=120), nullable=True),
        sa.Column("target_id", sa.String(length=200), nullable=True),
        sa.Column("detail", postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_audit_logs_target", "audit_logs", ["target_type", "target_id"])


def downgrade():
    op.drop_index("ix_audit_logs_target", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("ix_offers_status_expires_at", table_name="offers")
    op.drop_index("ix_offers_listing_id", table_name="offers")
    op.drop_table("offers")
    op.drop_index("ix_applicants_listing_id", table_name="applicants")
    op.drop_table("applicants")
    op.drop_index("uq_listings_active_rental_object_code", table_name="listings")
    op.drop_index("ix_listings_rental_object_code", table_name="listings")
    op.drop_table("listings")
