"""create listings, rental requests, delivery events and ratings

Revision ID: 20261017_0001
Revises: 
Create Date: 2026-10-17

"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = inspect(bind)
    tables = set(insp.get_table_names())

    if "listings" not in tables:
        op.create_table(
            "listings",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("owner_user_type", sa.String(length=10), nullable=False),
            sa.Column("owner_user_id", sa.Integer(), nullable=False),
            sa.Column("category", sa.String(length=50), nullable=False),
            sa.Column("title", sa.String(length=255), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("price_per_day", sa.Numeric(10, 2), nullable=False),
            sa.Column("latitude", sa.Float(), nullable=False),
            sa.Column("longitude", sa.Float(), nullable=False),
            sa.Column("address", sa.Text(), nullable=False),
            sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("rental_status", sa.String(length=20), nullable=False, server_default="available"),
            sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
            sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
            sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        )
        op.create_index("ix_listings_owner", "listings", ["owner_user_type", "owner_user_id"], unique=False)
        op.create_index("ix_listings_category", "listings", ["category"], unique=False)
        op.create_index("ix_listings_is_available", "listings", ["is_available"], unique=False)

    if "rental_requests" not in tables:
        op.create_table(
            "rental_requests",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("listing_id", sa.Integer(), nullable=False),
            sa.Column("renter_user_type", sa.String(length=10), nullable=False),
            sa.Column("renter_user_id", sa.Integer(), nullable=False),
            sa.Column("start_date", sa.DateTime(), nullable=False),
            sa.Column("end_date", sa.DateTime(), nullable=False),
            sa.Column("total_days", sa.Integer(), nullable=False),
            sa.Column("total_price", sa.Numeric(10, 2), nullable=False),
            sa.Column("message", sa.Text(), nullable=True),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
            sa.Column("denial_reason", sa.Text(), nullable=True),
            sa.Column("approved_at", sa.DateTime(), nullable=True),
            sa.Column("completed_at", sa.DateTime(), nullable=True),
            sa.Column("payment_status", sa.String(length=20), nullable=True),
            sa.Column("payment_method", sa.String(length=30), nullable=True),
            sa.Column("transaction_id", sa.String(length=100), nullable=True),
            sa.Column("payment_date", sa.DateTime(), nullable=True),
            sa.Column("platform_fee", sa.Numeric(10, 2), nullable=True),
            sa.Column("delivery_option", sa.String(length=20), nullable=True),
            sa.Column("delivery_cost", sa.Numeric(10, 2), nullable=True),
            sa.Column("distance_km", sa.Float(), nullable=True),
            sa.Column("delivery_address", sa.Text(), nullable=True),
            sa.Column("delivery_lat", sa.Float(), nullable=True),
            sa.Column("delivery_lon", sa.Float(), nullable=True),
            sa.Column("delivery_paid", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("delivery_status", sa.String(length=20), nullable=True),
            sa.Column("delivery_shipped_at", sa.DateTime(), nullable=True),
            sa.Column("delivery_en_route_at", sa.DateTime(), nullable=True),
            sa.Column("delivery_delivered_at", sa.DateTime(), nullable=True),
            sa.Column("expected_en_route_at", sa.DateTime(), nullable=True),
            sa.Column("expected_delivered_at", sa.DateTime(), nullable=True),
            sa.Column("delivery_confirmed", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("pickup_confirmed_by_renter", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("pickup_confirmed_by_lister", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("delivery_rated", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("owner_rated", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("renter_rated", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("return_initiated", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("return_initiated_at", sa.DateTime(), nullable=True),
            sa.Column("return_option", sa.String(length=20), nullable=True),
            sa.Column("return_delivery_cost", sa.Numeric(10, 2), nullable=True),
            sa.Column("return_delivery_address", sa.Text(), nullable=True),
            sa.Column("return_delivery_lat", sa.Float(), nullable=True),
            sa.Column("return_delivery_lon", sa.Float(), nullable=True),
            sa.Column("return_distance_km", sa.Float(), nullable=True),
            sa.Column("return_delivery_paid", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("return_delivery_status", sa.String(length=20), nullable=True),
            sa.Column("return_shipped_at", sa.DateTime(), nullable=True),
            sa.Column("return_en_route_at", sa.DateTime(), nullable=True),
            sa.Column("return_delivered_at", sa.DateTime(), nullable=True),
            sa.Column("expected_return_en_route_at", sa.DateTime(), nullable=True),
            sa.Column("expected_return_delivered_at", sa.DateTime(), nullable=True),
            sa.Column("return_confirmed_by_renter", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("return_confirmed_by_lister", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("return_overdue", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("late_fee", sa.Numeric(10, 2), nullable=True),
            sa.Column("current_late_fee", sa.Numeric(10, 2), nullable=True),
            sa.Column("late_fee_days", sa.Numeric(6, 2), nullable=True),
            sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
            sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
            sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
            sa.ForeignKeyConstraint(["listing_id"], ["listings.id"], ondelete="RESTRICT"),
        )
        op.create_index("ix_rental_requests_listing_id", "rental_requests", ["listing_id"], unique=False)
        op.create_index("ix_rental_requests_renter", "rental_requests", ["renter_user_type", "renter_user_id"], unique=False)
        op.create_index("ix_rental_requests_status", "rental_requests", ["status"], unique=False)
        op.create_index("ix_rental_requests_delivery_status", "rental_requests", ["delivery_status"], unique=False)
        op.create_index("ix_rental_requests_return_delivery_status", "rental_requests", ["return_delivery_status"], unique=False)

    if "delivery_events" not in tables:
        op.create_table(
            "delivery_events",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("rental_request_id", sa.Integer(), nullable=False),
            sa.Column("event_type", sa.String(length=40), nullable=False),
            sa.Column("description", sa.String(length=300), nullable=False),
            sa.Column("event_time", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
            sa.ForeignKeyConstraint(["rental_request_id"], ["rental_requests.id"], ondelete="CASCADE"),
        )
        op.create_index("ix_delivery_events_rental_request_id", "delivery_events", ["rental_request_id"], unique=False)

    if "delivery_ratings" not in tables:
        op.create_table(
            "delivery_ratings",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("request_id", sa.Integer(), nullable=False),
            sa.Column("rater_user_type", sa.String(length=10), nullable=False),
            sa.Column("rater_user_id", sa.Integer(), nullable=False),
            sa.Column("rater_type", sa.String(length=10), nullable=False),
            sa.Column("delivery_rating", sa.Integer(), nullable=False),
            sa.Column("item_condition_rating", sa.Integer(), nullable=False),
            sa.Column("communication_rating", sa.Integer(), nullable=False),
            sa.Column("comment", sa.String(length=500), nullable=True),
            sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
            sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
            sa.ForeignKeyConstraint(["request_id"], ["rental_requests.id"], ondelete="CASCADE"),
            sa.UniqueConstraint("request_id", "rater_type", name="uq_delivery_ratings_request_rater_type"),
        )

    if "user_ratings" not in tables:
        op.create_table(
            "user_ratings",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("rated_user_type", sa.String(length=10), nullable=False),
            sa.Column("rated_user_id", sa.Integer(), nullable=False),
            sa.Column("rater_user_type", sa.String(length=10), nullable=False),
            sa.Column("rater_user_id", sa.Integer(), nullable=False),
            sa.Column("listing_id", sa.Integer(), nullable=False),
            sa.Column("request_id", sa.Integer(), nullable=True),
            sa.Column("rating", sa.Integer(), nullable=False),
            sa.Column("review", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
            sa.ForeignKeyConstraint(["listing_id"], ["listings.id"], ondelete="RESTRICT"),
            sa.ForeignKeyConstraint(["request_id"], ["rental_requests.id"], ondelete="SET NULL"),
            sa.UniqueConstraint(
                "rater_user_type",
                "rater_user_id",
                "rated_user_type",
                "rated_user_id",
                "listing_id",
                name="uq_user_ratings_rater_rated_listing",
            ),
        )
        op.create_index("ix_user_ratings_rated", "user_ratings", ["rated_user_type", "rated_user_id"], unique=False)


def downgrade():
    bind = op.get_bind()
    insp = inspect(bind)
    tables = set(insp.get_table_names())

    for table in ("user_ratings", "delivery_ratings", "delivery_events", "rental_requests", "listings"):
        if table in tables:
            op.drop_table(table)
