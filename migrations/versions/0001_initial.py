from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="PARTICIPANT"),
        sa.Column("phone", sa.String(30)),
        sa.Column("cpf", sa.String(14)),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "event_categories",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(80), nullable=False, unique=True),
        sa.Column("description", sa.Text()),
        sa.Column("color", sa.String(20)),
        sa.Column("icon", sa.String(40)),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "events",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=False),
        sa.Column("location", sa.String(255), nullable=False),
        sa.Column("address", sa.String(255)),
        sa.Column("latitude", sa.Float()),
        sa.Column("longitude", sa.Float()),
        sa.Column("max_participants", sa.Integer(), nullable=False),
        sa.Column("available_spots", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("status", sa.String(20), nullable=False, server_default="PUBLISHED"),
        sa.Column("image_url", sa.String()),
        sa.Column("organizer_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("category_id", sa.Uuid(), sa.ForeignKey("event_categories.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("max_participants > 0", name="ck_events_max_participants_positive"),
        sa.CheckConstraint("available_spots >= 0", name="ck_events_available_spots_non_negative"),
        sa.CheckConstraint("available_spots <= max_participants", name="ck_events_available_spots_le_max"),
        sa.CheckConstraint("price >= 0", name="ck_events_price_non_negative"),
    )
    op.create_index("ix_events_start_date", "events", ["start_date"])
    op.create_index("ix_events_organizer_id", "events", ["organizer_id"])

    op.create_table(
        "inscriptions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("participant_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("event_id", sa.Uuid(), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="ACTIVE"),
        sa.Column("paid", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="UNPAID"),
        sa.Column("ticket_code", sa.String(64), nullable=False, unique=True),
        sa.Column("inscription_date", sa.DateTime(), nullable=False),
        sa.Column("checked_in_at", sa.DateTime()),
        sa.UniqueConstraint("participant_id", "event_id", name="uq_inscriptions_participant_event"),
    )
    op.create_index("ix_inscriptions_participant_id", "inscriptions", ["participant_id"])
    op.create_index("ix_inscriptions_event_id", "inscriptions", ["event_id"])
    op.create_index("ix_inscriptions_ticket_code", "inscriptions", ["ticket_code"])

    op.create_table(
        "event_reviews",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("event_id", sa.Uuid(), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_event_reviews_rating_range"),
    )
    op.create_index("ix_event_reviews_event_id", "event_reviews", ["event_id"])


def downgrade() -> None:
    op.drop_table("event_reviews")
    op.drop_table("inscriptions")
    op.drop_table("events")
    op.drop_table("event_categories")
    op.drop_table("users")
