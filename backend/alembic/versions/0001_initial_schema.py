"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates all tables for the event workflow:
users, venues, events, event_versions, approvals, audit_log,
debriefs, ai_content_versions.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

USER_ROLES = ("venue_manager", "reviewer", "central_planner", "executive")
EVENT_STATUSES = ("draft", "submitted", "needs_revisions", "approved", "rejected", "completed")
DECISIONS = ("approved", "needs_revisions", "rejected")


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("full_name", sa.String(150), nullable=True),
        sa.Column("role", sa.Enum(*USER_ROLES, name="userrole"), nullable=False, server_default="venue_manager"),
        sa.Column("venue_id", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    # --- venues ---
    op.create_table(
        "venues",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("default_reviewer_id", sa.String(36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- events ---
    op.create_table(
        "events",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("venue_id", sa.String(36), sa.ForeignKey("venues.id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("event_type", sa.String(100), nullable=True),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("venue_space", sa.String(500), nullable=True),
        sa.Column("status", sa.Enum(*EVENT_STATUSES, name="eventstatus"), nullable=False, server_default="draft"),
        sa.Column("created_by", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("assignee_id", sa.String(36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("expected_headcount", sa.Integer, nullable=True),
        sa.Column("wet_promo", sa.Text, nullable=True),
        sa.Column("food_promo", sa.Text, nullable=True),
        sa.Column("cost_total", sa.Float, nullable=True),
        sa.Column("cost_details", sa.Text, nullable=True),
        sa.Column("goal_focus", sa.String(120), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("terms", sa.Text, nullable=True),
        sa.Column("public_fields", sa.JSON, nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_events_venue_id", "events", ["venue_id"])
    op.create_index("ix_events_start_at", "events", ["start_at"])

    # --- event_versions ---
    op.create_table(
        "event_versions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("version", sa.Integer, nullable=False),
        sa.Column("payload", sa.JSON, nullable=False),
        sa.Column("submitted_by", sa.String(36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("event_id", "version", name="uq_event_versions_event_version"),
    )
    op.create_index("ix_event_versions_event_id", "event_versions", ["event_id"])

    # --- approvals ---
    op.create_table(
        "approvals",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("decision", sa.Enum(*DECISIONS, name="approvaldecision"), nullable=False),
        sa.Column("reviewer_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("feedback_text", sa.Text, nullable=True),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_approvals_event_id", "approvals", ["event_id"])

    # --- audit_log ---
    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.String(36), nullable=False),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("actor_id", sa.String(36), nullable=True),
        sa.Column("meta", sa.JSON, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_audit_log_entity_id", "audit_log", ["entity_id"])

    # --- debriefs ---
    op.create_table(
        "debriefs",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.id"), nullable=False, unique=True),
        sa.Column("attendance", sa.Integer, nullable=True),
        sa.Column("baseline_attendance", sa.Integer, nullable=True),
        sa.Column("wet_takings", sa.Float, nullable=True),
        sa.Column("food_takings", sa.Float, nullable=True),
        sa.Column("baseline_wet_takings", sa.Float, nullable=True),
        sa.Column("baseline_food_takings", sa.Float, nullable=True),
        sa.Column("promo_effectiveness", sa.Integer, nullable=True),
        sa.Column("highlights", sa.Text, nullable=True),
        sa.Column("issues", sa.Text, nullable=True),
        sa.Column("guest_sentiment_notes", sa.Text, nullable=True),
        sa.Column("operational_notes", sa.Text, nullable=True),
        sa.Column("would_book_again", sa.Boolean, nullable=True),
        sa.Column("next_time_actions", sa.Text, nullable=True),
        sa.Column("sales_uplift_value", sa.Float, nullable=True),
        sa.Column("sales_uplift_percent", sa.Float, nullable=True),
        sa.Column("submitted_by", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    # --- ai_content_versions ---
    op.create_table(
        "ai_content_versions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("version", sa.Integer, nullable=False),
        sa.Column("payload", sa.JSON, nullable=False),
        sa.Column("generated_by", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_ai_content_versions_event_id", "ai_content_versions", ["event_id"])


def downgrade() -> None:
    op.drop_table("ai_content_versions")
    op.drop_table("debriefs")
    op.drop_table("audit_log")
    op.drop_table("approvals")
    op.drop_table("event_versions")
    op.drop_table("events")
    op.drop_table("venues")
    op.drop_table("users")
    sa.Enum(name="approvaldecision").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="eventstatus").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="userrole").drop(op.get_bind(), checkfirst=True)
