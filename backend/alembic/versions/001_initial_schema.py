"""Initial schema: events, registrations, groups/heats, matches, sets, generation markers

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "event",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("format", sa.String(), nullable=False),
        sa.Column("best_of", sa.Integer(), nullable=False),
        sa.Column("players_per_heat", sa.Integer(), nullable=True),
        sa.Column("has_third_place_match", sa.Boolean(), nullable=False),
        sa.Column("points_schema_id", sa.Integer(), nullable=True),
        sa.Column("completed", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # Group table ("group" is reserved in SQL)
    op.create_table(
        "eventgroup",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["event_id"], ["event.id"]),
    )
    op.create_index("ix_eventgroup_event_id", "eventgroup", ["event_id"])

    op.create_table(
        "registration",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("group_id", sa.Integer(), nullable=True),
        sa.Column("player_ids", sa.JSON(), nullable=False),
        sa.Column("display_name", sa.String(), nullable=True),
        sa.Column("seed", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["event_id"], ["event.id"]),
        sa.ForeignKeyConstraint(["group_id"], ["eventgroup.id"]),
    )
    op.create_index("ix_registration_event_id", "registration", ["event_id"])
    op.create_index("ix_registration_group_id", "registration", ["group_id"])

    op.create_table(
        "match",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("group_id", sa.Integer(), nullable=True),
        sa.Column("round", sa.Integer(), nullable=False),
        sa.Column("match_number", sa.Integer(), nullable=False),
        sa.Column("registration1_id", sa.Integer(), nullable=True),
        sa.Column("registration2_id", sa.Integer(), nullable=True),
        sa.Column("bracket_position", sa.Integer(), nullable=True),
        sa.Column("winner_to", sa.Integer(), nullable=True),
        sa.Column("winner_to_slot", sa.Integer(), nullable=True),
        sa.Column("loser_to", sa.Integer(), nullable=True),
        sa.Column("loser_to_slot", sa.Integer(), nullable=True),
        sa.Column("is_third_place", sa.Boolean(), nullable=False),
        sa.Column("played", sa.Boolean(), nullable=False),
        sa.Column("winner_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["event_id"], ["event.id"]),
        sa.ForeignKeyConstraint(["group_id"], ["eventgroup.id"]),
        sa.ForeignKeyConstraint(["registration1_id"], ["registration.id"]),
        sa.ForeignKeyConstraint(["registration2_id"], ["registration.id"]),
        sa.ForeignKeyConstraint(["winner_id"], ["registration.id"]),
        sa.ForeignKeyConstraint(["winner_to"], ["match.id"]),
        sa.ForeignKeyConstraint(["loser_to"], ["match.id"]),
    )
    op.create_index("ix_match_event_id", "match", ["event_id"])
    op.create_index("ix_match_group_id", "match", ["group_id"])

    op.create_table(
        "matchset",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("match_id", sa.Integer(), nullable=False),
        sa.Column("set_number", sa.Integer(), nullable=False),
        sa.Column("registration1_score", sa.Integer(), nullable=False),
        sa.Column("registration2_score", sa.Integer(), nullable=False),
        sa.Column("played", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["match_id"], ["match.id"]),
        sa.UniqueConstraint("match_id", "set_number", name="uq_match_set_number"),
    )
    op.create_index("ix_matchset_match_id", "matchset", ["match_id"])

    op.create_table(
        "structuregeneration",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("kind", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["event_id"], ["event.id"]),
        sa.UniqueConstraint("event_id", name="uq_structure_generation_event"),
    )


def downgrade() -> None:
    op.drop_table("structuregeneration")
    op.drop_index("ix_matchset_match_id", table_name="matchset")
    op.drop_table("matchset")
    op.drop_index("ix_match_group_id", table_name="match")
    op.drop_index("ix_match_event_id", table_name="match")
    op.drop_table("match")
    op.drop_index("ix_registration_group_id", table_name="registration")
    op.drop_index("ix_registration_event_id", table_name="registration")
    op.drop_table("registration")
    op.drop_index("ix_eventgroup_event_id", table_name="eventgroup")
    op.drop_table("eventgroup")
    op.drop_table("event")
