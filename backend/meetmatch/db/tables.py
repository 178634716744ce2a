"""
Single source of truth for database tables that exist after migrations.

Use these names when writing raw SQL (e.g. TRUNCATE). user_blocks and user_profiles are owned
by the friendship/profile subsystems; the engine only reads them.
"""
# All tables that exist in the DB. Must match models and migrations.
ALL_TABLE_NAMES = (
    "availability_slots",
    "meetings",
    "match_suggestions",
    "user_blocks",
    "user_profiles",
)

# Tables the engine writes to. Order matters for FK when truncating.
ENGINE_TABLE_NAMES = (
    "match_suggestions",
    "meetings",
    "availability_slots",
)
