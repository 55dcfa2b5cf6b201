"""
SIGIL Registry — Database schema and seed data.
"""

from sigil_registry.database.migrations import MIGRATIONS, Migration, run_migrations

__all__ = ["MIGRATIONS", "Migration", "run_migrations"]
