"""SIGIL Registry — core subsystems (identity, entries, votes)."""
